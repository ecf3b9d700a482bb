"""CLI entrypoint for genesis-audit."""

import logging
import sys
from pathlib import Path

import click

from . import __version__
from .config import AuditConfig, find_default_config, load_config
from .errors import ConfigError
from .models import parse_address


def _configure_logging(verbose: bool) -> None:
    from rich.console import Console
    from rich.logging import RichHandler

    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.WARNING,
        format="%(message)s",
        datefmt="[%X]",
        handlers=[RichHandler(console=Console(stderr=True), show_path=False)],
        force=True,
    )


def _validate_addresses(ctx: click.Context, param: click.Parameter, value: tuple[str, ...]) -> tuple[str, ...]:
    try:
        return tuple(parse_address(v) for v in value)
    except ValueError as e:
        raise click.BadParameter(str(e), ctx=ctx, param=param) from e


def _read_validators_file(path: Path) -> list[str]:
    """One address per line; blank lines and # comments are ignored."""
    addresses = []
    for line in path.read_text(encoding="utf-8").splitlines():
        line = line.split("#", 1)[0].strip()
        if line:
            addresses.append(line)
    try:
        return [parse_address(a) for a in addresses]
    except ValueError as e:
        raise click.BadParameter(str(e), param_hint="--validators-file") from e


def _expected_validators(validators: tuple[str, ...], validators_file: Path | None) -> list[str] | None:
    if not validators and validators_file is None:
        return None
    expected = list(validators)
    if validators_file is not None:
        expected += _read_validators_file(validators_file)
    return expected


@click.group()
@click.version_option(__version__, prog_name="genesis-audit")
@click.option(
    "--config",
    "config_path",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="Audit profile TOML (defaults to ./genesis-audit.toml if present)",
)
@click.option("--verbose", "-V", is_flag=True, help="Enable debug logging")
@click.pass_context
def cli(ctx: click.Context, config_path: Path | None, verbose: bool) -> None:
    """genesis-audit - Verify a ledger migration against its legacy snapshot.

    Compares per-account balances and slow wallet splits, total supply, and
    the validator set of a migrated ledger with the recovery file it was
    built from.
    """
    ctx.ensure_object(dict)
    _configure_logging(verbose)

    if config_path is None:
        config_path = find_default_config(Path.cwd())

    config = AuditConfig()
    if config_path is not None:
        try:
            config = load_config(config_path)
        except ConfigError as e:
            raise click.ClickException(str(e)) from e

    ctx.obj["config"] = config
    ctx.obj["config_path"] = config_path


@cli.command()
@click.argument("recovery", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--expected-supply",
    type=click.IntRange(min=0, max=2**64 - 1),
    default=None,
    help="Fail unless the migrated total supply equals this value",
)
@click.option(
    "--validator",
    "validators",
    multiple=True,
    callback=_validate_addresses,
    metavar="ADDRESS",
    help="Expected validator address (repeatable)",
)
@click.option(
    "--validators-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="File of expected validator addresses, one per line",
)
@click.option("--scale", type=click.IntRange(min=1), default=None, help="Multiplier applied to legacy amounts")
@click.option(
    "--strict-resources/--lenient-resources",
    "strict_resources",
    default=None,
    help="Report accounts with no migrated balance resource instead of skipping them",
)
@click.option("--workers", type=click.IntRange(min=1), default=None, help="Audit worker threads")
@click.option("--json", "output_json", is_flag=True, help="Output findings as JSON")
@click.option("--out", type=click.Path(dir_okay=False, path_type=Path), default=None, help="Write findings JSON to a file")
@click.option(
    "--dump",
    type=click.Path(path_type=Path),
    default=None,
    help="Also write the migrated per-account dump (directory or file)",
)
@click.option(
    "--journal",
    type=click.Path(dir_okay=False, path_type=Path),
    default=None,
    help="Append a run entry to this JSONL journal",
)
@click.option("--quiet", "-q", is_flag=True, help="No progress display")
@click.pass_context
def compare(
    ctx: click.Context,
    recovery: Path,
    snapshot: Path,
    expected_supply: int | None,
    validators: tuple[str, ...],
    validators_file: Path | None,
    scale: int | None,
    strict_resources: bool | None,
    workers: int | None,
    output_json: bool,
    out: Path | None,
    dump: Path | None,
    journal: Path | None,
    quiet: bool,
) -> None:
    """Audit a migrated ledger snapshot against a recovery file.

    Aggregate checks run first and abort on failure: total supply (when
    --expected-supply or the profile sets it) and the validator set (when
    any --validator, --validators-file, or profile validators are given).
    Then every recovery record is compared with the migrated state.

    Exit code is 0 only when no findings were produced.

    Examples:

        genesis-audit compare recovery.json genesis_state.json

        genesis-audit compare recovery.json genesis_state.json --expected-supply 100000000 --json
    """
    from .commands.compare import run_compare

    config: AuditConfig = ctx.obj["config"].merged(
        expected_supply=expected_supply,
        validators=_expected_validators(validators, validators_file),
        scale=scale,
        strict_resources=strict_resources,
        workers=workers,
    )

    exit_code = run_compare(
        recovery,
        snapshot,
        config,
        output_json=output_json,
        out=out,
        dump=dump,
        journal=journal,
        quiet=quiet,
    )
    sys.exit(exit_code)


@cli.command()
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("expected", type=click.IntRange(min=0, max=2**64 - 1))
@click.option("--quiet", "-q", is_flag=True, help="No spinner")
def supply(snapshot: Path, expected: int, quiet: bool) -> None:
    """Check that the migrated total supply equals EXPECTED."""
    from .commands.checks import run_supply

    sys.exit(run_supply(snapshot, expected, quiet=quiet))


@cli.command()
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("addresses", nargs=-1, callback=_validate_addresses)
@click.option(
    "--validators-file",
    type=click.Path(exists=True, dir_okay=False, path_type=Path),
    default=None,
    help="File of expected validator addresses, one per line",
)
@click.pass_context
def validators(
    ctx: click.Context,
    snapshot: Path,
    addresses: tuple[str, ...],
    validators_file: Path | None,
) -> None:
    """Check that the migrated validator set equals the given addresses.

    With no addresses, the profile's validator list is used.
    """
    from .commands.checks import run_validators

    expected = _expected_validators(addresses, validators_file)
    if expected is None:
        expected = ctx.obj["config"].validators
    if expected is None:
        raise click.UsageError("No expected validators given (pass ADDRESSES, --validators-file, or a profile)")

    sys.exit(run_validators(snapshot, expected))


@cli.command()
@click.argument("recovery", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.argument("snapshot", type=click.Path(exists=True, dir_okay=False, path_type=Path))
@click.option(
    "--out",
    type=click.Path(path_type=Path),
    required=True,
    help="Output directory (writes genesis_balances.json) or file path",
)
def dump(recovery: Path, snapshot: Path, out: Path) -> None:
    """Export migrated balances for every recovered account."""
    from .commands.dump import run_dump

    sys.exit(run_dump(recovery, snapshot, out))


@cli.group()
def journal() -> None:
    """Audit run history."""
    pass


@journal.command("show")
@click.argument("path", type=click.Path(dir_okay=False, path_type=Path))
@click.option("--last", "last_n", type=click.IntRange(min=1), default=None, help="Show only the last N runs")
@click.option("--json", "output_json", is_flag=True, help="Output as JSON")
def journal_show(path: Path, last_n: int | None, output_json: bool) -> None:
    """Show runs recorded in a journal file."""
    from .commands.journal import run_journal_show

    sys.exit(run_journal_show(path, last_n=last_n, output_json=output_json))


def main() -> None:
    """Main entrypoint."""
    cli()


if __name__ == "__main__":
    main()
