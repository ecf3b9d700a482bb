"""Legacy recovery record loading and normalization."""

from .loader import load_recovery_file, parse_record, parse_records
from .normalize import is_system_record, normalize

__all__ = [
    "load_recovery_file",
    "parse_record",
    "parse_records",
    "is_system_record",
    "normalize",
]
