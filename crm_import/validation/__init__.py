from .validator import normalize_date, validate, validate_row

__all__ = [
    "normalize_date",
    "validate",
    "validate_row",
]
