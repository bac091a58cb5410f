"""ULID helpers: primary keys for every table and id validation at the API edge."""

from ulid import ULID

# Crockford base32, 26 characters
ULID_PATTERN = r"^[0-9A-HJKMNP-TV-Z]{26}$"


def generate_ulid() -> str:
    """Generate a new ULID string."""
    return str(ULID())


def is_valid_ulid(value: str) -> bool:
    try:
        ULID.from_str(value)
    except (ValueError, TypeError):
        return False
    return True
