import secrets
import string

_ALPHABET = string.ascii_lowercase + string.digits


def new_record_id(length: int = 9) -> str:
    return ''.join(secrets.choice(_ALPHABET) for _ in range(length))


def new_access_code(length: int = 6) -> str:
    """Parent portal code: short, uppercase, not guaranteed unique."""
    return new_record_id(length).upper()
