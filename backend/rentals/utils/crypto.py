import hashlib
import hmac
import secrets

SALT_LENGTH = 16
TOKEN_LENGTH = 32


def _digest(password: str, salt: str) -> str:
    return hmac.new(salt.encode("utf-8"), password.encode("utf-8"), hashlib.sha256).hexdigest()


def hash_password(password: str) -> tuple[str, str]:
    """Return ``(hash_hex, salt_hex)`` for a new password.

    The hash is HMAC-SHA256 of the password keyed with the hex salt string.
    """
    salt = secrets.token_hex(SALT_LENGTH)
    return _digest(password, salt), salt


def verify_password(password: str, stored_hash: str | None, stored_salt: str | None) -> bool:
    if not stored_hash or not stored_salt:
        return False
    test_hash = _digest(password, stored_salt)
    try:
        return hmac.compare_digest(bytes.fromhex(test_hash), bytes.fromhex(stored_hash))
    except ValueError:
        # stored hash is not hex
        return False


def generate_session_token() -> str:
    return secrets.token_hex(TOKEN_LENGTH)
