# --- utils/passwords.py ---
import bcrypt
from flask import current_app

# bcrypt only looks at the first 72 bytes
MAX_PASSWORD_BYTES = 72


def hash_password(password: str) -> str:
    rounds = current_app.config.get("BCRYPT_LOG_ROUNDS", 12)
    return bcrypt.hashpw(password.encode("utf-8"), bcrypt.gensalt(rounds)).decode("utf-8")


def check_password(password: str, password_hash: str | None) -> bool:
    if not password or not password_hash:
        return False
    try:
        return bcrypt.checkpw(password.encode("utf-8"), password_hash.encode("utf-8"))
    except ValueError:
        return False


_DUMMY_HASHES = {}


def dummy_hash() -> str:
    """A throwaway hash at the configured cost, for logins with no credential."""
    rounds = current_app.config.get("BCRYPT_LOG_ROUNDS", 12)
    if rounds not in _DUMMY_HASHES:
        _DUMMY_HASHES[rounds] = hash_password("simoly-no-such-account")
    return _DUMMY_HASHES[rounds]
