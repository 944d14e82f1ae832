# backend/app/utils/password_handler.py
from functools import lru_cache

import bcrypt
from app import config

# bcrypt only consumes the first 72 bytes of its input
BCRYPT_MAX_BYTES = 72


def _encode(password: str) -> bytes:
    return password.encode("utf-8", errors="surrogatepass")[:BCRYPT_MAX_BYTES]

def hash_password(password: str) -> str:
    """Salted bcrypt hash, fresh salt on every call"""
    salt = bcrypt.gensalt(rounds=config.BCRYPT_ROUNDS)
    return bcrypt.hashpw(_encode(password), salt).decode("utf-8")

def verify_password(password: str, password_hash: str | None) -> bool:
    """Compare a password against a stored digest. Malformed digests never match."""
    if not password_hash:
        return False
    try:
        return bcrypt.checkpw(_encode(password), password_hash.encode("utf-8"))
    except ValueError:
        return False

@lru_cache(maxsize=None)
def _dummy_hash(rounds: int) -> str:
    return bcrypt.hashpw(b"dummy-password", bcrypt.gensalt(rounds=rounds)).decode("utf-8")

def warm_dummy_hash() -> str:
    """Build the dummy digest up front so the first unknown-email login does no extra hashing"""
    return _dummy_hash(config.BCRYPT_ROUNDS)

def burn_verification(password: str) -> bool:
    """Run a comparison that always fails, so unknown accounts cost the same as wrong passwords"""
    verify_password(password, _dummy_hash(config.BCRYPT_ROUNDS))
    return False
