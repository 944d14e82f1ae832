# backend/app/utils/jwt_handler.py
import re
from datetime import datetime, timedelta, timezone
from jose import jwt
from app import config
from app.errors import InternalError

_DURATION_RE = re.compile(
    r"^\s*(\d*\.?\d+)\s*"
    r"(milliseconds?|msecs?|ms|seconds?|secs?|s|minutes?|mins?|m|"
    r"hours?|hrs?|h|days?|d|weeks?|w|years?|yrs?|y)?\s*$",
    re.IGNORECASE,
)
_UNIT_MS = {
    "ms": 1, "s": 1000, "m": 60_000, "h": 3_600_000,
    "d": 86_400_000, "w": 604_800_000, "y": 31_557_600_000,
}


def _unit_ms(unit: str | None) -> int:
    if not unit:
        return _UNIT_MS["s"]
    unit = unit.lower()
    if unit.startswith(("ms", "msec", "milli")):
        return _UNIT_MS["ms"]
    if unit.startswith("mi") and unit != "m":
        return _UNIT_MS["m"]
    return _UNIT_MS[unit[0]]

def parse_expires_in(value: str | int) -> timedelta:
    """Parse a TTL such as "30m", "1.5h", "2 days", "1w" or a bare number of seconds"""
    if isinstance(value, (int, float)):
        millis = value * 1000
    else:
        match = _DURATION_RE.match(value or "")
        if not match:
            raise ValueError(f"Invalid token expiration: {value!r}")
        amount, unit = match.groups()
        millis = float(amount) * _unit_ms(unit)
    if millis <= 0:
        raise ValueError(f"Token expiration must be positive: {value!r}")
    return timedelta(milliseconds=millis)

def token_ttl() -> timedelta:
    """Configured session lifetime, shared by the token and its cookie"""
    return parse_expires_in(config.EXPIRES_IN)

def create_access_token(data: dict, expires_delta: timedelta | None = None) -> str:
    """Create JWT access token"""
    if not config.SECRET_KEY:
        raise InternalError("Token signing secret is not configured")
    to_encode = data.copy()
    now = datetime.now(timezone.utc)
    expire = now + (expires_delta or token_ttl())
    to_encode.update({
        "exp": expire,
        "iat": now,
    })
    return jwt.encode(to_encode, config.SECRET_KEY, algorithm=config.ALGORITHM)

def decode_token(token: str) -> dict:
    """Decode and verify JWT token"""
    return jwt.decode(token, config.SECRET_KEY, algorithms=[config.ALGORITHM])
