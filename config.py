import os
import re
from datetime import timedelta
from typing import List, Optional

from dotenv import load_dotenv
from pydantic import BaseModel, Field, field_validator

# Load environment variables
load_dotenv()

_SECOND = 1
_MINUTE = 60 * _SECOND
_HOUR = 60 * _MINUTE
_DAY = 24 * _HOUR

# Unit spellings accepted by jsonwebtoken's expiresIn
_DURATION_UNITS = {
    "ms": 0.001, "msec": 0.001, "msecs": 0.001, "millisecond": 0.001, "milliseconds": 0.001,
    "s": _SECOND, "sec": _SECOND, "secs": _SECOND, "second": _SECOND, "seconds": _SECOND,
    "m": _MINUTE, "min": _MINUTE, "mins": _MINUTE, "minute": _MINUTE, "minutes": _MINUTE,
    "h": _HOUR, "hr": _HOUR, "hrs": _HOUR, "hour": _HOUR, "hours": _HOUR,
    "d": _DAY, "day": _DAY, "days": _DAY,
    "w": 7 * _DAY, "week": 7 * _DAY, "weeks": 7 * _DAY,
    "y": 365.25 * _DAY, "yr": 365.25 * _DAY, "yrs": 365.25 * _DAY, "year": 365.25 * _DAY, "years": 365.25 * _DAY,
}
_DURATION_PATTERN = re.compile(r"^\s*(\d+(?:\.\d+)?|\.\d+)\s*([a-z]*)\s*$", re.IGNORECASE)


def parse_duration(value: str) -> timedelta:
    """
    Parse a duration such as "7d", "1w", "12 hours", "1.5h" or a bare number of seconds

    Raises:
        ValueError: If the value is not a positive duration
    """
    match = _DURATION_PATTERN.match(value or "")
    unit = (match.group(2) or "s").lower() if match else None
    if not match or unit not in _DURATION_UNITS:
        raise ValueError(f"Invalid duration: {value!r}")

    seconds = float(match.group(1)) * _DURATION_UNITS[unit]
    if seconds <= 0:
        raise ValueError(f"Duration must be positive: {value!r}")
    return timedelta(seconds=seconds)


def _env_bool(name: str, default: bool = False) -> bool:
    value = os.getenv(name)
    if value is None:
        return default
    return value.strip().lower() in {"1", "true", "yes", "on"}


class Settings(BaseModel):
    """Application settings, read from the environment (and .env) at startup"""

    jwt_secret: str = Field(min_length=1)
    jwt_expire: timedelta = timedelta(days=7)
    database_url: Optional[str] = None
    database_echo: bool = False
    bcrypt_rounds: int = Field(default=10, ge=4, le=31)
    cors_origins: List[str] = ["http://localhost:3000"]
    log_level: str = "INFO"
    logfire_token: Optional[str] = None
    seed_demo_data: bool = False
    port: int = 5151

    @field_validator("jwt_expire", mode="before")
    @classmethod
    def _parse_expire(cls, value):
        if isinstance(value, str):
            return parse_duration(value)
        return value

    @classmethod
    def from_env(cls) -> "Settings":
        """
        Build settings from environment variables

        Raises:
            ValueError: If JWT_SECRET is not set
        """
        jwt_secret = os.getenv("JWT_SECRET")
        if not jwt_secret:
            raise ValueError("JWT_SECRET environment variable is not set")

        cors_origins = [
            origin.strip()
            for origin in os.getenv("CORS_ORIGINS", "http://localhost:3000").split(",")
            if origin.strip()
        ]

        return cls(
            jwt_secret=jwt_secret,
            jwt_expire=os.getenv("JWT_EXPIRE", "7d"),
            database_url=os.getenv("DATABASE_URL") or None,
            database_echo=_env_bool("DATABASE_ECHO"),
            bcrypt_rounds=int(os.getenv("BCRYPT_ROUNDS", "10")),
            cors_origins=cors_origins,
            log_level=os.getenv("LOG_LEVEL", "INFO").upper(),
            logfire_token=os.getenv("LOGFIRE_TOKEN") or None,
            seed_demo_data=_env_bool("SEED_DEMO_DATA"),
            port=int(os.getenv("PORT", "5151")),
        )
