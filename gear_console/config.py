import os
from typing import Mapping, Optional

from pydantic import BaseModel, ConfigDict, Field

DEFAULT_BASE_URL = "http://localhost:8080"
# The backend never returns more rows than this per page.
MAX_PAGE_SIZE = 100


def _read_number(env: Mapping[str, str], name: str, default, cast):
    raw = env.get(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return cast(raw)
    except ValueError as e:
        raise ValueError(f"Environment variable {name} must be a number, got {raw!r}") from e


class Settings(BaseModel):
    """
    Client configuration, read from GEAR_CONSOLE_* environment variables.
    """

    base_url: str = DEFAULT_BASE_URL
    page_size: int = Field(default=10, gt=0, le=MAX_PAGE_SIZE)
    timeout: float = Field(default=10.0, gt=0)
    poll_interval: float = Field(default=30.0, gt=0)

    model_config = ConfigDict(extra="forbid", frozen=True)

    @classmethod
    def from_env(cls, env: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if env is None else env
        return cls(
            base_url=env.get("GEAR_CONSOLE_BASE_URL") or DEFAULT_BASE_URL,
            page_size=_read_number(env, "GEAR_CONSOLE_PAGE_SIZE", 10, int),
            timeout=_read_number(env, "GEAR_CONSOLE_TIMEOUT", 10.0, float),
            poll_interval=_read_number(env, "GEAR_CONSOLE_POLL_INTERVAL", 30.0, float),
        )
