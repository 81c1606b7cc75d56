import math
import os
from dataclasses import dataclass
from typing import Mapping, Optional

from dashboard.errors import StartupError
from dashboard.providers.teamviewer_http import DEFAULT_API_URL

DEFAULT_HOST = "0.0.0.0"
DEFAULT_PORT = 3000


def _number(environ: Mapping[str, str], name: str, cast, default=None, valid=None):
    raw = (environ.get(name) or "").strip()
    if not raw:
        return default
    try:
        value = cast(raw)
    except ValueError:
        raise StartupError(f"{name} must be a number, got {raw!r}") from None
    if valid is not None and not valid(value):
        raise StartupError(f"{name} is out of range, got {raw!r}")
    return value


def _positive_timeout(value: float) -> bool:
    return math.isfinite(value) and value > 0


def _port(value: int) -> bool:
    return 0 <= value <= 65535


@dataclass(frozen=True)
class Settings:
    teamviewer_token: str
    api_url: str = DEFAULT_API_URL
    request_timeout: Optional[float] = None
    bind_host: str = DEFAULT_HOST
    bind_port: int = DEFAULT_PORT
    static_dir: Optional[str] = None
    log_level: str = "INFO"

    def __repr__(self) -> str:
        # keep the token out of logs and tracebacks
        return f"Settings(api_url={self.api_url!r}, bind={self.bind_host}:{self.bind_port})"

    @classmethod
    def from_env(cls, environ: Optional[Mapping[str, str]] = None) -> "Settings":
        env = os.environ if environ is None else environ
        token = (env.get("TEAMVIEWER_TOKEN") or "").strip()
        if not token:
            raise StartupError("TEAMVIEWER_TOKEN must be provided")
        return cls(
            teamviewer_token=token,
            api_url=(env.get("TEAMVIEWER_API_URL") or DEFAULT_API_URL).strip(),
            request_timeout=_number(env, "REQUEST_TIMEOUT", float, valid=_positive_timeout),
            bind_host=(env.get("BIND_HOST") or DEFAULT_HOST).strip(),
            bind_port=_number(env, "BIND_PORT", int, DEFAULT_PORT, valid=_port),
            static_dir=(env.get("STATIC_DIR") or "").strip() or None,
            log_level=(env.get("LOG_LEVEL") or "INFO").strip().upper(),
        )
