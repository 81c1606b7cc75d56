import logging
from datetime import datetime
from http.cookiejar import DefaultCookiePolicy
from typing import Any, Dict, List, Optional

import requests

from dashboard.device import Device, OnlineState
from dashboard.errors import DecodeError, TransportError
from .base import DeviceDirectory

logger = logging.getLogger(__name__)

DEFAULT_API_URL = "https://webapi.teamviewer.com/api/v1/devices"

DEFAULT_HEADERS = {
    "Accept": "application/json",
    "User-Agent": "device-dashboard/1.0",
}

# Optional string fields passed through as-is
STR_FIELDS = (
    "remotecontrol_id",
    "device_id",
    "userid",
    "alias",
    "groupid",
    "description",
    "policy_id",
    "supported_features",
)


# --------------------
# Decoding
# --------------------
def _type_name(value: Any) -> str:
    if isinstance(value, bool):
        return "boolean"
    if isinstance(value, (int, float)):
        return "number"
    if isinstance(value, str):
        return "string"
    if isinstance(value, list):
        return "array"
    if isinstance(value, dict):
        return "object"
    return type(value).__name__


def _optional(row: Dict[str, Any], key: str, expected: type, where: str):
    value = row.get(key)
    if value is None:
        return None
    # bool is an int subclass, but JSON true/false is never an id
    if not isinstance(value, expected) or (expected is int and isinstance(value, bool)):
        raise DecodeError(f"{where}.{key}: expected {expected.__name__}, got {_type_name(value)}")
    return value


def _parse_timestamp(value: Any, where: str) -> Optional[datetime]:
    if value is None:
        return None
    if not isinstance(value, str):
        raise DecodeError(f"{where}: expected timestamp string, got {_type_name(value)}")
    text = value.strip()
    if text[-1:] in ("Z", "z"):
        text = text[:-1] + "+00:00"
    try:
        parsed = datetime.fromisoformat(text)
    except ValueError as exc:
        raise DecodeError(f"{where}: invalid timestamp {value!r}") from exc
    if parsed.tzinfo is None:
        raise DecodeError(f"{where}: timestamp {value!r} has no UTC offset")
    return parsed


def _decode_device(row: Any, index: int) -> Device:
    where = f"devices[{index}]"
    if not isinstance(row, dict):
        raise DecodeError(f"{where}: expected object, got {_type_name(row)}")

    fields = {key: _optional(row, key, str, where) for key in STR_FIELDS}
    return Device(
        online_state=OnlineState.parse(row.get("online_state")),
        assigned_to=_optional(row, "assigned_to", bool, where),
        last_seen=_parse_timestamp(row.get("last_seen"), f"{where}.last_seen"),
        teamviewer_id=_optional(row, "teamviewer_id", int, where),
        **fields,
    )


def decode_devices(payload: Any) -> List[Device]:
    """Turn a parsed ``/devices`` response body into a device list.

    A missing (or null) ``devices`` key is an empty account, not an error.
    Upstream order is kept.
    """
    if not isinstance(payload, dict):
        raise DecodeError(f"expected a JSON object at top level, got {_type_name(payload)}")
    rows = payload.get("devices")
    if rows is None:
        return []
    if not isinstance(rows, list):
        raise DecodeError(f"devices: expected array, got {_type_name(rows)}")
    return [_decode_device(row, i) for i, row in enumerate(rows)]


# --------------------
# Client
# --------------------
def stateless_session() -> requests.Session:
    """A session that pools connections but never stores upstream cookies."""
    session = requests.Session()
    session.cookies.set_policy(DefaultCookiePolicy(allowed_domains=[]))
    return session


class TeamViewerDirectory(DeviceDirectory):
    def __init__(self, session: Optional[requests.Session] = None,
                 api_url: str = DEFAULT_API_URL, timeout: Optional[float] = None):
        self.session = session if session is not None else stateless_session()
        self.api_url = api_url
        self.timeout = timeout

    def fetch_devices(self, token: str) -> List[Device]:
        headers = dict(DEFAULT_HEADERS)
        headers["Authorization"] = f"Bearer {token}"

        # single attempt, failures go straight back to the caller
        try:
            resp = self.session.get(self.api_url, headers=headers, timeout=self.timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            logger.warning("[provider] GET %s failed: %s", self.api_url, exc)
            raise TransportError(str(exc)) from exc

        try:
            payload = resp.json()
        except ValueError as exc:
            logger.warning("[provider] GET %s returned a non-JSON body", self.api_url)
            raise DecodeError(f"body is not valid JSON: {exc}") from exc

        try:
            devices = decode_devices(payload)
        except DecodeError as exc:
            logger.warning("[provider] GET %s returned an unexpected shape: %s", self.api_url, exc)
            raise

        logger.info("[provider] fetched %d devices", len(devices))
        return devices
