from dataclasses import dataclass
from datetime import datetime
from enum import Enum
from typing import Any, Optional


class OnlineState(Enum):
    ONLINE = "Online"
    OFFLINE = "Offline"

    @classmethod
    def parse(cls, value: Any) -> "OnlineState":
        # pessimistic: anything but an exact "Online" shows as offline
        if value == cls.ONLINE.value:
            return cls.ONLINE
        return cls.OFFLINE

    @property
    def online(self) -> bool:
        return self is OnlineState.ONLINE


@dataclass(frozen=True)
class Device:
    online_state: OnlineState = OnlineState.OFFLINE
    remotecontrol_id: Optional[str] = None
    device_id: Optional[str] = None
    userid: Optional[str] = None
    alias: Optional[str] = None
    groupid: Optional[str] = None
    description: Optional[str] = None
    policy_id: Optional[str] = None
    assigned_to: Optional[bool] = None
    supported_features: Optional[str] = None
    last_seen: Optional[datetime] = None
    teamviewer_id: Optional[int] = None
