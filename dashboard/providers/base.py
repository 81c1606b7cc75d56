from abc import ABC, abstractmethod
from typing import List
from dashboard.device import Device

class DeviceDirectory(ABC):
    @abstractmethod
    def fetch_devices(self, token: str) -> List[Device]:
        """Return the account's devices in upstream order.

        Raises TransportError or DecodeError on failure.
        """
