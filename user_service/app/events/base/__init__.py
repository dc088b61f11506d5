"""
User Service event channel interfaces.

The user service only publishes; its one topic carries the bare user id.
"""

from abc import ABC, abstractmethod
from typing import Optional


class EventPublisher(ABC):
    """Abstract base class for event publishers"""

    @abstractmethod
    async def publish(self, topic: str, payload: str, key: Optional[str] = None) -> bool:
        """Publish a payload, returning whether it reached the broker"""
        pass
