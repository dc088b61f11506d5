"""
Media Service event channel base classes.

The media service only consumes; ``user.deleted`` and ``product.deleted``
payloads reach handlers as decoded text.
"""

from abc import ABC, abstractmethod
from typing import Any


class EventHandler(ABC):
    """Abstract base class for topic handlers"""

    @abstractmethod
    async def handle(self, payload: str) -> Any:
        """Apply one delivered payload; must be idempotent under redelivery"""
        pass


class EventSubscriber(ABC):
    """Abstract base class for event subscribers"""

    @abstractmethod
    async def subscribe(self, topic: str, handler: EventHandler) -> None:
        """Subscribe a handler to a topic"""
        pass
