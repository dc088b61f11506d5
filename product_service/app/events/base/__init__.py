"""
Product Service event channel base classes and interfaces.

Cascade topics carry plain string payloads (a bare id or a JSON document),
so handlers receive the decoded text rather than an envelope object.
"""

from abc import ABC, abstractmethod
from typing import Any, Optional


class EventHandler(ABC):
    """Abstract base class for topic handlers"""

    @abstractmethod
    async def handle(self, payload: str) -> Any:
        """Apply one delivered payload; must be idempotent under redelivery"""
        pass


class EventPublisher(ABC):
    """Abstract base class for event publishers"""

    @abstractmethod
    async def publish(self, topic: str, payload: str, key: Optional[str] = None) -> bool:
        """Publish a payload, returning whether it reached the broker"""
        pass


class EventSubscriber(ABC):
    """Abstract base class for event subscribers"""

    @abstractmethod
    async def subscribe(self, topic: str, handler: EventHandler) -> None:
        """Subscribe a handler to a topic"""
        pass
