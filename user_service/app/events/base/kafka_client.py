import asyncio
from typing import Awaitable, Callable, Optional, Set

from aiokafka import AIOKafkaProducer  # type: ignore
from aiokafka.admin import AIOKafkaAdminClient, NewTopic  # type: ignore
from aiokafka.errors import KafkaConnectionError, KafkaError  # type: ignore

from ...core.settings import get_settings
from ...utils.logging import setup_user_logging as setup_logging
from . import EventPublisher

logger = setup_logging("user_service.events.kafka", log_level=get_settings().LOG_LEVEL)


def _encode(value: Optional[str]) -> Optional[bytes]:
    return value.encode("utf-8") if value is not None else None


async def connect_with_backoff(
    start: Callable[[], Awaitable[None]],
    name: str,
    max_retries: int,
    retry_delay: float,
    timeout: float,
) -> bool:
    """Await start() until it succeeds; False once every attempt timed out or failed."""
    for attempt in range(1, max_retries + 1):
        try:
            await asyncio.wait_for(start(), timeout=timeout)
            logger.info(
                f"{name} connected to Kafka",
                extra={"attempt": attempt, "operation": "kafka_connect"},
            )
            return True
        except (KafkaConnectionError, asyncio.TimeoutError) as e:
            if attempt == max_retries:
                logger.error(
                    f"{name} could not reach Kafka after {max_retries} attempts, "
                    "running in degraded mode",
                    extra={"error": str(e), "operation": "kafka_connect_exhausted"},
                )
                return False
            delay = retry_delay * 2 ** (attempt - 1)
            logger.warning(
                f"{name} connection attempt {attempt} failed, retrying in {delay}s",
                extra={"error": str(e), "operation": "kafka_connect_retry"},
            )
            await asyncio.sleep(delay)
    return False


class KafkaEventPublisher(EventPublisher):
    """
    Kafka publisher for string payloads.

    With graceful degradation enabled an unreachable broker never raises:
    the payload is logged and publish() reports False.
    """

    def __init__(
        self,
        bootstrap_servers: str,
        client_id: str,
        max_retries: int = 20,
        retry_delay: float = 2.0,
        enable_graceful_degradation: bool = True,
    ):
        self.bootstrap_servers = bootstrap_servers
        self.client_id = client_id
        self.max_retries = max_retries
        self.retry_delay = retry_delay
        self.enable_graceful_degradation = enable_graceful_degradation
        self.producer: Optional[AIOKafkaProducer] = None
        self.is_connected = False
        self._known_topics: Set[str] = set()
        self._connection_lock = asyncio.Lock()

    async def _ensure_topic(self, topic: str) -> None:
        if topic in self._known_topics:
            return

        admin = AIOKafkaAdminClient(bootstrap_servers=self.bootstrap_servers)
        await admin.start()  # type: ignore
        try:
            if topic not in await admin.list_topics():
                await admin.create_topics(
                    [NewTopic(name=topic, num_partitions=1, replication_factor=1)]
                )
                logger.info(
                    "Created Kafka topic",
                    extra={"topic": topic, "operation": "create_topic"},
                )
            self._known_topics.add(topic)
        except Exception as e:
            # The broker may auto-create it on first send
            logger.warning(
                "Could not verify Kafka topic",
                extra={"topic": topic, "error": str(e), "operation": "ensure_topic"},
            )
        finally:
            await admin.close()  # type: ignore

    async def start(self, timeout: float = 30.0) -> None:
        async with self._connection_lock:
            if self.is_connected:
                return

            async def _start_producer() -> None:
                producer = AIOKafkaProducer(
                    bootstrap_servers=self.bootstrap_servers,
                    client_id=self.client_id,
                    value_serializer=_encode,
                    key_serializer=_encode,
                    acks="all",
                    retry_backoff_ms=1000,
                    request_timeout_ms=30000,
                )
                try:
                    await producer.start()  # type: ignore
                except BaseException:
                    await producer.stop()  # type: ignore
                    raise
                self.producer = producer

            self.is_connected = await connect_with_backoff(
                _start_producer,
                name=f"Producer {self.client_id}",
                max_retries=self.max_retries,
                retry_delay=self.retry_delay,
                timeout=timeout,
            )

    async def stop(self) -> None:
        async with self._connection_lock:
            producer, self.producer = self.producer, None
            self.is_connected = False
            if producer is None:
                return
            try:
                await producer.stop()  # type: ignore
                logger.info("Kafka producer stopped")
            except Exception as e:
                logger.warning(
                    "Error stopping Kafka producer",
                    extra={"error": str(e), "operation": "stop_producer"},
                )

    async def publish(self, topic: str, payload: str, key: Optional[str] = None) -> bool:
        if not self.is_connected or self.producer is None:
            if not self.enable_graceful_degradation:
                raise KafkaConnectionError("Kafka producer not connected")
            logger.warning(
                f"Kafka unavailable, event for {topic} not published",
                extra={
                    "topic": topic,
                    "key": key,
                    "payload": payload,
                    "operation": "publish_degraded",
                },
            )
            return False

        await self._ensure_topic(topic)

        try:
            await self.producer.send_and_wait(topic, payload, key=key)  # type: ignore
        except KafkaError as e:
            logger.error(
                f"Kafka rejected event for {topic}",
                extra={
                    "topic": topic,
                    "key": key,
                    "payload": payload,
                    "error": str(e),
                    "operation": "publish_event_failed",
                },
            )
            if not self.enable_graceful_degradation:
                raise
            return False

        logger.info(
            "Published event",
            extra={"topic": topic, "key": key, "operation": "publish_event"},
        )
        return True

    async def health_check(self) -> bool:
        if not self.is_connected or self.producer is None:
            return False
        try:
            metadata = await self.producer.client.fetch_all_metadata()  # type: ignore
            return bool(metadata.brokers())  # type: ignore
        except Exception as e:
            logger.warning(
                "Kafka health check failed",
                extra={"error": str(e), "operation": "health_check"},
            )
            return False
