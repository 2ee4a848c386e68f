"""HubBusClient — the hub's connection to the NATS JetStream control bus."""

import asyncio
import logging
from collections.abc import Callable, Coroutine
from typing import Any

import nats
from nats.aio.client import Client as NATSClient
from nats.aio.msg import Msg
from nats.js.api import DeliverPolicy
from nats.js.client import JetStreamContext
from nats.js.errors import NotFoundError
from pydantic import ValidationError

from hubkit.helpers.validation import validate_message
from hubkit.models.envelope import Envelope
from hubkit.models.topics import to_nats_subject

logger = logging.getLogger(__name__)

STREAM_NAME = "SPNHUB"
STREAM_SUBJECTS = ["hub.>"]

Handler = Callable[[Envelope], Coroutine[Any, Any, None]]


class HubBusClient:
    """Publishes and consumes hub envelopes on the `SPNHUB` stream.

    Incoming messages that fail `validate_message` are logged and dropped
    before they reach a handler. Every delivered message is acked, whether
    or not its handler succeeded, so a bad message is never redelivered.
    """

    def __init__(self, url: str = "nats://localhost:4222", name: str = "spn-hub") -> None:
        self._url = url
        self._name = name
        self._nc: NATSClient | None = None
        self._js: JetStreamContext | None = None
        self._subscriptions: list[Any] = []
        self._consumers: set[asyncio.Task] = set()

    @property
    def is_connected(self) -> bool:
        return self._nc is not None and self._nc.is_connected

    async def connect(self) -> None:
        self._nc = await nats.connect(
            self._url,
            name=self._name,
            reconnected_cb=self._on_reconnect,
            disconnected_cb=self._on_disconnect,
            error_cb=self._on_error,
            max_reconnect_attempts=10,
            reconnect_time_wait=2,
        )
        self._js = self._nc.jetstream()
        await self._ensure_stream()

    async def _ensure_stream(self) -> None:
        assert self._js is not None
        try:
            await self._js.find_stream_name_by_subject(STREAM_SUBJECTS[0])
        except NotFoundError:
            await self._js.add_stream(name=STREAM_NAME, subjects=STREAM_SUBJECTS)
            logger.info("Created JetStream stream '%s'", STREAM_NAME)

    async def publish(self, topic: str, envelope: Envelope) -> None:
        if self._js is None:
            raise RuntimeError("Not connected. Call connect() first.")
        subject = to_nats_subject(topic)
        await self._js.publish(subject, envelope.to_wire())
        logger.debug("Published %s to %s: %s", envelope.type, subject, envelope.id)

    async def subscribe(self, topic: str, handler: Handler) -> None:
        """Deliver new envelopes on `topic` to `handler`, one at a time."""
        if self._js is None:
            raise RuntimeError("Not connected. Call connect() first.")
        subject = to_nats_subject(topic)
        sub = await self._js.subscribe(subject, manual_ack=True, deliver_policy=DeliverPolicy.NEW)
        self._subscriptions.append(sub)

        consumer = asyncio.ensure_future(self._consume(subject, sub, handler))
        self._consumers.add(consumer)
        consumer.add_done_callback(self._consumers.discard)
        logger.info("Subscribed to %s", subject)

    async def _consume(self, subject: str, sub: Any, handler: Handler) -> None:
        async for msg in sub.messages:
            try:
                await self._deliver(subject, msg, handler)
            finally:
                if msg.reply:
                    try:
                        await msg.ack()
                    except Exception as e:
                        logger.debug("Ack failed on %s: %s", subject, e)

    async def _deliver(self, subject: str, msg: Msg, handler: Handler) -> None:
        try:
            envelope = Envelope.from_wire(msg.data)
        except ValidationError as e:
            logger.warning("Dropping undecodable message on %s: %s", subject, e)
            return

        errors = validate_message(envelope)
        if errors:
            logger.warning("Dropping invalid %s from %s: %s", envelope.type, envelope.from_hub, "; ".join(errors))
            return

        try:
            await handler(envelope)
        except Exception:
            logger.exception("Error handling %s on %s", envelope.type, subject)

    async def close(self) -> None:
        """Stop consuming and disconnect. Safe to call more than once."""
        consumers = [c for c in self._consumers if c is not asyncio.current_task()]
        for consumer in consumers:
            consumer.cancel()
        await asyncio.gather(*consumers, return_exceptions=True)

        for sub in self._subscriptions:
            try:
                await sub.unsubscribe()
            except Exception as e:
                logger.debug("Unsubscribe failed: %s", e)
        self._subscriptions.clear()

        if self._nc is not None:
            await self._nc.drain()
            self._nc = None
            self._js = None
            logger.info("Disconnected from NATS")

    async def _on_reconnect(self, _: Any = None) -> None:
        logger.info("Reconnected to NATS at %s", self._url)

    async def _on_disconnect(self, _: Any = None) -> None:
        logger.warning("Disconnected from NATS")

    async def _on_error(self, e: Exception) -> None:
        logger.error("NATS error: %s", e)
