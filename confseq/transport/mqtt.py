"""MQTT channel client built on aiomqtt."""

from __future__ import annotations

import logging
from collections.abc import AsyncIterator, Callable
from contextlib import AsyncExitStack
from types import TracebackType
from typing import TYPE_CHECKING, Any

import aiomqtt
import msgspec
import tenacity
from transitions import Machine

from ..config.settings import SessionConfig
from ..const import DEFAULT_MQTT_QOS
from ..errors import TransportError
from ..mqtt import build_mqtt_connect_properties, build_mqtt_publish_properties
from ..mqtt.messages import InboundMessage, OutboundPublish
from ..protocol.topics import device_topic, parse_topic, subscription_filter
from ..util import log_payload
from ..util.mqtt_helper import configure_tls_context

logger = logging.getLogger("confseq.transport.mqtt")

ClientFactory = Callable[..., Any]


def _log_retry_attempt(retry_state: tenacity.RetryCallState) -> None:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    logger.warning(
        "MQTT connect attempt %d failed (%s); retrying in %.2fs",
        retry_state.attempt_number,
        exc,
        retry_state.next_action.sleep if retry_state.next_action else 0,
    )


def _payload_bytes(payload: Any) -> bytes:
    if payload is None:
        return b""
    if isinstance(payload, (bytes, bytearray)):
        return bytes(payload)
    return str(payload).encode("utf-8")


class MqttChannelClient:
    """Channel client with FSM-based connection state."""

    if TYPE_CHECKING:
        fsm_state: str
        trigger: Callable[[str], bool]

    # FSM States
    STATE_DISCONNECTED = "disconnected"
    STATE_CONNECTING = "connecting"
    STATE_SUBSCRIBING = "subscribing"
    STATE_READY = "ready"

    def __init__(
        self,
        config: SessionConfig,
        *,
        client_factory: ClientFactory = aiomqtt.Client,
    ) -> None:
        self.config = config
        self._client_factory = client_factory
        self._client: Any = None
        self._messages: AsyncIterator[aiomqtt.Message] | None = None
        self._stack: AsyncExitStack | None = None
        self.fsm_state = self.STATE_DISCONNECTED

        self.machine = Machine(
            model=self,
            states=[
                self.STATE_DISCONNECTED,
                self.STATE_CONNECTING,
                self.STATE_SUBSCRIBING,
                self.STATE_READY,
            ],
            initial=self.STATE_DISCONNECTED,
            model_attribute="fsm_state",
            ignore_invalid_triggers=True,
        )

        self.machine.add_transition("connect", self.STATE_DISCONNECTED, self.STATE_CONNECTING)
        self.machine.add_transition("connected", self.STATE_CONNECTING, self.STATE_SUBSCRIBING)
        self.machine.add_transition("subscribed", self.STATE_SUBSCRIBING, self.STATE_READY)
        self.machine.add_transition("disconnect", "*", self.STATE_DISCONNECTED)

    async def __aenter__(self) -> MqttChannelClient:
        await self.open()
        return self

    async def __aexit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        await self.close()

    def is_active(self) -> bool:
        return self.fsm_state == self.STATE_READY

    async def open(self) -> None:
        """Connect and subscribe, retrying transient broker failures."""
        try:
            tls_context = configure_tls_context(self.config)
        except RuntimeError as exc:
            raise TransportError(str(exc)) from exc

        retryer = tenacity.AsyncRetrying(
            stop=tenacity.stop_after_attempt(self.config.connect_attempts),
            wait=tenacity.wait_exponential(multiplier=self.config.reconnect_delay, max=30),
            retry=tenacity.retry_if_exception_type((aiomqtt.MqttError, OSError)),
            before_sleep=_log_retry_attempt,
            reraise=True,
        )

        try:
            async for attempt in retryer:
                with attempt:
                    await self._open_session(tls_context)
        except (aiomqtt.MqttError, OSError) as exc:
            raise TransportError(
                f"Unable to connect to MQTT broker {self.config.mqtt_host}:{self.config.mqtt_port}: {exc}"
            ) from exc

    async def _open_session(self, tls_context: Any) -> None:
        if not self.config.mqtt_user:
            logger.warning("MQTT connecting without authentication (anonymous)")

        self.trigger("connect")
        stack = AsyncExitStack()
        try:
            client = await stack.enter_async_context(
                self._client_factory(
                    hostname=self.config.mqtt_host,
                    port=self.config.mqtt_port,
                    username=self.config.mqtt_user or None,
                    password=self.config.mqtt_pass or None,
                    tls_context=tls_context,
                    logger=logging.getLogger("confseq.mqtt.client"),
                    protocol=aiomqtt.ProtocolVersion.V5,
                    properties=build_mqtt_connect_properties(),
                )
            )
            self.trigger("connected")
            logger.info("Connected to MQTT broker %s:%d", self.config.mqtt_host, self.config.mqtt_port)

            topic_filter = subscription_filter(self.config.mqtt_topic)
            await client.subscribe(topic_filter, qos=DEFAULT_MQTT_QOS)
            logger.info("Subscribed to %s", topic_filter)
        except BaseException:
            await stack.aclose()
            self.trigger("disconnect")
            raise

        self._stack = stack
        self._client = client
        self._messages = client.messages
        self.trigger("subscribed")

    async def close(self) -> None:
        stack, self._stack = self._stack, None
        self._client = None
        self._messages = None
        try:
            if stack is not None:
                await stack.aclose()
        except aiomqtt.MqttError as exc:
            logger.warning("MQTT disconnect failed: %s", exc)
        finally:
            self.trigger("disconnect")

    async def publish(self, device_id: str, topic: str, payload: bytes) -> None:
        if self._client is None or not self.is_active():
            raise TransportError(f"Trying to publish {topic} on inactive client")

        message = OutboundPublish(
            device_id=device_id,
            topic_name=device_topic(self.config.mqtt_topic, device_id, topic),
            payload=payload,
        )
        log_payload(logger, logging.DEBUG, f"MQTT PUB > {message.topic_name}", message.payload)

        try:
            await self._client.publish(
                message.topic_name,
                message.payload,
                qos=message.qos,
                retain=message.retain,
                properties=build_mqtt_publish_properties(message),
            )
        except aiomqtt.MqttError as exc:
            raise TransportError(f"While publishing {topic} for {device_id}: {exc}") from exc

    async def next_message(self) -> InboundMessage:
        if self._messages is None or not self.is_active():
            raise TransportError("Trying to receive message from inactive client")

        while True:
            try:
                message = await anext(self._messages)
            except (aiomqtt.MqttError, StopAsyncIteration) as exc:
                self.trigger("disconnect")
                raise TransportError(f"MQTT message stream interrupted: {exc}") from exc

            inbound = self._decode(message)
            if inbound is not None:
                return inbound

    def _decode(self, message: aiomqtt.Message) -> InboundMessage | None:
        topic_name = str(message.topic)
        route = parse_topic(self.config.mqtt_topic, topic_name)
        if route is None:
            logger.debug("Ignoring message on foreign topic %s", topic_name)
            return None

        data = _payload_bytes(message.payload)
        log_payload(logger, logging.DEBUG, f"MQTT SUB < {topic_name}", data)
        if not data:
            logger.debug("Ignoring empty message on %s", topic_name)
            return None

        try:
            payload = msgspec.json.decode(data)
        except msgspec.DecodeError as exc:
            logger.warning("Ignoring non-JSON message on %s: %s", topic_name, exc)
            return None
        if not isinstance(payload, dict):
            logger.warning("Ignoring non-object message on %s", topic_name)
            return None

        return InboundMessage(payload=payload, attributes=route.attributes(), topic_name=topic_name)


__all__ = ["MqttChannelClient"]
