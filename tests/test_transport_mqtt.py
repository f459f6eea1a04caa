"""Tests for the aiomqtt-backed channel client."""

from __future__ import annotations

import dataclasses
from collections.abc import AsyncIterator, Iterable
from types import SimpleNamespace
from typing import Any

import aiomqtt
import pytest

from confseq.config.settings import SessionConfig
from confseq.errors import TransportError
from confseq.protocol.topics import parse_topic
from confseq.transport import ChannelClient, MqttChannelClient


class FakeMqttClient:
    def __init__(self, options: dict[str, Any], inbound: Iterable[Any], factory: FakeClientFactory) -> None:
        self.options = options
        self._inbound = list(inbound)
        self._factory = factory
        self.subscriptions: list[tuple[str, int]] = []
        self.published: list[dict[str, Any]] = []
        self.exited = False

    async def __aenter__(self) -> FakeMqttClient:
        if self._factory.connect_error is not None:
            raise self._factory.connect_error
        return self

    async def __aexit__(self, *_exc: object) -> None:
        self.exited = True

    async def subscribe(self, topic: str, qos: int = 0) -> None:
        self.subscriptions.append((topic, qos))

    async def publish(self, topic: str, payload: bytes, **kwargs: Any) -> None:
        if self._factory.publish_error is not None:
            raise self._factory.publish_error
        self.published.append({"topic": topic, "payload": payload, **kwargs})

    @property
    def messages(self) -> AsyncIterator[Any]:
        return self._iterate()

    async def _iterate(self) -> AsyncIterator[Any]:
        for message in self._inbound:
            yield message


class FakeClientFactory:
    def __init__(self, inbound: Iterable[Any] = ()) -> None:
        self.inbound = list(inbound)
        self.clients: list[FakeMqttClient] = []
        self.connect_error: Exception | None = None
        self.publish_error: Exception | None = None

    def __call__(self, **options: Any) -> FakeMqttClient:
        client = FakeMqttClient(options, self.inbound, self)
        self.clients.append(client)
        return client


def _message(topic: str, payload: Any) -> SimpleNamespace:
    return SimpleNamespace(topic=topic, payload=payload)


def test_parse_topic_extracts_attributes() -> None:
    route = parse_topic("udmi", "udmi/AHU-1/states/pointset")
    assert route is not None
    assert route.attributes() == {"deviceId": "AHU-1", "subFolder": "pointset", "subType": "states"}


def test_parse_topic_defaults_sub_folder() -> None:
    route = parse_topic("site/udmi", "site/udmi/AHU-1/config")
    assert route is not None
    assert route.sub_folder == "update"
    assert route.sub_type == "config"


@pytest.mark.parametrize("topic", ["other/AHU-1/states/system", "udmi/AHU-1", "udmi"])
def test_parse_topic_rejects_foreign_topics(topic: str) -> None:
    assert parse_topic("udmi", topic) is None


@pytest.mark.parametrize(
    "topic",
    [
        "udmi/AHU-1/config/../../../../escaped",
        "udmi/AHU-1/states/system/extra",
        "udmi/AHU-1/states/..",
        "udmi/AHU-1/./system",
        "udmi/../states/system",
    ],
)
def test_parse_topic_rejects_nested_and_dot_segments(topic: str) -> None:
    assert parse_topic("udmi", topic) is None


def test_client_satisfies_channel_protocol(session_config: SessionConfig) -> None:
    assert isinstance(MqttChannelClient(session_config, client_factory=FakeClientFactory()), ChannelClient)


@pytest.mark.asyncio
async def test_open_connects_and_subscribes(session_config: SessionConfig) -> None:
    factory = FakeClientFactory()
    channel = MqttChannelClient(session_config, client_factory=factory)
    assert not channel.is_active()

    async with channel:
        assert channel.is_active()
        assert channel.fsm_state == MqttChannelClient.STATE_READY
        client = factory.clients[0]
        assert client.subscriptions == [("udmi/#", 1)]
        assert client.options["hostname"] == "localhost"
        assert client.options["port"] == 1883
        assert client.options["protocol"] == aiomqtt.ProtocolVersion.V5

    assert not channel.is_active()
    assert client.exited


@pytest.mark.asyncio
async def test_publish_addresses_device_topic(session_config: SessionConfig) -> None:
    factory = FakeClientFactory()
    async with MqttChannelClient(session_config, client_factory=factory) as channel:
        await channel.publish("AHU-1", "config/system", b'{"min_loglevel":400}')

    published = factory.clients[0].published
    assert len(published) == 1
    assert published[0]["topic"] == "udmi/AHU-1/config/system"
    assert published[0]["payload"] == b'{"min_loglevel":400}'
    assert published[0]["qos"] == 1
    assert published[0]["retain"] is False
    assert published[0]["properties"].ContentType == "application/json"


@pytest.mark.asyncio
async def test_publish_on_closed_channel_fails(session_config: SessionConfig) -> None:
    channel = MqttChannelClient(session_config, client_factory=FakeClientFactory())
    with pytest.raises(TransportError, match="inactive client"):
        await channel.publish("AHU-1", "query/state", b"{}")


@pytest.mark.asyncio
async def test_publish_error_becomes_transport_error(session_config: SessionConfig) -> None:
    factory = FakeClientFactory()
    factory.publish_error = aiomqtt.MqttError("connection lost")

    async with MqttChannelClient(session_config, client_factory=factory) as channel:
        with pytest.raises(TransportError, match="connection lost"):
            await channel.publish("AHU-1", "query/state", b"{}")


@pytest.mark.asyncio
async def test_next_message_skips_undecodable_messages(session_config: SessionConfig) -> None:
    factory = FakeClientFactory(
        [
            _message("elsewhere/AHU-1/states/system", b'{"serial_no":"X"}'),
            _message("udmi/AHU-1/states/system", b""),
            _message("udmi/AHU-1/states/system", b"not json"),
            _message("udmi/AHU-1/states/system", b"[1, 2]"),
            _message("udmi/AHU-1/states/../../escaped", b'{"serial_no":"X"}'),
            _message("udmi/AHU-1/states/system/extra", b'{"serial_no":"X"}'),
            _message("udmi/AHU-1/states/system", b'{"serial_no":"ABC123"}'),
        ]
    )

    async with MqttChannelClient(session_config, client_factory=factory) as channel:
        message = await channel.next_message()

    assert message.payload == {"serial_no": "ABC123"}
    assert message.device_id == "AHU-1"
    assert message.sub_folder == "system"
    assert message.sub_type == "states"
    assert message.topic_name == "udmi/AHU-1/states/system"


@pytest.mark.asyncio
async def test_stream_end_deactivates_channel(session_config: SessionConfig) -> None:
    factory = FakeClientFactory([_message("udmi/AHU-1/config", b'{"version":"1"}')])

    async with MqttChannelClient(session_config, client_factory=factory) as channel:
        first = await channel.next_message()
        assert first.sub_folder == "update"
        with pytest.raises(TransportError, match="interrupted"):
            await channel.next_message()
        assert not channel.is_active()
        with pytest.raises(TransportError, match="inactive client"):
            await channel.next_message()


@pytest.mark.asyncio
async def test_connect_failure_raises_transport_error(session_config: SessionConfig) -> None:
    factory = FakeClientFactory()
    factory.connect_error = aiomqtt.MqttError("connection refused")
    channel = MqttChannelClient(session_config, client_factory=factory)

    with pytest.raises(TransportError, match="Unable to connect to MQTT broker localhost:1883"):
        await channel.open()

    assert len(factory.clients) == 1
    assert channel.fsm_state == MqttChannelClient.STATE_DISCONNECTED


@pytest.mark.asyncio
async def test_missing_ca_file_raises_transport_error(session_config: SessionConfig, tmp_path: Any) -> None:
    config = dataclasses.replace(session_config, mqtt_tls=True, mqtt_cafile=str(tmp_path / "missing-ca.pem"))
    factory = FakeClientFactory()

    with pytest.raises(TransportError, match="CA file missing"):
        await MqttChannelClient(config, client_factory=factory).open()

    assert factory.clients == []
