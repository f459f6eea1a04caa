"""TLS setup for the MQTT channel client."""

from __future__ import annotations

import logging
import ssl
from pathlib import Path

from ..config.settings import SessionConfig

logger = logging.getLogger("confseq.util.mqtt")


def configure_tls_context(config: SessionConfig) -> ssl.SSLContext | None:
    """Create an ssl.SSLContext based on the session configuration.

    The device key file doubles as the client key when a client certificate
    is configured, so the harness authenticates with the same credential the
    registry issued for the device.
    """
    if not config.mqtt_tls:
        return None

    try:
        if config.mqtt_cafile:
            if not Path(config.mqtt_cafile).exists():
                raise RuntimeError(f"MQTT TLS CA file missing: {config.mqtt_cafile}")
            context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH, cafile=config.mqtt_cafile)
        else:
            context = ssl.create_default_context(ssl.Purpose.SERVER_AUTH)

        context.minimum_version = ssl.TLSVersion.TLSv1_2

        if config.mqtt_certfile:
            context.load_cert_chain(config.mqtt_certfile, config.key_file)

        return context
    except (OSError, ssl.SSLError, ValueError) as exc:
        raise RuntimeError(f"TLS setup failed: {exc}") from exc


__all__ = ["configure_tls_context"]
