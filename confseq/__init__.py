"""Conformance sequencing engine package initialisation."""

__version__ = "1.0.0"

import logging
import sys

logger = logging.getLogger(__name__)


def _check_dependencies():
    """Fail fast when the installed paho-mqtt predates the v2 callback API."""
    try:
        import paho.mqtt.client as mqtt

        # aiomqtt 2.x drives paho through CallbackAPIVersion.VERSION2; a 1.6.x
        # install imports fine and then breaks on the first connect.
        if not hasattr(mqtt, "CallbackAPIVersion"):
            logger.critical(
                "FATAL: Incompatible paho-mqtt version detected. "
                "confseq requires paho-mqtt 2.x with CallbackAPIVersion support."
            )
            sys.exit(1)

    except ImportError:
        # Missing packages surface as ImportError from the importing module.
        pass


_check_dependencies()
