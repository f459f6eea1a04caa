"""Constants shared across confseq modules."""

from __future__ import annotations

from typing import Final

# Channel topics
STATE_QUERY_TOPIC: Final[str] = "query/state"
CONFIG_TOPIC_PREFIX: Final[str] = "config"
EMPTY_MESSAGE: Final[bytes] = b"{}"

# Message attributes
ATTR_DEVICE_ID: Final[str] = "deviceId"
ATTR_SUB_FOLDER: Final[str] = "subFolder"
ATTR_SUB_TYPE: Final[str] = "subType"
DEFAULT_SUB_FOLDER: Final[str] = "update"

# Payload field that never takes part in comparisons or typed decoding
TIMESTAMP_FIELD: Final[str] = "timestamp"

# Output tree
RESULT_LOG_FILE: Final[str] = "RESULT.log"
TESTS_OUT_DIR: Final[str] = "tests"
DEVICES_OUT_DIR: Final[str] = "devices"
ATTRIBUTE_SUFFIX: Final[str] = ".attr"
MESSAGE_SUFFIX: Final[str] = ".json"
RESULT_FORMAT: Final[str] = "RESULT {result} {test_name} {message}\n"
RESULT_PASS: Final[str] = "pass"
RESULT_FAIL: Final[str] = "fail"
PASS_MESSAGE: Final[str] = "Sequence completed"

# Configuration sources
VALIDATOR_CONFIG_FILE: Final[str] = "validator_config.json"
CLOUD_IOT_CONFIG_FILE: Final[str] = "cloud_iot_config.json"

# Defaults
DEFAULT_MQTT_HOST: Final[str] = "localhost"
DEFAULT_MQTT_PORT: Final[int] = 1883
DEFAULT_MQTT_TOPIC: Final[str] = "udmi"
DEFAULT_MQTT_QOS: Final[int] = 1
DEFAULT_CONNECT_ATTEMPTS: Final[int] = 5
DEFAULT_RECONNECT_DELAY: Final[int] = 1
DEFAULT_TEST_TIMEOUT: Final[float] = 60.0
DEFAULT_OUT_DIR: Final[str] = "out"
DEFAULT_DEBUG_LOGGING: Final[bool] = False
INITIAL_MIN_LOGLEVEL: Final[int] = 400
