"""Tests for session configuration loading."""

from __future__ import annotations

import dataclasses
import json
from pathlib import Path
from typing import Any

import pytest

from confseq.config.settings import SessionConfig, load_session_config
from confseq.errors import StartupConfigError


def _write_configs(tmp_path: Path, validator: dict[str, Any], registry: dict[str, Any] | None = None) -> Path:
    site_model = tmp_path / "site_model"
    site_model.mkdir(exist_ok=True)
    if registry is not None:
        (site_model / "cloud_iot_config.json").write_text(json.dumps(registry))
    path = tmp_path / "validator_config.json"
    path.write_text(json.dumps({"site_model": str(site_model), **validator}))
    return path


@pytest.fixture()
def identity() -> dict[str, Any]:
    return {
        "project_id": "test-project",
        "device_id": "AHU-1",
        "serial_no": "ABC123",
        "key_file": "rsa_private.pem",
    }


def test_load_applies_defaults(tmp_path: Path, identity: dict[str, Any]) -> None:
    path = _write_configs(tmp_path, identity, {"registry_id": "ZZ-TRI-FECTA", "cloud_region": "us-central1"})

    config = load_session_config(path)

    assert config.device_id == "AHU-1"
    assert config.serial_no == "ABC123"
    assert config.registry_id == "ZZ-TRI-FECTA"
    assert config.cloud_region == "us-central1"
    assert config.mqtt_host == "localhost"
    assert config.mqtt_port == 1883
    assert config.mqtt_topic == "udmi"
    assert config.test_timeout == 60.0
    assert config.device_out_dir == Path("out") / "devices" / "AHU-1"
    assert config.result_log == Path("out") / "devices" / "AHU-1" / "RESULT.log"


def test_load_ignores_unknown_keys_and_normalizes_topic(tmp_path: Path, identity: dict[str, Any]) -> None:
    validator = {**identity, "mqtt_topic": "/site/udmi/", "extra_field": 1, "mqtt_port": 8883}
    path = _write_configs(tmp_path, validator, {"registry_id": "R1", "unused": True})

    config = load_session_config(path)

    assert config.mqtt_topic == "site/udmi"
    assert config.mqtt_port == 8883
    assert config.cloud_region is None


@pytest.mark.parametrize("missing", ["device_id", "serial_no", "project_id", "key_file"])
def test_missing_identity_field_fails_fast(tmp_path: Path, identity: dict[str, Any], missing: str) -> None:
    del identity[missing]
    path = _write_configs(tmp_path, identity, {"registry_id": "R1"})

    with pytest.raises(StartupConfigError, match=missing):
        load_session_config(path)


def test_missing_registry_file_fails_fast(tmp_path: Path, identity: dict[str, Any]) -> None:
    path = _write_configs(tmp_path, identity)

    with pytest.raises(StartupConfigError, match="cloud_iot_config.json"):
        load_session_config(path)


def test_missing_registry_id_fails_fast(tmp_path: Path, identity: dict[str, Any]) -> None:
    path = _write_configs(tmp_path, identity, {"cloud_region": "us-central1"})

    with pytest.raises(StartupConfigError, match="registry_id"):
        load_session_config(path)


def test_malformed_json_fails_fast(tmp_path: Path) -> None:
    path = tmp_path / "validator_config.json"
    path.write_text("{not json")

    with pytest.raises(StartupConfigError, match="validator_config.json"):
        load_session_config(path)


def test_non_object_json_fails_fast(tmp_path: Path) -> None:
    path = tmp_path / "validator_config.json"
    path.write_text("[]")

    with pytest.raises(StartupConfigError, match="expected a JSON object"):
        load_session_config(path)


def test_password_is_not_in_repr(session_config: SessionConfig) -> None:
    config = dataclasses.replace(session_config, mqtt_pass="hunter2")
    assert "hunter2" not in repr(config)
