"""Pytest configuration for confseq tests."""

from __future__ import annotations

import asyncio
import importlib.util
import inspect
import logging
import sys
from pathlib import Path

import pytest

PACKAGE_ROOT = Path(__file__).resolve().parents[1]
if str(PACKAGE_ROOT) not in sys.path:
    sys.path.insert(0, str(PACKAGE_ROOT))

from confseq.config.settings import SessionConfig  # noqa: E402
from confseq.services.recorder import ResultRecorder  # noqa: E402
from confseq.state.context import SessionContext  # noqa: E402

from .mocks import FakeChannel  # noqa: E402

_HAS_PYTEST_ASYNCIO = importlib.util.find_spec("pytest_asyncio") is not None

DEVICE_ID = "AHU-1"
SERIAL_NO = "ABC123"


def pytest_configure(config: pytest.Config) -> None:
    config.addinivalue_line("markers", "asyncio: mark test to run on asyncio loop")


@pytest.hookimpl(tryfirst=True)
def pytest_pyfunc_call(pyfuncitem: pytest.Function) -> bool | None:
    """Fallback asyncio runner when pytest-asyncio is unavailable."""
    if _HAS_PYTEST_ASYNCIO:
        return None
    if "asyncio" not in pyfuncitem.keywords:
        return None
    test_function = pyfuncitem.obj
    if not inspect.iscoroutinefunction(test_function):
        return None

    kwargs = {name: pyfuncitem.funcargs[name] for name in pyfuncitem._fixtureinfo.argnames}
    asyncio.run(test_function(**kwargs))
    return True


@pytest.fixture(autouse=True)
def reset_logging_handlers():
    """Close and remove root handlers installed by configure_logging()."""
    yield
    root = logging.getLogger()
    for handler in root.handlers[:]:
        if type(handler).__module__.startswith("_pytest"):
            continue
        try:
            handler.close()
        except (OSError, RuntimeError):
            pass
        root.removeHandler(handler)


@pytest.fixture()
def session_config(tmp_path: Path) -> SessionConfig:
    return SessionConfig(
        project_id="test-project",
        site_model=str(tmp_path / "site_model"),
        device_id=DEVICE_ID,
        serial_no=SERIAL_NO,
        key_file=str(tmp_path / "rsa_private.pem"),
        registry_id="ZZ-TRI-FECTA",
        mqtt_topic="udmi",
        connect_attempts=1,
        test_timeout=0.5,
        out_dir=str(tmp_path / "out"),
    )


@pytest.fixture()
def fake_channel() -> FakeChannel:
    return FakeChannel()


@pytest.fixture()
def recorder(session_config: SessionConfig) -> ResultRecorder:
    result_recorder = ResultRecorder(session_config.device_out_dir)
    result_recorder.reset()
    return result_recorder


@pytest.fixture()
def session_context(
    session_config: SessionConfig,
    fake_channel: FakeChannel,
    recorder: ResultRecorder,
) -> SessionContext:
    return SessionContext(config=session_config, channel=fake_channel, recorder=recorder)
