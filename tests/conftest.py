import asyncio

import pytest

from configmanager.client.models import ConfigurationSetting


class StatusError(Exception):
    """Remote failure carrying an HTTP-like status code."""

    def __init__(self, status_code):
        self.status_code = status_code
        super().__init__(f"status {status_code}")


class FakeClient:
    """
    In-memory remote client.

    settings maps key_filter -> list of ConfigurationSetting.
    sentinel is a list of values (or exceptions) returned by successive
    get_setting calls; the last one repeats.
    """

    def __init__(self, settings=None, sentinel=None, delays=None):
        self.settings = settings or {}
        self.sentinel = list(sentinel or [None])
        self.delays = delays or {}
        self.gate = None
        self.list_calls = []
        self.get_calls = []

    async def get_setting(self, key, label=None):
        self.get_calls.append((key, label))
        result = self.sentinel.pop(0) if len(self.sentinel) > 1 else self.sentinel[0]
        if isinstance(result, Exception):
            raise result
        return ConfigurationSetting(key=key, value=result, label=label)

    async def list_settings(self, key_filter, label_filter=None):
        self.list_calls.append((key_filter, label_filter))
        # Results reflect the remote state at call time, even when gated
        items = list(self.settings.get(key_filter, []))
        if self.gate is not None:
            await self.gate.wait()
        delay = self.delays.get(key_filter, 0)
        for setting in items:
            await asyncio.sleep(delay)
            yield setting


class FakeClock:
    """Replaces asyncio.sleep; every sleep blocks until released by the test."""

    def __init__(self):
        self.sleeps = []
        self._sleepers = asyncio.Queue()
        self._pending = None

    async def sleep(self, seconds):
        self.sleeps.append(seconds)
        waiter = asyncio.get_running_loop().create_future()
        await self._sleepers.put(waiter)
        await waiter

    async def wait_for_sleep(self):
        """Return once the loop is parked in sleep()."""
        if self._pending is None:
            self._pending = await asyncio.wait_for(self._sleepers.get(), timeout=2)

    def release(self):
        self._pending.set_result(None)
        self._pending = None

    async def advance(self):
        """Let one interval pass and wait until the next sleep begins."""
        await self.wait_for_sleep()
        self.release()
        await self.wait_for_sleep()


class RecordingLogger:
    def __init__(self):
        self.messages = {"debug": [], "info": [], "warn": [], "error": []}

    def debug(self, message):
        self.messages["debug"].append(message)

    def info(self, message):
        self.messages["info"].append(message)

    def warn(self, message):
        self.messages["warn"].append(message)

    def error(self, message):
        self.messages["error"].append(message)


def setting(key, value, label=None):
    return ConfigurationSetting(key=key, value=value, label=label)


@pytest.fixture
def recording_logger():
    return RecordingLogger()


@pytest.fixture
def fake_client():
    return FakeClient(settings={"key": [setting("key", '{"something": true}')]})
