"""Shared fixtures for exporter tests."""

import threading
from datetime import datetime, timedelta, timezone

import pytest

from nature_remo_exporter.metrics import MetricState
from nature_remo_exporter.models import Device

T0 = datetime(2024, 5, 1, 12, 0, 0, tzinfo=timezone.utc)


def at(minutes: float) -> str:
    """ISO timestamp `minutes` after T0, as the cloud API sends it."""
    return (T0 + timedelta(minutes=minutes)).isoformat().replace("+00:00", "Z")


def device_payload(
    device_id="dev-1",
    name="Living Room",
    temperature=22.5,
    humidity=48.0,
    illumination=120.0,
    movement=(1.0, 0),
    **overrides,
):
    """Build a /1/devices list item. Pass None for a sensor to omit it."""
    events = {}
    if temperature is not None:
        events["te"] = {"val": temperature, "created_at": at(0)}
    if humidity is not None:
        events["hu"] = {"val": humidity, "created_at": at(0)}
    if illumination is not None:
        events["il"] = {"val": illumination, "created_at": at(0)}
    if movement is not None:
        value, minutes = movement
        events["mo"] = {"val": value, "created_at": at(minutes)}

    payload = {
        "id": device_id,
        "name": name,
        "firmware_version": "Remo/1.0.77-g808448c",
        "mac_address": "aa:bb:cc:dd:ee:ff",
        "bt_mac_address": "aa:bb:cc:dd:ee:00",
        "serial_number": "1W320000000000",
        "temperature_offset": 0,
        "humidity_offset": 0,
        "created_at": at(-60 * 24),
        "updated_at": at(0),
        "newest_events": events,
    }
    payload.update(overrides)
    return payload


@pytest.fixture
def make_device():
    """Factory fixture returning parsed Device models."""

    def _make(**kwargs) -> Device:
        return Device.model_validate(device_payload(**kwargs))

    return _make


@pytest.fixture
def state():
    """Metric state on its own registry, without process collectors."""
    return MetricState(process_metrics=False)


class ScriptedClient:
    """Stand-in for NatureRemoClient that replays a list of results.

    Each entry is either a list of devices to return or an exception to raise.
    Once the script is exhausted the last entry is repeated and `on_exhausted`
    (if given) is called once.
    """

    def __init__(self, script, on_exhausted=None, on_call=None):
        self.script = list(script)
        self.on_exhausted = on_exhausted
        self.on_call = on_call
        self.calls = 0
        self.closed = False
        self._lock = threading.Lock()

    def get_devices(self):
        with self._lock:
            index = min(self.calls, len(self.script) - 1)
            self.calls += 1
            calls = self.calls
        if self.on_call is not None:
            self.on_call(calls)
        if calls == len(self.script) and self.on_exhausted is not None:
            self.on_exhausted()
        result = self.script[index]
        if isinstance(result, Exception):
            raise result
        return result

    def close(self):
        self.closed = True
