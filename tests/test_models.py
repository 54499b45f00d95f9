"""Tests for Nature Remo payload models."""

from nature_remo_exporter.models import DEVICE_LABELS, Device, SensorType

from tests.conftest import T0, device_payload


class TestDeviceParsing:
    """Test parsing /1/devices items."""

    def test_parses_full_payload(self, make_device):
        device = make_device(temperature=21.0, humidity=55)

        assert device.id == "dev-1"
        assert device.name == "Living Room"
        assert device.reading(SensorType.TEMPERATURE).val == 21.0
        assert device.reading(SensorType.HUMIDITY).val == 55.0
        assert device.reading(SensorType.MOVEMENT).created_at == T0

    def test_missing_sensor_reading_is_none(self, make_device):
        device = make_device(illumination=None, movement=None)

        assert device.reading(SensorType.ILLUMINATION) is None
        assert device.reading(SensorType.MOVEMENT) is None
        assert device.reading(SensorType.TEMPERATURE) is not None

    def test_unknown_sensor_keys_are_kept_but_ignored(self):
        payload = device_payload()
        payload["newest_events"]["xx"] = {"val": 3, "created_at": "2024-05-01T12:00:00Z"}

        device = Device.model_validate(payload)

        assert "xx" in device.newest_events
        assert {s.value for s in SensorType} <= set(device.newest_events)

    def test_null_newest_events(self):
        device = Device.model_validate(device_payload(newest_events=None))

        assert device.newest_events == {}
        assert device.reading(SensorType.TEMPERATURE) is None


class TestDeviceLabels:
    """Test label set construction."""

    def test_labels_cover_schema_in_order(self, make_device):
        labels = make_device().labels()

        assert list(labels) == DEVICE_LABELS
        assert labels == {
            "id": "dev-1",
            "name": "Living Room",
            "firmware_version": "Remo/1.0.77-g808448c",
            "mac_address": "aa:bb:cc:dd:ee:ff",
            "bt_mac_address": "aa:bb:cc:dd:ee:00",
            "serial_number": "1W320000000000",
        }

    def test_absent_identity_fields_become_empty_strings(self):
        payload = device_payload(bt_mac_address=None, serial_number=None)
        del payload["firmware_version"]

        labels = Device.model_validate(payload).labels()

        assert labels["bt_mac_address"] == ""
        assert labels["serial_number"] == ""
        assert labels["firmware_version"] == ""
        assert all(isinstance(v, str) for v in labels.values())
