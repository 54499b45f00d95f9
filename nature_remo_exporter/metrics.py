"""
Prometheus metrics module
Device gauges, the derived movement counter and exporter self-metrics
"""
import logging
import threading
from datetime import datetime
from typing import Dict, Iterable, Tuple

from prometheus_client import (
    CollectorRegistry,
    Counter,
    Gauge,
    GCCollector,
    Histogram,
    PlatformCollector,
    ProcessCollector,
    generate_latest,
)
from prometheus_client.core import UnknownMetricFamily

from .models import DEVICE_LABELS, Device, SensorType

logger = logging.getLogger(__name__)

NAMESPACE = "nature_remo"
EXPORTER_NAMESPACE = "nature_remo_exporter"


class MovementCounter:
    """
    Per-device movement event counts, published as nature_remo_movement_counter.

    prometheus_client's Counter always renders its samples with a _total
    suffix, so the counts are kept here and emitted as an untyped family whose
    sample name is exactly the family name. Values only ever go up.
    """

    def __init__(self, name: str, documentation: str, labelnames):
        self.name = name
        self.documentation = documentation
        self.labelnames = list(labelnames)
        self._values: Dict[Tuple[str, ...], float] = {}
        self._lock = threading.Lock()

    def inc(self, labels: Dict[str, str], amount: float = 1):
        if amount < 0:
            raise ValueError("Counters can only be incremented by non-negative amounts.")
        key = tuple(labels[name] for name in self.labelnames)
        with self._lock:
            self._values[key] = self._values.get(key, 0.0) + amount

    def get(self, labels: Dict[str, str]):
        key = tuple(labels[name] for name in self.labelnames)
        with self._lock:
            return self._values.get(key)

    def collect(self):
        family = UnknownMetricFamily(self.name, self.documentation, labels=self.labelnames)
        with self._lock:
            values = list(self._values.items())
        for key, value in values:
            family.add_metric(list(key), value)
        yield family


class MetricState:
    """
    Owns every series the exporter publishes.

    The refresher is the only writer (via update()); the /metrics route only
    reads through render(). Each series value is guarded by prometheus_client's
    own per-value lock, so a scrape never sees a half-written value. A scrape
    running during update() may see some devices from the new cycle and some
    from the previous one.

    Exporter self-metrics (refresh failures and duration) are regular
    prometheus_client metrics and also emit _created samples unless
    disable_created_metrics() was called first, as the CLI does. Device
    series never carry _created samples.
    """

    def __init__(self, registry: CollectorRegistry = None, process_metrics: bool = True):
        self.registry = registry if registry is not None else CollectorRegistry()

        if process_metrics:
            ProcessCollector(registry=self.registry)
            PlatformCollector(registry=self.registry)
            GCCollector(registry=self.registry)

        # Device metrics
        self.temperature = Gauge(
            'temperature', 'current temperature',
            DEVICE_LABELS, namespace=NAMESPACE, registry=self.registry
        )
        self.humidity = Gauge(
            'humidity', 'current humidity',
            DEVICE_LABELS, namespace=NAMESPACE, registry=self.registry
        )
        self.illumination = Gauge(
            'illumination', 'current illumination',
            DEVICE_LABELS, namespace=NAMESPACE, registry=self.registry
        )
        self.movement = Gauge(
            'movement', 'current movement',
            DEVICE_LABELS, namespace=NAMESPACE, registry=self.registry
        )
        self.movement_counter = MovementCounter(
            f"{NAMESPACE}_movement_counter", "number of movement events detected since exporter start",
            DEVICE_LABELS
        )
        self.registry.register(self.movement_counter)

        # Exporter metrics
        self.refresh_duration = Histogram(
            'refresh_duration_seconds', 'Duration of refresh cycles (fetch and update)',
            namespace=EXPORTER_NAMESPACE, registry=self.registry
        )
        self.refresh_failures = Counter(
            'refresh_failures', 'Number of failed refresh cycles',
            namespace=EXPORTER_NAMESPACE, registry=self.registry
        )

        # Last movement event timestamp per device ID, never published
        self._last_movements: Dict[str, datetime] = {}

    def update(self, devices: Iterable[Device]):
        """
        Apply one device list to the gauges and the movement counter.

        A sensor missing from a device's newest events leaves its series
        untouched, so the last known value stays published.
        """
        count = 0
        for device in devices:
            labels = device.labels()

            for sensor, gauge in (
                (SensorType.TEMPERATURE, self.temperature),
                (SensorType.HUMIDITY, self.humidity),
                (SensorType.ILLUMINATION, self.illumination),
            ):
                reading = device.reading(sensor)
                if reading is not None:
                    gauge.labels(**labels).set(reading.val)

            movement = device.reading(SensorType.MOVEMENT)
            if movement is not None:
                self.movement.labels(**labels).set(movement.val)
                increment = 1 if self.record_movement(device.id, movement.created_at) else 0
                self.movement_counter.inc(labels, increment)

            count += 1

        logger.debug(f"Updated metrics for {count} devices")

    def record_movement(self, device_id: str, observed_at: datetime) -> bool:
        """
        Remember the latest movement event time for a device.

        Returns True only when a previous time was known and differs from
        observed_at; the first sighting of a device is just a baseline.
        """
        last = self._last_movements.get(device_id)
        if last is None:
            self._last_movements[device_id] = observed_at
            return False
        if last == observed_at:
            return False

        self._last_movements[device_id] = observed_at
        return True

    def last_movement(self, device_id: str):
        """Last recorded movement event time for a device, or None"""
        return self._last_movements.get(device_id)

    def render(self) -> bytes:
        """Current values in the Prometheus text exposition format"""
        return generate_latest(self.registry)
