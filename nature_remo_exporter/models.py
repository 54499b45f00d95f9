"""
Data models module
Pydantic models for Nature Remo Cloud API payloads and API responses
"""
from datetime import datetime
from enum import Enum
from typing import Dict, Optional

from pydantic import BaseModel, Field, field_validator

# Label keys shared by every device series, in exposition order
DEVICE_LABELS = [
    "id",
    "name",
    "firmware_version",
    "mac_address",
    "bt_mac_address",
    "serial_number",
]


class SensorType(str, Enum):
    """Keys used by the cloud API in a device's newest_events"""
    TEMPERATURE = "te"
    HUMIDITY = "hu"
    ILLUMINATION = "il"
    MOVEMENT = "mo"


class SensorValue(BaseModel):
    val: float = Field(description="Latest observed value")
    created_at: datetime = Field(description="When the value was observed (UTC)")


class Device(BaseModel):
    id: str = Field(description="Opaque device ID")
    name: str = Field("", description="Display name set in the Nature Remo app")
    firmware_version: str = Field("", description="Firmware version string, e.g. 'Remo/1.0.77-g808448c'")
    mac_address: str = Field("", description="Wi-Fi MAC address")
    bt_mac_address: str = Field("", description="Bluetooth MAC address")
    serial_number: str = Field("", description="Hardware serial number")
    temperature_offset: float = Field(0.0, description="User configured temperature offset")
    humidity_offset: float = Field(0.0, description="User configured humidity offset")
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None
    newest_events: Dict[str, SensorValue] = Field(
        default_factory=dict,
        description="Most recent reading per sensor key (te, hu, il, mo)"
    )

    class Config:
        json_schema_extra = {
            "example": {
                "id": "3b9c9e0a-1111-2222-3333-444455556666",
                "name": "Living Room",
                "firmware_version": "Remo/1.0.77-g808448c",
                "mac_address": "aa:bb:cc:dd:ee:ff",
                "bt_mac_address": "aa:bb:cc:dd:ee:00",
                "serial_number": "1W320000000000",
                "newest_events": {
                    "te": {"val": 22.5, "created_at": "2024-05-01T12:00:00Z"},
                    "hu": {"val": 48, "created_at": "2024-05-01T12:00:00Z"},
                    "il": {"val": 120, "created_at": "2024-05-01T11:58:00Z"},
                    "mo": {"val": 1, "created_at": "2024-05-01T11:42:10Z"}
                }
            }
        }

    @field_validator(
        "name", "firmware_version", "mac_address", "bt_mac_address", "serial_number",
        mode="before"
    )
    @classmethod
    def null_to_empty(cls, v):
        # Exposition format can't represent absent label values
        return "" if v is None else v

    @field_validator("temperature_offset", "humidity_offset", mode="before")
    @classmethod
    def null_to_zero(cls, v):
        return 0.0 if v is None else v

    @field_validator("newest_events", mode="before")
    @classmethod
    def null_to_no_events(cls, v):
        return {} if v is None else v

    def reading(self, sensor: SensorType) -> Optional[SensorValue]:
        """Latest reading for a sensor kind, or None when the device has none"""
        return self.newest_events.get(sensor.value)

    def labels(self) -> Dict[str, str]:
        """Label set identifying this device on every published series"""
        return {key: getattr(self, key) for key in DEVICE_LABELS}


class HealthStatus(BaseModel):
    status: str = Field(description="Overall health status: 'healthy' or 'unhealthy'")
    timestamp: datetime = Field(description="UTC timestamp of health check")
    version: str = Field(description="Exporter version")
    refresher_running: bool = Field(description="True if the refresh loop background task is running")
    last_refresh: Optional[datetime] = Field(None, description="UTC timestamp of the last refresh attempt")
    last_success: Optional[datetime] = Field(None, description="UTC timestamp of the last successful refresh")
    last_error: Optional[str] = Field(None, description="Error message of the last failed refresh, if the latest cycle failed")
    consecutive_errors: int = Field(0, description="Number of failed refresh cycles in a row")

    class Config:
        json_schema_extra = {
            "example": {
                "status": "healthy",
                "timestamp": "2024-05-01T12:00:30Z",
                "version": "1.0.0",
                "refresher_running": True,
                "last_refresh": "2024-05-01T12:00:00Z",
                "last_success": "2024-05-01T12:00:00Z",
                "last_error": None,
                "consecutive_errors": 0
            }
        }
