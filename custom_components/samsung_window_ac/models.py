"""Data models for the Samsung Window AC integration."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import UTC, datetime, timedelta
from enum import IntEnum, StrEnum
from typing import Any

from .const import TOKEN_SAFETY_MARGIN


class RemoteMode(StrEnum):
    """Air conditioner modes as named by the SmartThings capability."""

    OFF = "off"
    COOL = "cool"
    DEHUMIDIFY = "dry"
    AI_COMFORT = "aIComfort"
    FAN = "wind"


class TargetMode(IntEnum):
    """Host-facing target heating/cooling state."""

    OFF = 0
    HEAT = 1
    COOL = 2
    AUTO = 3


class CurrentMode(IntEnum):
    """Host-facing current heating/cooling state (no auto slot)."""

    OFF = 0
    HEAT = 1
    COOL = 2


class Characteristic(StrEnum):
    """Host-facing characteristics served by the state cache."""

    ACTIVE = "active"
    CURRENT_MODE = "current_mode"
    TARGET_MODE = "target_mode"
    CURRENT_TEMPERATURE = "current_temperature"
    TARGET_TEMPERATURE = "target_temperature"
    HEATING_THRESHOLD = "heating_threshold"
    COOLING_THRESHOLD = "cooling_threshold"
    HUMIDITY = "humidity"


@dataclass(frozen=True)
class CredentialRecord:
    """Access/refresh credential pair with its absolute expiry."""

    access_token: str
    refresh_token: str
    expires_at: datetime

    @classmethod
    def from_token_payload(
        cls, payload: dict[str, Any], issued_at: datetime | None = None
    ) -> CredentialRecord:
        """Create a record from an OAuth token response."""
        if issued_at is None:
            issued_at = datetime.now(UTC)
        return cls(
            access_token=payload["access_token"],
            refresh_token=payload["refresh_token"],
            expires_at=issued_at + timedelta(seconds=payload["expires_in"]),
        )

    @classmethod
    def from_storage(cls, data: dict[str, Any]) -> CredentialRecord:
        """Create a record from the persisted JSON object."""
        return cls(
            access_token=data["accessToken"],
            refresh_token=data["refreshToken"],
            expires_at=datetime.fromtimestamp(data["expiresAt"] / 1000, tz=UTC),
        )

    def as_storage(self) -> dict[str, Any]:
        """Serialize the record for persistence (expiry in epoch milliseconds)."""
        return {
            "accessToken": self.access_token,
            "refreshToken": self.refresh_token,
            "expiresAt": int(self.expires_at.timestamp() * 1000),
        }

    def is_usable(self, now: datetime | None = None) -> bool:
        """Return True while the record is outside the safety margin."""
        if now is None:
            now = datetime.now(UTC)
        return now < self.expires_at - TOKEN_SAFETY_MARGIN


@dataclass(frozen=True)
class SmartThingsDevice:
    """Represents a SmartThings device.

    Attributes:
        id: Unique device identifier.
        name: Device name as reported by the manufacturer.
        label: User-assigned display label.

    """

    id: str
    name: str
    label: str

    @property
    def display_name(self) -> str:
        """Return the label, falling back to the device name."""
        return self.label or self.name


@dataclass(slots=True)
class ACState:
    """Decoded remote-side state of the air conditioner."""

    power_on: bool | None
    mode: RemoteMode | None
    current_temperature: float | None
    humidity: float | None
    cooling_setpoint: float | None


@dataclass(slots=True)
class CachedValue:
    """A cached payload with the monotonic time it was captured at."""

    value: Any
    captured_at: float


@dataclass(slots=True)
class HostState:
    """Host-facing snapshot of every characteristic."""

    active: bool
    current_mode: CurrentMode
    target_mode: TargetMode
    current_temperature: float
    target_temperature: float
    heating_threshold: float
    cooling_threshold: float
    humidity: float
