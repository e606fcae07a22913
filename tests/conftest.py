"""Pytest configuration and fixtures for Samsung Window AC tests."""

from datetime import UTC, datetime, timedelta
from typing import Any
from unittest.mock import AsyncMock, Mock

import pytest

from custom_components.samsung_window_ac.models import CredentialRecord


def create_record(
    expires_in: timedelta = timedelta(hours=1),
    access_token: str = "access_token",
    refresh_token: str = "refresh_token",
) -> CredentialRecord:
    """Create a credential record expiring relative to now."""
    return CredentialRecord(
        access_token=access_token,
        refresh_token=refresh_token,
        expires_at=datetime.now(UTC) + expires_in,
    )


def create_status_response(
    switch: str = "on",
    mode: str = "cool",
    temperature: float = 27.0,
    humidity: float = 45.0,
    setpoint: float = 24.0,
) -> dict[str, Any]:
    """Create a unified device status response."""
    return {
        "components": {
            "main": {
                "switch": {"switch": {"value": switch}},
                "temperatureMeasurement": {
                    "temperature": {"value": temperature, "unit": "C"},
                },
                "relativeHumidityMeasurement": {
                    "humidity": {"value": humidity, "unit": "%"},
                },
                "airConditionerMode": {"airConditionerMode": {"value": mode}},
                "thermostatCoolingSetpoint": {
                    "coolingSetpoint": {"value": setpoint, "unit": "C"},
                },
            },
        },
    }


@pytest.fixture
def mock_hass() -> Mock:
    """Create a mock Home Assistant instance running executor jobs inline."""
    hass = Mock()
    hass.data = {}

    async def _run(func: Any, *args: Any) -> Any:
        return func(*args)

    hass.async_add_executor_job = AsyncMock(side_effect=_run)
    return hass


@pytest.fixture
def sample_token_response() -> dict[str, Any]:
    """Fixture providing a sample OAuth token response."""
    return {
        "access_token": "new_access_token",
        "token_type": "bearer",
        "refresh_token": "new_refresh_token",
        "expires_in": 86399,
        "scope": "r:devices:* x:devices:*",
        "installed_app_id": "app-id",
        "access_tier": 0,
    }


@pytest.fixture
def sample_devices_response() -> dict[str, Any]:
    """Fixture providing a sample /devices response."""
    return {
        "items": [
            {"deviceId": "tv-1", "name": "Samsung TV", "label": "Living room TV"},
            {
                "deviceId": "ac-1",
                "name": "Samsung Window A/C",
                "label": "Bedroom AC",
            },
        ],
    }


@pytest.fixture
def sample_status_response() -> dict[str, Any]:
    """Fixture providing a unified status response for a cooling device."""
    return create_status_response()


@pytest.fixture
def sample_command_response() -> dict[str, Any]:
    """Fixture providing a completed command response."""
    return {"results": [{"id": "cmd-1", "status": "COMPLETED"}]}
