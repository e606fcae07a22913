"""Climate entity for Samsung window air conditioners.

This module exposes the air conditioner as a Home Assistant climate entity
whose state is read through the integration's state cache.
"""

from __future__ import annotations

import logging
from datetime import timedelta
from typing import TYPE_CHECKING, Any

from homeassistant.components.climate import (
    ATTR_HVAC_MODE,
    ATTR_TARGET_TEMP_HIGH,
    ATTR_TARGET_TEMP_LOW,
    ClimateEntity,
    ClimateEntityFeature,
    HVACAction,
    HVACMode,
)
from homeassistant.const import ATTR_TEMPERATURE, UnitOfTemperature
from homeassistant.exceptions import HomeAssistantError
from homeassistant.helpers.device_registry import DeviceInfo

from .api import SmartThingsApiAuthError
from .const import DOMAIN, MANUFACTURER, MAX_TEMP, MIN_TEMP, MODEL, TEMP_STEP
from .models import CurrentMode, HostState, SmartThingsDevice, TargetMode

if TYPE_CHECKING:
    from collections.abc import Awaitable

    from homeassistant.config_entries import ConfigEntry
    from homeassistant.core import HomeAssistant
    from homeassistant.helpers.entity_platform import AddEntitiesCallback

    from .cache import StateCache

_LOGGER = logging.getLogger(__name__)

SCAN_INTERVAL = timedelta(seconds=30)

TARGET_MODE_TO_HVAC_MODE = {
    TargetMode.OFF: HVACMode.OFF,
    TargetMode.HEAT: HVACMode.HEAT,
    TargetMode.COOL: HVACMode.COOL,
    TargetMode.AUTO: HVACMode.HEAT_COOL,
}
HVAC_MODE_TO_TARGET_MODE = {
    value: key for key, value in TARGET_MODE_TO_HVAC_MODE.items()
}
CURRENT_MODE_TO_HVAC_ACTION = {
    CurrentMode.OFF: HVACAction.OFF,
    CurrentMode.HEAT: HVACAction.HEATING,
    CurrentMode.COOL: HVACAction.COOLING,
}


async def async_setup_entry(
    hass: HomeAssistant,
    entry: ConfigEntry,
    async_add_entities: AddEntitiesCallback,
) -> None:
    """Set up the climate entity for the discovered air conditioner."""
    entry_data = hass.data[DOMAIN][entry.entry_id]
    async_add_entities(
        [SamsungWindowACClimateEntity(entry_data["cache"], entry_data["device"])],
        update_before_add=True,
    )


class SamsungWindowACClimateEntity(ClimateEntity):
    """Climate entity bound to one SmartThings air conditioner.

    Holds the last observed host-facing snapshot. Writes change it only once
    the device confirms the command.
    """

    _attr_temperature_unit = UnitOfTemperature.CELSIUS
    _attr_target_temperature_step = TEMP_STEP
    _attr_min_temp = MIN_TEMP
    _attr_max_temp = MAX_TEMP
    _attr_has_entity_name = True
    _attr_name = None
    _attr_should_poll = True
    _attr_hvac_modes = list(HVAC_MODE_TO_TARGET_MODE)
    _attr_supported_features = (
        ClimateEntityFeature.TARGET_TEMPERATURE
        | ClimateEntityFeature.TARGET_TEMPERATURE_RANGE
        | ClimateEntityFeature.TURN_OFF
        | ClimateEntityFeature.TURN_ON
    )

    def __init__(self, cache: StateCache, device: SmartThingsDevice) -> None:
        """Initialize the climate entity.

        Args:
            cache: State cache serving this device's characteristics.
            device: Resolved SmartThings device identity.

        """
        self._cache = cache
        self._device = device
        self._attr_unique_id = device.id
        self._attr_device_info = DeviceInfo(
            identifiers={(DOMAIN, device.id)},
            manufacturer=MANUFACTURER,
            model=MODEL,
            name=device.display_name,
            serial_number=device.id,
        )
        self._apply_state(cache.last_known_state())

    @property
    def host_state(self) -> HostState:
        """Return the last observed host-facing snapshot."""
        return self._state

    def _apply_state(self, state: HostState) -> None:
        self._state = state
        self._attr_hvac_mode = TARGET_MODE_TO_HVAC_MODE[state.target_mode]
        self._attr_hvac_action = CURRENT_MODE_TO_HVAC_ACTION[state.current_mode]
        self._attr_current_temperature = state.current_temperature
        self._attr_target_temperature = state.target_temperature
        self._attr_target_temperature_low = state.heating_threshold
        self._attr_target_temperature_high = state.cooling_threshold
        self._attr_current_humidity = state.humidity

    async def async_update(self) -> None:
        """Refresh the snapshot from the state cache."""
        try:
            state = await self._cache.async_get_state()
        except SmartThingsApiAuthError:
            if self._attr_available:
                _LOGGER.exception(
                    "Authentication error for %s. Please re-configure the "
                    "integration.",
                    self._device.display_name,
                )
            self._attr_available = False
            return

        self._attr_available = True
        self._apply_state(state)

    async def async_set_hvac_mode(self, hvac_mode: HVACMode) -> None:
        """Set the HVAC mode.

        Args:
            hvac_mode: The HVAC mode to set.

        """
        target_mode = HVAC_MODE_TO_TARGET_MODE.get(hvac_mode)
        if target_mode is None:
            unsupported = f"Unsupported HVAC mode: {hvac_mode}"
            raise HomeAssistantError(unsupported)

        await self._async_write(self._cache.async_set_target_mode(target_mode))

    async def async_set_temperature(self, **kwargs: Any) -> None:  # noqa: ANN401
        """Set the target temperature or the low/high threshold pair.

        Args:
            **kwargs: Keyword arguments containing temperature data.

        """
        if (hvac_mode := kwargs.get(ATTR_HVAC_MODE)) is not None:
            await self.async_set_hvac_mode(hvac_mode)

        if (temperature := kwargs.get(ATTR_TEMPERATURE)) is not None:
            await self._async_write(
                self._cache.async_set_target_temperature(temperature)
            )

        if (low := kwargs.get(ATTR_TARGET_TEMP_LOW)) is not None:
            await self._async_write(self._cache.async_set_heating_threshold(low))

        if (high := kwargs.get(ATTR_TARGET_TEMP_HIGH)) is not None:
            await self._async_write(self._cache.async_set_cooling_threshold(high))

    async def async_turn_on(self) -> None:
        """Switch the air conditioner on."""
        await self._async_write(self._cache.async_set_active(True))

    async def async_turn_off(self) -> None:
        """Switch the air conditioner off."""
        await self._async_write(self._cache.async_set_active(False))

    async def _async_write(self, write: Awaitable[bool]) -> None:
        if not await write:
            failed = f"{self._device.display_name} did not accept the change"
            raise HomeAssistantError(failed)
        self._apply_state(self._cache.last_known_state())
