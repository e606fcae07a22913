"""State cache for the Samsung Window AC integration.

Characteristic reads are served from a per-key cache with its own TTL. A
unified status snapshot is fetched at most once per status TTL; inside that
window stale characteristics are refreshed through single-capability
requests. When the cloud is unreachable the last known value is served.

Writes go straight to the cloud and, once the device confirms completion,
invalidate the characteristics the write can affect.
"""

from __future__ import annotations

import dataclasses
import logging
import time
from typing import TYPE_CHECKING, Any

import httpx

from . import api
from .const import (
    CAPABILITY_AC_MODE,
    CAPABILITY_COOLING_SETPOINT,
    CAPABILITY_HUMIDITY,
    CAPABILITY_SWITCH,
    CAPABILITY_TEMPERATURE,
    CHARACTERISTIC_TTL,
    DEFAULT_TEMPERATURE,
    STATUS_TTL,
)
from .models import (
    ACState,
    CachedValue,
    Characteristic,
    CurrentMode,
    HostState,
    TargetMode,
)
from .translator import (
    clamp_temperature,
    decode_mode,
    derive_cooling_threshold,
    derive_heating_threshold,
    encode_mode,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from .auth import CredentialManager

_LOGGER = logging.getLogger(__name__)

STATUS_KEY = "status"

TTLS: dict[str, float] = {
    STATUS_KEY: STATUS_TTL,
    **{characteristic: CHARACTERISTIC_TTL for characteristic in Characteristic},
}

DEFAULTS: dict[Characteristic, Any] = {
    Characteristic.ACTIVE: False,
    Characteristic.CURRENT_MODE: CurrentMode.OFF,
    Characteristic.TARGET_MODE: TargetMode.OFF,
    Characteristic.CURRENT_TEMPERATURE: DEFAULT_TEMPERATURE,
    Characteristic.TARGET_TEMPERATURE: DEFAULT_TEMPERATURE,
    Characteristic.HEATING_THRESHOLD: DEFAULT_TEMPERATURE,
    Characteristic.COOLING_THRESHOLD: DEFAULT_TEMPERATURE,
    Characteristic.HUMIDITY: 0,
}

# Capabilities fetched when a characteristic is refreshed on its own.
# Thresholds have none: they are derived from other characteristics.
CAPABILITIES: dict[Characteristic, tuple[str, ...]] = {
    Characteristic.ACTIVE: (CAPABILITY_SWITCH,),
    Characteristic.CURRENT_MODE: (CAPABILITY_SWITCH, CAPABILITY_AC_MODE),
    Characteristic.TARGET_MODE: (CAPABILITY_SWITCH, CAPABILITY_AC_MODE),
    Characteristic.CURRENT_TEMPERATURE: (CAPABILITY_TEMPERATURE,),
    Characteristic.HUMIDITY: (CAPABILITY_HUMIDITY,),
    Characteristic.TARGET_TEMPERATURE: (CAPABILITY_COOLING_SETPOINT,),
    Characteristic.HEATING_THRESHOLD: (),
    Characteristic.COOLING_THRESHOLD: (),
}

_TEMPERATURE_KEYS = frozenset(
    {
        Characteristic.TARGET_TEMPERATURE,
        Characteristic.HEATING_THRESHOLD,
        Characteristic.COOLING_THRESHOLD,
    }
)
_MODE_KEYS = frozenset(
    {
        Characteristic.CURRENT_MODE,
        Characteristic.TARGET_MODE,
        Characteristic.CURRENT_TEMPERATURE,
        Characteristic.HUMIDITY,
    }
)

# Written characteristic -> characteristics invalidated once the write completes
INVALIDATIONS: dict[Characteristic, frozenset[Characteristic]] = {
    Characteristic.TARGET_TEMPERATURE: _TEMPERATURE_KEYS,
    Characteristic.HEATING_THRESHOLD: _TEMPERATURE_KEYS,
    Characteristic.COOLING_THRESHOLD: _TEMPERATURE_KEYS,
    Characteristic.TARGET_MODE: _MODE_KEYS,
    Characteristic.ACTIVE: _MODE_KEYS | {Characteristic.ACTIVE},
}

# Errors that make the cloud unavailable for a single call
REMOTE_ERRORS = (api.SmartThingsApiClientError, httpx.HTTPError)


def host_values(state: ACState) -> dict[Characteristic, Any]:
    """Compute host-facing characteristic values from a decoded ACState.

    Fields the snapshot does not carry are omitted.
    """
    values: dict[Characteristic, Any] = {}

    if state.power_on is not None:
        values[Characteristic.ACTIVE] = state.power_on
        if state.mode is not None or not state.power_on:
            current, target = decode_mode(state.mode, state.power_on)
            values[Characteristic.CURRENT_MODE] = current
            values[Characteristic.TARGET_MODE] = target

    if state.current_temperature is not None:
        values[Characteristic.CURRENT_TEMPERATURE] = state.current_temperature
    if state.humidity is not None:
        values[Characteristic.HUMIDITY] = state.humidity

    if state.cooling_setpoint is not None:
        setpoint = state.cooling_setpoint
        values[Characteristic.TARGET_TEMPERATURE] = setpoint
        values[Characteristic.HEATING_THRESHOLD] = setpoint
        if values.get(Characteristic.TARGET_MODE) is TargetMode.AUTO:
            values[Characteristic.COOLING_THRESHOLD] = derive_cooling_threshold(
                setpoint
            )
        elif Characteristic.TARGET_MODE in values:
            values[Characteristic.COOLING_THRESHOLD] = setpoint

    return values


class StateCache:
    """Reconcile host characteristic reads/writes with one cloud device.

    One instance is owned by each entity; calls arrive serialized by the
    Home Assistant event loop so no internal locking is needed.
    """

    def __init__(
        self,
        session: httpx.AsyncClient,
        credentials: CredentialManager,
        device_id: str,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        self._session = session
        self._credentials = credentials
        self.device_id = device_id
        self._clock = clock
        self._entries: dict[str, CachedValue] = {}
        self._last_known: dict[Characteristic, Any] = {}

    def is_fresh(self, key: str) -> bool:
        """Return True if the entry for key holds a value within its TTL."""
        entry = self._entries.get(key)
        if entry is None or entry.value is None:
            return False
        return self._clock() - entry.captured_at < TTLS[key]

    def cached(self, key: str) -> Any:
        """Return the cached value for key regardless of age, or None."""
        entry = self._entries.get(key)
        return entry.value if entry is not None else None

    def last_known(self, characteristic: Characteristic) -> Any:
        """Return the latest observed value, falling back to the default."""
        return self._last_known.get(characteristic, DEFAULTS[characteristic])

    def last_known_state(self) -> HostState:
        """Return a snapshot of last known values without any remote call."""
        return HostState(
            **{
                characteristic.value: self.last_known(characteristic)
                for characteristic in Characteristic
            }
        )

    def invalidate(self, keys: frozenset[Characteristic]) -> None:
        """Clear the given fine-tier entries."""
        for key in keys:
            self._entries.pop(key, None)
        _LOGGER.debug("Invalidated %s", sorted(keys))

    def _store(self, key: str, value: Any) -> None:
        self._entries[key] = CachedValue(value=value, captured_at=self._clock())
        if key != STATUS_KEY:
            self._last_known[key] = value

    def _store_values(self, values: dict[Characteristic, Any]) -> None:
        for characteristic, value in values.items():
            self._store(characteristic, value)

    async def async_read(self, characteristic: Characteristic) -> Any:
        """Return the value of a characteristic, fetching it if stale.

        Remote failures fall back to the last known value. Only a failed
        credential refresh propagates.

        Raises:
            SmartThingsApiAuthError: If the credential cannot be refreshed.

        """
        if self.is_fresh(characteristic):
            _LOGGER.debug("Cache hit for %s", characteristic)
            return self.cached(characteristic)

        if characteristic in (
            Characteristic.HEATING_THRESHOLD,
            Characteristic.COOLING_THRESHOLD,
        ) and self.is_fresh(STATUS_KEY):
            return await self._async_read_threshold(characteristic)

        access_token = await self._credentials.async_ensure_valid()
        try:
            if not self.is_fresh(STATUS_KEY):
                await self._async_fetch_status(access_token)
            else:
                await self._async_fetch_capabilities(
                    access_token, CAPABILITIES[characteristic]
                )
        except REMOTE_ERRORS as err:
            value = self.last_known(characteristic)
            _LOGGER.warning(
                "Failed to read %s from device %s, using last known value %s: %s",
                characteristic,
                self.device_id,
                value,
                err,
            )
            return value

        if not self.is_fresh(characteristic):
            _LOGGER.debug("Device %s did not report %s", self.device_id, characteristic)
            return self.last_known(characteristic)
        return self.cached(characteristic)

    async def _async_fetch_status(self, access_token: str) -> None:
        state = await api.async_get_device_status(
            self._session, access_token, self.device_id
        )
        self._store(STATUS_KEY, state)
        self._store_values(host_values(state))

    async def _async_fetch_capabilities(
        self, access_token: str, capabilities: tuple[str, ...]
    ) -> None:
        fields: dict[str, Any] = {}
        for capability in capabilities:
            fields.update(
                await api.async_get_capability_status(
                    self._session, access_token, self.device_id, capability
                )
            )

        # Patch the snapshot in place; its capture time stays unchanged
        snapshot = self._entries[STATUS_KEY]
        snapshot.value = dataclasses.replace(snapshot.value, **fields)

        partial = dict.fromkeys(f.name for f in dataclasses.fields(ACState))
        self._store_values(host_values(ACState(**(partial | fields))))

    async def _async_read_threshold(self, characteristic: Characteristic) -> Any:
        setpoint = await self.async_read(Characteristic.TARGET_TEMPERATURE)
        target_mode = await self.async_read(Characteristic.TARGET_MODE)

        if characteristic is Characteristic.HEATING_THRESHOLD:
            value = setpoint
        elif target_mode is TargetMode.AUTO:
            value = derive_cooling_threshold(setpoint)
        else:
            value = setpoint

        if self.is_fresh(Characteristic.TARGET_TEMPERATURE) and self.is_fresh(
            Characteristic.TARGET_MODE
        ):
            self._store(characteristic, value)
        return value

    async def async_get_state(self) -> HostState:
        """Read every characteristic into a host-facing snapshot."""
        return HostState(
            **{
                characteristic.value: await self.async_read(characteristic)
                for characteristic in Characteristic
            }
        )

    async def _async_command(self, *commands: dict[str, Any]) -> bool:
        access_token = await self._credentials.async_ensure_valid()
        try:
            return await api.async_send_commands(
                self._session, access_token, self.device_id, list(commands)
            )
        except REMOTE_ERRORS:
            _LOGGER.exception(
                "Failed to send %s to device %s", list(commands), self.device_id
            )
            return False

    def _complete_write(
        self, written: Characteristic, values: dict[Characteristic, Any]
    ) -> None:
        self.invalidate(INVALIDATIONS[written])
        self._last_known.update(values)

        # Outside auto both thresholds track the setpoint
        target_mode = values.get(Characteristic.TARGET_MODE)
        if target_mode is not None and target_mode is not TargetMode.AUTO:
            setpoint = self.last_known(Characteristic.TARGET_TEMPERATURE)
            self._store(Characteristic.HEATING_THRESHOLD, setpoint)
            self._store(Characteristic.COOLING_THRESHOLD, setpoint)

    async def async_set_active(self, active: bool) -> bool:
        """Switch the device on or off."""
        if not await self._async_command(api.switch_command(active)):
            _LOGGER.error("Device %s did not confirm switch %s", self.device_id, active)
            return False

        values: dict[Characteristic, Any] = {Characteristic.ACTIVE: active}
        if not active:
            values[Characteristic.CURRENT_MODE] = CurrentMode.OFF
            values[Characteristic.TARGET_MODE] = TargetMode.OFF
        self._complete_write(Characteristic.ACTIVE, values)
        _LOGGER.info("Switched device %s %s", self.device_id, "on" if active else "off")
        return True

    async def async_set_target_mode(self, target_mode: TargetMode) -> bool:
        """Set the target heating/cooling mode.

        Off sends a switch-off command. Auto sends the mode command followed by
        a setpoint command carrying the current heating threshold, then caches
        the derived cooling threshold.
        """
        if target_mode is TargetMode.OFF:
            return await self.async_set_active(False)

        heating = None
        if target_mode is TargetMode.AUTO:
            heating = clamp_temperature(
                await self.async_read(Characteristic.HEATING_THRESHOLD)
            )

        remote_mode = encode_mode(target_mode)
        if not await self._async_command(api.mode_command(remote_mode)):
            _LOGGER.error(
                "Device %s did not confirm mode %s", self.device_id, remote_mode
            )
            return False

        current, _ = decode_mode(remote_mode, True)
        self._complete_write(
            Characteristic.TARGET_MODE,
            {
                Characteristic.TARGET_MODE: target_mode,
                Characteristic.CURRENT_MODE: current,
            },
        )
        _LOGGER.info("Set device %s mode to %s", self.device_id, remote_mode)

        if heating is None:
            return True

        if not await self._async_command(api.setpoint_command(heating)):
            _LOGGER.error(
                "Device %s switched to %s but did not confirm setpoint %d",
                self.device_id,
                remote_mode,
                heating,
            )
            return False

        self._complete_write(
            Characteristic.HEATING_THRESHOLD,
            {Characteristic.TARGET_TEMPERATURE: heating},
        )
        self._store(Characteristic.HEATING_THRESHOLD, heating)
        self._store(Characteristic.COOLING_THRESHOLD, derive_cooling_threshold(heating))
        return True

    async def async_set_target_temperature(self, temperature: float) -> bool:
        """Set the cooling setpoint; thresholds follow it outside auto mode."""
        clamped = clamp_temperature(temperature)
        if not await self._async_send_setpoint(clamped):
            return False

        cooling = (
            derive_cooling_threshold(clamped)
            if self.last_known(Characteristic.TARGET_MODE) is TargetMode.AUTO
            else clamped
        )

        self._complete_write(
            Characteristic.TARGET_TEMPERATURE,
            {
                Characteristic.TARGET_TEMPERATURE: clamped,
                Characteristic.HEATING_THRESHOLD: clamped,
                Characteristic.COOLING_THRESHOLD: cooling,
            },
        )
        return True

    async def async_set_heating_threshold(self, temperature: float) -> bool:
        """Set the heating threshold.

        In auto mode the setpoint follows the heating threshold and the cooling
        threshold is derived from it; otherwise this is a target temperature
        write.
        """
        if await self.async_read(Characteristic.TARGET_MODE) is not TargetMode.AUTO:
            return await self.async_set_target_temperature(temperature)

        heating = clamp_temperature(temperature)
        return await self._async_set_thresholds(
            Characteristic.HEATING_THRESHOLD,
            heating,
            derive_cooling_threshold(heating),
        )

    async def async_set_cooling_threshold(self, temperature: float) -> bool:
        """Set the cooling threshold.

        In auto mode the heating threshold, and with it the setpoint, is derived
        from the cooling threshold; otherwise this is a target temperature
        write.
        """
        if await self.async_read(Characteristic.TARGET_MODE) is not TargetMode.AUTO:
            return await self.async_set_target_temperature(temperature)

        cooling = clamp_temperature(temperature)
        return await self._async_set_thresholds(
            Characteristic.COOLING_THRESHOLD,
            derive_heating_threshold(cooling),
            cooling,
        )

    async def _async_set_thresholds(
        self, written: Characteristic, heating: float, cooling: float
    ) -> bool:
        if not await self._async_send_setpoint(heating):
            return False

        self._complete_write(written, {Characteristic.TARGET_TEMPERATURE: heating})
        self._store(Characteristic.HEATING_THRESHOLD, heating)
        self._store(Characteristic.COOLING_THRESHOLD, cooling)
        return True

    async def _async_send_setpoint(self, temperature: float) -> bool:
        if not await self._async_command(api.setpoint_command(int(temperature))):
            _LOGGER.error(
                "Device %s did not confirm setpoint %s", self.device_id, temperature
            )
            return False
        _LOGGER.info("Set device %s setpoint to %s", self.device_id, temperature)
        return True
