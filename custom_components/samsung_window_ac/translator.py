"""Bidirectional mapping between SmartThings and thermostat state models.

The cloud device reports five air conditioner modes plus a separate power
switch, while the thermostat model has a four-valued target mode and a
three-valued current mode. The mapping is kept as plain lookup tables so it
can be inspected and tested directly.
"""

from __future__ import annotations

import logging

from .const import MAX_TEMP, MIN_TEMP, TEMP_STEP, THRESHOLD_OFFSET
from .models import CurrentMode, RemoteMode, TargetMode

_LOGGER = logging.getLogger(__name__)

REMOTE_TO_TARGET = {
    RemoteMode.OFF: TargetMode.OFF,
    RemoteMode.DEHUMIDIFY: TargetMode.HEAT,
    RemoteMode.COOL: TargetMode.COOL,
    RemoteMode.AI_COMFORT: TargetMode.AUTO,
    RemoteMode.FAN: TargetMode.OFF,
}
TARGET_TO_REMOTE = {
    TargetMode.OFF: RemoteMode.OFF,
    TargetMode.HEAT: RemoteMode.DEHUMIDIFY,
    TargetMode.COOL: RemoteMode.COOL,
    TargetMode.AUTO: RemoteMode.AI_COMFORT,
}
TARGET_TO_CURRENT = {
    TargetMode.OFF: CurrentMode.OFF,
    TargetMode.HEAT: CurrentMode.HEAT,
    TargetMode.COOL: CurrentMode.COOL,
    TargetMode.AUTO: CurrentMode.COOL,
}


def parse_remote_mode(value: str | None) -> RemoteMode:
    """Parse a raw airConditionerMode value, treating unknown values as off."""
    try:
        return RemoteMode(value)
    except ValueError:
        _LOGGER.warning("Unknown air conditioner mode %r, treating as off", value)
        return RemoteMode.OFF


def decode_mode(
    remote_mode: RemoteMode, power_on: bool
) -> tuple[CurrentMode, TargetMode]:
    """Decode a remote mode and power state into (current, target) modes."""
    if not power_on:
        return CurrentMode.OFF, TargetMode.OFF

    target = REMOTE_TO_TARGET[remote_mode]
    return TARGET_TO_CURRENT[target], target


def encode_mode(target_mode: TargetMode | int | None) -> RemoteMode:
    """Encode a target mode as the remote mode to command."""
    try:
        return TARGET_TO_REMOTE[TargetMode(target_mode)]
    except (ValueError, TypeError, KeyError):
        return RemoteMode.OFF


def derive_cooling_threshold(heating_threshold: float) -> float:
    """Derive the auto-mode cooling threshold from the heating threshold."""
    return min(heating_threshold + THRESHOLD_OFFSET, MAX_TEMP)


def derive_heating_threshold(cooling_threshold: float) -> float:
    """Derive the auto-mode heating threshold from the cooling threshold."""
    return max(cooling_threshold - THRESHOLD_OFFSET, MIN_TEMP)


def clamp_temperature(value: float) -> int:
    """Snap a temperature to the device step and clamp it to its range.

    Out-of-range input is clamped rather than rejected; a warning is logged.
    """
    stepped = round(value / TEMP_STEP) * TEMP_STEP
    clamped = max(MIN_TEMP, min(MAX_TEMP, stepped))
    if clamped != stepped:
        _LOGGER.warning(
            "Temperature %s is out of range (%d-%d), clamping to %d",
            value,
            MIN_TEMP,
            MAX_TEMP,
            clamped,
        )
    return int(clamped)
