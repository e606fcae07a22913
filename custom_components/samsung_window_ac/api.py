"""API client for the SmartThings cloud.

This module provides functions to interact with the SmartThings API,
including the OAuth refresh exchange, device discovery, status queries and
command sending. Request builders and response parsers are kept as plain
functions so they can be tested without network access.
"""

import logging
from typing import Any

import httpx
from homeassistant.core import HomeAssistant
from homeassistant.helpers.httpx_client import create_async_httpx_client
from httpx_retries import Retry, RetryTransport

from .const import (
    BASE_URL,
    CAPABILITY_AC_MODE,
    CAPABILITY_ATTRIBUTES,
    CAPABILITY_COOLING_SETPOINT,
    CAPABILITY_HUMIDITY,
    CAPABILITY_SWITCH,
    CAPABILITY_TEMPERATURE,
    COMMAND_COMPLETED,
    TOKEN_URL,
)
from .models import ACState, CredentialRecord, RemoteMode, SmartThingsDevice
from .translator import parse_remote_mode

_LOGGER = logging.getLogger(__name__)

# HTTP status codes
HTTP_BAD_REQUEST = 400
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403


class SmartThingsApiClientError(Exception):
    """Base exception for SmartThings API errors (remote unavailable)."""


class SmartThingsApiAuthError(SmartThingsApiClientError):
    """Exception raised when the credential refresh exchange fails."""


class DeviceNotFoundError(SmartThingsApiClientError):
    """Exception raised when discovery cannot match the target device."""


def create_headers(access_token: str | None = None) -> dict[str, str]:
    """Create HTTP headers for SmartThings API requests.

    Args:
        access_token: Optional bearer credential to include in headers.

    Returns:
        Dictionary containing HTTP headers for API requests.

    """
    headers = {
        "Content-Type": "application/json",
        "Accept": "application/json",
    }
    if access_token:
        headers["Authorization"] = f"Bearer {access_token}"
    return headers


def is_http_error(status: int) -> bool:
    """Check if HTTP status code indicates an error.

    Args:
        status: HTTP status code to check.

    Returns:
        True if status code is 400 or higher, False otherwise.

    """
    return status >= HTTP_BAD_REQUEST


def is_auth_error(status: int) -> bool:
    """Check if HTTP status code indicates a rejected credential.

    Args:
        status: HTTP status code to check.

    Returns:
        True if status code is 401 or 403, False otherwise.

    """
    return status in (HTTP_UNAUTHORIZED, HTTP_FORBIDDEN)


def validate_response(response: httpx.Response) -> dict[str, Any]:
    """Validate HTTP response and return parsed JSON data.

    Args:
        response: HTTP response object to validate.

    Returns:
        Parsed JSON data from response.

    Raises:
        SmartThingsApiClientError: If the status is an error or the body
            is not a JSON object.

    """
    if is_http_error(response.status_code):
        client_error = f"Request failed: {response.status_code}"
        raise SmartThingsApiClientError(client_error)

    try:
        data = response.json()
    except ValueError as err:
        malformed = f"Malformed response body: {err}"
        raise SmartThingsApiClientError(malformed) from err

    if not isinstance(data, dict):
        malformed = "Malformed response body: expected a JSON object"
        raise SmartThingsApiClientError(malformed)
    return data


def extract_devices(data: dict[str, Any]) -> list[SmartThingsDevice]:
    """Extract device list from a /devices response.

    Args:
        data: API response data dictionary.

    Returns:
        List of SmartThingsDevice objects.

    """
    return [
        SmartThingsDevice(
            id=item["deviceId"],
            name=item.get("name") or "",
            label=item.get("label") or "",
        )
        for item in data.get("items", [])
    ]


def find_device(devices: list[SmartThingsDevice], sentinel: str) -> SmartThingsDevice:
    """Select the device whose name or label equals the sentinel.

    Raises:
        DeviceNotFoundError: If no device matches.

    """
    for device in devices:
        if sentinel in (device.name, device.label):
            return device

    not_found = f"Device {sentinel!r} not found among {len(devices)} devices"
    raise DeviceNotFoundError(not_found)


def _attribute_value(block: dict[str, Any] | None, attribute: str) -> Any:
    if not block:
        return None
    return (block.get(attribute) or {}).get("value")


def _as_float(value: Any) -> float | None:
    if value is None:
        return None
    try:
        return float(value)
    except (TypeError, ValueError):
        _LOGGER.warning("Ignoring non-numeric capability value %r", value)
        return None


def _as_power(value: Any) -> bool | None:
    return None if value is None else value == "on"


def _as_mode(value: Any) -> RemoteMode | None:
    return None if value is None else parse_remote_mode(value)


CAPABILITY_DECODERS = {
    CAPABILITY_SWITCH: ("power_on", _as_power),
    CAPABILITY_TEMPERATURE: ("current_temperature", _as_float),
    CAPABILITY_HUMIDITY: ("humidity", _as_float),
    CAPABILITY_AC_MODE: ("mode", _as_mode),
    CAPABILITY_COOLING_SETPOINT: ("cooling_setpoint", _as_float),
}


def decode_capability_status(capability: str, data: dict[str, Any]) -> dict[str, Any]:
    """Decode a single-capability status block.

    Args:
        capability: Capability the block belongs to.
        data: Capability status block, keyed by attribute name.

    Returns:
        A one-item mapping from ACState field name to decoded value.

    """
    field, decoder = CAPABILITY_DECODERS[capability]
    return {field: decoder(_attribute_value(data, CAPABILITY_ATTRIBUTES[capability]))}


def decode_device_status(data: dict[str, Any]) -> ACState:
    """Decode a unified /status snapshot into an ACState.

    Missing capability blocks decode as None.
    """
    main = data.get("components", {}).get("main", {})
    fields: dict[str, Any] = {}
    for capability in CAPABILITY_DECODERS:
        fields.update(decode_capability_status(capability, main.get(capability, {})))
    return ACState(**fields)


def extract_command_result(data: dict[str, Any]) -> bool:
    """Return True only if every command result reports COMPLETED.

    Args:
        data: API response data dictionary.

    Returns:
        True if the command batch completed, False otherwise.

    """
    results = data.get("results") or []
    return bool(results) and all(
        result.get("status") == COMMAND_COMPLETED for result in results
    )


def build_command(
    capability: str, command: str, arguments: list[Any] | None = None
) -> dict[str, Any]:
    """Build one entry of a commands request body."""
    entry: dict[str, Any] = {
        "component": "main",
        "capability": capability,
        "command": command,
    }
    if arguments is not None:
        entry["arguments"] = arguments
    return entry


def switch_command(on: bool) -> dict[str, Any]:
    """Build a switch on/off command."""
    return build_command(CAPABILITY_SWITCH, "on" if on else "off")


def mode_command(mode: RemoteMode) -> dict[str, Any]:
    """Build an air conditioner mode command."""
    return build_command(CAPABILITY_AC_MODE, "setAirConditionerMode", [mode.value])


def setpoint_command(temperature: int) -> dict[str, Any]:
    """Build a cooling setpoint command."""
    return build_command(
        CAPABILITY_COOLING_SETPOINT, "setCoolingSetpoint", [temperature]
    )


def create_session_client(hass: HomeAssistant) -> httpx.AsyncClient:
    """Create HTTP client for the SmartThings API.

    Only idempotent GET requests are retried by the transport; command and
    token requests are never replayed.

    Args:
        hass: Home Assistant instance.

    Returns:
        Configured httpx AsyncClient with retry transport.

    """
    base_client = create_async_httpx_client(hass)
    retry = Retry(total=2, backoff_factor=0.5, allowed_methods=["GET"])
    base_client._transport = RetryTransport(  # noqa: SLF001
        transport=base_client._transport,  # noqa: SLF001
        retry=retry,
    )
    return base_client


async def async_refresh_token(
    session: httpx.AsyncClient,
    client_id: str,
    client_secret: str,
    refresh_token: str,
) -> CredentialRecord:
    """Exchange a refresh credential for a new credential record.

    Args:
        session: HTTP client session.
        client_id: OAuth client identifier.
        client_secret: OAuth client secret.
        refresh_token: Current (single-use) refresh credential.

    Returns:
        The new CredentialRecord.

    Raises:
        SmartThingsApiAuthError: If the exchange fails for any reason.

    """
    payload = {
        "grant_type": "refresh_token",
        "client_id": client_id,
        "refresh_token": refresh_token,
    }

    _LOGGER.debug("Refreshing SmartThings credentials")
    try:
        response = await session.post(
            TOKEN_URL,
            data=payload,
            auth=(client_id, client_secret),
            headers={"Content-Type": "application/x-www-form-urlencoded"},
        )
    except httpx.HTTPError as err:
        refresh_error = f"Token refresh request failed: {err}"
        raise SmartThingsApiAuthError(refresh_error) from err

    if is_auth_error(response.status_code):
        auth_error = f"Token refresh rejected: {response.status_code}"
        raise SmartThingsApiAuthError(auth_error)

    try:
        data = validate_response(response)
        record = CredentialRecord.from_token_payload(data)
    except SmartThingsApiClientError as err:
        raise SmartThingsApiAuthError(str(err)) from err
    except (KeyError, TypeError) as err:
        missing = f"Token response missing field: {err}"
        raise SmartThingsApiAuthError(missing) from err

    _LOGGER.debug("Credentials refreshed, expiring at %s", record.expires_at)
    return record


async def async_get_devices(
    session: httpx.AsyncClient,
    access_token: str,
) -> list[SmartThingsDevice]:
    """Fetch the account's devices from the SmartThings API.

    Raises:
        SmartThingsApiClientError: If API request fails.

    """
    _LOGGER.debug("Fetching devices from SmartThings API")
    response = await session.get(
        f"{BASE_URL}/devices", headers=create_headers(access_token)
    )
    data = validate_response(response)
    devices = extract_devices(data)
    _LOGGER.debug("Retrieved %d devices from SmartThings API", len(devices))
    return devices


async def async_get_device_status(
    session: httpx.AsyncClient,
    access_token: str,
    device_id: str,
) -> ACState:
    """Fetch the unified status snapshot of a device.

    Raises:
        SmartThingsApiClientError: If API request fails.

    """
    _LOGGER.debug("Fetching unified status for device %s", device_id)
    response = await session.get(
        f"{BASE_URL}/devices/{device_id}/status",
        headers=create_headers(access_token),
    )
    state = decode_device_status(validate_response(response))
    _LOGGER.debug("Status for device %s: %s", device_id, state)
    return state


async def async_get_capability_status(
    session: httpx.AsyncClient,
    access_token: str,
    device_id: str,
    capability: str,
) -> dict[str, Any]:
    """Fetch a single capability's status for the main component.

    Returns:
        A one-item mapping from ACState field name to decoded value.

    Raises:
        SmartThingsApiClientError: If API request fails.

    """
    _LOGGER.debug("Fetching %s status for device %s", capability, device_id)
    response = await session.get(
        f"{BASE_URL}/devices/{device_id}/components/main/capabilities/"
        f"{capability}/status",
        headers=create_headers(access_token),
    )
    return decode_capability_status(capability, validate_response(response))


async def async_send_commands(
    session: httpx.AsyncClient,
    access_token: str,
    device_id: str,
    commands: list[dict[str, Any]],
) -> bool:
    """Send a batch of commands to a device.

    Returns:
        True if every command completed, False otherwise.

    Raises:
        SmartThingsApiClientError: If API request fails.

    """
    _LOGGER.debug("Sending commands to device %s: %s", device_id, commands)
    response = await session.post(
        f"{BASE_URL}/devices/{device_id}/commands",
        headers=create_headers(access_token),
        json={"commands": commands},
    )
    result = extract_command_result(validate_response(response))
    _LOGGER.debug("Command result for device %s: %s", device_id, result)
    return result
