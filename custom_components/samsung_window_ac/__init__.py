from __future__ import annotations

import logging
from pathlib import Path
from typing import TYPE_CHECKING

import httpx
from homeassistant.config_entries import ConfigEntry
from homeassistant.const import Platform
from homeassistant.core import HomeAssistant, callback
from homeassistant.util import slugify

from . import api
from .api import create_session_client
from .auth import CredentialManager, CredentialStore
from .cache import StateCache
from .const import (
    CONF_CLIENT_ID,
    CONF_CLIENT_SECRET,
    CONF_DEVICE_NAME,
    CONF_REFRESH_TOKEN,
    DEFAULT_DEVICE_NAME,
    DOMAIN,
)

if TYPE_CHECKING:
    from collections.abc import Callable

    from .models import CredentialRecord

_LOGGER = logging.getLogger(__name__)

PLATFORMS = [Platform.CLIMATE]


def storage_dir(hass: HomeAssistant, client_id: str) -> Path:
    """Return the directory holding the credential file for a client."""
    return Path(hass.config.path(".storage", DOMAIN, slugify(client_id)))


def _update_refresh_token(
    hass: HomeAssistant, entry: ConfigEntry
) -> Callable[[CredentialRecord], None]:
    @callback
    def _update(record: CredentialRecord) -> None:
        """Keep the rotated refresh credential in the config entry."""
        data = {**entry.data, CONF_REFRESH_TOKEN: record.refresh_token}
        hass.config_entries.async_update_entry(entry, data=data)

    return _update


async def async_setup_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info(
        "Setting up Samsung Window AC integration for entry %s", entry.entry_id
    )

    client_id = entry.data[CONF_CLIENT_ID]
    device_name = entry.data.get(CONF_DEVICE_NAME, DEFAULT_DEVICE_NAME)

    session = create_session_client(hass)
    credentials = CredentialManager(
        session,
        CredentialStore(hass, storage_dir(hass, client_id)),
        client_id,
        entry.data[CONF_CLIENT_SECRET],
        entry.data[CONF_REFRESH_TOKEN],
        on_refresh=_update_refresh_token(hass, entry),
    )

    try:
        access_token = await credentials.async_ensure_valid()
        devices = await api.async_get_devices(session, access_token)
        device = api.find_device(devices, device_name)
        _LOGGER.info("Found %s device %s", device.display_name, device.id)
    except api.SmartThingsApiAuthError as err:
        _LOGGER.warning(
            "Authentication failed for entry %s: %s", entry.entry_id, str(err)
        )
        return False
    except api.DeviceNotFoundError as err:
        _LOGGER.error("Device lookup failed for entry %s: %s", entry.entry_id, err)
        return False
    except api.SmartThingsApiClientError as err:
        _LOGGER.error("API client error for entry %s: %s", entry.entry_id, str(err))
        return False
    except httpx.ConnectError as err:
        _LOGGER.error("Connection error for entry %s: %s", entry.entry_id, str(err))
        return False
    except httpx.TimeoutException as err:
        _LOGGER.error("Timeout error for entry %s: %s", entry.entry_id, str(err))
        return False
    except httpx.HTTPError as err:
        _LOGGER.error("HTTP error for entry %s: %s", entry.entry_id, str(err))
        return False

    hass.data.setdefault(DOMAIN, {})[entry.entry_id] = {
        "session": session,
        "credentials": credentials,
        "device": device,
        "cache": StateCache(session, credentials, device.id),
    }

    await hass.config_entries.async_forward_entry_setups(entry, PLATFORMS)
    _LOGGER.info(
        "Successfully setup Samsung Window AC integration for entry %s",
        entry.entry_id,
    )
    return True


async def async_unload_entry(hass: HomeAssistant, entry: ConfigEntry) -> bool:
    _LOGGER.info(
        "Unloading Samsung Window AC integration for entry %s", entry.entry_id
    )

    unload_ok = await hass.config_entries.async_unload_platforms(entry, PLATFORMS)
    if unload_ok:
        hass.data.get(DOMAIN, {}).pop(entry.entry_id, None)
        _LOGGER.debug("Cleaned up data for entry %s", entry.entry_id)
    else:
        _LOGGER.warning("Failed to unload some platforms for entry %s", entry.entry_id)
    return unload_ok
