"""Configuration flow for the Samsung Window AC integration.

The flow consumes the externally issued refresh credential once, confirms the
air conditioner can be found with the resulting access credential, and stores
the rotated credentials so setup can continue from them.
"""

import logging
from typing import Any

import httpx
import voluptuous as vol
from homeassistant.config_entries import ConfigFlow, ConfigFlowResult
from homeassistant.helpers.httpx_client import get_async_client

from . import api, storage_dir
from .auth import CredentialPersistenceError, CredentialStore
from .const import (
    CONF_CLIENT_ID,
    CONF_CLIENT_SECRET,
    CONF_DEVICE_NAME,
    CONF_REFRESH_TOKEN,
    DEFAULT_DEVICE_NAME,
    DOMAIN,
    ERROR_API_ERROR,
    ERROR_CANNOT_CONNECT,
    ERROR_DEVICE_NOT_FOUND,
    ERROR_INVALID_AUTH,
    ERROR_TIMEOUT,
    ERROR_UNKNOWN,
)
from .models import CredentialRecord

_LOGGER = logging.getLogger(__name__)

STEP_USER_DATA_SCHEMA = vol.Schema(
    {
        vol.Required(CONF_CLIENT_ID): str,
        vol.Required(CONF_CLIENT_SECRET): str,
        vol.Required(CONF_REFRESH_TOKEN): str,
        vol.Required(CONF_DEVICE_NAME, default=DEFAULT_DEVICE_NAME): str,
    }
)


class SamsungWindowACConfigFlow(ConfigFlow, domain=DOMAIN):
    """Handle configuration flow for the Samsung Window AC integration."""

    VERSION = 1

    def __init__(self) -> None:
        """Initialize the flow."""
        self._records: dict[str, CredentialRecord] = {}

    async def async_step_user(
        self, user_input: dict[str, Any] | None = None
    ) -> ConfigFlowResult:
        """
        Handle the initial step of the config flow.

        Args:
            user_input: OAuth client credentials, refresh credential and the
                name of the device to control.

        Returns:
            ConfigFlowResult indicating the next step or errors.

        """
        errors: dict[str, str] = {}

        if user_input is not None:
            client_id = user_input[CONF_CLIENT_ID]
            device_name = user_input[CONF_DEVICE_NAME]

            await self.async_set_unique_id(client_id)
            self._abort_if_unique_id_configured()

            try:
                session = get_async_client(self.hass)
                record = await self._async_get_record(session, user_input)
                devices = await api.async_get_devices(session, record.access_token)
                device = api.find_device(devices, device_name)
                _LOGGER.info("Found SmartThings device %s", device.id)

            except api.SmartThingsApiAuthError as err:
                _LOGGER.warning(
                    "Authentication failed (%s): %s", ERROR_INVALID_AUTH, err
                )
                errors["base"] = ERROR_INVALID_AUTH
            except api.DeviceNotFoundError as err:
                _LOGGER.warning("%s (%s)", err, ERROR_DEVICE_NOT_FOUND)
                errors["base"] = ERROR_DEVICE_NOT_FOUND
            except httpx.ConnectError:
                _LOGGER.exception("Connection error (%s)", ERROR_CANNOT_CONNECT)
                errors["base"] = ERROR_CANNOT_CONNECT
            except httpx.TimeoutException:
                _LOGGER.exception("Timeout error (%s)", ERROR_TIMEOUT)
                errors["base"] = ERROR_TIMEOUT
            except api.SmartThingsApiClientError:
                _LOGGER.exception("API client error (%s)", ERROR_API_ERROR)
                errors["base"] = ERROR_API_ERROR
            except Exception:
                _LOGGER.exception(
                    "Unexpected error during setup (%s)",
                    ERROR_UNKNOWN,
                )
                errors["base"] = ERROR_UNKNOWN

            else:
                return self.async_create_entry(
                    title=device.display_name,
                    data={
                        CONF_CLIENT_ID: client_id,
                        CONF_CLIENT_SECRET: user_input[CONF_CLIENT_SECRET],
                        CONF_REFRESH_TOKEN: record.refresh_token,
                        CONF_DEVICE_NAME: device_name,
                    },
                )

        return self.async_show_form(
            step_id="user",
            data_schema=STEP_USER_DATA_SCHEMA,
            errors=errors,
        )

    async def _async_get_record(
        self, session: httpx.AsyncClient, user_input: dict[str, Any]
    ) -> CredentialRecord:
        """Return a usable credential record for the submitted client.

        A refresh credential is single-use, so a record obtained by an earlier
        submit of this flow is reused, or refreshed from its rotated refresh
        credential, instead of exchanging the submitted one again.
        """
        client_id = user_input[CONF_CLIENT_ID]
        record = self._records.get(client_id)
        if record is not None and record.is_usable():
            return record

        record = await api.async_refresh_token(
            session,
            client_id,
            user_input[CONF_CLIENT_SECRET],
            record.refresh_token
            if record is not None
            else user_input[CONF_REFRESH_TOKEN],
        )
        self._records[client_id] = record

        store = CredentialStore(self.hass, storage_dir(self.hass, client_id))
        try:
            await store.async_save(record)
        except CredentialPersistenceError as err:
            _LOGGER.warning("Credentials not persisted: %s", err)
        return record
