"""Credential lifecycle management for the Samsung Window AC integration."""

from __future__ import annotations

import asyncio
import json
import logging
from pathlib import Path
from typing import TYPE_CHECKING

from . import api
from .const import TOKEN_FILE_NAME
from .models import CredentialRecord

if TYPE_CHECKING:
    from collections.abc import Callable

    import httpx
    from homeassistant.core import HomeAssistant

_LOGGER = logging.getLogger(__name__)


class CredentialPersistenceError(Exception):
    """Exception raised when the credential file cannot be written."""


class CredentialStore:
    """Persist the credential record as a small JSON file."""

    def __init__(self, hass: HomeAssistant, storage_dir: Path) -> None:
        self._hass = hass
        self.path = storage_dir / TOKEN_FILE_NAME

    async def async_load(self) -> CredentialRecord | None:
        """Load the persisted record, or None if absent or unreadable."""
        try:
            contents = await self._hass.async_add_executor_job(self._read)
        except (OSError, ValueError):
            _LOGGER.exception("Failed to read credential file %s", self.path)
            return None

        if contents is None:
            return None

        try:
            return CredentialRecord.from_storage(json.loads(contents))
        except (ValueError, KeyError, TypeError):
            _LOGGER.exception("Ignoring malformed credential file %s", self.path)
            return None

    async def async_save(self, record: CredentialRecord) -> None:
        """Write the record, creating parent directories as needed.

        Raises:
            CredentialPersistenceError: If the file cannot be written.

        """
        contents = json.dumps(record.as_storage(), indent=2)
        try:
            await self._hass.async_add_executor_job(self._write, contents)
        except OSError as err:
            error_msg = f"Failed to write credential file {self.path}: {err}"
            raise CredentialPersistenceError(error_msg) from err
        _LOGGER.debug("Credentials saved to %s", self.path)

    def _read(self) -> str | None:
        if not self.path.exists():
            return None
        return self.path.read_text(encoding="utf-8")

    def _write(self, contents: str) -> None:
        self.path.parent.mkdir(parents=True, exist_ok=True)
        self.path.write_text(contents, encoding="utf-8")


class CredentialManager:
    """Keep a bearer credential valid across calls and restarts.

    One instance is shared by every entity of a config entry. Refreshes are
    serialized so that concurrent callers observing an expiring credential
    trigger a single exchange of the single-use refresh credential.
    Every rotated record is also handed to `on_refresh`, if given.
    """

    def __init__(
        self,
        session: httpx.AsyncClient,
        store: CredentialStore,
        client_id: str,
        client_secret: str,
        refresh_token: str,
        on_refresh: Callable[[CredentialRecord], None] | None = None,
    ) -> None:
        self._session = session
        self._store = store
        self._client_id = client_id
        self._client_secret = client_secret
        self._initial_refresh_token = refresh_token
        self._on_refresh = on_refresh
        self._record: CredentialRecord | None = None
        self._loaded = False
        self._lock = asyncio.Lock()

    @property
    def record(self) -> CredentialRecord | None:
        """Return the current credential record."""
        return self._record

    async def async_ensure_valid(self) -> str:
        """Return an access credential that is not about to expire.

        Raises:
            SmartThingsApiAuthError: If the refresh exchange fails.

        """
        record = self._record
        if record is not None and record.is_usable():
            return record.access_token

        async with self._lock:
            if not self._loaded:
                self._record = await self._store.async_load()
                self._loaded = True
                if self._record is not None:
                    _LOGGER.debug("Loaded stored credentials")

            if self._record is None or not self._record.is_usable():
                await self._async_refresh()

            return self._record.access_token

    async def _async_refresh(self) -> None:
        refresh_token = (
            self._record.refresh_token
            if self._record is not None
            else self._initial_refresh_token
        )
        try:
            record = await api.async_refresh_token(
                self._session,
                self._client_id,
                self._client_secret,
                refresh_token,
            )
        except api.SmartThingsApiAuthError:
            _LOGGER.exception("Failed to refresh SmartThings credentials")
            raise

        self._record = record
        _LOGGER.info("Refreshed SmartThings credentials")

        if self._on_refresh is not None:
            self._on_refresh(record)

        try:
            await self._store.async_save(record)
        except CredentialPersistenceError as err:
            _LOGGER.warning("Keeping refreshed credentials in memory only: %s", err)
