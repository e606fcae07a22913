"""Tests for the Samsung Window AC climate entity."""

from unittest.mock import AsyncMock, Mock

import pytest
from homeassistant.components.climate import (
    ATTR_HVAC_MODE,
    ATTR_TARGET_TEMP_HIGH,
    ATTR_TARGET_TEMP_LOW,
    ClimateEntityFeature,
    HVACAction,
    HVACMode,
)
from homeassistant.const import ATTR_TEMPERATURE, UnitOfTemperature
from homeassistant.exceptions import HomeAssistantError

from custom_components.samsung_window_ac.api import SmartThingsApiAuthError
from custom_components.samsung_window_ac.climate import (
    SamsungWindowACClimateEntity,
    async_setup_entry,
)
from custom_components.samsung_window_ac.models import (
    CurrentMode,
    HostState,
    SmartThingsDevice,
    TargetMode,
)

MIN_TEMP = 18
MAX_TEMP = 30
TEMP_STEP = 1


def create_host_state(**overrides: object) -> HostState:
    """Create a host-facing snapshot of a cooling air conditioner."""
    values = {
        "active": True,
        "current_mode": CurrentMode.COOL,
        "target_mode": TargetMode.COOL,
        "current_temperature": 27.0,
        "target_temperature": 24.0,
        "heating_threshold": 24.0,
        "cooling_threshold": 24.0,
        "humidity": 45.0,
    }
    values.update(overrides)
    return HostState(**values)


@pytest.fixture
def mock_device() -> SmartThingsDevice:
    """Create a SmartThings air conditioner device."""
    return SmartThingsDevice(id="ac-1", name="Samsung Window A/C", label="Bedroom AC")


@pytest.fixture
def mock_cache() -> Mock:
    """Create a mock state cache accepting every write."""
    cache = Mock()
    cache.last_known_state = Mock(
        return_value=create_host_state(
            active=False,
            current_mode=CurrentMode.OFF,
            target_mode=TargetMode.OFF,
        )
    )
    cache.async_get_state = AsyncMock(return_value=create_host_state())
    cache.async_set_active = AsyncMock(return_value=True)
    cache.async_set_target_mode = AsyncMock(return_value=True)
    cache.async_set_target_temperature = AsyncMock(return_value=True)
    cache.async_set_heating_threshold = AsyncMock(return_value=True)
    cache.async_set_cooling_threshold = AsyncMock(return_value=True)
    return cache


@pytest.fixture
def entity(
    mock_cache: Mock, mock_device: SmartThingsDevice
) -> SamsungWindowACClimateEntity:
    """Create a climate entity for testing."""
    return SamsungWindowACClimateEntity(mock_cache, mock_device)


class TestAsyncSetupEntry:
    """Tests for async_setup_entry function."""

    @pytest.mark.asyncio
    async def test_async_setup_entry_creates_entity_for_device(
        self, mock_cache: Mock, mock_device: SmartThingsDevice
    ) -> None:
        """Test that async_setup_entry adds one entity with an initial update."""
        hass = Mock()
        hass.data = {
            "samsung_window_ac": {
                "test_entry": {"cache": mock_cache, "device": mock_device},
            },
        }
        entry = Mock()
        entry.entry_id = "test_entry"
        async_add_entities = Mock()

        await async_setup_entry(hass, entry, async_add_entities)

        async_add_entities.assert_called_once()
        entities = async_add_entities.call_args[0][0]
        assert len(entities) == 1
        assert isinstance(entities[0], SamsungWindowACClimateEntity)
        assert async_add_entities.call_args[1]["update_before_add"] is True


class TestSamsungWindowACClimateEntityInit:
    """Tests for SamsungWindowACClimateEntity initialization."""

    def test_init_sets_attributes_from_last_known_state(
        self, entity: SamsungWindowACClimateEntity
    ) -> None:
        """Test that init applies the cache's last known values."""
        assert entity.unique_id == "ac-1"
        assert entity.hvac_mode == HVACMode.OFF
        assert entity.hvac_action == HVACAction.OFF
        assert entity.current_temperature == 27.0
        assert entity.target_temperature == 24.0
        assert entity.current_humidity == 45.0

    def test_init_sets_class_attributes(
        self, entity: SamsungWindowACClimateEntity
    ) -> None:
        """Test that the entity exposes the device's temperature range."""
        assert entity.hvac_modes == [
            HVACMode.OFF,
            HVACMode.HEAT,
            HVACMode.COOL,
            HVACMode.HEAT_COOL,
        ]
        assert entity.temperature_unit == UnitOfTemperature.CELSIUS
        assert entity.min_temp == MIN_TEMP
        assert entity.max_temp == MAX_TEMP
        assert entity.target_temperature_step == TEMP_STEP
        assert entity.supported_features & ClimateEntityFeature.TARGET_TEMPERATURE_RANGE

    def test_init_sets_device_info(self, entity: SamsungWindowACClimateEntity) -> None:
        """Test that the device info uses the device label."""
        device_info = entity.device_info
        assert device_info is not None
        assert device_info["identifiers"] == {("samsung_window_ac", "ac-1")}
        assert device_info["name"] == "Bedroom AC"


class TestSamsungWindowACClimateEntityAsyncUpdate:
    """Tests for async_update method."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("target_mode", "current_mode", "hvac_mode", "hvac_action"),
        [
            (TargetMode.OFF, CurrentMode.OFF, HVACMode.OFF, HVACAction.OFF),
            (TargetMode.HEAT, CurrentMode.HEAT, HVACMode.HEAT, HVACAction.HEATING),
            (TargetMode.COOL, CurrentMode.COOL, HVACMode.COOL, HVACAction.COOLING),
            (
                TargetMode.AUTO,
                CurrentMode.COOL,
                HVACMode.HEAT_COOL,
                HVACAction.COOLING,
            ),
        ],
    )
    async def test_async_update_maps_modes(
        self,
        entity: SamsungWindowACClimateEntity,
        mock_cache: Mock,
        target_mode: TargetMode,
        current_mode: CurrentMode,
        hvac_mode: HVACMode,
        hvac_action: HVACAction,
    ) -> None:
        """Test that host modes map onto Home Assistant HVAC modes."""
        mock_cache.async_get_state.return_value = create_host_state(
            target_mode=target_mode, current_mode=current_mode
        )
        await entity.async_update()
        assert entity.hvac_mode == hvac_mode
        assert entity.hvac_action == hvac_action

    @pytest.mark.asyncio
    async def test_async_update_exposes_thresholds(
        self, entity: SamsungWindowACClimateEntity, mock_cache: Mock
    ) -> None:
        """Test that thresholds become the low/high target temperatures."""
        mock_cache.async_get_state.return_value = create_host_state(
            target_mode=TargetMode.AUTO,
            heating_threshold=22.0,
            cooling_threshold=26.0,
        )
        await entity.async_update()
        assert entity.target_temperature_low == 22.0
        assert entity.target_temperature_high == 26.0
        assert entity.host_state.cooling_threshold == 26.0

    @pytest.mark.asyncio
    async def test_async_update_marks_unavailable_on_auth_error(
        self, entity: SamsungWindowACClimateEntity, mock_cache: Mock
    ) -> None:
        """Test that a failed credential refresh makes the entity unavailable."""
        mock_cache.async_get_state.side_effect = SmartThingsApiAuthError("expired")
        await entity.async_update()
        assert entity.available is False

        mock_cache.async_get_state.side_effect = None
        await entity.async_update()
        assert entity.available is True
        assert entity.hvac_mode == HVACMode.COOL


class TestSamsungWindowACClimateEntityWrites:
    """Tests for the entity's write methods."""

    @pytest.mark.asyncio
    @pytest.mark.parametrize(
        ("hvac_mode", "target_mode"),
        [
            (HVACMode.OFF, TargetMode.OFF),
            (HVACMode.HEAT, TargetMode.HEAT),
            (HVACMode.COOL, TargetMode.COOL),
            (HVACMode.HEAT_COOL, TargetMode.AUTO),
        ],
    )
    async def test_async_set_hvac_mode_sets_target_mode(
        self,
        entity: SamsungWindowACClimateEntity,
        mock_cache: Mock,
        hvac_mode: HVACMode,
        target_mode: TargetMode,
    ) -> None:
        """Test that each HVAC mode is written as its target mode."""
        await entity.async_set_hvac_mode(hvac_mode)
        mock_cache.async_set_target_mode.assert_awaited_once_with(target_mode)

    @pytest.mark.asyncio
    async def test_async_set_hvac_mode_rejects_unsupported_mode(
        self, entity: SamsungWindowACClimateEntity, mock_cache: Mock
    ) -> None:
        """Test that unsupported HVAC modes raise without a write."""
        with pytest.raises(HomeAssistantError, match="Unsupported HVAC mode"):
            await entity.async_set_hvac_mode(HVACMode.FAN_ONLY)
        mock_cache.async_set_target_mode.assert_not_called()

    @pytest.mark.asyncio
    async def test_async_set_hvac_mode_raises_when_write_rejected(
        self, entity: SamsungWindowACClimateEntity, mock_cache: Mock
    ) -> None:
        """Test that a rejected write raises and keeps the previous state."""
        mock_cache.async_set_target_mode.return_value = False
        mock_cache.last_known_state.return_value = create_host_state()

        with pytest.raises(HomeAssistantError, match="did not accept"):
            await entity.async_set_hvac_mode(HVACMode.COOL)
        assert entity.hvac_mode == HVACMode.OFF

    @pytest.mark.asyncio
    async def test_successful_write_applies_last_known_state(
        self, entity: SamsungWindowACClimateEntity, mock_cache: Mock
    ) -> None:
        """Test that a confirmed write refreshes the entity's snapshot."""
        mock_cache.last_known_state.return_value = create_host_state(
            target_mode=TargetMode.HEAT, current_mode=CurrentMode.HEAT
        )
        await entity.async_set_hvac_mode(HVACMode.HEAT)
        assert entity.hvac_mode == HVACMode.HEAT
        assert entity.hvac_action == HVACAction.HEATING

    @pytest.mark.asyncio
    async def test_async_set_temperature_writes_target_temperature(
        self, entity: SamsungWindowACClimateEntity, mock_cache: Mock
    ) -> None:
        """Test that a single temperature writes the target temperature."""
        await entity.async_set_temperature(**{ATTR_TEMPERATURE: 22})
        mock_cache.async_set_target_temperature.assert_awaited_once_with(22)
        mock_cache.async_set_heating_threshold.assert_not_called()

    @pytest.mark.asyncio
    async def test_async_set_temperature_writes_threshold_pair(
        self, entity: SamsungWindowACClimateEntity, mock_cache: Mock
    ) -> None:
        """Test that a low/high pair writes both thresholds."""
        await entity.async_set_temperature(
            **{ATTR_TARGET_TEMP_LOW: 21, ATTR_TARGET_TEMP_HIGH: 25}
        )
        mock_cache.async_set_heating_threshold.assert_awaited_once_with(21)
        mock_cache.async_set_cooling_threshold.assert_awaited_once_with(25)
        mock_cache.async_set_target_temperature.assert_not_called()

    @pytest.mark.asyncio
    async def test_async_set_temperature_applies_hvac_mode_first(
        self, entity: SamsungWindowACClimateEntity, mock_cache: Mock
    ) -> None:
        """Test that an HVAC mode passed with the temperature is written."""
        await entity.async_set_temperature(
            **{ATTR_HVAC_MODE: HVACMode.COOL, ATTR_TEMPERATURE: 20}
        )
        mock_cache.async_set_target_mode.assert_awaited_once_with(TargetMode.COOL)
        mock_cache.async_set_target_temperature.assert_awaited_once_with(20)

    @pytest.mark.asyncio
    async def test_async_set_temperature_raises_when_write_rejected(
        self, entity: SamsungWindowACClimateEntity, mock_cache: Mock
    ) -> None:
        """Test that a rejected setpoint raises HomeAssistantError."""
        mock_cache.async_set_target_temperature.return_value = False
        with pytest.raises(HomeAssistantError):
            await entity.async_set_temperature(**{ATTR_TEMPERATURE: 22})

    @pytest.mark.asyncio
    async def test_async_turn_on_and_off_switch_device(
        self, entity: SamsungWindowACClimateEntity, mock_cache: Mock
    ) -> None:
        """Test that turn on/off write the active characteristic."""
        await entity.async_turn_on()
        await entity.async_turn_off()
        assert [call.args for call in mock_cache.async_set_active.await_args_list] == [
            (True,),
            (False,),
        ]
