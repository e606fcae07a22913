"""Constants for the Samsung Window AC integration.

This module contains all the constants used throughout the integration,
including API endpoints, configuration keys, cache TTLs and temperature limits.
"""

from datetime import timedelta

DOMAIN = "samsung_window_ac"

BASE_URL = "https://api.smartthings.com/v1"
TOKEN_URL = "https://api.smartthings.com/oauth/token"

DEFAULT_DEVICE_NAME = "Samsung Window A/C"
MANUFACTURER = "Samsung"
MODEL = "Samsung WindFree"

CONF_CLIENT_ID = "client_id"
CONF_CLIENT_SECRET = "client_secret"
CONF_REFRESH_TOKEN = "refresh_token"
CONF_DEVICE_NAME = "device_name"

TOKEN_FILE_NAME = "tokens.json"
TOKEN_SAFETY_MARGIN = timedelta(minutes=5)

STATUS_TTL = 300  # Seconds, unified device status snapshot
CHARACTERISTIC_TTL = 30  # Seconds, per-characteristic entries

MIN_TEMP = 18
MAX_TEMP = 30
TEMP_STEP = 1
THRESHOLD_OFFSET = 4
DEFAULT_TEMPERATURE = 24

COMMAND_COMPLETED = "COMPLETED"

ERROR_INVALID_AUTH = "invalid_auth"
ERROR_CANNOT_CONNECT = "cannot_connect"
ERROR_TIMEOUT = "timeout_error"
ERROR_API_ERROR = "api_error"
ERROR_DEVICE_NOT_FOUND = "device_not_found"
ERROR_UNKNOWN = "unknown_error"

CAPABILITY_SWITCH = "switch"
CAPABILITY_TEMPERATURE = "temperatureMeasurement"
CAPABILITY_HUMIDITY = "relativeHumidityMeasurement"
CAPABILITY_AC_MODE = "airConditionerMode"
CAPABILITY_COOLING_SETPOINT = "thermostatCoolingSetpoint"

# Capability -> attribute carrying its value
CAPABILITY_ATTRIBUTES = {
    CAPABILITY_SWITCH: "switch",
    CAPABILITY_TEMPERATURE: "temperature",
    CAPABILITY_HUMIDITY: "humidity",
    CAPABILITY_AC_MODE: "airConditionerMode",
    CAPABILITY_COOLING_SETPOINT: "coolingSetpoint",
}
