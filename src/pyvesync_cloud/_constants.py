"""Internal constants shared across the library."""

API_BASE_URLS: dict[str, str] = {
    "US": "https://smartapi.vesync.com",
    "EU": "https://smartapi.vesync.eu",
}
REGION_ORDER: tuple[str, ...] = ("US", "EU")

#: Country code sent in Step 1 when nothing better is known.
REGION_DEFAULT_COUNTRY: dict[str, str] = {
    "US": "US",
    "EU": "DE",
}

USER_AGENT = "okhttp/3.12.1"
DEFAULT_TZ = "America/New_York"
DEFAULT_LANGUAGE = "en"
DEFAULT_DEVICE_REGION = "US"

APP_VERSION = "2.8.6"
PHONE_BRAND = "SM N9005"
PHONE_OS = "Android"
MOBILE_ID = "1234567890123456"
USER_TYPE = "1"

# ------------------------------------------------------------------
# Two-step (authorize code) login identity
# ------------------------------------------------------------------

APP_ID = "THqcCqBj"
CLIENT_TYPE = "vesyncApp"
CLIENT_VERSION = "VeSync 5.7.16"
CLIENT_INFO = "SM N9005"
OS_INFO = "Android"
AUTH_PROTOCOL_TYPE = "generic"

# ------------------------------------------------------------------
# Remote application codes
# ------------------------------------------------------------------

TOKEN_EXPIRED_CODES: frozenset[int] = frozenset({-11001000})
CREDENTIAL_ERROR_CODES: frozenset[int] = frozenset({-11201129, -11202129, -11000129})
CROSS_REGION_CODES: frozenset[int] = frozenset({-11260022, -11261022})
APP_VERSION_TOO_LOW_CODES: frozenset[int] = frozenset({-11012022})
UNSUPPORTED_IN_MODE_CODES: frozenset[int] = frozenset({11018000})
UNCONFIRMED_CODES: frozenset[int] = frozenset({11000000})

#: Bounded number of region hops while following cross-region hints.
MAX_REGION_REDIRECTS = 2
