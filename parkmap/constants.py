"""
Centralized constants for the parking data pipeline.

Endpoints, request budgets and sentinel values shared by the ingest,
normalize and merge stages. Import from here to ensure consistency.
"""

# Taipei City (TPC) open data feeds
TPC_DESC_URL = 'https://tcgbusfs.blob.core.windows.net/blobtcmsv/TCMSV_alldesc.json'
TPC_AVAIL_URL = 'https://tcgbusfs.blob.core.windows.net/blobtcmsv/TCMSV_allavailable.json'

# New Taipei City (NTPC) open data feeds (paginated)
NTPC_DESC_BASE_URL = 'https://data.ntpc.gov.tw/api/datasets/b1464ef0-9c7c-4a6f-abf7-6bdf32847e68/json'
NTPC_AVAIL_BASE_URL = 'https://data.ntpc.gov.tw/api/datasets/e09b35a5-a738-48cc-b0f5-570b67ad9c78/json'

# Source tags
SOURCE_TPC = 'TPC'
SOURCE_NTPC = 'NTPC'

USER_AGENT = 'TaipeiParkingMap/1.0'

# Request budgets (seconds)
DIRECT_TIMEOUT = 5.0
RELAY_TIMEOUT = 8.0
RELAY_RETRIES = 2
BACKOFF_STEP = 0.5

# Pagination (NTPC)
PAGE_SIZE = 1000
MAX_PAGES = 16  # ~16,000 records

# Availability sentinels
AVAILABLE_UNKNOWN = -9
AVAILABLE_SUFFICIENT = -11
AVAILABLE_LIMITED = -12  # fewer than half left
AVAILABLE_SCARCE = -13
AVAILABILITY_SENTINELS = frozenset({
    AVAILABLE_UNKNOWN,
    AVAILABLE_SUFFICIENT,
    AVAILABLE_LIMITED,
    AVAILABLE_SCARCE,
})

# TWD97 / TM2 zone 121 (EPSG:3826)
TWD97_PROJ = (
    '+proj=tmerc +lat_0=0 +lon_0=121 +k=0.9999 +x_0=250000 +y_0=0 '
    '+ellps=GRS80 +towgs84=0,0,0,0,0,0,0 +units=m +no_defs'
)
WGS84_CRS = 'EPSG:4326'

# Rough bounds of Taiwan (WGS84), for sanity checks
TAIWAN_BBOX = {
    'minLat': 21.0,
    'maxLat': 26.0,
    'minLon': 119.0,
    'maxLon': 123.0
}
