"""Internal constants shared across the library."""

from datetime import timedelta

USER_AGENT = "ontmon/1"
DEFAULT_REQUEST_TIMEOUT: float = 10.0
DEFAULT_RX_WARNING_THRESHOLD: float = -27.0
DEFAULT_OFFLINE_WINDOW = timedelta(minutes=15)
DEFAULT_STATE_FILE = "./device_state.json"
DEFAULT_TIME_ZONE = "Asia/Jakarta"
DEFAULT_WA_API_URL = "https://app.wacloud.web.id/api/send-message"

UNKNOWN = "Unknown"
NO_TAG = "No Tag"

# ------------------------------------------------------------------
# GenieACS meta keys and TR-069 parameter paths
# ------------------------------------------------------------------

DEVICE_ID_KEY = "_id"
LAST_INFORM_KEY = "_lastInform"
TAGS_KEY = "_tags"

#: Product class, in precedence order.
PRODUCT_CLASS_PATHS: tuple[str, ...] = (
    "InternetGatewayDevice.DeviceInfo.ProductClass",
    "DeviceID.ProductClass",
)

#: Optical receive power, in precedence order.  Values are assumed to be dBm.
RX_POWER_PATHS: tuple[str, ...] = (
    "VirtualParameters.RXPower",
    "InternetGatewayDevice.WANDevice.1.X_FH_GponInterfaceConfig.RXPower",
    "InternetGatewayDevice.WANDevice.1.WANDSLInterfaceConfig.OpticalSignalLevel",
    "InternetGatewayDevice.WANDevice.1.WANDSLDiagnostics.RxPower",
)

UPTIME_PATH = "InternetGatewayDevice.DeviceInfo.UpTime"
EXTERNAL_IP_PATH = "InternetGatewayDevice.WANDevice.1.WANConnectionDevice.1.WANIPConnection.1.ExternalIPAddress"
CONNECTION_REQUEST_URL_PATH = "InternetGatewayDevice.ManagementServer.ConnectionRequestURL"

#: Fields requested from ``GET /devices`` to bound the payload size.
DEVICE_PROJECTION: tuple[str, ...] = (
    DEVICE_ID_KEY,
    LAST_INFORM_KEY,
    TAGS_KEY,
    *PRODUCT_CLASS_PATHS,
    *RX_POWER_PATHS,
    EXTERNAL_IP_PATH,
    CONNECTION_REQUEST_URL_PATH,
    UPTIME_PATH,
)
