"""
xroute Constants

This module consolidates global constants and environment configuration
used throughout the codebase. Constants are organized by category for easy
reference and maintenance.
"""
import ast
from dotenv import dotenv_values

# =============================================================================
# ENVIRONMENT CONFIGURATION
# =============================================================================
# Load environment variables once at module import
_config = dotenv_values(".env")

LOGGER_DEFAULTS = {
    'LOG_LEVEL':                       'INFO',
    'LOG_FORMAT':                      '%(asctime)s - %(levelname)s - %(name)s - %(message)s',
    'LOG_DATE_FORMAT':                 '%Y-%m-%dT%H:%M:%S',
    'LOG_CONSOLE_HIGHLIGHTING':        'True',
    'LOG_FILE_OUTPUT':                 'False',
}

LOG_MAX_FILE_SIZE = 10 * 1024 * 1024 # 10MB
LOG_BACKUP_COUNT = 5


# WARNING: THE VALUES BELOW ARE PART OF THE PROTOCOL. CHANGING THEM CHANGES
# POOL PRICING, MESSAGE FEES AND ADMISSION BOUNDS FOR EVERY LEDGER THAT
# REPLAYS THE SAME OPERATIONS.

# ==================================================================================
# ROUTER / AMM
# ==================================================================================
FEE_DENOMINATOR = 1000  # basis points, 1000 = 100%
MAX_FEE_RATE = 1000
DEFAULT_FEE_RATE = 3  # 0.3%
MAX_NETWORK_LENGTH = 32
FIRST_POOL_ID = 1


# ==================================================================================
# CROSS-CHAIN MESSAGING
# ==================================================================================
DEFAULT_BASE_MESSAGE_FEE = 10
MAX_PAYLOAD_SIZE = 1024
MAX_TARGET_CONTRACT_LENGTH = 64
MAX_SIGNATURE_SIZE = 65
MAX_BRIDGE_ID_LENGTH = 32
MAX_BRIDGE_NAME_LENGTH = 64
MAX_SUPPORTED_NETWORKS = 10
MAX_BATCH_SIZE = 50
FIRST_MESSAGE_ID = 1


# ==================================================================================
# EVENT LOGS (oldest entries are dropped past the limit)
# ==================================================================================
LEDGER_EVENT_LOG_SIZE = 10_000
TOKEN_EVENT_LOG_SIZE = 1_000


# ==================================================================================
# IDENTITIES
# ==================================================================================
DEFAULT_OWNER = "xroute-deployer"
DEFAULT_CUSTODY = "xroute-custody"


# ==================================================================================
# CONFIGURATION WRAPPERS
# ==================================================================================
class ConfigString(str):
    """
    String subclass that stores a default value.
    """
    def __new__(cls, value, default):
        obj = str.__new__(cls, value)
        obj._default = default
        return obj

    def default(self):
        return self._default

class ConfigBool(int):
    """
    Int subclass acting as a boolean that stores a default value.
    """
    def __new__(cls, value, default):
        obj = int.__new__(cls, bool(value))
        obj._default = default
        return obj

    def default(self):
        return self._default

    def __repr__(self):
        return str(bool(self))

    def __str__(self):
        return str(bool(self))

    def __eq__(self, other):
        return bool(self) == other

    __hash__ = int.__hash__


# ==================================================================================
# DYNAMIC CONFIGURATION LOADING
# ==================================================================================
namespace = globals()

def parse_bool(v):
    """
    Convert "True"/"False" (any casing, with surrounding whitespace) into bool.
    Avoids exceptions by only calling ast.literal_eval for known literals.
    """
    if not isinstance(v, str):
        return v
    s = v.strip()
    if not s:
        return v
    if s.casefold() in {"true", "false"}:
        return ast.literal_eval(s.title())
    return v

for key, default_raw in LOGGER_DEFAULTS.items():
    # dotenv_values returns strings or None. None is treated as missing.
    raw = _config.get(key)
    value_raw = default_raw if raw is None else raw

    value = parse_bool(value_raw)
    default_val = parse_bool(default_raw)

    if isinstance(value, bool):
        namespace[key] = ConfigBool(value, default_val)
    else:
        namespace[key] = ConfigString(value_raw, default_val)
