import os

# Path to the configuration file. Can be overriden for tests.
CONFIG_FILE_PATH = os.path.expanduser( '~/.fragmentbridge' )

# Environment variable pointing to an alternate configuration file.
CONFIG_FILE_ENV_VAR = 'FB_CONFIG_FILE'

# The provider's allow-listed redirect URI is registered with this exact port,
# the ephemeral fallback only works with providers accepting any loopback port.
DEFAULT_PORT = 3000
DEFAULT_HOST = '127.0.0.1'

# Abandoned sessions release their port after this delay.
DEFAULT_SESSION_TIMEOUT = 300  # 5 minutes

DEFAULT_LOCALE = 'en'

# Idle browser connections (pre-connects) are dropped after this delay.
REQUEST_SOCKET_TIMEOUT = 10

TOKEN_PATH = '/token'

# A fragment is a few KiB, declared bodies above this are not read.
MAX_BODY_SIZE = 64 * 1024
