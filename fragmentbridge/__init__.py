"""fragmentbridge: loopback bridge for OAuth2 implicit-grant logins in desktop applications"""

__version__ = "1.0.0"
__license__ = "Apache v2"

from .config import BridgeConfig, load_config
from .relay import TokenRelay, RelayMessage, TOKEN_RECEIVED_EVENT, SESSION_ABORTED_EVENT
from .router import RequestRouter, RouterState
from .session import SessionController, SessionInfo, SessionStatus, start_session
from .credential import build_authorization_url, parse_credential, CredentialError
from .utils import BridgeException, BindError, set_default_print_debug_fn
