"""
Application-side helpers around a loopback session.

The listener relays the fragment untouched. Building the provider URL and
parsing what comes back belong to the application, these helpers cover the
usual implicit-grant shapes.
"""

import urllib.parse
from typing import Any, Dict, Iterable, Optional

from .session import SessionInfo
from .utils import BridgeException


class CredentialError( BridgeException ):
    """The relayed payload holds an error or no access token."""
    pass


def build_authorization_url( authorize_url: str, client_id: str, info: SessionInfo,
                             scopes: Iterable[str] = (), extra_params: Optional[Dict[str, str]] = None ) -> str:
    """
    Build the provider authorization URL for an implicit-grant session.

    Args:
        authorize_url: provider authorization endpoint
        client_id: OAuth client ID registered with the provider
        info: the started session
        scopes: OAuth scopes to request
        extra_params: additional query parameters (e.g. prompt)

    Returns:
        The URL to open in the browser
    """
    params = {
        'response_type': 'token',
        'client_id': client_id,
        'redirect_uri': info.redirect_uri,
        'state': info.state,
    }
    scopes = list( scopes )
    if scopes:
        params[ 'scope' ] = ' '.join( scopes )
    if extra_params:
        params.update( extra_params )

    separator = '&' if urllib.parse.urlsplit( authorize_url ).query else '?'
    return f"{authorize_url}{separator}{urllib.parse.urlencode( params )}"


def parse_credential( payload: str, require_token: bool = True ) -> Dict[str, Any]:
    """
    Parse a relayed fragment.

    Args:
        payload: raw fragment, e.g. "access_token=...&token_type=Bearer&expires_in=3599"
        require_token: raise if no access_token is present

    Returns:
        Dictionary of the fragment parameters, expires_in as int when numeric

    Raises:
        CredentialError: If the provider returned an error or no token was found
    """
    if payload.startswith( '#' ):
        payload = payload[ 1: ]

    params = { k: v[ 0 ] for k, v in urllib.parse.parse_qs( payload ).items() }

    if 'error' in params:
        error_desc = params.get( 'error_description', 'Unknown error' )
        raise CredentialError( f"OAuth error: {params[ 'error' ]} - {error_desc}" )

    if require_token and not params.get( 'access_token' ):
        raise CredentialError( 'No access token in relayed payload' )

    expires_in = params.get( 'expires_in' )
    if expires_in is not None and expires_in.isdigit():
        params[ 'expires_in' ] = int( expires_in )

    return params
