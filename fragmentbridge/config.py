"""
Configuration for loopback authorization sessions.

Values are acquired in the following order, later sources win:
1- Built-in defaults from constants.py.
2- A YAML file at FB_CONFIG_FILE, or "~/.fragmentbridge" if unset.
3- FB_HOST, FB_PORT, FB_TIMEOUT and FB_LOCALE environment variables.
"""

import ipaddress
import os
from dataclasses import dataclass, replace
from typing import Any, Dict, Optional

import yaml

from . import constants
from .utils import BridgeException


@dataclass(frozen=True)
class BridgeConfig:
    """Settings shared by the listener, the router and the session controller."""

    host: str = constants.DEFAULT_HOST
    port: int = constants.DEFAULT_PORT
    timeout: float = constants.DEFAULT_SESSION_TIMEOUT
    locale: str = constants.DEFAULT_LOCALE

    def with_overrides( self, **kwargs ) -> 'BridgeConfig':
        """Return a validated copy with the non-None values of kwargs applied."""
        values = { k: v for k, v in kwargs.items() if v is not None }
        return _validate( replace( self, **values ) )


_ENV_VARS = {
    'FB_HOST': 'host',
    'FB_PORT': 'port',
    'FB_TIMEOUT': 'timeout',
    'FB_LOCALE': 'locale',
}


def _read_config_file( path: str ) -> Dict[str, Any]:
    if not os.path.isfile( path ):
        return {}
    with open( path, 'rb' ) as f:
        data = yaml.safe_load( f.read() )
    # Handle scenario where a file is empty
    data = data or {}
    if not isinstance( data, dict ):
        raise BridgeException( 'Invalid configuration file %s, expected a mapping.' % ( path, ) )
    return data


def _validate( config: BridgeConfig ) -> BridgeConfig:
    try:
        port = int( config.port )
        timeout = float( config.timeout )
    except ( TypeError, ValueError ):
        raise BridgeException( 'Invalid port or timeout: %r, %r' % ( config.port, config.timeout ) )
    if not 0 <= port <= 65535:
        raise BridgeException( 'Invalid port %s, should be in 0-65535.' % ( port, ) )
    if timeout <= 0:
        raise BridgeException( 'Invalid timeout %s, should be positive.' % ( timeout, ) )
    try:
        if not ipaddress.IPv4Address( config.host ).is_loopback:
            raise BridgeException( 'Host %s is not a loopback address.' % ( config.host, ) )
    except ValueError:
        raise BridgeException( 'Invalid host %r, should be an IPv4 loopback address.' % ( config.host, ) )
    return replace( config, port = port, timeout = timeout, locale = str( config.locale ) )


def load_config( path: Optional[str] = None, environ: Optional[Dict[str, str]] = None ) -> BridgeConfig:
    """
    Load the configuration from file and environment.

    Args:
        path: YAML file to read, FB_CONFIG_FILE or the default path if unset
        environ: environment mapping, os.environ if unset

    Returns:
        A validated BridgeConfig

    Raises:
        BridgeException: If a value is invalid
    """
    if environ is None:
        environ = os.environ
    if path is None:
        path = environ.get( constants.CONFIG_FILE_ENV_VAR, None ) or constants.CONFIG_FILE_PATH

    values = {}
    for key, value in _read_config_file( path ).items():
        if key in BridgeConfig.__dataclass_fields__:
            values[ key ] = value

    for envName, key in _ENV_VARS.items():
        value = environ.get( envName, '' )
        if value != '':
            values[ key ] = value

    return _validate( BridgeConfig( **values ) )
