"""
Per-request decisions of the loopback listener.

The router is independent from the HTTP server so the state machine can be
driven directly:

    LISTENING --(POST /token, matching state)--> TERMINATED

Every other request leaves it LISTENING. Once TERMINATED, nothing else is
processed.
"""

import enum
import threading
import urllib.parse
from dataclasses import dataclass
from typing import Callable, Optional

from .constants import DEFAULT_LOCALE, TOKEN_PATH
from .pages import render_bridge_page, render_success_page
from .relay import TokenRelay
from .state import states_match
from .utils import BodyReadError, StateMismatchError, get_debug_printer

HTML_CONTENT_TYPE = 'text/html; charset=utf-8'
TEXT_CONTENT_TYPE = 'text/plain; charset=utf-8'

STATE_MISMATCH_BODY = 'Unauthorized: State mismatch'
TERMINATED_BODY = 'Gone: session already completed'


class RouterState( enum.Enum ):
    LISTENING = 'listening'
    TERMINATED = 'terminated'


@dataclass(frozen=True)
class RouterResponse:
    status: int
    content_type: str
    body: str

    def encoded( self ) -> bytes:
        return self.body.encode( 'utf-8' )


class RequestRouter( object ):
    '''Routes requests between serving the bridge page and accepting the token.'''

    def __init__( self, expected_state: str, relay: TokenRelay, locale: str = DEFAULT_LOCALE, print_debug_fn: Optional[Callable[[str], None]] = None ):
        '''Create a router for one session.

        Args:
            expected_state (str): the state issued for the session.
            relay (TokenRelay): where a validated payload is handed off.
            locale (str): locale of the served pages.
            print_debug_fn (function(message)): a callback function that will receive detailed debug messages.
        '''
        self._expected_state = expected_state
        self._relay = relay
        self._state = RouterState.LISTENING
        self._lock = threading.Lock()
        self._printDebug = get_debug_printer( print_debug_fn )
        # Pages never change for a session, render them once.
        self._bridge = RouterResponse( 200, HTML_CONTENT_TYPE, render_bridge_page( locale ) )
        self._success = RouterResponse( 200, HTML_CONTENT_TYPE, render_success_page( locale ) )

    @property
    def state( self ) -> RouterState:
        return self._state

    @property
    def is_terminated( self ) -> bool:
        return self._state is RouterState.TERMINATED

    def route( self, method: str, path: str, read_body: Callable[[], bytes] ) -> RouterResponse:
        '''Decide the response to one request.

        Args:
            method (str): HTTP method.
            path (str): request target, path and query.
            read_body (function): returns the raw request body, only called for an accepted submission.

        Returns:
            The RouterResponse to send back.
        '''
        with self._lock:
            if self._state is RouterState.TERMINATED:
                self._printDebug( "ignoring %s %s, session already completed" % ( method, path ) )
                return RouterResponse( 410, TEXT_CONTENT_TYPE, TERMINATED_BODY )

            parsed = urllib.parse.urlsplit( path )
            if method.upper() != 'POST' or parsed.path != TOKEN_PATH:
                return self._bridge

            try:
                self._check_state( parsed.query )
            except StateMismatchError as e:
                self._printDebug( "rejected token submission: %s" % ( e, ) )
                return RouterResponse( 403, TEXT_CONTENT_TYPE, STATE_MISMATCH_BODY )

            try:
                payload = self._read_payload( read_body )
            except BodyReadError as e:
                self._printDebug( "failed to read request body, relaying an empty payload: %s" % ( e, ) )
                payload = ''

            self._relay.deliver( payload )
            self._state = RouterState.TERMINATED
            self._printDebug( "token relayed, listener terminating" )
            return self._success

    def _check_state( self, query: str ) -> None:
        values = urllib.parse.parse_qs( query, keep_blank_values = True ).get( 'state', [] )
        if len( values ) != 1:
            raise StateMismatchError( 'expected exactly one state parameter, got %d' % ( len( values ), ), code = 403 )
        if not states_match( self._expected_state, values[ 0 ] ):
            raise StateMismatchError( 'state parameter does not match', code = 403 )

    def _read_payload( self, read_body: Callable[[], bytes] ) -> str:
        try:
            data = read_body()
        except OSError as e:
            raise BodyReadError( str( e ) )
        if isinstance( data, str ):
            return data
        try:
            return data.decode( 'utf-8' )
        except UnicodeDecodeError as e:
            raise BodyReadError( 'body is not valid UTF-8: %s' % ( e, ) )
