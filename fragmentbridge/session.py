"""
Loopback authorization sessions.

A session issues a state, binds the loopback listener and runs the accept loop
on a daemon thread. start() returns the port and state as soon as the listener
is bound so the caller can build the provider's authorization URL:

    relay = TokenRelay()
    controller = SessionController( relay = relay )
    info = controller.start()
    # redirect_uri=http://127.0.0.1:<info.port>/, state=<info.state>, response_type=token
    message = relay.receive( timeout = 300 )
"""

import enum
import threading
import time
from dataclasses import dataclass
from typing import Callable, Optional, Tuple

from .config import BridgeConfig
from .constants import DEFAULT_HOST
from .listener import LoopbackListener
from .oauth_server import BridgeRequestHandler, make_handler_factory
from .relay import TokenRelay
from .router import RequestRouter
from .state import issue_state
from .utils import BridgeException, get_debug_printer

# How often the accept loop checks for stop requests and timeout.
_POLL_INTERVAL = 1


class SessionStatus( enum.Enum ):
    PENDING = 'pending'
    FULFILLED = 'fulfilled'
    ABORTED = 'aborted'


@dataclass(frozen=True)
class SessionInfo:
    port: int
    state: str
    host: str = DEFAULT_HOST

    @property
    def redirect_uri( self ) -> str:
        return 'http://%s:%s/' % ( self.host, self.port )


class SessionController( object ):
    '''Runs one loopback authorization session at a time.'''

    def __init__( self, relay: Optional[TokenRelay] = None, config: Optional[BridgeConfig] = None, print_debug_fn: Optional[Callable[[str], None]] = None ):
        '''Create a controller.

        Args:
            relay (TokenRelay): channel receiving the captured credential, a new one is created if unset.
            config (BridgeConfig): listener and timeout settings, defaults if unset.
            print_debug_fn (function(message)): a callback function that will receive detailed debug messages.
        '''
        self.relay = relay if relay is not None else TokenRelay( print_debug_fn = print_debug_fn )
        self._config = config if config is not None else BridgeConfig()
        self._print_debug_fn = print_debug_fn
        self._printDebug = get_debug_printer( print_debug_fn )
        self._status: Optional[SessionStatus] = None
        self._info: Optional[SessionInfo] = None
        self._router: Optional[RequestRouter] = None
        self._thread: Optional[threading.Thread] = None
        self._stopEvent = threading.Event()
        self._lock = threading.Lock()

    @property
    def status( self ) -> Optional[SessionStatus]:
        '''Status of the current session, None before start().'''
        if self._router is not None and self._router.is_terminated:
            return SessionStatus.FULFILLED
        return self._status

    @property
    def info( self ) -> Optional[SessionInfo]:
        return self._info

    def start( self ) -> SessionInfo:
        '''Start a session.

        Returns:
            The SessionInfo with the bound port and issued state.

        Raises:
            BindError: If no loopback port could be bound, no session is left running.
            BridgeException: If a session of this controller is still pending.
        '''
        with self._lock:
            if self._thread is not None and self._thread.is_alive():
                raise BridgeException( 'An authorization session is already running on port %s.' % ( self._info.port, ) )

            state = issue_state()
            router = RequestRouter( state, self.relay, locale = self._config.locale, print_debug_fn = self._print_debug_fn )
            listener = LoopbackListener( host = self._config.host, preferred_port = self._config.port, print_debug_fn = self._print_debug_fn )
            server, port = listener.bind( make_handler_factory( router, print_debug_fn = self._print_debug_fn ) )
            server.timeout = _POLL_INTERVAL

            self._router = router
            self._info = SessionInfo( port = port, state = state, host = self._config.host )
            self._stopEvent = threading.Event()
            self._status = SessionStatus.PENDING

            self._thread = threading.Thread( target = self._run_server, args = ( server, port, router, self._stopEvent ), name = 'fragmentbridge-%s' % ( port, ) )
            self._thread.daemon = True
            self._thread.start()

            return self._info

    def _run_server( self, server, port: int, router: RequestRouter, stopEvent: threading.Event ):
        '''Accept loop, one request at a time until fulfilled, stopped or timed out.'''
        deadline = time.monotonic() + self._config.timeout
        reason = None
        try:
            while not router.is_terminated:
                if stopEvent.is_set():
                    reason = 'Authentication cancelled'
                    break
                if time.monotonic() >= deadline:
                    reason = 'Authentication timeout'
                    break
                server.handle_request()
        finally:
            server.server_close()

        if router.is_terminated:
            self._status = SessionStatus.FULFILLED
            self._printDebug( "session fulfilled, port %s released" % ( port, ) )
        else:
            self._status = SessionStatus.ABORTED
            self._printDebug( "session aborted (%s), port %s released" % ( reason, port ) )
            self.relay.notify_aborted( reason )

    def stop( self ) -> None:
        '''Stop a pending session, it ends ABORTED and its port is released. No-op otherwise.'''
        self._stopEvent.set()
        if self._thread is not None and self._thread is not threading.current_thread():
            # A connection in progress holds the loop for up to the handler's socket timeout.
            self._thread.join( timeout = BridgeRequestHandler.timeout + _POLL_INTERVAL * 2 )

    def wait( self, timeout: Optional[float] = None ) -> Optional[SessionStatus]:
        '''Wait for the accept loop to exit.

        Args:
            timeout (float): seconds to wait, forever if None.

        Returns:
            The session status, still PENDING if the wait timed out.
        '''
        if self._thread is not None:
            self._thread.join( timeout = timeout )
        return self.status


def start_session( relay: Optional[TokenRelay] = None, config: Optional[BridgeConfig] = None, print_debug_fn: Optional[Callable[[str], None]] = None ) -> Tuple[SessionController, SessionInfo]:
    '''Start a session with a new controller.

    Returns:
        Tuple of (controller, session info).

    Raises:
        BindError: If no loopback port could be bound.
    '''
    controller = SessionController( relay = relay, config = config, print_debug_fn = print_debug_fn )
    return controller, controller.start()
