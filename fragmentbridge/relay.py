"""
Hand-off of captured credentials from the loopback listener to the application.

The listener pushes messages on a bounded channel and the application owns the
receiving side, either by polling receive() from its own loop or by
subscribing callbacks. Delivery never raises into the listener: the HTTP
response sent to the browser does not depend on it.
"""

import queue
import threading
from dataclasses import dataclass
from typing import Callable, List, Optional

from .utils import RelayDeliveryFailure, get_debug_printer

TOKEN_RECEIVED_EVENT = 'oauth_token_received'
SESSION_ABORTED_EVENT = 'oauth_session_aborted'


@dataclass(frozen=True)
class RelayMessage:
    event: str
    payload: str


class TokenRelay( object ):
    '''Channel carrying relay messages to the application layer.'''

    def __init__( self, max_pending: int = 16, print_debug_fn: Optional[Callable[[str], None]] = None ):
        '''Create the channel.

        Args:
            max_pending (int): maximum number of undelivered messages held for receive().
            print_debug_fn (function(message)): a callback function that will receive detailed debug messages.
        '''
        self._channel: queue.Queue = queue.Queue( maxsize = max_pending )
        self._subscribers: List[Callable[[RelayMessage], None]] = []
        self._lock = threading.Lock()
        self._isClosed = False
        self._printDebug = get_debug_printer( print_debug_fn )

    def subscribe( self, callback: Callable[[RelayMessage], None] ) -> None:
        with self._lock:
            self._subscribers.append( callback )

    def unsubscribe( self, callback: Callable[[RelayMessage], None] ) -> None:
        with self._lock:
            if callback in self._subscribers:
                self._subscribers.remove( callback )

    def deliver( self, payload: str ) -> None:
        '''Relay a captured credential payload, fire-and-forget.

        Args:
            payload (str): the raw fragment content, unparsed.
        '''
        self._publish( RelayMessage( TOKEN_RECEIVED_EVENT, payload ) )

    def notify_aborted( self, reason: str ) -> None:
        '''Tell the application a session ended without a credential.'''
        self._publish( RelayMessage( SESSION_ABORTED_EVENT, reason ) )

    def receive( self, timeout: Optional[float] = None ) -> Optional[RelayMessage]:
        '''Wait for the next message.

        Args:
            timeout (float): seconds to wait, forever if None.

        Returns:
            The next RelayMessage, or None if none arrived in time.
        '''
        try:
            return self._channel.get( timeout = timeout )
        except queue.Empty:
            return None

    def close( self ) -> None:
        with self._lock:
            self._isClosed = True
            self._subscribers = []

    def _publish( self, message: RelayMessage ) -> None:
        try:
            self._put( message )
        except RelayDeliveryFailure as e:
            self._printDebug( "relay of %s dropped: %s" % ( message.event, e ) )

        with self._lock:
            subscribers = list( self._subscribers )
        for callback in subscribers:
            try:
                callback( message )
            except Exception as e:
                self._printDebug( "relay subscriber %r failed on %s: %s" % ( callback, message.event, e ) )

    def _put( self, message: RelayMessage ) -> None:
        with self._lock:
            if self._isClosed:
                raise RelayDeliveryFailure( 'relay channel is closed' )
        try:
            self._channel.put_nowait( message )
        except queue.Full:
            raise RelayDeliveryFailure( 'relay channel is full, %s messages pending' % ( self._channel.maxsize, ) )
