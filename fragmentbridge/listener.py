import socketserver
from typing import Callable, Optional, Tuple

from . import constants
from .utils import BindError, get_debug_printer


class LoopbackServer( socketserver.TCPServer ):
    '''TCP server bound to a loopback address, handling one request at a time.'''

    # An occupied port must fail to bind, not be shared.
    allow_reuse_address = False

    def __init__( self, server_address, handler_factory, print_debug_fn = None ):
        self._printDebug = get_debug_printer( print_debug_fn )
        super().__init__( server_address, handler_factory )

    def handle_error( self, request, client_address ):
        # Connection level errors only affect that client.
        self._printDebug( "error handling request from %s:%s" % client_address[ : 2 ] )


class LoopbackListener( object ):
    '''Binds the loopback listener, preferring the fixed redirect port.'''

    def __init__( self, host: str = constants.DEFAULT_HOST, preferred_port: int = constants.DEFAULT_PORT, print_debug_fn: Optional[Callable[[str], None]] = None ):
        '''Prepare a listener.

        Args:
            host (str): loopback address to bind.
            preferred_port (int): port registered in the provider's redirect URI, 0 to only use an ephemeral port.
            print_debug_fn (function(message)): a callback function that will receive detailed debug messages.
        '''
        self._host = host
        self._preferred_port = preferred_port
        self._print_debug_fn = print_debug_fn
        self._printDebug = get_debug_printer( print_debug_fn )

    def bind( self, handler_factory ) -> Tuple[LoopbackServer, int]:
        '''Bind the listener.

        Args:
            handler_factory: request handler class (or factory) for the server.

        Returns:
            Tuple of (server, port) where port is read back from the bound socket.

        Raises:
            BindError: If neither the preferred nor an ephemeral port could be bound.
        '''
        server = None
        if self._preferred_port:
            try:
                server = LoopbackServer( ( self._host, self._preferred_port ), handler_factory, print_debug_fn = self._print_debug_fn )
            except OSError as e:
                self._printDebug( "port %s unavailable (%s), falling back to an ephemeral port" % ( self._preferred_port, e ) )

        if server is None:
            try:
                server = LoopbackServer( ( self._host, 0 ), handler_factory, print_debug_fn = self._print_debug_fn )
            except OSError as e:
                raise BindError( 'Failed to start server: %s' % ( e, ) )

        port = server.server_address[ 1 ]
        self._printDebug( "listening on %s:%s" % ( self._host, port ) )
        return server, port
