import http.server
import socket
from typing import Callable, Optional

from .constants import MAX_BODY_SIZE, REQUEST_SOCKET_TIMEOUT
from .router import RequestRouter
from .utils import BodyReadError, get_debug_printer


class BridgeRequestHandler(http.server.BaseHTTPRequestHandler):
    """Handler adapting HTTP requests to a RequestRouter."""

    # Idle pre-connects from the browser must not block the accept loop.
    timeout = REQUEST_SOCKET_TIMEOUT

    def __init__(self, *args, router: RequestRouter = None, print_debug_fn: Optional[Callable[[str], None]] = None, **kwargs):
        self.router = router
        self._printDebug = get_debug_printer(print_debug_fn)
        super().__init__(*args, **kwargs)

    def _dispatch(self):
        self._body_consumed = False
        response = self.router.route(self.command, self.path, self._read_body)
        if not self._body_consumed:
            self._drain_body()
        body = response.encoded()
        self.send_response(response.status)
        self.send_header('Content-Type', response.content_type)
        self.send_header('Content-Length', str(len(body)))
        self.send_header('Cache-Control', 'no-store')
        self.end_headers()
        if self.command != 'HEAD':
            self.wfile.write(body)
        self.wfile.flush()

    do_GET = _dispatch
    do_POST = _dispatch
    do_HEAD = _dispatch
    do_PUT = _dispatch
    do_DELETE = _dispatch
    do_PATCH = _dispatch
    do_OPTIONS = _dispatch

    def _drain_body(self):
        # Closing with unread input resets the connection and the client
        # may lose the response.
        try:
            self._read_body()
        except (BodyReadError, OSError) as e:
            self._printDebug("could not drain request body: %s" % (e,))

    def _read_body(self) -> bytes:
        """Read exactly Content-Length bytes of body."""
        self._body_consumed = True
        length = self.headers.get('Content-Length')
        if not length:
            return b''
        try:
            length = int(length)
        except ValueError:
            raise BodyReadError('invalid Content-Length %r' % (length,))
        if length < 0:
            raise BodyReadError('invalid Content-Length %r' % (length,))
        if length > MAX_BODY_SIZE:
            self._discard_body(length)
            raise BodyReadError('declared body of %d bytes exceeds %d bytes' % (length, MAX_BODY_SIZE))
        try:
            data = self.rfile.read(length)
        except socket.timeout:
            raise BodyReadError('timed out reading %d bytes of body' % (length,))
        if len(data) != length:
            raise BodyReadError('body truncated, got %d of %d bytes' % (len(data), length))
        return data

    def _discard_body(self, length):
        # Only a bounded prefix is read, the connection is closed after the response.
        self.close_connection = True
        try:
            self.rfile.read(min(length, MAX_BODY_SIZE))
        except OSError as e:
            self._printDebug("could not discard request body: %s" % (e,))

    def log_message(self, format, *args):
        """Send request logs to the debug callback instead of stderr."""
        self._printDebug("%s - %s" % (self.address_string(), format % args))


def make_handler_factory(router: RequestRouter, print_debug_fn: Optional[Callable[[str], None]] = None):
    """
    Build the request handler factory passed to the listener.

    Args:
        router: router of the session
        print_debug_fn: a callback function that will receive detailed debug messages

    Returns:
        A callable creating BridgeRequestHandler instances bound to the router
    """
    return lambda *args, **kwargs: BridgeRequestHandler(
        *args,
        router=router,
        print_debug_fn=print_debug_fn,
        **kwargs
    )
