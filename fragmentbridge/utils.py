from datetime import datetime, timezone
from typing import Callable, Optional


class BridgeException( Exception ):
    '''Exception type used for various errors in the fragmentbridge package.'''

    def __init__(self, message, code=None):
        """
        Initialize the exception with a message and an optional status code.

        Args:
            message (str): The error message.
            code (int, optional): An optional HTTP status code tied to the error. Defaults to None.
        """
        super().__init__(message)
        self.code = code


class BindError( BridgeException ):
    '''Neither the fixed nor the fallback loopback port could be bound.'''
    pass


class StateMismatchError( BridgeException ):
    '''A token submission carried a missing or wrong state value.'''
    pass


class BodyReadError( BridgeException ):
    '''The body of a token submission could not be read.'''
    pass


class RelayDeliveryFailure( BridgeException ):
    '''The application-side channel did not accept a relayed message.'''
    pass


# Default function to call with debug messages.
DEFAULT_PRINT_DEBUG_FN: Optional[Callable[[str], None]] = None

def set_default_print_debug_fn( fn: Optional[Callable[[str], None]] = None ):
    """
    Set a default function to call with debug messages.

    Args:
        fn (function): the function to call with debug messages.
    """
    global DEFAULT_PRINT_DEBUG_FN
    DEFAULT_PRINT_DEBUG_FN = fn


def get_debug_printer( print_debug_fn: Optional[Callable[[str], None]] = None ) -> Callable[[str], None]:
    """
    Build a debug printer that prefixes messages with a UTC timestamp.

    Args:
        print_debug_fn (function(message)): callback receiving messages, the module default is used if unset.

    Returns:
        A function taking a message, a no-op when no callback is configured.
    """
    def _printDebug( msg ):
        fn = print_debug_fn or DEFAULT_PRINT_DEBUG_FN
        if fn is not None:
            time_string = datetime.now(timezone.utc).strftime("%Y-%m-%d %H:%M:%SZ")
            fn( f"{time_string}: {msg}" )
    return _printDebug
