"""
CSRF state tokens for a single authorization attempt.
"""

import hmac
import uuid
from typing import Optional


def issue_state() -> str:
    """
    Issue a new opaque state value.

    Returns:
        A random version-4 UUID string, different on every call.
    """
    return str( uuid.uuid4() )


def states_match( expected: Optional[str], received: Optional[str] ) -> bool:
    """
    Compare a received state against the issued one.

    The whole value must be equal, a value that only contains, prefixes or
    suffixes the issued state is rejected.

    Args:
        expected: the state issued for the session
        received: the state found in the request

    Returns:
        True if both values are present and identical
    """
    if not expected or not received:
        return False
    return hmac.compare_digest( expected.encode( 'utf-8' ), received.encode( 'utf-8' ) )
