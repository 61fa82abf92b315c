"""
Security: static shared-secret API key carried in the X-API-KEY header.
"""

import hmac

from forumshop.errors import AuthError


def verify_api_key(provided: str | None, expected: str) -> None:
    """Raise AuthError unless the header matches the configured secret. Constant-time compare."""
    if not provided:
        raise AuthError("API key is required")
    if not hmac.compare_digest(provided.encode(), expected.encode()):
        raise AuthError("Invalid API key")
