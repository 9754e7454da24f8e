"""Caller identity for API requests.

Callers are authenticated upstream; the identity arrives in the X-User-Id
header. Search accepts anonymous callers, credit operations do not.
"""

from fastapi import Header

from tubescrape.exceptions import AuthenticationError


def get_caller_id(x_user_id: str | None = Header(default=None)) -> str | None:
    return x_user_id.strip() if x_user_id and x_user_id.strip() else None


def require_caller_id(x_user_id: str | None = Header(default=None)) -> str:
    caller_id = get_caller_id(x_user_id)
    if caller_id is None:
        raise AuthenticationError("The function must be called while authenticated.")
    return caller_id
