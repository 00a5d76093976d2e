"""Shared request dependencies."""

from uuid import UUID

from fastapi import Header, HTTPException, Query, WebSocketException, status


def _parse_user_id(raw: str) -> UUID | None:
    try:
        return UUID(raw)
    except ValueError:
        return None


async def require_user(x_user_id: str | None = Header(default=None)) -> UUID:
    """Return the caller's user id from the X-User-Id header."""
    if not x_user_id:
        raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED)
    user_id = _parse_user_id(x_user_id)
    if user_id is None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST, detail="Invalid X-User-Id"
        )
    return user_id


async def require_socket_user(
    x_user_id: str | None = Header(default=None),
    user_id: str | None = Query(default=None),
) -> UUID:
    """Return the subscriber's user id for a WebSocket handshake.

    The X-User-Id header is preferred; browsers cannot set headers on a
    WebSocket, so a user_id query parameter is accepted in its place.
    """
    raw = x_user_id or user_id
    parsed = _parse_user_id(raw) if raw else None
    if parsed is None:
        raise WebSocketException(
            code=status.WS_1008_POLICY_VIOLATION, reason="Invalid X-User-Id"
        )
    return parsed
