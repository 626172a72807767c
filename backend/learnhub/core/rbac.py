"""Role-based access control.

Maps protected operations to the roles allowed to call them and implements
the request-body drain performed before a denial is returned.

Example
-------
>>> is_authorized(frozenset(), {"student"})
True
>>> is_authorized(required_roles_for("users.list"), {"student"})
False
"""

from __future__ import annotations

import logging
import time
from collections.abc import Iterable, Mapping
from typing import IO

from werkzeug.exceptions import HTTPException

from learnhub.models.enums import UserRole

log = logging.getLogger(__name__)

#: Upper bound on the time spent discarding a denied request's body.
DRAIN_TIMEOUT_SECONDS = 1.0

_ADMINS = frozenset({UserRole.ADMIN, UserRole.SUPER_ADMIN})

#: Operation name -> roles allowed to perform it. An empty set (or an
#: operation missing from the table) admits any authenticated caller.
OPERATION_ROLES: Mapping[str, frozenset[UserRole]] = {
    "auth.logout_all": frozenset(),
    "auth.sessions": frozenset(),
    "auth.revoke_session": frozenset(),
    "users.me": frozenset(),
    "users.list": _ADMINS,
    "users.update_roles": frozenset({UserRole.SUPER_ADMIN}),
}


def _values(roles: Iterable[UserRole | str]) -> set[str]:
    return {getattr(r, "value", r) for r in roles}


def required_roles_for(operation: str) -> frozenset[UserRole]:
    return OPERATION_ROLES.get(operation, frozenset())


def is_authorized(
    required: Iterable[UserRole | str],
    caller_roles: Iterable[UserRole | str],
) -> bool:
    """
    Decide whether a caller may perform an operation.

    :param required: Roles of which the caller needs at least one.
    :param caller_roles: Roles carried by the caller's access token.
    :returns: ``True`` when ``required`` is empty or shares a role with
        ``caller_roles``.
    """
    wanted = _values(required)
    if not wanted:
        return True
    return bool(wanted & _values(caller_roles))


def drain_stream(
    stream: IO[bytes] | None,
    *,
    timeout: float = DRAIN_TIMEOUT_SECONDS,
    chunk_size: int = 64 * 1024,
) -> bool:
    """
    Read and discard whatever is left of a request body.

    Reads happen on the calling thread; the deadline is checked between
    chunks, so nothing touches the stream once this returns. End of stream
    and stream errors both count as done.

    :param stream: Readable binary stream (``request.stream``).
    :param timeout: Seconds after which reading stops.
    :param chunk_size: Bytes per read.
    :returns: ``True`` if the stream was drained in time. On ``False`` the
        connection still holds unread bytes and must not be reused.
    """
    if stream is None:
        return True

    deadline = time.monotonic() + timeout
    try:
        while stream.read(chunk_size):
            if time.monotonic() >= deadline:
                log.warning("request.drain_timeout", extra={"elapsed_ms": int(timeout * 1000)})
                return False
    except (OSError, ValueError, HTTPException) as exc:
        log.debug("request.drain_error", extra={"reason": type(exc).__name__})
    return True
