"""Per-request context for KYC log correlation.

RequestIDMiddleware opens one RequestContext per HTTP request. The auth
dependencies record the authenticated caller on it, so every log line emitted
while handling the request (uploads, submissions, admin decisions) carries
the request id and the acting seller or admin.

The ContextVar holds a mutable object. Dependencies that run in a worker
thread see a copy of the context, but the same RequestContext instance.
"""

import re
import uuid
from contextlib import contextmanager
from contextvars import ContextVar
from dataclasses import dataclass
from typing import Iterator, Optional

NO_REQUEST_ID = "no-request-id"

# Accepted shape for a caller-supplied X-Request-ID
REQUEST_ID_PATTERN = re.compile(r"[A-Za-z0-9._:-]{1,128}")


@dataclass
class RequestContext:
    request_id: str
    actor_id: Optional[str] = None
    actor_role: Optional[str] = None


_current: ContextVar[Optional[RequestContext]] = ContextVar("kyc_request_context", default=None)


def new_request_id() -> str:
    return uuid.uuid4().hex


def accept_request_id(header_value: Optional[str]) -> str:
    """Reuse an incoming request id when well formed, else mint a new one."""
    if header_value and REQUEST_ID_PATTERN.fullmatch(header_value):
        return header_value
    return new_request_id()


def current_context() -> Optional[RequestContext]:
    return _current.get()


def get_request_id() -> str:
    context = _current.get()
    return context.request_id if context else NO_REQUEST_ID


@contextmanager
def request_context(request_id: Optional[str] = None) -> Iterator[RequestContext]:
    """Bind a RequestContext for the duration of the block."""
    context = RequestContext(request_id=request_id or new_request_id())
    token = _current.set(context)
    try:
        yield context
    finally:
        _current.reset(token)


def bind_actor(user_id: str, role: Optional[str] = None) -> None:
    """Record the authenticated caller on the current request (no-op outside one)."""
    context = _current.get()
    if context is not None:
        context.actor_id = user_id
        context.actor_role = role
