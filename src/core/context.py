"""Request-scoped context carried through contextvars.

Every log line emitted while serving a request picks these values up, so
services never pass request ids or the acting user around explicitly.
"""

from contextvars import ContextVar
from typing import Any
from uuid import UUID, uuid4


request_id_var: ContextVar[str] = ContextVar("request_id", default="")
user_id_var: ContextVar[str | None] = ContextVar("user_id", default=None)
user_role_var: ContextVar[str | None] = ContextVar("user_role", default=None)
correlation_id_var: ContextVar[str | None] = ContextVar("correlation_id", default=None)


def get_request_id() -> str:
    """Get the current request ID."""
    return request_id_var.get()


def set_request_id(request_id: str | None = None) -> str:
    """Set the request ID, generating one when the caller sent none."""
    rid = request_id or str(uuid4())
    request_id_var.set(rid)
    return rid


def get_user_id() -> str | None:
    return user_id_var.get()


def set_user(user_id: str | UUID | None, role: str | None = None) -> None:
    """Bind the authenticated caller to the current context.

    Args:
        user_id: Caller's user id, or None to clear it.
        role: Caller's role name.
    """
    user_id_var.set(str(user_id) if user_id is not None else None)
    user_role_var.set(role)


def set_correlation_id(correlation_id: str | None) -> None:
    correlation_id_var.set(correlation_id)


def get_context() -> dict[str, Any]:
    """Return the non-empty context values keyed by log field name."""
    values = {
        "request_id": request_id_var.get(),
        "user_id": user_id_var.get(),
        "user_role": user_role_var.get(),
        "correlation_id": correlation_id_var.get(),
    }
    return {key: value for key, value in values.items() if value}


def clear_context() -> None:
    """Reset every context variable at the end of a request."""
    request_id_var.set("")
    user_id_var.set(None)
    user_role_var.set(None)
    correlation_id_var.set(None)
