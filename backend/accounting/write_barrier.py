# accounting/write_barrier.py
"""
Write barrier for command-owned ledger tables.

Vouchers, lines, audit entries and sequences may only be written by the
command layer. Commands push a named write context; model ``save()``
checks it and refuses writes made from anywhere else (shell scripts,
serializers, the admin).
"""

from contextlib import contextmanager
import threading

from django.conf import settings


_state = threading.local()

COMMAND_CONTEXTS = frozenset({"command", "bootstrap"})


def _context_stack() -> list[str]:
    stack = getattr(_state, "write_context_stack", None)
    if stack is None:
        stack = []
        _state.write_context_stack = stack
    return stack


def current_write_context() -> str | None:
    stack = _context_stack()
    return stack[-1] if stack else None


def write_context_allowed(allowed_contexts) -> bool:
    ctx = current_write_context()
    if ctx is None:
        return False
    return ctx in allowed_contexts


def assert_command_write(model_name: str) -> None:
    """Raise unless inside command_writes_allowed() (or running tests)."""
    if write_context_allowed(COMMAND_CONTEXTS) or getattr(settings, "TESTING", False):
        return
    raise RuntimeError(
        f"{model_name} is a command-owned write model. "
        "Direct saves are only allowed within command_writes_allowed()."
    )


@contextmanager
def _push_write_context(name: str):
    stack = _context_stack()
    stack.append(name)
    try:
        yield
    finally:
        stack.pop()


@contextmanager
def command_writes_allowed():
    with _push_write_context("command"):
        yield


@contextmanager
def bootstrap_writes_allowed():
    with _push_write_context("bootstrap"):
        yield
