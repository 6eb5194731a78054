"""Per-request counter of store operations, read by ``TimingMiddleware``."""
from contextvars import ContextVar


class OpCounter:
    __slots__ = ("count",)

    def __init__(self) -> None:
        self.count = 0


# Sync route handlers run on worker threads inside a copy of the request
# context, so the counter must be mutated in place, never re-set.
op_counter_var: ContextVar[OpCounter | None] = ContextVar("store_op_counter", default=None)


def increment_op_count() -> None:
    """
    Record one store operation against the current request.

    No-op outside a request (scripts, direct store use in tests).
    """
    counter = op_counter_var.get()
    if counter is not None:
        counter.count += 1
