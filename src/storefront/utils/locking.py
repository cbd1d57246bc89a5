"""Per-key serialization for read-modify-write commands.

Loyalty balances are touched by order placement, order deletion and refund
approval. Commands that mutate a customer's balance run under that customer's
lock so their unit-of-work reads and commits never interleave within a
process; across processes the aggregate ``_version`` check catches stale
writes, which are retried here for commands with no external side effects.
"""

import threading
from contextlib import contextmanager

import structlog
from protean.exceptions import ExpectedVersionError
from protean.utils.globals import current_domain

from storefront.utils.settings import setting

logger = structlog.get_logger(__name__)

_registry_guard = threading.Lock()
_locks: dict[str, threading.RLock] = {}


def lock_for(key: str) -> threading.RLock:
    with _registry_guard:
        lock = _locks.get(key)
        if lock is None:
            lock = _locks[key] = threading.RLock()
        return lock


@contextmanager
def exclusive(key: str):
    with lock_for(key):
        yield


def customer_key(customer_id) -> str:
    return f"customer:{customer_id}"


def refund_claim_key(customer_id, payment_id) -> str:
    return f"refund-claim:{customer_id}:{payment_id}"


def run_exclusive(key: str, command, retry_on_conflict: bool = True):
    """Process ``command`` synchronously while holding the lock for ``key``.

    Gateway-touching commands must pass ``retry_on_conflict=False``: a charge
    or refund is never replayed automatically.
    """
    attempts = setting("MAX_CONCURRENCY_RETRIES") if retry_on_conflict else 0
    with exclusive(key):
        for attempt in range(attempts + 1):
            try:
                return current_domain.process(command, asynchronous=False)
            except ExpectedVersionError:
                if attempt >= attempts:
                    raise
                logger.warning(
                    "Concurrent update detected, retrying",
                    key=key,
                    command=command.__class__.__name__,
                    attempt=attempt + 1,
                )
