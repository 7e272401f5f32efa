"""Access to the configured persistence provider.

Provider calls are serialized: each call holds the storage lock for exactly
one operation (one read, or one unit of work) and releases it on every exit
path. Nothing holds the lock across a whole checkout, so concurrent
checkouts interleave between their steps.

Provider errors that are not domain rejections are translated once, here,
into ``StorageFailure`` so callers see a single failure type for "the store
broke" regardless of the adapter underneath.
"""

import threading
from contextlib import contextmanager

import structlog
from protean.exceptions import ObjectNotFoundError, ValidationError

from checkout.errors import CheckoutError, StorageFailure

logger = structlog.get_logger(__name__)

# Reentrant: a store operation may call another store read while holding it
_storage_lock = threading.RLock()


@contextmanager
def storage_call(operation):
    """Run one storage operation under the storage lock."""
    with _storage_lock:
        try:
            yield
        except (CheckoutError, ValidationError, ObjectNotFoundError):
            raise
        except Exception as exc:
            logger.error("storage.operation_failed", operation=operation, error=str(exc))
            raise StorageFailure(operation, str(exc)) from exc
