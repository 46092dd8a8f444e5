"""Per-vehicle exclusion domains for the booking check-then-write sequence."""

import logging
import threading
from collections.abc import Hashable, Iterator
from contextlib import contextmanager

from app.errors import ConcurrencyConflictError

logger = logging.getLogger(__name__)


class VehicleLockRegistry:
    """One lock per vehicle, created on demand.

    The registry lock only guards the dict lookup and is never held across
    I/O, so bookings for different vehicles proceed in parallel.
    """

    def __init__(self):
        self._registry_lock = threading.Lock()
        self._locks: dict[Hashable, threading.Lock] = {}

    def _lock_for(self, vehicle_id: Hashable) -> threading.Lock:
        with self._registry_lock:
            lock = self._locks.get(vehicle_id)
            if lock is None:
                lock = threading.Lock()
                self._locks[vehicle_id] = lock
            return lock

    def __contains__(self, vehicle_id: Hashable) -> bool:
        with self._registry_lock:
            return vehicle_id in self._locks

    @contextmanager
    def hold(self, vehicle_id: Hashable, timeout: float) -> Iterator[None]:
        """Hold the vehicle's lock for the duration of the block.

        Raises:
            ConcurrencyConflictError: If the lock is not acquired within ``timeout`` seconds.
        """
        lock = self._lock_for(vehicle_id)
        if not lock.acquire(timeout=timeout):
            logger.warning(
                "Timed out after %.1fs waiting for booking lock on vehicle %s",
                timeout,
                vehicle_id,
            )
            raise ConcurrencyConflictError(
                f"Vehicle {vehicle_id} is being booked by another request, please retry"
            )
        try:
            yield
        finally:
            lock.release()


vehicle_locks = VehicleLockRegistry()
