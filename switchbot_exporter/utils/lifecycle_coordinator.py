"""Lifecycle coordinator for graceful exporter shutdown."""

import logging
import signal
import threading
import time
from abc import ABC, abstractmethod
from collections.abc import Callable
from enum import Enum

logger = logging.getLogger(__name__)


class LifecycleEvent(str, Enum):
    PREPARE_SHUTDOWN = "prepare-shutdown"
    SHUTDOWN = "shutdown"
    AFTER_SHUTDOWN = "after-shutdown"


class LifecycleCoordinatorProtocol(ABC):
    """Protocol for lifecycle coordinator implementations."""

    @abstractmethod
    def initialize(self) -> None: ...

    @abstractmethod
    def register_lifecycle_notification(self, callback: Callable[[LifecycleEvent], None]) -> None: ...

    @abstractmethod
    def register_shutdown_waiter(self, name: str, handler: Callable[[float], bool]) -> None: ...

    @abstractmethod
    def is_shutting_down(self) -> bool: ...

    @abstractmethod
    def shutdown(self) -> None: ...


class LifecycleCoordinator(LifecycleCoordinatorProtocol):
    """Coordinator for process lifecycle events and graceful shutdown.

    SIGTERM and SIGINT start the shutdown sequence: PREPARE_SHUTDOWN, then
    the registered waiters, then SHUTDOWN and AFTER_SHUTDOWN. The runner
    exits once AFTER_SHUTDOWN has been raised.
    """

    def __init__(self, graceful_shutdown_timeout: int):
        self._graceful_shutdown_timeout = graceful_shutdown_timeout
        self._shutting_down = False
        self._lifecycle_lock = threading.RLock()
        self._lifecycle_notifications: list[Callable[[LifecycleEvent], None]] = []
        self._shutdown_waiters: dict[str, Callable[[float], bool]] = {}

        logger.info("LifecycleCoordinator initialized")

    def initialize(self) -> None:
        signal.signal(signal.SIGTERM, self._handle_sigterm)
        signal.signal(signal.SIGINT, self._handle_sigterm)

    def register_lifecycle_notification(self, callback: Callable[[LifecycleEvent], None]) -> None:
        with self._lifecycle_lock:
            self._lifecycle_notifications.append(callback)

    def register_shutdown_waiter(self, name: str, handler: Callable[[float], bool]) -> None:
        with self._lifecycle_lock:
            self._shutdown_waiters[name] = handler

    def is_shutting_down(self) -> bool:
        with self._lifecycle_lock:
            return self._shutting_down

    def _handle_sigterm(self, signum: int, frame: object) -> None:
        logger.info(f"Received signal {signum}, initiating graceful shutdown")
        self.shutdown()

    def shutdown(self) -> None:
        with self._lifecycle_lock:
            if self._shutting_down:
                return
            self._shutting_down = True
            shutdown_start_time = time.perf_counter()
            self._raise_lifecycle_event(LifecycleEvent.PREPARE_SHUTDOWN)

        for name, waiter in self._shutdown_waiters.items():
            remaining = self._graceful_shutdown_timeout - (time.perf_counter() - shutdown_start_time)
            if remaining <= 0:
                logger.error(f"Shutdown timeout exceeded before waiting for {name}")
                break
            try:
                if not waiter(remaining):
                    logger.warning(f"{name} was not ready within timeout")
            except Exception as e:
                logger.error(f"Error in shutdown waiter {name}: {e}")

        self._raise_lifecycle_event(LifecycleEvent.SHUTDOWN)
        logger.info(f"Shutdown completed in {time.perf_counter() - shutdown_start_time:.1f}s")
        self._raise_lifecycle_event(LifecycleEvent.AFTER_SHUTDOWN)

    def _raise_lifecycle_event(self, event: LifecycleEvent) -> None:
        for callback in self._lifecycle_notifications:
            try:
                callback(event)
            except Exception as e:
                logger.error(f"Error in lifecycle event notification: {e}")
