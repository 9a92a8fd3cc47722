"""Serialized device inventory reloads."""

import logging
import queue
import signal
import threading
from concurrent.futures import Future
from dataclasses import dataclass

from switchbot_exporter.exceptions import InvalidOperationException
from switchbot_exporter.services.device_label_cache import DeviceLabelCache
from switchbot_exporter.services.switchbot_client import SwitchBotClient
from switchbot_exporter.utils.lifecycle_coordinator import LifecycleCoordinatorProtocol

logger = logging.getLogger(__name__)

_REPLY_POLL_INTERVAL = 1.0


@dataclass
class ReloadRequest:
    """One entry in the reload queue.

    ``reply`` is None for fire-and-forget reloads (SIGHUP); otherwise it
    receives exactly one result: the device count or the failure.
    """

    source: str
    reply: "Future[int] | None" = None


class ReloadCoordinator:
    """Single worker thread that owns all device label cache refreshes.

    Reload requests arrive on one FIFO queue from two sources: the SIGHUP
    handler and the /-/reload endpoint. Only the worker thread consumes the
    queue, so no two refreshes ever run at the same time. A failed refresh
    leaves the cache as it was.
    """

    def __init__(
        self,
        switchbot_client: SwitchBotClient,
        label_cache: DeviceLabelCache,
        lifecycle_coordinator: LifecycleCoordinatorProtocol,
    ):
        self.switchbot_client = switchbot_client
        self.label_cache = label_cache
        self._queue: "queue.Queue[ReloadRequest | None]" = queue.Queue()
        self._thread: threading.Thread | None = None
        self._loaded = threading.Event()
        self._stopped = threading.Event()

        lifecycle_coordinator.register_shutdown_waiter("ReloadCoordinator", self.stop)

    @property
    def is_loaded(self) -> bool:
        """Whether the initial inventory load has completed."""
        return self._loaded.is_set()

    @property
    def is_running(self) -> bool:
        return self._thread is not None and self._thread.is_alive() and not self._stopped.is_set()

    def initialize(self) -> None:
        """Install the SIGHUP handler. Must be called from the main thread."""
        if hasattr(signal, "SIGHUP"):
            signal.signal(signal.SIGHUP, self._handle_sighup)

    def start(self) -> int:
        """Load the inventory synchronously, then start the worker thread.

        Raises whatever the initial load raises; the worker is not started
        in that case.
        """
        if self._thread is not None and self._thread.is_alive():
            logger.warning("Reload coordinator already running")
            return len(self.label_cache)

        count = self._reload()
        self._loaded.set()

        self._stopped.clear()
        self._thread = threading.Thread(
            target=self._worker,
            daemon=True,
            name="ReloadCoordinator",
        )
        self._thread.start()
        return count

    def trigger_reload(self, source: str = "signal") -> None:
        """Queue a reload without waiting for it. Failures are only logged."""
        self._queue.put(ReloadRequest(source=source))

    def request_reload(self, source: str = "request") -> int:
        """Queue a reload and block until the worker has performed it.

        Returns:
            Number of devices returned by the inventory fetch

        Raises:
            InvalidOperationException: If the coordinator is not running
            SwitchBotApiException: If the inventory fetch failed
        """
        worker = self._thread
        if worker is None or not self.is_running:
            raise InvalidOperationException(
                "reload devices", "the reload coordinator is not running"
            )

        reply: "Future[int]" = Future()
        self._queue.put(ReloadRequest(source=source, reply=reply))

        # The request may land behind the stop sentinel after the queue was drained
        while True:
            try:
                return reply.result(timeout=_REPLY_POLL_INTERVAL)
            except TimeoutError:
                if reply.done():
                    raise
                if not worker.is_alive():
                    raise InvalidOperationException(
                        "reload devices", "the reload coordinator was stopped"
                    ) from None

    def stop(self, timeout: float = 5.0) -> bool:
        """Stop the worker thread, failing any reloads still queued.

        A reload already queued runs to completion first, bounded by timeout.

        Returns:
            False if the worker was still busy when the timeout expired
        """
        self._stopped.set()
        thread = self._thread
        if thread is None:
            return True

        self._queue.put(None)
        thread.join(timeout=timeout)
        self._thread = None
        logger.info("Stopped reload coordinator")
        return not thread.is_alive()

    def _handle_sighup(self, signum: int, frame: object) -> None:
        logger.info(f"Received signal {signum}, reloading devices")
        self.trigger_reload("signal")

    def _worker(self) -> None:
        while True:
            request = self._queue.get()
            if request is None:
                break
            self._process(request)

        self._drain()

    def _process(self, request: ReloadRequest) -> None:
        try:
            count = self._reload()
        except Exception as e:
            logger.error(f"Error reloading devices ({request.source}): {e}")
            if request.reply is not None:
                request.reply.set_exception(e)
            return

        if request.reply is not None:
            request.reply.set_result(count)

    def _drain(self) -> None:
        while True:
            try:
                request = self._queue.get_nowait()
            except queue.Empty:
                return
            if request is not None and request.reply is not None:
                request.reply.set_exception(
                    InvalidOperationException(
                        "reload devices", "the reload coordinator was stopped"
                    )
                )

    def _reload(self) -> int:
        logger.info("Reloading device list")
        inventory = self.switchbot_client.list_devices()
        count = self.label_cache.record_inventory(inventory.all_devices())
        logger.info(
            f"Reloaded devices: {len(inventory.devices)} physical, "
            f"{len(inventory.infrared_remotes)} infrared"
        )
        return count
