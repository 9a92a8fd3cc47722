"""Tests for ReloadCoordinator."""

import os
import signal
import threading
from collections.abc import Generator

import pytest

from switchbot_exporter.exceptions import InvalidOperationException, SwitchBotApiException
from switchbot_exporter.schemas.switchbot import Device
from switchbot_exporter.services.device_label_cache import DeviceLabelCache
from switchbot_exporter.services.reload_coordinator import ReloadCoordinator
from switchbot_exporter.utils.lifecycle_coordinator import LifecycleCoordinator
from tests.testing_utils import (
    FakeSwitchBotClient,
    TestLifecycleCoordinator,
    build_default_client,
    wait_for,
)


@pytest.fixture
def fake_client() -> FakeSwitchBotClient:
    return build_default_client()


@pytest.fixture
def lifecycle_coordinator() -> TestLifecycleCoordinator:
    return TestLifecycleCoordinator()


@pytest.fixture
def coordinator(
    fake_client: FakeSwitchBotClient, lifecycle_coordinator: TestLifecycleCoordinator
) -> Generator[ReloadCoordinator, None, None]:
    coordinator = ReloadCoordinator(
        switchbot_client=fake_client,
        label_cache=DeviceLabelCache(),
        lifecycle_coordinator=lifecycle_coordinator,
    )
    yield coordinator
    coordinator.stop()


class TestStart:
    def test_start_loads_inventory_synchronously(self, coordinator, fake_client):
        count = coordinator.start()

        assert count == 5
        assert fake_client.list_calls == 1
        assert coordinator.is_loaded
        assert coordinator.is_running
        assert ("ir-1", "TV") in coordinator.label_cache.snapshot()

    def test_start_failure_propagates_and_does_not_start_worker(self, coordinator, fake_client):
        fake_client.list_error = SwitchBotApiException("unauthorized")

        with pytest.raises(SwitchBotApiException):
            coordinator.start()

        assert not coordinator.is_loaded
        assert not coordinator.is_running
        assert len(coordinator.label_cache) == 0


class TestRequestReload:
    def test_request_reload_returns_device_count(self, coordinator, fake_client):
        coordinator.start()
        fake_client.devices.append(
            Device(device_id="hub-1", device_name="Hub", device_type="Hub 2")
        )

        assert coordinator.request_reload() == 6
        assert ("hub-1", "Hub") in coordinator.label_cache.snapshot()

    def test_request_reload_failure_is_reported_and_cache_kept(self, coordinator, fake_client):
        coordinator.start()
        before = coordinator.label_cache.snapshot()
        fake_client.list_error = SwitchBotApiException("rate limited")

        with pytest.raises(SwitchBotApiException, match="rate limited"):
            coordinator.request_reload()

        assert coordinator.label_cache.snapshot() == before

    def test_worker_survives_a_failed_reload(self, coordinator, fake_client):
        coordinator.start()
        fake_client.list_error = SwitchBotApiException("rate limited")
        with pytest.raises(SwitchBotApiException):
            coordinator.request_reload()

        fake_client.list_error = None

        assert coordinator.request_reload() == 5

    def test_repeated_reloads_leave_roster_unchanged(self, coordinator):
        coordinator.start()
        before = coordinator.label_cache.snapshot()

        coordinator.request_reload()
        coordinator.request_reload()

        assert coordinator.label_cache.snapshot() == before

    def test_removed_devices_are_not_pruned(self, coordinator, fake_client):
        coordinator.start()
        fake_client.devices = [d for d in fake_client.devices if d.device_id != "meter-1"]

        coordinator.request_reload()

        assert ("meter-1", "Living Room") in coordinator.label_cache.snapshot()

    def test_request_reload_before_start_is_rejected(self, coordinator):
        with pytest.raises(InvalidOperationException):
            coordinator.request_reload()

    def test_request_reload_after_stop_is_rejected(self, coordinator):
        coordinator.start()
        coordinator.stop()

        with pytest.raises(InvalidOperationException):
            coordinator.request_reload()

    def test_concurrent_reloads_never_overlap(self, coordinator, fake_client):
        coordinator.start()
        fake_client.list_delay = 0.1
        results: list[int] = []
        barrier = threading.Barrier(3)

        def reload() -> None:
            barrier.wait()
            results.append(coordinator.request_reload())

        threads = [threading.Thread(target=reload) for _ in range(3)]
        for thread in threads:
            thread.start()
        for thread in threads:
            thread.join(timeout=10)

        assert results == [5, 5, 5]
        intervals = sorted(fake_client.list_intervals[1:])
        assert len(intervals) == 3
        for (_, previous_end), (next_start, _) in zip(intervals, intervals[1:], strict=False):
            assert next_start >= previous_end


class TestTriggers:
    def test_trigger_reload_is_fire_and_forget(self, coordinator, fake_client):
        coordinator.start()
        fake_client.devices.append(
            Device(device_id="hub-1", device_name="Hub", device_type="Hub 2")
        )

        coordinator.trigger_reload()

        assert wait_for(lambda: ("hub-1", "Hub") in coordinator.label_cache.snapshot())

    def test_failed_triggered_reload_is_absorbed(self, coordinator, fake_client):
        coordinator.start()
        fake_client.list_error = SwitchBotApiException("rate limited")

        coordinator.trigger_reload()
        assert wait_for(lambda: fake_client.list_calls == 2)

        fake_client.list_error = None
        assert coordinator.request_reload() == 5

    def test_sighup_handler_triggers_reload(self, coordinator, fake_client):
        coordinator.start()
        fake_client.devices.append(
            Device(device_id="hub-1", device_name="Hub", device_type="Hub 2")
        )

        coordinator._handle_sighup(signal.SIGHUP, None)

        assert wait_for(lambda: ("hub-1", "Hub") in coordinator.label_cache.snapshot())

    @pytest.mark.skipif(not hasattr(signal, "SIGHUP"), reason="SIGHUP not available")
    def test_initialize_installs_sighup_handler(self, coordinator, fake_client):
        previous = signal.getsignal(signal.SIGHUP)
        try:
            coordinator.initialize()
            coordinator.start()

            os.kill(os.getpid(), signal.SIGHUP)

            assert wait_for(lambda: fake_client.list_calls == 2)
        finally:
            signal.signal(signal.SIGHUP, previous)


class TestShutdown:
    def test_shutdown_stops_worker(self, coordinator, lifecycle_coordinator):
        coordinator.start()

        lifecycle_coordinator.simulate_full_shutdown()

        assert not coordinator.is_running

    def test_queued_reload_finishes_before_shutdown_completes(self, fake_client):
        lifecycle_coordinator = LifecycleCoordinator(graceful_shutdown_timeout=5)
        coordinator = ReloadCoordinator(
            switchbot_client=fake_client,
            label_cache=DeviceLabelCache(),
            lifecycle_coordinator=lifecycle_coordinator,
        )
        coordinator.start()
        fake_client.list_delay = 0.2
        fake_client.devices.append(
            Device(device_id="hub-1", device_name="Hub", device_type="Hub 2")
        )

        coordinator.trigger_reload()
        lifecycle_coordinator.shutdown()

        assert not coordinator.is_running
        assert fake_client.list_calls == 2
        assert ("hub-1", "Hub") in coordinator.label_cache.snapshot()

    def test_stop_reports_busy_worker(self, coordinator, fake_client):
        coordinator.start()
        fake_client.list_delay = 0.5
        coordinator.trigger_reload()

        assert coordinator.stop(timeout=0.05) is False
        assert not coordinator.is_running

    def test_stop_is_idempotent(self, coordinator):
        coordinator.start()

        assert coordinator.stop() is True
        assert coordinator.stop() is True
