"""Shared fixtures for hostpanel tests."""

import dataclasses
from collections.abc import Callable

import psutil
import pytest

from hostpanel.models import AddressEntry, DiskUsage, InterfaceTraffic, Snapshot


def build_snapshot(**overrides) -> Snapshot:
    """Build a fully populated snapshot, overriding any fields given."""
    fields = dict(
        hostname="testhost",
        os_info="Linux 6.1.0",
        cpu_model="Test CPU",
        cpu_core_count=8,
        cpu_clock_ghz=3.2,
        cpu_usage_percent=42.0,
        memory_total_bytes=16 * 1024**3,
        memory_used_bytes=12 * 1024**3,
        memory_used_percent=77.0,
        gpu_description="Test GPU",
        uptime_seconds=3600.0,
        ip_addresses=(AddressEntry("10.0.0.5", "eth0"),),
        disks=(DiskUsage("/", 100 * 1024**3, 40 * 1024**3, 40.0),),
        interfaces=(InterfaceTraffic("eth0", 1024**2, 2 * 1024**2, 0.0, 0.0),),
        cpu_temp_c=55.0,
        gpu_temp_c=61.0,
        sampled_at=1.0,
    )
    fields.update(overrides)
    return Snapshot(**fields)


def assert_well_formed(snapshot: Snapshot) -> None:
    """Every field holds an in-domain value or a non-empty sentinel."""
    for field in dataclasses.fields(snapshot):
        value = getattr(snapshot, field.name)
        assert value is not None, field.name
        if isinstance(value, str):
            assert value, field.name
        if isinstance(value, tuple):
            assert len(value) >= 1, field.name
            for entry in value:
                assert entry.label, field.name

    for name in ("cpu_usage_percent", "memory_used_percent"):
        value = getattr(snapshot, name)
        if not isinstance(value, str):
            assert 0.0 <= value <= 100.0
    for name in ("cpu_core_count", "cpu_clock_ghz"):
        value = getattr(snapshot, name)
        if not isinstance(value, str):
            assert value > 0, name
    assert snapshot.memory_used_bytes >= 0
    assert snapshot.memory_total_bytes >= 0


def get_current_memory_mb() -> float:
    """Resident set size of this test process in MB."""
    return psutil.Process().memory_info().rss / (1024 * 1024)


class StubCollector:
    """Collector double that returns a fixed snapshot and counts calls."""

    def __init__(self, snapshot: Snapshot | None = None) -> None:
        self.snapshot = snapshot if snapshot is not None else build_snapshot()
        self.calls = 0

    def collect(self) -> Snapshot:
        self.calls += 1
        return self.snapshot


@pytest.fixture
def make_snapshot() -> Callable[..., Snapshot]:
    """Factory for fully populated snapshots."""
    return build_snapshot


@pytest.fixture
def stub_collector() -> StubCollector:
    return StubCollector()
