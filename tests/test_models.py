"""Tests for hostpanel data models."""

import dataclasses

import pytest

from hostpanel.models import (
    NOT_SAMPLED,
    AddressEntry,
    DiskUsage,
    InterfaceTraffic,
    Placeholder,
    Snapshot,
)


def test_snapshot_is_frozen(make_snapshot):
    """Test that Snapshot is immutable (frozen)."""
    snapshot = make_snapshot()

    with pytest.raises(dataclasses.FrozenInstanceError):
        snapshot.cpu_usage_percent = 99.0


def test_snapshot_uses_slots(make_snapshot):
    """Test that Snapshot uses __slots__ for memory efficiency."""
    snapshot = make_snapshot()

    # Slots-based dataclasses don't have __dict__
    assert not hasattr(snapshot, "__dict__")


def test_not_sampled_snapshot_has_no_blank_fields():
    """Test the startup snapshot fills every field with a placeholder."""
    snapshot = Snapshot.not_sampled()

    for field in dataclasses.fields(snapshot):
        value = getattr(snapshot, field.name)
        assert value is not None
        if isinstance(value, str):
            assert value == NOT_SAMPLED
        if isinstance(value, tuple):
            assert value == (Placeholder(NOT_SAMPLED),)

    assert snapshot.cpu_core_count == NOT_SAMPLED
    assert snapshot.memory_total_bytes == 0
    assert snapshot.sampled_at == 0.0


def test_address_entry_label():
    """Test addresses are labelled with their interface."""
    assert AddressEntry("10.0.0.5", "eth0").label == "10.0.0.5 (eth0)"


def test_placeholder_label():
    """Test placeholders render their own text."""
    assert Placeholder("no addresses found").label == "no addresses found"


def test_disk_usage_label():
    """Test disk usage label shows used/total and percentage."""
    disk = DiskUsage("/", total_bytes=100 * 1024**3, used_bytes=25 * 1024**3, used_percent=25.0)

    assert disk.label == "/: 25.0 GB / 100.0 GB (25% used)"


def test_interface_traffic_label():
    """Test interface label shows totals and rates."""
    traffic = InterfaceTraffic(
        "eth0",
        bytes_sent=1024**2,
        bytes_recv=3 * 1024**2,
        sent_rate=2048.0,
        recv_rate=512.0,
    )

    assert traffic.label == "eth0: ↑ 1.00 MB, ↓ 3.00 MB (2.0 KB/s up, 0.5 KB/s down)"
