"""Data models for hostpanel."""

from dataclasses import dataclass

UNAVAILABLE = "unavailable"
NOT_SAMPLED = "not yet sampled"
NO_ADDRESSES = "no addresses found"
NO_DISKS = "no disks found"
NO_INTERFACES = "no active interfaces found"

GIB = 1024**3
MIB = 1024**2


@dataclass(slots=True, frozen=True)
class Placeholder:
    """Stand-in entry for a list-valued metric that has nothing to show."""

    text: str

    @property
    def label(self) -> str:
        return self.text


@dataclass(slots=True, frozen=True)
class AddressEntry:
    """An IPv4 address and the interface that owns it."""

    address: str
    interface: str

    @property
    def label(self) -> str:
        return f"{self.address} ({self.interface})"


@dataclass(slots=True, frozen=True)
class DiskUsage:
    """Usage of one mounted partition."""

    mountpoint: str
    total_bytes: int
    used_bytes: int
    used_percent: float

    @property
    def label(self) -> str:
        return (
            f"{self.mountpoint}: {self.used_bytes / GIB:.1f} GB / "
            f"{self.total_bytes / GIB:.1f} GB ({int(self.used_percent)}% used)"
        )


@dataclass(slots=True, frozen=True)
class InterfaceTraffic:
    """Cumulative and per-second traffic of one network interface."""

    name: str
    bytes_sent: int
    bytes_recv: int
    sent_rate: float  # Bytes per second since the previous cycle
    recv_rate: float

    @property
    def label(self) -> str:
        return (
            f"{self.name}: ↑ {self.bytes_sent / MIB:.2f} MB, "
            f"↓ {self.bytes_recv / MIB:.2f} MB "
            f"({self.sent_rate / 1024:.1f} KB/s up, {self.recv_rate / 1024:.1f} KB/s down)"
        )


AddressField = tuple[AddressEntry | Placeholder, ...]
DiskField = tuple[DiskUsage | Placeholder, ...]
InterfaceField = tuple[InterfaceTraffic | Placeholder, ...]


@dataclass(slots=True, frozen=True)
class Snapshot:
    """
    Immutable bundle of every metric sampled in one collection cycle.

    Fields that could not be measured hold a sentinel (``UNAVAILABLE`` for
    scalars, a ``Placeholder`` entry for sequences) rather than ``None``.
    """

    hostname: str
    os_info: str
    cpu_model: str
    cpu_core_count: int | str
    cpu_clock_ghz: float | str
    cpu_usage_percent: float | str
    memory_total_bytes: int
    memory_used_bytes: int
    memory_used_percent: float | str
    gpu_description: str
    uptime_seconds: float | str
    ip_addresses: AddressField
    disks: DiskField
    interfaces: InterfaceField
    cpu_temp_c: float | str
    gpu_temp_c: float | str
    sampled_at: float = 0.0

    @classmethod
    def not_sampled(cls) -> "Snapshot":
        """Build the snapshot shown before the first cycle completes."""
        pending = (Placeholder(NOT_SAMPLED),)
        return cls(
            hostname=NOT_SAMPLED,
            os_info=NOT_SAMPLED,
            cpu_model=NOT_SAMPLED,
            cpu_core_count=NOT_SAMPLED,
            cpu_clock_ghz=NOT_SAMPLED,
            cpu_usage_percent=NOT_SAMPLED,
            memory_total_bytes=0,
            memory_used_bytes=0,
            memory_used_percent=NOT_SAMPLED,
            gpu_description=NOT_SAMPLED,
            uptime_seconds=NOT_SAMPLED,
            ip_addresses=pending,
            disks=pending,
            interfaces=pending,
            cpu_temp_c=NOT_SAMPLED,
            gpu_temp_c=NOT_SAMPLED,
        )
