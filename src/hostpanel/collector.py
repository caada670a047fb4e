"""Snapshot collection for hostpanel."""

import ipaddress
import logging
import platform
import socket
import subprocess
import time
from collections.abc import Callable
from pathlib import Path
from typing import TypeVar

import psutil

from hostpanel.models import (
    GIB,
    NO_ADDRESSES,
    NO_DISKS,
    NO_INTERFACES,
    UNAVAILABLE,
    AddressEntry,
    AddressField,
    DiskField,
    DiskUsage,
    InterfaceField,
    InterfaceTraffic,
    Placeholder,
    Snapshot,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")

CPUINFO_PATH = Path("/proc/cpuinfo")
NVIDIA_SMI_COMMAND = [
    "nvidia-smi",
    "--query-gpu=name,temperature.gpu",
    "--format=csv,noheader,nounits",
]
# Checked in order before falling back to whichever chip reports first
CPU_SENSOR_CHIPS = ("coretemp", "k10temp", "cpu_thermal", "acpitz")


def _percent(value: float) -> float:
    """Clamp a percentage into 0-100."""
    return min(100.0, max(0.0, float(value)))


def _is_loopback_interface(stats: object) -> bool:
    flags = getattr(stats, "flags", "") or ""
    return "loopback" in flags.split(",")


def parse_nvidia_smi(output: str) -> tuple[str, float | str] | None:
    """
    Parse ``nvidia-smi --query-gpu=name,temperature.gpu`` CSV output.

    Returns the first GPU's name and temperature, or None if no line parses.
    The temperature is ``UNAVAILABLE`` when the driver reports it as such.
    """
    for line in output.splitlines():
        if not line.strip():
            continue
        parts = [p.strip() for p in line.split(",")]
        if len(parts) < 2 or not parts[0]:
            continue
        try:
            temperature: float | str = float(parts[1])
        except ValueError:
            temperature = UNAVAILABLE
        return parts[0], temperature
    return None


class SnapshotCollector:
    """
    Samples every dashboard metric in one pass.

    Each probe is guarded separately: a probe that raises is logged at DEBUG
    and its fields fall back to sentinels, while the other probes carry on.
    ``collect()`` therefore never raises.
    """

    def __init__(
        self,
        cpu_sample_window: float = 0.1,
        gpu_probe_timeout: float = 3.0,
        system: str | None = None,
        clock: Callable[[], float] = time.monotonic,
    ) -> None:
        """
        Initialize the SnapshotCollector.

        Args:
            cpu_sample_window: Seconds to sample CPU usage over.
            gpu_probe_timeout: Seconds before nvidia-smi is abandoned.
            system: Platform name as returned by ``platform.system()``.
                Detected when omitted.
            clock: Monotonic clock used for interface throughput rates.
        """
        self._cpu_sample_window = cpu_sample_window
        self._gpu_probe_timeout = gpu_probe_timeout
        self._system = system if system is not None else platform.system()
        self._clock = clock
        self._prev_counters: dict[str, tuple[int, int]] = {}
        self._prev_time: float | None = None

    def collect(self) -> Snapshot:
        """Collect a complete snapshot of the current host state."""
        hostname = self._guard("hostname", self._read_hostname, UNAVAILABLE)
        os_info = self._guard("os", self._read_os_info, UNAVAILABLE)
        cpu_model = self._guard("cpu model", self._read_cpu_model, UNAVAILABLE)
        cpu_cores = self._guard("cpu cores", self._read_cpu_cores, UNAVAILABLE)
        cpu_clock = self._guard("cpu clock", self._read_cpu_clock, UNAVAILABLE)
        cpu_usage = self._guard("cpu usage", self._read_cpu_usage, UNAVAILABLE)
        mem_total, mem_used, mem_percent = self._guard(
            "memory", self._read_memory, (0, 0, UNAVAILABLE)
        )
        uptime = self._guard("uptime", self._read_uptime, UNAVAILABLE)
        addresses = self._guard(
            "addresses", self._read_addresses, (Placeholder(UNAVAILABLE),)
        )
        disks = self._guard("disks", self._read_disks, (Placeholder(UNAVAILABLE),))
        interfaces = self._guard(
            "interfaces", self._read_interfaces, (Placeholder(UNAVAILABLE),)
        )
        cpu_temp = self._guard("cpu temperature", self._read_cpu_temp, UNAVAILABLE)
        gpu_description, gpu_temp = self._guard(
            "gpu", self._read_gpu, (UNAVAILABLE, UNAVAILABLE)
        )

        return Snapshot(
            hostname=hostname,
            os_info=os_info,
            cpu_model=cpu_model,
            cpu_core_count=cpu_cores,
            cpu_clock_ghz=cpu_clock,
            cpu_usage_percent=cpu_usage,
            memory_total_bytes=mem_total,
            memory_used_bytes=mem_used,
            memory_used_percent=mem_percent,
            gpu_description=gpu_description,
            uptime_seconds=uptime,
            ip_addresses=addresses,
            disks=disks,
            interfaces=interfaces,
            cpu_temp_c=cpu_temp,
            gpu_temp_c=gpu_temp,
            sampled_at=time.time(),
        )

    def _guard(self, name: str, probe: Callable[[], T], fallback: T) -> T:
        """Run one probe, returning ``fallback`` if it raises."""
        try:
            return probe()
        except Exception:
            logger.debug("%s probe failed", name, exc_info=True)
            return fallback

    def _read_hostname(self) -> str:
        return platform.node() or UNAVAILABLE

    def _read_os_info(self) -> str:
        release = platform.release()
        return f"{self._system} {release}".strip() or UNAVAILABLE

    def _read_cpu_model(self) -> str:
        """Read the CPU model name from /proc/cpuinfo or the platform module."""
        if self._system == "Linux":
            for line in CPUINFO_PATH.read_text(encoding="utf-8", errors="ignore").splitlines():
                if line.startswith("model name"):
                    _, _, model = line.partition(":")
                    return model.strip() or UNAVAILABLE
            return UNAVAILABLE
        return platform.processor() or UNAVAILABLE

    def _read_cpu_cores(self) -> int | str:
        return psutil.cpu_count(logical=True) or UNAVAILABLE

    def _read_cpu_clock(self) -> float | str:
        freq = psutil.cpu_freq()
        if freq is None or freq.current <= 0:
            return UNAVAILABLE
        return float(freq.current) / 1000.0

    def _read_cpu_usage(self) -> float:
        # Blocks for the sampling window
        return _percent(psutil.cpu_percent(interval=self._cpu_sample_window))

    def _read_memory(self) -> tuple[int, int, float]:
        mem = psutil.virtual_memory()
        return int(mem.total), int(mem.used), _percent(mem.percent)

    def _read_uptime(self) -> float:
        return max(0.0, time.time() - psutil.boot_time())

    def _read_addresses(self) -> AddressField:
        """
        List non-loopback IPv4 addresses tagged with their interface name.

        Interfaces reported as down or flagged loopback are skipped when
        interface stats are available.
        """
        try:
            stats = psutil.net_if_stats()
        except Exception:
            logger.debug("interface stats unavailable", exc_info=True)
            stats = {}

        entries: list[AddressEntry | Placeholder] = []
        for name, addrs in psutil.net_if_addrs().items():
            iface_stats = stats.get(name)
            if iface_stats is not None and (
                not iface_stats.isup or _is_loopback_interface(iface_stats)
            ):
                continue
            for addr in addrs:
                if addr.family != socket.AF_INET:
                    continue
                try:
                    ip = ipaddress.IPv4Address(addr.address)
                except ValueError:
                    continue
                if ip.is_loopback:
                    continue
                entries.append(AddressEntry(address=str(ip), interface=name))

        if not entries:
            return (Placeholder(NO_ADDRESSES),)
        return tuple(entries)

    def _read_disks(self) -> DiskField:
        """Usage of every mounted partition of at least 1 GiB."""
        entries: list[DiskUsage | Placeholder] = []
        for partition in psutil.disk_partitions(all=False):
            try:
                usage = psutil.disk_usage(partition.mountpoint)
            except OSError:
                # Unreadable mount points (permissions, stale mounts)
                continue
            if usage.total < GIB:
                continue
            entries.append(
                DiskUsage(
                    mountpoint=partition.mountpoint,
                    total_bytes=int(usage.total),
                    used_bytes=int(usage.used),
                    used_percent=_percent(usage.percent),
                )
            )

        if not entries:
            return (Placeholder(NO_DISKS),)
        return tuple(entries)

    def _read_interfaces(self) -> InterfaceField:
        """
        Traffic of every active non-loopback interface.

        Rates are derived from the counters seen on the previous call and are
        zero on the first call.
        """
        now = self._clock()
        counters = psutil.net_io_counters(pernic=True)
        stats = psutil.net_if_stats()
        elapsed = now - self._prev_time if self._prev_time is not None else 0.0

        entries: list[InterfaceTraffic | Placeholder] = []
        current: dict[str, tuple[int, int]] = {}
        for name, io in counters.items():
            current[name] = (io.bytes_sent, io.bytes_recv)
            iface_stats = stats.get(name)
            if iface_stats is None or not iface_stats.isup:
                continue
            if _is_loopback_interface(iface_stats):
                continue

            sent_rate = recv_rate = 0.0
            previous = self._prev_counters.get(name)
            if previous is not None and elapsed > 0:
                sent_rate = max(0.0, (io.bytes_sent - previous[0]) / elapsed)
                recv_rate = max(0.0, (io.bytes_recv - previous[1]) / elapsed)

            entries.append(
                InterfaceTraffic(
                    name=name,
                    bytes_sent=int(io.bytes_sent),
                    bytes_recv=int(io.bytes_recv),
                    sent_rate=sent_rate,
                    recv_rate=recv_rate,
                )
            )

        self._prev_counters = current
        self._prev_time = now

        if not entries:
            return (Placeholder(NO_INTERFACES),)
        return tuple(entries)

    def _read_cpu_temp(self) -> float | str:
        temps = psutil.sensors_temperatures()
        if not temps:
            return UNAVAILABLE
        for chip in CPU_SENSOR_CHIPS:
            if temps.get(chip):
                return float(temps[chip][0].current)
        for entries in temps.values():
            if entries:
                return float(entries[0].current)
        return UNAVAILABLE

    def _read_gpu(self) -> tuple[str, float | str]:
        """
        Query the GPU name and temperature.

        nvidia-smi is tried once per cycle on Linux and Windows; any failure
        leaves both fields unavailable until the next cycle.
        """
        if self._system == "Darwin":
            return "Apple GPU", UNAVAILABLE
        if self._system not in ("Linux", "Windows"):
            return UNAVAILABLE, UNAVAILABLE

        try:
            result = subprocess.run(
                NVIDIA_SMI_COMMAND,
                capture_output=True,
                text=True,
                timeout=self._gpu_probe_timeout,
                check=False,
            )
        except (OSError, subprocess.TimeoutExpired) as exc:
            logger.debug("nvidia-smi unavailable: %s", exc)
            return UNAVAILABLE, UNAVAILABLE

        if result.returncode != 0:
            logger.debug("nvidia-smi exited with %d", result.returncode)
            return UNAVAILABLE, UNAVAILABLE

        parsed = parse_nvidia_smi(result.stdout)
        if parsed is None:
            logger.debug("could not parse nvidia-smi output %r", result.stdout)
            return UNAVAILABLE, UNAVAILABLE
        return parsed
