"""Text formatting of snapshots into the dashboard panels.

Everything here is pure: no I/O and no metric collection. Unavailable values
show up as their sentinel text.
"""

from dataclasses import dataclass

from hostpanel.config import DEFAULT_SETTINGS, Settings
from hostpanel.models import GIB, Snapshot


@dataclass(slots=True, frozen=True)
class PanelText:
    """Text for each dashboard region, drawn from a single snapshot."""

    header: str
    stats: str
    addresses: str
    resources: str


def format_bytes(size: float) -> str:
    """Format bytes as human-readable string."""
    for unit in ["B", "K", "M", "G", "T"]:
        if size < 1024:
            return f"{size:.1f}{unit}" if unit != "B" else f"{int(size)}{unit}"
        size = size / 1024
    return f"{size:.1f}P"


def format_uptime(uptime: float | str) -> str:
    """Format seconds since boot, passing sentinels through."""
    if isinstance(uptime, str):
        return uptime
    days = int(uptime // 86400)
    hours = int((uptime % 86400) // 3600)
    minutes = int((uptime % 3600) // 60)
    seconds = int(uptime % 60)
    if days > 0:
        return f"{days} days, {hours:02d}:{minutes:02d}:{seconds:02d}"
    return f"{hours:02d}:{minutes:02d}:{seconds:02d}"


def format_percent(value: float | str) -> str:
    if isinstance(value, str):
        return value
    return f"{int(value):02d}%"


def format_temperature(value: float | str) -> str:
    if isinstance(value, str):
        return value
    return f"{value:.0f}°C"


def format_cpu(snapshot: Snapshot) -> str:
    """Describe the CPU as ``<cores> x <model> @ <clock> GHz``.

    Parts that could not be measured show their sentinel in place. When
    nothing at all is known the line is just that sentinel.
    """
    cores, model, clock = snapshot.cpu_core_count, snapshot.cpu_model, snapshot.cpu_clock_ghz
    if isinstance(cores, str) and cores == model == clock:
        return model
    if not isinstance(clock, str):
        clock = f"{clock:.2f} GHz"
    return f"{cores} x {model} @ {clock}"


def format_memory(snapshot: Snapshot) -> str:
    if isinstance(snapshot.memory_used_percent, str):
        return snapshot.memory_used_percent
    used = format_bytes(snapshot.memory_used_bytes)
    return f"{snapshot.memory_total_bytes / GIB:.1f} GB System Memory ({used} used)"


def render_header(snapshot: Snapshot, settings: Settings = DEFAULT_SETTINGS) -> str:
    """Host identity, CPU, memory, GPU and uptime."""
    lines = [
        settings.banner,
        settings.tagline,
        "",
        f"Host: {snapshot.hostname} ({snapshot.os_info})",
        f"CPU: {format_cpu(snapshot)}",
        f"Memory: {format_memory(snapshot)}",
        f"GPU: {snapshot.gpu_description}",
        f"Uptime: {format_uptime(snapshot.uptime_seconds)}",
    ]
    return "\n".join(lines)


def render_stats(snapshot: Snapshot) -> str:
    """Live usage percentages and temperatures."""
    lines = [
        f"CPU Usage: {format_percent(snapshot.cpu_usage_percent)}",
        f"RAM Usage: {format_percent(snapshot.memory_used_percent)}",
        f"CPU Temp: {format_temperature(snapshot.cpu_temp_c)}",
        f"GPU Temp: {format_temperature(snapshot.gpu_temp_c)}",
    ]
    return "\n".join(lines)


def render_addresses(snapshot: Snapshot, settings: Settings = DEFAULT_SETTINGS) -> str:
    lines = [settings.tools_hint]
    lines.extend(entry.label for entry in snapshot.ip_addresses)
    return "\n".join(lines)


def render_resources(snapshot: Snapshot) -> str:
    """Disk usage followed by network interface traffic."""
    lines = ["Disks:"]
    lines.extend(f"  {entry.label}" for entry in snapshot.disks)
    lines.append("Network:")
    lines.extend(f"  {entry.label}" for entry in snapshot.interfaces)
    return "\n".join(lines)


def render(snapshot: Snapshot, settings: Settings = DEFAULT_SETTINGS) -> PanelText:
    """Format every panel from the same snapshot."""
    return PanelText(
        header=render_header(snapshot, settings),
        stats=render_stats(snapshot),
        addresses=render_addresses(snapshot, settings),
        resources=render_resources(snapshot),
    )
