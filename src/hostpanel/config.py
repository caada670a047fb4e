"""Fixed settings for hostpanel.

The refresh cadence and metric set are not user-configurable; the values live
here so the app and tests can share them. Only the log location and level can
be changed, from the command line.
"""

from dataclasses import dataclass
from pathlib import Path

DEFAULT_LOG_DIR = Path.home() / ".config" / "hostpanel" / "logs"


@dataclass(slots=True, frozen=True)
class Settings:
    """Timing constants and banner text for one dashboard run."""

    refresh_interval: float = 0.9  # Seconds between sampling cycles
    render_interval: float = 0.5  # Seconds between redraws from the store
    cpu_sample_window: float = 0.1  # Seconds cpu_percent() blocks for
    gpu_probe_timeout: float = 3.0
    stop_timeout: float = 5.0  # Upper bound on joining the scheduler thread
    banner: str = "HOST SERVER"
    tagline: str = "Virtual Platform"
    tools_hint: str = "Download tools to manage this host from:"


DEFAULT_SETTINGS = Settings()
