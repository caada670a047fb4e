"""hostpanel - Main Textual application."""

import argparse
import logging
import sys
from pathlib import Path

from textual.app import App, ComposeResult
from textual.binding import Binding
from textual.containers import Horizontal
from textual.css.query import NoMatches
from textual.widgets import Footer, Static

from hostpanel.collector import SnapshotCollector
from hostpanel.config import DEFAULT_SETTINGS, Settings
from hostpanel.logging_setup import configure_logging
from hostpanel.models import Snapshot
from hostpanel.render import render
from hostpanel.scheduler import SnapshotScheduler
from hostpanel.store import SnapshotStore

logger = logging.getLogger(__name__)

PANEL_IDS = ("header", "stats", "addresses", "resources")


class Panel(Static):
    """A plain-text dashboard region that remembers what it last drew."""

    DEFAULT_CSS = """
    Panel {
        height: auto;
        padding: 1 2;
    }
    """

    def __init__(self, **kwargs) -> None:
        """Initialize Panel."""
        super().__init__("", markup=False, **kwargs)
        self.drawn_text = ""

    def draw(self, text: str) -> None:
        """Replace the panel contents."""
        self.drawn_text = text
        self.update(text)


class HostPanelApp(App):
    """
    Main hostpanel application.

    Owns the snapshot store, the collector and the background scheduler.
    A Textual interval timer redraws the panels from whatever the store holds,
    so the event loop never waits on a collection.
    """

    TITLE = "hostpanel"
    SUB_TITLE = "Host Metrics Dashboard"

    CSS = """
    Screen {
        layout: vertical;
    }

    #top {
        height: auto;
        background: $surface;
    }

    #header {
        width: 2fr;
    }

    #stats {
        width: 1fr;
        text-align: right;
    }

    #addresses {
        background: $panel;
    }
    """

    BINDINGS = [
        Binding("escape", "request_stop", "Quit", priority=True),
        Binding("ctrl+c", "request_stop", "Quit", show=False, priority=True),
    ]

    def __init__(
        self,
        collector: SnapshotCollector | None = None,
        settings: Settings = DEFAULT_SETTINGS,
    ) -> None:
        """
        Initialize the HostPanelApp.

        Args:
            collector: Snapshot source. A psutil-backed collector is built
                from ``settings`` when omitted.
            settings: Timing constants and banner text.
        """
        super().__init__()
        self._dashboard_settings = settings
        self._snapshot_store = SnapshotStore()
        self._collector = (
            collector
            if collector is not None
            else SnapshotCollector(
                cpu_sample_window=settings.cpu_sample_window,
                gpu_probe_timeout=settings.gpu_probe_timeout,
            )
        )
        self._scheduler = SnapshotScheduler(
            self._collector,
            self._snapshot_store,
            interval=settings.refresh_interval,
        )
        self._last_drawn: Snapshot | None = None
        self._stopping = False
        self.stop_requests = 0

    @property
    def store(self) -> SnapshotStore:
        return self._snapshot_store

    @property
    def scheduler(self) -> SnapshotScheduler:
        return self._scheduler

    def compose(self) -> ComposeResult:
        """Compose the application layout."""
        yield Horizontal(Panel(id="header"), Panel(id="stats"), id="top")
        yield Panel(id="addresses")
        yield Panel(id="resources")
        yield Footer()

    def on_mount(self) -> None:
        """Start sampling and the redraw timer once the app is mounted."""
        self._scheduler.start()
        self._refresh_from_store()
        self.set_interval(self._dashboard_settings.render_interval, self._refresh_from_store)

    def on_unmount(self) -> None:
        """Make sure the sampling thread is told to stop when the app goes away."""
        self._scheduler.request_stop()

    def shutdown(self) -> None:
        """Wait for the sampling thread. Call once the event loop has finished."""
        self._scheduler.stop(timeout=self._dashboard_settings.stop_timeout)

    def _refresh_from_store(self) -> None:
        """Redraw if a newer snapshot has been published."""
        snapshot = self._snapshot_store.get()
        if snapshot is self._last_drawn:
            return
        self.redraw(snapshot)

    def redraw(self, snapshot: Snapshot) -> None:
        """Draw every panel from one snapshot."""
        panels = render(snapshot, self._dashboard_settings)
        try:
            for panel_id in PANEL_IDS:
                self.query_one(f"#{panel_id}", Panel).draw(getattr(panels, panel_id))
        except NoMatches:
            # Screen is being torn down
            return
        self._last_drawn = snapshot

    def panel_text(self, panel_id: str) -> str:
        """Return the text last drawn into a panel."""
        return self.query_one(f"#{panel_id}", Panel).drawn_text

    def action_request_stop(self) -> None:
        """Stop sampling and exit. Only the first request has any effect."""
        if self._stopping:
            return
        self._stopping = True
        self.stop_requests += 1
        logger.info("stop requested")
        # Never join here: a slow probe would freeze the event loop
        self._scheduler.request_stop()
        self.exit()


def main(argv: list[str] | None = None) -> int:
    """Entry point for the hostpanel application."""
    parser = argparse.ArgumentParser(
        prog="hostpanel",
        description="Live terminal dashboard of host metrics. Press Esc or Ctrl+C to quit.",
    )
    parser.add_argument(
        "--log-file",
        type=Path,
        default=None,
        metavar="PATH",
        help="Write logs here instead of ~/.config/hostpanel/logs/hostpanel.log",
    )
    parser.add_argument("--debug", action="store_true", help="Log probe failures")
    args = parser.parse_args(argv)

    configure_logging(args.log_file, level=logging.DEBUG if args.debug else logging.INFO)

    app = HostPanelApp()
    try:
        app.run()
    except Exception as exc:
        logger.exception("render surface failed")
        print(f"hostpanel: {exc}", file=sys.stderr)
        return 1
    finally:
        app.shutdown()
    return app.return_code or 0


if __name__ == "__main__":
    raise SystemExit(main())
