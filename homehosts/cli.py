import os
import signal
import sys
import time
from dataclasses import dataclass
from pathlib import Path
from typing import Optional

import click

from . import config
from .errors import ConfigError, HostsFileError, MarkerInconsistency, ProbeError, ServiceError
from .hosts import contains_end_marker, contains_managed_region, find_managed_region_bounds, read_lines
from .logging_config import setup_logging
from .network import get_probe
from .service import ServiceManager, get_service, program_arguments
from .watcher import apply_once, decide, restore_once, run_forever


def signal_handler(signum, frame):
    """Handle interrupt signals gracefully."""
    signal_name = signal.Signals(signum).name
    click.echo(f"\n\nReceived {signal_name}. Exiting gracefully...")
    sys.exit(0)


signal.signal(signal.SIGINT, signal_handler)  # Ctrl+C
signal.signal(signal.SIGTERM, signal_handler)  # Termination signal


# --- Location Services / Wi-Fi Scanning Imports ---
try:
    import objc
    from CoreLocation import (
        CLLocationManager,
        kCLAuthorizationStatusNotDetermined,
        kCLAuthorizationStatusDenied,
        kCLAuthorizationStatusRestricted,
    )
    import CoreWLAN

    CORELOCATION_AVAILABLE = True
except ImportError:
    # This will fail on non-macOS platforms, which is fine.
    CORELOCATION_AVAILABLE = False


if CORELOCATION_AVAILABLE:
    try:

        class LocationAuthDelegate(objc.lookUpClass("NSObject")):
            """Delegate to handle location authorization callbacks."""

            def locationManagerDidChangeAuthorization_(self, manager):
                # Required by CoreLocation; the status is polled instead.
                pass

    except (objc.error, AttributeError):
        LocationAuthDelegate = None
else:
    LocationAuthDelegate = None

LOCATION_AUTH_POLL_COUNT = 10
LOCATION_AUTH_POLL_INTERVAL = 1  # seconds
WIFI_SCAN_RETRY_COUNT = 5
WIFI_SCAN_RETRY_DELAY_BASE = 2  # seconds


@dataclass
class CliContext:
    """Options shared by every command."""

    config_path: Path
    debug: bool = False
    service: Optional[ServiceManager] = None


# --- Helper Functions ---


def _load_config_or_exit(ctx_obj: CliContext):
    try:
        return config.load_config(ctx_obj.config_path)
    except ConfigError as e:
        click.echo(click.style(f"Error loading config: {e}", fg="red"), err=True)
        sys.exit(1)


def _validate_selection_input(choice_str, items):
    """Parse a comma-separated list of 1-based indexes into items."""
    selection = []
    if not choice_str.strip():
        return selection
    try:
        indices = [int(i.strip()) - 1 for i in choice_str.split(",")]
    except ValueError:
        click.echo("Warning: Invalid input. Please enter numbers only.", err=True)
        return None

    for i in indices:
        if 0 <= i < len(items):
            selection.append(items[i])
        else:
            click.echo(f"Warning: Invalid selection '{i + 1}' ignored.", err=True)
    return selection


def prompt_for_selection(prompt_title, items, selected_items, manual_entry_label="items"):
    """
    Prompt the user to pick any number of items, plus manual entries.

    Args:
        prompt_title (str): The main title for the prompt section.
        items (list): Available strings to choose from.
        selected_items (list): Strings that are currently selected.
        manual_entry_label (str): What to call the items in the manual prompt.

    Returns:
        list: The updated selection.
    """
    click.echo(click.style(prompt_title, bold=True))
    current_selection = list(selected_items)

    if not items:
        click.echo("No networks were automatically discovered.")
    else:
        click.echo("Select by number, separated by commas (e.g., 1,3).")
        for i, item in enumerate(items, 1):
            is_selected = "x" if item in current_selection else " "
            click.echo(f" [{is_selected}] {i}: {item}")

        default_indices = ",".join(str(i + 1) for i, s in enumerate(items) if s in current_selection)
        choice_str = click.prompt(
            "Select by number (or press Enter to keep current)", default=default_indices, show_default=True
        )
        if choice_str != default_indices:
            parsed = _validate_selection_input(choice_str, items)
            if parsed is not None:
                # Keep selected entries that were not in the scan
                current_selection = [s for s in current_selection if s not in items] + parsed

    manual = click.prompt(
        f"Enter any additional {manual_entry_label} (comma-separated), or press Enter to skip",
        default="",
        show_default=False,
    )
    for item in (s.strip() for s in manual.split(",")):
        if item and item not in current_selection:
            current_selection.append(item)

    return current_selection


def _request_location_authorization():
    """Request Location Services access, needed to see SSIDs in a scan."""
    if not CORELOCATION_AVAILABLE or LocationAuthDelegate is None:
        click.echo("Location services not available - using manual SSID entry")
        return False

    manager = CLLocationManager.alloc().init()
    delegate = LocationAuthDelegate.alloc().init()
    manager.setDelegate_(delegate)
    status = manager.authorizationStatus()

    if status == kCLAuthorizationStatusNotDetermined:
        click.echo("Requesting Location Services access to scan for Wi-Fi networks...")
        manager.requestWhenInUseAuthorization()
        for _ in range(LOCATION_AUTH_POLL_COUNT):
            time.sleep(LOCATION_AUTH_POLL_INTERVAL)
            status = manager.authorizationStatus()
            if status != kCLAuthorizationStatusNotDetermined:
                break

    if status in (kCLAuthorizationStatusDenied, kCLAuthorizationStatusRestricted):
        click.echo(click.style("Error: Location Services access is denied or restricted.", fg="red"), err=True)
        return False
    return True


def _perform_wifi_scan():
    """Scan for nearby Wi-Fi networks. Returns a sorted list of SSIDs."""
    interface = CoreWLAN.CWInterface.interface()
    if not interface:
        click.echo("No Wi-Fi interface found.", err=True)
        return []

    click.echo("Scanning for Wi-Fi networks... (this may take a moment)")
    networks, error = None, None
    for i in range(WIFI_SCAN_RETRY_COUNT):
        networks, error = interface.scanForNetworksWithName_error_(None, None)
        if networks is not None:
            break
        if error and "Busy" in str(error):
            time.sleep(WIFI_SCAN_RETRY_DELAY_BASE * (i + 1))
        else:
            break

    if networks is None:
        click.echo(f"Failed to scan for networks. Error: {error}", err=True)
        return []

    # SSIDs redacted by the OS come back as None
    ssids = sorted({str(n.ssid()) for n in networks if n.ssid()})
    click.echo(f"Found {len(ssids)} available networks.")
    return ssids


def get_available_ssids():
    """Nearby SSIDs via CoreWLAN, or an empty list where scanning is unavailable."""
    if not _request_location_authorization():
        return []
    return _perform_wifi_scan()


def _prompt_hosts_lines(current_lines):
    """Ask for the hosts lines written on the home network."""
    click.echo(click.style("\n--- Home Hosts Entries ---", bold=True))
    if current_lines:
        click.echo("Current entries:")
        for line in current_lines:
            click.echo(f"  {line}")
        if not click.confirm("Replace these entries?", default=False):
            return list(current_lines)

    click.echo("Enter one hosts line per prompt (e.g. '192.168.1.10 nas.home'). Press Enter on an empty line to finish.")
    lines = []
    while True:
        line = click.prompt("Hosts line", default="", show_default=False)
        if not line.strip():
            break
        lines.append(line.strip())
    return lines


def _current_ssid():
    try:
        return get_probe().get_ssid()
    except ProbeError as e:
        click.echo(f"Could not determine current Wi-Fi network: {e}", err=True)
        return None


# --- CLI Commands ---


class OrderedGroup(click.Group):
    """Custom Click group that preserves command order."""

    def list_commands(self, ctx):
        return list(self.commands.keys())


@click.group(cls=OrderedGroup)
@click.option(
    "-c",
    "--config",
    "config_path",
    type=click.Path(dir_okay=False, path_type=Path),
    default=config.get_config_path,
    show_default=str(config.get_config_path()),
    help="Path of the HomeHosts configuration file.",
)
@click.option("--debug", is_flag=True, help="Enable verbose debug logging.")
@click.pass_context
def cli(ctx, config_path, debug):
    """
    HomeHosts - switch hosts file entries by Wi-Fi network.

    On a home network the entries configured in config.toml are written into
    the hosts file between HomeHosts markers; on any other network they are
    removed again. A SwitchHosts block in the same file is left untouched.
    """
    ctx.obj = CliContext(config_path=config_path, debug=debug)


@cli.command()
@click.option(
    "-f",
    "--interval",
    type=click.IntRange(min=1),
    default=None,
    help="Seconds between Wi-Fi checks (defaults to settings.interval, 300).",
)
@click.option("--daemon", is_flag=True, hidden=True, help="Set by the installed service.")
@click.pass_obj
def run(ctx_obj, interval, daemon):
    """
    Watch the Wi-Fi network and switch the hosts file accordingly.

    This is what the background service runs. It checks the network every
    interval and only rewrites the hosts file when switching between a home
    and a non-home network.
    """
    cfg = _load_config_or_exit(ctx_obj)
    setup_logging(debug=ctx_obj.debug or cfg.debug, force_reinit=True, daemon=daemon)
    run_forever(cfg, interval or cfg.interval)


def _run_one_shot(ctx_obj, action, done_message, unchanged_message):
    cfg = _load_config_or_exit(ctx_obj)
    setup_logging(debug=ctx_obj.debug or cfg.debug, force_reinit=True)
    try:
        changed = action(cfg)
    except MarkerInconsistency as e:
        click.echo(click.style(f"HomeHosts markers in {cfg.hosts_file} look damaged: {e}", fg="red"), err=True)
        sys.exit(1)
    except HostsFileError as e:
        click.echo(click.style(f"Error updating hosts file: {e}", fg="red"), err=True)
        click.echo("Editing the hosts file usually requires root, try again with sudo.", err=True)
        sys.exit(1)

    if changed:
        click.echo(click.style(done_message.format(path=cfg.hosts_file), fg="green"))
    else:
        click.echo(unchanged_message.format(path=cfg.hosts_file))


@cli.command()
@click.pass_obj
def apply(ctx_obj):
    """Insert the home hosts entries now, regardless of the network."""
    _run_one_shot(ctx_obj, apply_once, "Home hosts added to {path}.", "Nothing to change in {path}.")


@cli.command()
@click.pass_obj
def restore(ctx_obj):
    """Remove the home hosts entries now, regardless of the network."""
    _run_one_shot(ctx_obj, restore_once, "Home hosts removed from {path}.", "Nothing to change in {path}.")


@cli.command()
@click.pass_obj
def status(ctx_obj):
    """
    Show the current network, what HomeHosts would do, and the hosts file state.
    """
    cfg = _load_config_or_exit(ctx_obj)

    click.echo(f"Config file:    {ctx_obj.config_path}")
    click.echo(f"Home networks:  {', '.join(cfg.ssids) or '(none)'}")
    click.echo(f"Hosts entries:  {len(cfg.hosts)}")

    ssid = _current_ssid()
    click.echo(f"Current SSID:   {ssid or '(unknown)'}")
    target = decide(ssid, cfg)
    click.echo(f"Desired state:  {target.value}")

    try:
        lines = read_lines(cfg.hosts_file)
    except HostsFileError as e:
        click.echo(click.style(f"Hosts file:     {e}", fg="red"))
        sys.exit(1)

    try:
        present = find_managed_region_bounds(lines) is not None
    except MarkerInconsistency as e:
        click.echo(click.style(f"Hosts file:     markers damaged ({e})", fg="red"))
        sys.exit(1)

    if not present and contains_managed_region(lines):
        click.echo(click.style("Hosts file:     end marker missing", fg="yellow"))
    elif not present and contains_end_marker(lines):
        click.echo(click.style("Hosts file:     start marker missing", fg="yellow"))
    else:
        state = "applied" if present else "restored"
        color = "green" if state == target.value else "yellow"
        click.echo(click.style(f"Hosts file:     {state}", fg=color))

    writable = os.access(cfg.hosts_file, os.W_OK)
    click.echo(f"Writable:       {'yes' if writable else 'no (run the service as root)'}")


@cli.command()
@click.pass_obj
def configure(ctx_obj):
    """
    Interactively choose home Wi-Fi networks and hosts entries.

    \b
    • Wi-Fi networks (SSIDs) that count as home
    • Hosts lines written to the hosts file while at home
    • How often the network is checked

    For best results, run this command while connected to your home network.
    """
    config_path = ctx_obj.config_path
    click.echo(click.style("--- HomeHosts Configuration Wizard ---", bold=True, underline=True))
    if not config_path.exists():
        click.echo(f"No configuration file found. A new one will be created at:\n{config_path}")
    else:
        click.echo(f"Loaded existing configuration from:\n{config_path}")

    try:
        data = config.load_config_data(config_path)
    except ConfigError as e:
        click.echo(click.style(f"Error loading config: {e}", fg="red"), err=True)
        sys.exit(1)

    home = data.setdefault("home", {})
    settings = data.setdefault("settings", {})
    ssids = list(home.get("ssids", []))

    current_ssid = _current_ssid()
    if current_ssid and current_ssid not in ssids:
        if click.confirm(f'Do you want to treat the current Wi-Fi network "{current_ssid}" as home?', default=True):
            ssids.append(current_ssid)

    home["ssids"] = prompt_for_selection(
        "\n--- Home Wi-Fi Networks (SSIDs) ---",
        items=get_available_ssids(),
        selected_items=ssids,
        manual_entry_label="SSIDs",
    )
    home["hosts"] = _prompt_hosts_lines(home.get("hosts", []))

    click.echo(click.style("\n--- Check Interval ---", bold=True))
    settings["interval"] = click.prompt(
        "Seconds between Wi-Fi checks",
        type=click.IntRange(min=1),
        default=settings.get("interval", config.DEFAULT_INTERVAL_SECONDS),
    )

    try:
        config.save_config(data, config_path)
    except (ConfigError, OSError) as e:
        click.echo(f"Error saving configuration file: {e}", err=True)
        sys.exit(1)

    click.echo(click.style(f"\nConfiguration saved to {config_path}", fg="green"))


# --- Service Management Commands ---


@cli.group()
@click.pass_context
def service(ctx):
    """
    Manage the HomeHosts background service.

    \b
    • install   - Install and start the background service
    • uninstall - Stop and remove the background service
    • start     - Start the background service
    • stop      - Stop the background service
    • restart   - Restart the background service
    • status    - Check if the service is running

    The service runs as root (a LaunchDaemon on macOS, a systemd unit on
    Linux), since it edits the hosts file. Run these commands with sudo.
    """
    try:
        ctx.obj.service = get_service()
    except ServiceError as e:
        click.echo(str(e), err=True)
        sys.exit(1)


def _require_installed(manager):
    if not manager.is_installed():
        click.echo("Service is not installed. Please run `homehosts service install` first.", err=True)
        sys.exit(1)


@service.command()
@click.pass_obj
def install(ctx_obj):
    """Install and start the background service."""
    cfg = _load_config_or_exit(ctx_obj)
    if not cfg.ssids or not cfg.hosts:
        click.echo(
            click.style("Warning: no home networks or hosts entries configured yet.", fg="yellow"),
            err=True,
        )

    arguments = program_arguments(ctx_obj.config_path.resolve(), cfg.interval)
    click.echo("Installing HomeHosts service...")
    try:
        started = ctx_obj.service.install(arguments)
    except ServiceError as e:
        click.echo(click.style(f"An error occurred during installation: {e}", fg="red"), err=True)
        sys.exit(1)

    click.echo(f"Created service definition at: {ctx_obj.service.unit_path}")
    if not started:
        click.echo(click.style("Service installed but failed to start. Check the logs:", fg="red"), err=True)
        click.echo(f"  tail -f {config.LOG_FILE}", err=True)
        sys.exit(1)
    click.echo(click.style("Service installed and started successfully.", fg="green"))


@service.command()
@click.option(
    "--restore/--no-restore",
    "restore_hosts",
    default=True,
    show_default=True,
    help="Remove the home hosts entries after stopping the service.",
)
@click.pass_obj
def uninstall(ctx_obj, restore_hosts):
    """Stop and remove the background service."""
    _require_installed(ctx_obj.service)
    click.echo("Uninstalling HomeHosts service...")
    try:
        ctx_obj.service.uninstall()
    except ServiceError as e:
        click.echo(click.style(f"An error occurred during uninstallation: {e}", fg="red"), err=True)
        sys.exit(1)
    click.echo(click.style("Service uninstalled successfully.", fg="green"))

    if restore_hosts:
        _run_one_shot(ctx_obj, restore_once, "Home hosts removed from {path}.", "No home hosts left in {path}.")


@service.command()
@click.pass_obj
def start(ctx_obj):
    """Start the background service."""
    _require_installed(ctx_obj.service)
    click.echo("Starting HomeHosts service...")
    if ctx_obj.service.start():
        click.echo("Service started.")
    else:
        click.echo(click.style("Failed to start the service.", fg="red"), err=True)
        sys.exit(1)


@service.command()
@click.pass_obj
def stop(ctx_obj):
    """
    Stop the background service.

    The hosts file is left as it was when the service stopped.
    """
    _require_installed(ctx_obj.service)
    click.echo("Stopping HomeHosts service...")
    if ctx_obj.service.stop():
        click.echo("Service stopped.")
    else:
        click.echo(click.style("Failed to stop the service.", fg="red"), err=True)
        sys.exit(1)


@service.command()
@click.pass_obj
def restart(ctx_obj):
    """Restart the background service."""
    _require_installed(ctx_obj.service)
    if ctx_obj.service.restart():
        click.echo("Service restarted.")
    else:
        click.echo(click.style("Failed to restart the service.", fg="red"), err=True)
        sys.exit(1)


@service.command(name="status")
@click.pass_obj
def service_status(ctx_obj):
    """Check whether the background service is installed and running."""
    manager = ctx_obj.service
    if not manager.is_installed():
        click.echo("Service is not installed.")
        return

    click.echo(f"Service definition: {manager.unit_path}")
    if manager.is_running():
        click.echo(click.style("Process is RUNNING.", fg="green"))
    else:
        click.echo(click.style("Process is STOPPED.", fg="yellow"))
        click.echo("Check logs for details:")
        click.echo(f"  tail -f {config.LOG_FILE}")


if __name__ == "__main__":
    cli()
