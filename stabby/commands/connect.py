# stabby connect command
# Pick a host and open an interactive shell on it

import sys
from typing import Any, Callable, Dict, List, Optional

from ..config import load_config, lookup
from ..core.models import HostRecord
from ..services.shell_bridge import ShellBridge, ShellBridgeError
from ..ui.selector import select_host
from .host import load_hosts

usage = '''[<number>]

Without a number, shows the host selector.
With a number (as shown by "stabby list"), connects to that host directly.
'''


def _print_diagnostics(bridge: ShellBridge) -> None:
    for line in bridge.diagnostics:
        print(f"Warning: {line}", file=sys.stderr)


def run_session(
    host: HostRecord,
    config: Optional[Dict[str, Any]] = None,
    bridge_factory: Callable[..., ShellBridge] = ShellBridge,
) -> None:
    """Run one shell session and turn its outcome into a process exit."""
    bridge = bridge_factory(config=config or load_config())
    try:
        bridge.run(host)
    except ShellBridgeError as e:
        _print_diagnostics(bridge)
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1)
    except KeyboardInterrupt:
        _print_diagnostics(bridge)
        print(f"\nSession to {host.address} interrupted.", file=sys.stderr)
        raise SystemExit(130)
    _print_diagnostics(bridge)


def cmd_select(args: List[str]) -> None:
    """Show the selector, then connect to the chosen host."""
    config = load_config()
    hosts = load_hosts(lookup(config, "hosts_file"))

    outcome = select_host(hosts)
    if outcome.is_quit:
        return
    run_session(hosts[outcome.index], config)


def cmd_connect(args: List[str]) -> None:
    """Connect to host number N without showing the selector."""
    if not args:
        cmd_select(args)
        return
    if args[0] in ("-h", "--help"):
        print(usage)
        return

    config = load_config()
    hosts = load_hosts(lookup(config, "hosts_file"))

    try:
        number = int(args[0])
    except ValueError:
        print(f"Invalid host number: {args[0]}")
        raise SystemExit(1)
    if not 1 <= number <= len(hosts):
        print(f"Host number out of range: {number} (1-{len(hosts)})")
        raise SystemExit(1)

    run_session(hosts[number - 1], config)
