# stabby host command
# Host list loading and display

from pathlib import Path
from typing import List, Optional, Sequence, Union

import yaml

from ..core.models import HostConfigError, HostRecord

HOST_FILE_HELP = '''Hosts are read from ~/.ssh/stabby_config.yaml (setting: hosts_file):

  servers:
    - host: 10.0.0.5
      port: 22
      desc: build box
      password: secret
      user: deploy        # optional, defaults to ssh.username
'''


def get_hosts_file(path: Union[str, Path, None] = None) -> Path:
    """Resolve the host file path, falling back to the hosts_file setting."""
    if path is None:
        from ..config import get_config_value
        from ..constants import DEFAULT_HOSTS_FILE
        path = get_config_value("hosts_file", DEFAULT_HOSTS_FILE)
    return Path(path).expanduser()


def load_hosts(path: Union[str, Path, None] = None) -> List[HostRecord]:
    """
    Load hosts from the host file, preserving file order.

    Raises:
        HostConfigError: File missing, unparsable, or with an invalid entry
    """
    hosts_file = get_hosts_file(path)
    if not hosts_file.exists():
        raise HostConfigError(f"Host file not found: {hosts_file}")

    try:
        with open(hosts_file, "r") as f:
            data = yaml.safe_load(f) or {}
    except yaml.YAMLError as e:
        raise HostConfigError(f"Cannot parse {hosts_file}: {e}") from e

    if isinstance(data, dict):
        entries = data.get("servers") or []
    else:
        entries = data
    if not isinstance(entries, list):
        raise HostConfigError(f"'servers' must be a list in {hosts_file}")

    hosts = []
    for num, entry in enumerate(entries, start=1):
        if not isinstance(entry, dict):
            raise HostConfigError("expected a mapping with host/port/desc/password", num)
        try:
            hosts.append(HostRecord.from_dict(entry))
        except HostConfigError as e:
            raise HostConfigError(str(e), num) from e
    return hosts


def format_host_lines(hosts: Sequence[HostRecord]) -> List[str]:
    """Numbered, secret-free lines for a host listing."""
    if not hosts:
        return []
    width = max(len(h.address) for h in hosts)
    lines = []
    for num, host in enumerate(hosts, start=1):
        line = f"{num:>3}. {host.address:<{width}}"
        if host.username:
            line += f"  [{host.username}]"
        if host.description:
            line += f"  {host.description}"
        lines.append(line.rstrip())
    return lines


def cmd_list(args: List[str], path: Optional[str] = None) -> None:
    """List configured hosts."""
    hosts = load_hosts(path)
    if not hosts:
        print(f"No hosts configured in {get_hosts_file(path)}")
        return

    print("Configured hosts:")
    print("-" * 60)
    for line in format_host_lines(hosts):
        print(line)
    print("-" * 60)
    print(f"Total: {len(hosts)} hosts")
