# stabby config command
# Show and edit settings

from typing import List, Optional

import yaml

from ..config import get_config_value, load_config, set_config_value
from ..constants import CONFIG_FILE

usage = '''[subcommand] [args...]

Subcommands:
  show             - Show configuration
  get <key>        - Get a value (e.g. pty.term)
  set <key> <val>  - Set a value (e.g. ssh.connect_timeout 5)

Settings are stored in: ~/.config/stabby/config.yaml
'''


def cmd_show(args: List[str]) -> None:
    """Show the merged configuration."""
    print(f"# {CONFIG_FILE}")
    print(yaml.dump(load_config(), default_flow_style=False, sort_keys=False), end="")


def cmd_get(args: List[str]) -> None:
    """Print one configuration value."""
    if not args:
        print("Usage: stabby config get <key>")
        raise SystemExit(1)

    value = get_config_value(args[0])
    if value is None:
        print(f"Not set: {args[0]}")
        raise SystemExit(1)
    if isinstance(value, (dict, list)):
        print(yaml.dump(value, default_flow_style=False, sort_keys=False), end="")
    else:
        print(value)


def cmd_set(args: List[str]) -> None:
    """Set one configuration value; the value is parsed as YAML."""
    if len(args) < 2:
        print("Usage: stabby config set <key> <value>")
        raise SystemExit(1)

    key = args[0]
    raw = " ".join(args[1:])
    try:
        value = yaml.safe_load(raw)
    except yaml.YAMLError:
        value = raw

    set_config_value(key, value)
    print(f"Set {key} = {value!r}")


def main(args: List[str]) -> Optional[str]:
    """Main entry point for config command."""
    if not args or args[0] in ("-h", "--help"):
        print(usage)
        return None

    subcommand = args[0]
    subargs = args[1:]

    commands = {
        "show": cmd_show,
        "get": cmd_get,
        "set": cmd_set,
    }

    if subcommand not in commands:
        print(f"Unknown subcommand: {subcommand}")
        print(usage)
        raise SystemExit(1)

    commands[subcommand](subargs)
    return None
