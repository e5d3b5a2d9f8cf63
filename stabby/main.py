#!/usr/bin/env python
# stabby - pick a host, get a shell
# License: MIT

import sys
from typing import Dict, List, Optional


# ---------------------------------------------------------------------------
# COMMANDS_REGISTRY – single source of truth for all CLI commands.
# usage / help_text are generated from this registry.
# ---------------------------------------------------------------------------

COMMANDS_REGISTRY: List[Dict] = [
    {
        "command": "connect",
        "description": "Pick a host and open a shell (default command)",
        "help_summary": "Pick a host and open a shell",
        "subcommands": [
            {"name": "", "description": "Show the host selector"},
            {"name": "<number>", "description": "Connect to host number N directly"},
        ],
    },
    {
        "command": "list",
        "description": "List configured hosts",
        "help_summary": "List configured hosts",
        "subcommands": [],
    },
    {
        "command": "logs",
        "description": "Session event logs",
        "help_summary": "Show recent sessions",
        "subcommands": [
            {"name": "", "description": "List recent sessions"},
            {"name": "<session-id>", "description": "Show events of one session"},
        ],
    },
    {
        "command": "config",
        "description": "Configuration and settings",
        "help_summary": "Configuration and settings",
        "subcommands": [
            {"name": "show", "description": "Show configuration"},
            {"name": "get <key>", "description": "Get config value"},
            {"name": "set <key> <val>", "description": "Set config value"},
        ],
    },
    {
        "command": "help",
        "description": "Show help",
        "help_summary": "Show this help",
        "subcommands": [],
    },
    {
        "command": "version",
        "description": "Show version",
        "help_summary": "Show version",
        "subcommands": [],
    },
]


def _generate_usage() -> str:
    """Generate the short usage string from COMMANDS_REGISTRY."""
    lines = ["[command] [args...]", "", "Commands:"]
    for entry in COMMANDS_REGISTRY:
        cmd = entry["command"]
        if cmd in ("help", "version"):
            continue
        lines.append(f"  {cmd:<10s}- {entry['description']}")
    lines.append("")
    return "\n".join(lines)


def _generate_help_text() -> str:
    """Generate the full help text from COMMANDS_REGISTRY."""
    from .commands.host import HOST_FILE_HELP

    lines = [
        "",
        "stabby: pick one of your configured hosts and open an SSH shell on it.",
        "",
        "COMMANDS",
    ]
    for entry in COMMANDS_REGISTRY:
        cmd = entry["command"]
        subs = entry.get("subcommands", [])
        if not subs:
            lines.append(f"  {'stabby ' + cmd:<32s}{entry['help_summary']}")
            continue
        for sc in subs:
            left = f"stabby {cmd} {sc['name']}".rstrip()
            lines.append(f"  {left:<32s}{sc['description']}")
    lines.extend([
        "",
        "HOST FILE",
        *["  " + line if line else "" for line in HOST_FILE_HELP.splitlines()],
        "",
        "CONFIG FILES",
        "  ~/.config/stabby/",
        "  ├── config.yaml         Settings (ssh, pty, logging)",
        "  └── logs/               Session event logs",
        "",
    ])
    return "\n".join(lines)


usage = _generate_usage()


def main(args: list[str]) -> Optional[str]:
    """Main entry point for stabby."""
    from .core.models import HostConfigError

    # No subcommand - pick a host and connect
    command = args[1] if len(args) > 1 else "connect"
    cmd_args = args[2:]

    try:
        if command == "connect":
            from .commands.connect import cmd_connect
            cmd_connect(cmd_args)
            return None
        elif command == "list":
            from .commands.host import cmd_list
            cmd_list(cmd_args)
            return None
        elif command == "logs":
            from .commands.logs_cmd import main as logs_main
            return logs_main(cmd_args)
        elif command == "config":
            from .commands.config_cmd import main as config_main
            return config_main(cmd_args)
    except HostConfigError as e:
        print(f"Error: {e}", file=sys.stderr)
        raise SystemExit(1)

    if command in ("help", "-h", "--help"):
        print(_generate_help_text())
        raise SystemExit(0)
    elif command in ("version", "--version"):
        from . import __version__
        print(f"stabby {__version__}")
        raise SystemExit(0)
    else:
        print(f"Unknown command: {command}")
        print(usage)
        raise SystemExit(1)


def cli() -> None:
    """CLI entry point (called by pip installed command)."""
    result = main(sys.argv)
    if result:
        print(result)


if __name__ == "__main__":
    cli()
