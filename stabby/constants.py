# stabby constants
# Paths and built-in defaults

from pathlib import Path

CONFIG_DIR = Path.home() / ".config" / "stabby"
CONFIG_FILE = CONFIG_DIR / "config.yaml"
LOGS_DIR = CONFIG_DIR / "logs"

# Host list location used by the original stabby tool
DEFAULT_HOSTS_FILE = "~/.ssh/stabby_config.yaml"

DEFAULT_SSH_PORT = 22
DEFAULT_USERNAME = "root"
DEFAULT_CONNECT_TIMEOUT = 10

DEFAULT_TERM = "xterm"
DEFAULT_PTY_ROWS = 32
DEFAULT_PTY_COLS = 160
