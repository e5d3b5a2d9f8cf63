# stabby local terminal helpers
# Raw mode switching and size detection

import os
import sys
import termios
import tty
from typing import Any, List, Optional, Tuple


TerminalState = List[Any]


class LocalTerminal:
    """
    Mode control for the local terminal behind one file descriptor.

    The shell bridge takes exactly one snapshot before entering raw mode
    and hands it back to restore() exactly once when the session ends.
    """

    def __init__(self, fd: Optional[int] = None):
        self.fd = sys.stdin.fileno() if fd is None else fd

    def snapshot(self) -> TerminalState:
        """Capture the current terminal attributes."""
        return termios.tcgetattr(self.fd)

    def make_raw(self) -> None:
        """Disable echo, line buffering and signal characters."""
        tty.setraw(self.fd)

    def restore(self, state: TerminalState) -> None:
        """Put back attributes captured by snapshot()."""
        termios.tcsetattr(self.fd, termios.TCSADRAIN, state)

    def size(self) -> Optional[Tuple[int, int]]:
        """Return (rows, cols) of the terminal, or None if unavailable."""
        try:
            size = os.get_terminal_size(self.fd)
        except OSError:
            return None
        if size.lines <= 0 or size.columns <= 0:
            return None
        return size.lines, size.columns


def get_terminal_size() -> Tuple[int, int]:
    """Get terminal size (rows, cols)."""
    try:
        size = os.get_terminal_size()
        return size.lines, size.columns
    except OSError:
        return 24, 80
