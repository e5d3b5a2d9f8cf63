# stabby host selector
# Full-screen list for picking one configured host

import os
import re
import select
import sys
import termios
import tty
from dataclasses import dataclass
from typing import Callable, List, Optional, Sequence

from ..core.models import HostRecord, SelectionOutcome
from ..core.terminal import get_terminal_size


# ANSI escape codes
ESC = "\033"
CSI = f"{ESC}["

KEY_UP = "\x1b[A"
KEY_DOWN = "\x1b[B"
KEY_HOME = "\x1b[H"
KEY_END = "\x1b[F"
KEY_ESC = "\x1b"
KEY_CTRL_C = "\x03"
KEY_CTRL_D = "\x04"
ENTER_KEYS = ("\r", "\n")
ABORT_KEYS = ("q", KEY_ESC, KEY_CTRL_C, KEY_CTRL_D)

QUIT_LABEL = "Quit"
QUIT_DETAIL = "Press to exit"

# Alternate encodings of the keys the selector handles
_KEY_ALIASES = {
    "\x1bOA": KEY_UP,
    "\x1bOB": KEY_DOWN,
    "\x1bOH": KEY_HOME,
    "\x1bOF": KEY_END,
    "\x1b[1~": KEY_HOME,
    "\x1b[7~": KEY_HOME,
    "\x1b[4~": KEY_END,
    "\x1b[8~": KEY_END,
}

_ANSI_RE = re.compile(r"\x1b\[[0-9;?]*[A-Za-z]")


def clear_screen():
    print(f"{CSI}2J{CSI}H", end="", flush=True)


def move_cursor(row: int, col: int):
    print(f"{CSI}{row};{col}H", end="", flush=True)


def hide_cursor():
    print(f"{CSI}?25l", end="", flush=True)


def show_cursor():
    print(f"{CSI}?25h", end="", flush=True)


def bold(text: str) -> str:
    return f"{CSI}1m{text}{CSI}0m"


def dim(text: str) -> str:
    return f"{CSI}2m{text}{CSI}0m"


def reverse(text: str) -> str:
    return f"{CSI}7m{text}{CSI}0m"


def strip_ansi(text: str) -> str:
    return _ANSI_RE.sub("", text)


def _input_pending(fd: int, timeout: float = 0.05) -> bool:
    readable, _, _ = select.select([fd], [], [], timeout)
    return bool(readable)


def decode_key(read_char: Callable[[], str], pending: Callable[[], bool]) -> str:
    """Read one key, folding an escape sequence into a single string."""
    ch = read_char()
    # A lone ESC (no sequence following) is the abort key
    if ch != KEY_ESC or not pending():
        return ch
    seq = ch + read_char()
    if seq[-1] not in ("[", "O"):
        return seq
    while pending():
        seq += read_char()
        # Sequences end with a final byte in the range @ to ~
        if "\x40" <= seq[-1] <= "\x7e":
            break
    return _KEY_ALIASES.get(seq, seq)


def getch() -> str:
    """Read a single key from stdin in raw mode."""
    fd = sys.stdin.fileno()
    old_settings = termios.tcgetattr(fd)
    try:
        tty.setraw(fd)
        return decode_key(
            lambda: os.read(fd, 1).decode("utf-8", errors="replace"),
            lambda: _input_pending(fd),
        )
    finally:
        termios.tcsetattr(fd, termios.TCSADRAIN, old_settings)


@dataclass(frozen=True)
class MenuEntry:
    """One row of the selector list."""
    label: str
    detail: str = ""


def build_entries(hosts: Sequence[HostRecord]) -> List[MenuEntry]:
    """One entry per host in input order, then the Quit entry."""
    entries = [MenuEntry(label=h.host, detail=h.description) for h in hosts]
    entries.append(MenuEntry(label=QUIT_LABEL, detail=QUIT_DETAIL))
    return entries


def outcome_for_index(index: int, host_count: int) -> SelectionOutcome:
    """Map an activated list index to a selection outcome."""
    if index == host_count:
        return SelectionOutcome.quit()
    if not 0 <= index < host_count:
        raise IndexError(f"Selection index {index} outside 0..{host_count}")
    return SelectionOutcome.chosen(index)


def format_entry(entry: MenuEntry, width: int) -> str:
    """Render an entry as plain text; an empty detail stays empty."""
    label_width = min(32, max(12, width // 3))
    line = f" {entry.label:<{label_width}}"
    if entry.detail:
        line += f" {entry.detail}"
    return line[:max(0, width - 1)]


class HostSelector:
    """
    Full-screen selection list over an ordered host sequence.

    The list always ends with a synthetic Quit entry. run() blocks until
    one entry is activated and returns the outcome; nothing outlives the call.
    """

    def __init__(
        self,
        hosts: Sequence[HostRecord],
        read_key: Optional[Callable[[], str]] = None,
        title: str = " stabby ",
    ):
        self.hosts = list(hosts)
        self.entries = build_entries(self.hosts)
        self.read_key = read_key or getch
        self.title = title
        self.selected_index = 0
        self.scroll_offset = 0

    @property
    def quit_index(self) -> int:
        return len(self.entries) - 1

    def run(self) -> SelectionOutcome:
        """Run the selector and return the activated outcome."""
        hide_cursor()
        try:
            while True:
                self._draw()
                outcome = self.handle_key(self.read_key())
                if outcome is not None:
                    return outcome
        finally:
            show_cursor()
            clear_screen()

    def handle_key(self, key: str) -> Optional[SelectionOutcome]:
        """Apply one key press; returns an outcome once an entry is activated."""
        if key in (KEY_UP, "k"):
            self.selected_index = max(0, self.selected_index - 1)
        elif key in (KEY_DOWN, "j"):
            self.selected_index = min(self.quit_index, self.selected_index + 1)
        elif key == KEY_HOME:
            self.selected_index = 0
        elif key == KEY_END:
            self.selected_index = self.quit_index
        elif key in ENTER_KEYS:
            return outcome_for_index(self.selected_index, len(self.hosts))
        elif key in ABORT_KEYS:
            return SelectionOutcome.quit()
        return None

    def render(self, rows: int, cols: int) -> List[str]:
        """Build the screen lines for the current state."""
        lines = [reverse(self.title.center(cols))]
        lines.append(bold(f"Select a host ({len(self.hosts)} configured):"))
        lines.append("-" * min(cols, 60))

        # Header takes three rows, footer one
        visible_rows = max(1, rows - 4)
        if self.selected_index < self.scroll_offset:
            self.scroll_offset = self.selected_index
        if self.selected_index >= self.scroll_offset + visible_rows:
            self.scroll_offset = self.selected_index - visible_rows + 1

        window = self.entries[self.scroll_offset:self.scroll_offset + visible_rows]
        for offset, entry in enumerate(window):
            idx = self.scroll_offset + offset
            text = format_entry(entry, cols)
            if idx == self.selected_index:
                lines.append(reverse(text.ljust(max(0, cols - 1))))
            elif idx == self.quit_index:
                lines.append(dim(text))
            else:
                lines.append(text)
        return lines

    def _draw(self):
        """Draw current state."""
        clear_screen()
        rows, cols = get_terminal_size()
        for row, line in enumerate(self.render(rows, cols), start=1):
            move_cursor(row, 1)
            print(line, end="")

        move_cursor(rows, 1)
        footer = " [↑↓] Navigate  [Enter] Select  [q] Quit "
        print(reverse(footer.ljust(cols)), end="", flush=True)


def select_host(
    hosts: Sequence[HostRecord],
    read_key: Optional[Callable[[], str]] = None,
) -> SelectionOutcome:
    """Show the host list and block until the operator picks an entry."""
    return HostSelector(hosts, read_key=read_key).run()
