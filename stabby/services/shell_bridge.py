# stabby shell bridge
# Interactive SSH shell with the local terminal in raw mode

import contextlib
import signal
import sys
import termios
import threading
import time
from dataclasses import dataclass
from enum import Enum
from typing import Any, BinaryIO, Callable, Dict, List, Optional, Tuple

import paramiko

from ..config import get_default_config, lookup
from ..constants import DEFAULT_PTY_COLS, DEFAULT_PTY_ROWS, DEFAULT_TERM, DEFAULT_USERNAME
from ..core.models import HostRecord
from ..core.session_log import NullSessionLogger, SessionLogger
from ..core.terminal import LocalTerminal
from .stream_relay import StreamRelay


class ErrorKind(Enum):
    """Bridge step that ended a session."""
    CONNECT_FAILED = "connect"
    SESSION_FAILED = "open session"
    TERMINAL_MODE_FAILED = "enter raw mode"
    PTY_FAILED = "request pty"
    SHELL_START_FAILED = "start shell"
    REMOTE_EXIT = "remote exit"


class ShellBridgeError(Exception):
    """A shell session ended with an error at one of the bridge steps."""
    def __init__(self, kind: ErrorKind, message: str, exit_status: Optional[int] = None):
        self.kind = kind
        self.message = message
        self.exit_status = exit_status
        if kind == ErrorKind.REMOTE_EXIT:
            super().__init__(message)
        else:
            super().__init__(f"{kind.value} failed: {message}")


@dataclass(frozen=True)
class PtyRequest:
    """Parameters of the remote pseudo-terminal."""
    term: str = DEFAULT_TERM
    rows: int = DEFAULT_PTY_ROWS
    cols: int = DEFAULT_PTY_COLS


# paramiko raises these for transport, channel and socket failures
SSH_ERRORS = (paramiko.SSHException, OSError, EOFError)

# Name resolution also raises UnicodeError (a ValueError) for malformed hostnames
CONNECT_ERRORS = SSH_ERRORS + (ValueError,)


def describe_error(error: BaseException) -> str:
    return str(error) or type(error).__name__


def _raise_interrupt(signum, frame):
    raise KeyboardInterrupt(f"signal {signum}")


class ShellBridge:
    """
    Open an interactive shell on one host and relay the local terminal to it.

    Steps run in order and the first failure ends the session:
    connect, open session, enter raw mode, attach streams, request pty,
    start shell, wait. Every resource acquired along the way is released
    on the way out, innermost first, whether the session ends normally,
    with an error or by interrupt. Release failures are collected in
    ``diagnostics`` and never replace the primary result.
    """

    def __init__(
        self,
        config: Optional[Dict[str, Any]] = None,
        client_factory: Optional[Callable[[], Any]] = None,
        terminal: Optional[Any] = None,
        stdin_fd: Optional[int] = None,
        stdout: Optional[BinaryIO] = None,
        stderr: Optional[BinaryIO] = None,
        session_logger: Optional[Any] = None,
        handle_signals: bool = True,
        poll_interval: float = 0.05,
    ):
        """
        Initialize the bridge.

        Args:
            config: Loaded configuration (defaults when omitted)
            client_factory: Returns a paramiko SSHClient-compatible object
            terminal: Local terminal controller (LocalTerminal on stdin)
            stdin_fd: Local input descriptor (terminal fd by default)
            stdout: Binary sink for remote stdout
            stderr: Binary sink for remote stderr
            session_logger: Session event logger (built from config when omitted)
            handle_signals: Install SIGTERM/SIGHUP/SIGWINCH handlers during the session
            poll_interval: Seconds between session-end checks
        """
        self.config = config or get_default_config()
        self.client_factory = client_factory or paramiko.SSHClient
        self.terminal = terminal or LocalTerminal()
        self.stdin_fd = self.terminal.fd if stdin_fd is None else stdin_fd
        self.stdout = stdout or sys.stdout.buffer
        self.stderr = stderr or sys.stderr.buffer
        self.session_logger = session_logger
        self.handle_signals = handle_signals
        self.poll_interval = poll_interval
        self.diagnostics: List[str] = []
        self._released: set = set()

    def run(self, host: HostRecord) -> None:
        """
        Run one interactive session against host.

        Raises:
            ShellBridgeError: A step failed or the remote shell exited non-zero
            KeyboardInterrupt: The session was interrupted locally
        """
        self.diagnostics = []
        self._released = set()
        logger = self.session_logger or self._make_logger(host)
        username = host.username or lookup(self.config, "ssh.username", DEFAULT_USERNAME)

        start = time.time()
        ok = False
        exit_status = None
        self._log(logger, "start", username)
        try:
            exit_status = self._run_steps(host, username, logger)
            ok = True
        except ShellBridgeError as e:
            exit_status = e.exit_status
            self._log(logger, "state_failed", e.kind.value, e.message)
            raise
        except KeyboardInterrupt:
            self._log(logger, "state_failed", "interrupted", "local interrupt")
            raise
        finally:
            self._log(logger, "end", ok, int((time.time() - start) * 1000), exit_status)

    def _run_steps(self, host: HostRecord, username: str, logger) -> int:
        with contextlib.ExitStack() as stack:
            self._log(logger, "state", "connect")
            client = self._connect(host, username, logger)
            stack.callback(self._release, "transport", client.close, logger)

            self._log(logger, "state", "open_session")
            channel = self._open_session(client)
            stack.callback(self._release, "session channel", channel.close, logger)

            # Handlers go in before raw mode so they are restored after it
            self._install_signal_handlers(stack, channel)

            self._log(logger, "state", "enter_raw_mode")
            self._enter_raw_mode(stack, logger)

            self._log(logger, "state", "attach_streams")
            relay = StreamRelay(
                channel,
                stdin_fd=self.stdin_fd,
                stdout=self.stdout,
                stderr=self.stderr,
                poll_interval=self.poll_interval,
                on_error=lambda name, e: self._note(logger, f"relay {name}", e),
            )
            stack.callback(relay.stop)
            # The channel closes before the pumps are joined and the terminal restored
            stack.callback(self._release, "session channel", channel.close, logger)

            self._log(logger, "state", "request_pty")
            self._request_pty(channel)

            self._log(logger, "state", "start_shell")
            self._start_shell(channel)
            relay.start()

            self._log(logger, "state", "wait")
            status = relay.wait()

        if status == -1:
            raise ShellBridgeError(
                ErrorKind.REMOTE_EXIT,
                "remote session closed without an exit status",
                exit_status=status,
            )
        if status != 0:
            raise ShellBridgeError(
                ErrorKind.REMOTE_EXIT,
                f"remote shell exited with status {status}",
                exit_status=status,
            )
        return status

    def _connect(self, host: HostRecord, username: str, logger):
        client = self.client_factory()
        # Any host key is accepted; no known_hosts file is consulted
        client.set_missing_host_key_policy(paramiko.AutoAddPolicy())
        timeout = lookup(self.config, "ssh.connect_timeout")
        try:
            client.connect(
                hostname=host.host,
                port=host.port,
                username=username,
                password=host.secret,
                timeout=timeout,
                allow_agent=False,
                look_for_keys=False,
            )
        except CONNECT_ERRORS as e:
            self._release("transport", client.close, logger)
            raise ShellBridgeError(
                ErrorKind.CONNECT_FAILED,
                f"{username}@{host.address}: {describe_error(e)}",
            ) from e
        return client

    def _open_session(self, client):
        transport = client.get_transport()
        if transport is None or not transport.is_active():
            raise ShellBridgeError(ErrorKind.SESSION_FAILED, "transport is not active")
        try:
            return transport.open_session()
        except SSH_ERRORS as e:
            raise ShellBridgeError(ErrorKind.SESSION_FAILED, describe_error(e)) from e

    def _enter_raw_mode(self, stack: contextlib.ExitStack, logger) -> None:
        try:
            state = self.terminal.snapshot()
            self.terminal.make_raw()
        except (termios.error, OSError, ValueError) as e:
            raise ShellBridgeError(ErrorKind.TERMINAL_MODE_FAILED, describe_error(e)) from e
        stack.callback(self._release, "terminal mode", lambda: self.terminal.restore(state), logger)

    def pty_request(self) -> PtyRequest:
        """Build the pty request from config and the local terminal size."""
        term = lookup(self.config, "pty.term", DEFAULT_TERM)
        rows = lookup(self.config, "pty.rows", DEFAULT_PTY_ROWS)
        cols = lookup(self.config, "pty.cols", DEFAULT_PTY_COLS)
        if lookup(self.config, "pty.detect_size", True):
            size = self._local_size()
            if size:
                rows, cols = size
        return PtyRequest(term=term, rows=rows, cols=cols)

    def _request_pty(self, channel) -> None:
        request = self.pty_request()
        try:
            channel.get_pty(term=request.term, width=request.cols, height=request.rows)
        except SSH_ERRORS as e:
            raise ShellBridgeError(ErrorKind.PTY_FAILED, describe_error(e)) from e

    def _start_shell(self, channel) -> None:
        try:
            channel.invoke_shell()
        except SSH_ERRORS as e:
            raise ShellBridgeError(ErrorKind.SHELL_START_FAILED, describe_error(e)) from e

    def _local_size(self) -> Optional[Tuple[int, int]]:
        size_of = getattr(self.terminal, "size", None)
        return size_of() if size_of else None

    def _install_signal_handlers(self, stack: contextlib.ExitStack, channel) -> None:
        if not self.handle_signals or threading.current_thread() is not threading.main_thread():
            return

        handlers = {signal.SIGTERM: _raise_interrupt}
        if hasattr(signal, "SIGHUP"):
            handlers[signal.SIGHUP] = _raise_interrupt
        if hasattr(signal, "SIGWINCH") and lookup(self.config, "pty.detect_size", True):
            handlers[signal.SIGWINCH] = lambda signum, frame: self._resize(channel)

        for signum, handler in handlers.items():
            previous = signal.signal(signum, handler)
            if previous is None:
                previous = signal.SIG_DFL
            stack.callback(signal.signal, signum, previous)

    def _resize(self, channel) -> None:
        size = self._local_size()
        if not size:
            return
        rows, cols = size
        try:
            channel.resize_pty(width=cols, height=rows)
        except SSH_ERRORS as e:
            self.diagnostics.append(f"resize pty: {describe_error(e)}")

    def _release(self, resource: str, release: Callable[[], Any], logger) -> None:
        if resource in self._released:
            return
        self._released.add(resource)
        try:
            release()
        except Exception as e:
            self._note(logger, resource, e)

    def _note(self, logger, resource: str, error: BaseException) -> None:
        self.diagnostics.append(f"{resource}: {describe_error(error)}")
        self._log(logger, "teardown_error", resource, describe_error(error))

    def _log(self, logger, event: str, *args) -> None:
        """Write a session log event. A failing log never ends the session."""
        try:
            getattr(logger, event)(*args)
        except OSError as e:
            note = f"session log: {describe_error(e)}"
            if note not in self.diagnostics:
                self.diagnostics.append(note)

    def _make_logger(self, host: HostRecord):
        if not lookup(self.config, "logging.enabled", True):
            return NullSessionLogger()
        try:
            return SessionLogger(host.address, logs_dir=lookup(self.config, "logging.dir"))
        except OSError as e:
            self.diagnostics.append(f"session log: {describe_error(e)}")
            return NullSessionLogger()
