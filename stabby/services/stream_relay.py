# stabby stream relay
# Concurrent byte pumps between local standard streams and an SSH channel

import os
import select
import threading
import time
from typing import BinaryIO, Callable, List, Optional

import paramiko


READ_SIZE = 32768


class StreamRelay:
    """
    Relay bytes between the local process and a remote session channel.

    Three pumps run on daemon threads so that none of them can block the
    others: local stdin -> channel, channel stdout -> local stdout and
    channel stderr -> local stderr. wait() blocks on the session ending,
    not on any single stream.
    """

    def __init__(
        self,
        channel,
        stdin_fd: int,
        stdout: BinaryIO,
        stderr: BinaryIO,
        poll_interval: float = 0.05,
        on_error: Optional[Callable[[str, BaseException], None]] = None,
    ):
        """
        Initialize the relay.

        Args:
            channel: paramiko Channel (or compatible object)
            stdin_fd: File descriptor of local input
            stdout: Binary stream for remote stdout
            stderr: Binary stream for remote stderr
            poll_interval: Seconds between checks for session end
            on_error: Called with (pump name, exception) when a pump fails
        """
        self.channel = channel
        self.stdin_fd = stdin_fd
        self.stdout = stdout
        self.stderr = stderr
        self.poll_interval = poll_interval
        self.on_error = on_error
        self._stop = threading.Event()
        self._threads: List[threading.Thread] = []
        self._output_threads: List[threading.Thread] = []

    def start(self) -> None:
        """Start the three pumps."""
        if self._threads:
            return
        out_thread = threading.Thread(
            target=self._pump_output,
            args=("stdout", self.channel.recv, self.stdout),
            name="stabby-relay-stdout",
            daemon=True,
        )
        err_thread = threading.Thread(
            target=self._pump_output,
            args=("stderr", self.channel.recv_stderr, self.stderr),
            name="stabby-relay-stderr",
            daemon=True,
        )
        in_thread = threading.Thread(
            target=self._pump_input,
            name="stabby-relay-stdin",
            daemon=True,
        )
        self._output_threads = [out_thread, err_thread]
        self._threads = [out_thread, err_thread, in_thread]
        for thread in self._threads:
            thread.start()

    def wait(self, drain_timeout: float = 1.0) -> int:
        """
        Block until the remote side exits or the channel closes.

        Returns:
            Remote exit status, or -1 if the channel closed without one
        """
        while not self.channel.exit_status_ready():
            if self.channel.closed:
                break
            time.sleep(self.poll_interval)

        status = self.channel.recv_exit_status() if self.channel.exit_status_ready() else -1

        # Let buffered output reach the local terminal before teardown
        for thread in self._output_threads:
            thread.join(drain_timeout)
        return status

    def stop(self, timeout: float = 1.0) -> None:
        """Ask the pumps to finish and wait briefly for them."""
        self._stop.set()
        for thread in self._threads:
            if thread is not threading.current_thread():
                thread.join(timeout)

    @property
    def running(self) -> bool:
        return any(thread.is_alive() for thread in self._threads)

    def _pump_output(self, name: str, recv: Callable[[int], bytes], sink: BinaryIO) -> None:
        try:
            while not self._stop.is_set():
                data = recv(READ_SIZE)
                if not data:
                    break
                sink.write(data)
                sink.flush()
        except (OSError, EOFError, ValueError, paramiko.SSHException) as e:
            self._report(name, e)

    def _pump_input(self) -> None:
        try:
            while not self._stop.is_set() and not self.channel.closed:
                readable, _, _ = select.select([self.stdin_fd], [], [], self.poll_interval)
                if not readable:
                    continue
                data = os.read(self.stdin_fd, 1024)
                if not data:
                    # Local EOF: half-close so the remote shell sees it
                    self.channel.shutdown_write()
                    break
                self.channel.sendall(data)
        except (OSError, EOFError, ValueError, paramiko.SSHException) as e:
            if not self._stop.is_set() and not self.channel.closed:
                self._report("stdin", e)

    def _report(self, name: str, error: BaseException) -> None:
        if self.on_error:
            self.on_error(name, error)
