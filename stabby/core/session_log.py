# stabby session log
# JSONL.GZ lifecycle log for shell sessions

import gzip
import json
import uuid
from pathlib import Path
from datetime import datetime
from typing import List, Optional

from ..constants import LOGS_DIR


def get_logs_dir(path: Optional[str] = None) -> Path:
    """Get the logs directory path, creating it if needed."""
    logs_dir = Path(path).expanduser() if path else LOGS_DIR
    logs_dir.mkdir(parents=True, exist_ok=True)
    return logs_dir


class SessionLogger:
    """
    Session lifecycle logger using JSONL.GZ compressed storage.

    Records state transitions and teardown diagnostics for one shell
    session. Relayed terminal bytes and secrets are never written.

    Features:
    - Real-time write (flush after each entry)
    - Compress to .gz after the session ends
    """

    def __init__(self, host: str, logs_dir: Optional[str] = None, session_id: Optional[str] = None):
        """
        Initialize session logger.

        Args:
            host: host:port of the target
            logs_dir: Directory for log files (defaults to ~/.config/stabby/logs)
            session_id: Session ID (generated when omitted)
        """
        self.logs_dir = get_logs_dir(logs_dir)
        self.session_id = session_id or uuid.uuid4().hex[:12]
        self.host = host

        # Use uncompressed temp file during the session, compress at end
        date_prefix = datetime.now().strftime("%Y-%m-%d")
        self.temp_file = self.logs_dir / f"{date_prefix}_{self.session_id}.jsonl"
        self.final_file = self.logs_dir / f"{date_prefix}_{self.session_id}.jsonl.gz"
        self._file = open(self.temp_file, "a", encoding="utf-8")
        self._closed = False

    def _write(self, event: str, **kwargs) -> None:
        """Write a log entry."""
        if self._closed:
            return

        entry = {
            "ts": datetime.now().isoformat(),
            "event": event,
            "session_id": self.session_id,
            **kwargs
        }
        self._file.write(json.dumps(entry, ensure_ascii=False) + "\n")
        self._file.flush()

    def start(self, username: str) -> None:
        """Log session start."""
        self._write("session_start", host=self.host, user=username)

    def state(self, name: str) -> None:
        """Log entry into a bridge state."""
        self._write("state", state=name)

    def state_failed(self, name: str, error: str) -> None:
        """Log the failure that ended the session."""
        self._write("state_failed", state=name, error=error)

    def teardown_error(self, resource: str, error: str) -> None:
        """Log a failure while releasing a resource."""
        self._write("teardown_error", resource=resource, error=error)

    def end(self, success: bool, duration_ms: int, exit_status: Optional[int] = None) -> None:
        """Log session end and compress the log file."""
        self._write("session_end", ok=success, ms=duration_ms, exit_status=exit_status)
        self._file.close()
        self._closed = True
        self._compress()

    def _compress(self) -> None:
        """Compress the temp file to .gz."""
        try:
            with open(self.temp_file, "rb") as f_in:
                with gzip.open(self.final_file, "wb") as f_out:
                    f_out.writelines(f_in)
            self.temp_file.unlink()
        except OSError:
            # Keep the uncompressed file if compression fails
            pass

    def __del__(self):
        """Ensure file is closed on deletion."""
        if not self._closed and hasattr(self, '_file'):
            try:
                self._file.close()
            except OSError:
                pass


class NullSessionLogger:
    """Logger with the SessionLogger interface that writes nothing."""

    session_id = ""

    def start(self, username: str) -> None:
        pass

    def state(self, name: str) -> None:
        pass

    def state_failed(self, name: str, error: str) -> None:
        pass

    def teardown_error(self, resource: str, error: str) -> None:
        pass

    def end(self, success: bool, duration_ms: int, exit_status: Optional[int] = None) -> None:
        pass


class SessionLogReader:
    """Session log reader supporting .gz compressed logs."""

    def __init__(self, logs_dir: Optional[str] = None):
        self.logs_dir = get_logs_dir(logs_dir)

    def list_sessions(self, limit: int = 20) -> List[dict]:
        """List recent session records, newest first."""
        logs = list(self.logs_dir.glob("*.jsonl.gz")) + list(self.logs_dir.glob("*.jsonl"))
        logs = sorted(logs, key=lambda p: p.stat().st_mtime, reverse=True)

        results = []
        for log in logs[:limit]:
            entries = self._read_log_file(log)
            if not entries:
                continue
            first = entries[0]
            last = entries[-1]
            ended = last.get("event") == "session_end"
            results.append({
                "session_id": first.get("session_id", ""),
                "host": first.get("host", ""),
                "started": first.get("ts", ""),
                "success": last.get("ok") if ended else None,
                "exit_status": last.get("exit_status") if ended else None,
                "duration_ms": last.get("ms", 0) if ended else 0,
                "file": str(log),
            })
        return results

    def read_session(self, session_id: str) -> List[dict]:
        """Read all entries for a session."""
        for pattern in [f"*_{session_id}.jsonl.gz", f"*_{session_id}.jsonl"]:
            matches = list(self.logs_dir.glob(pattern))
            if matches:
                return self._read_log_file(matches[0])
        return []

    def _read_log_file(self, path: Path) -> List[dict]:
        """Read all entries from a log file."""
        if path.name.endswith(".gz"):
            with gzip.open(path, "rt", encoding="utf-8") as f:
                lines = [line.strip() for line in f if line.strip()]
        else:
            with open(path, "r", encoding="utf-8") as f:
                lines = [line.strip() for line in f if line.strip()]

        entries = []
        for line in lines:
            try:
                entries.append(json.loads(line))
            except json.JSONDecodeError:
                continue
        return entries
