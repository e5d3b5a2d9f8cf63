# stabby logs command
# Browse per-session event logs

from typing import List, Optional

from ..config import get_config_value
from ..core.session_log import SessionLogReader

usage = '''[<session-id>]

Without arguments, lists recent sessions.
With a session id, prints that session's events.
'''


def _status_text(record: dict) -> str:
    if record["success"] is None:
        return "unfinished"
    if record["success"]:
        return "ok"
    status = record.get("exit_status")
    return "failed" if status is None else f"failed ({status})"


def cmd_list(args: List[str], reader: Optional[SessionLogReader] = None) -> None:
    """List recent sessions."""
    reader = reader or SessionLogReader(get_config_value("logging.dir"))
    records = reader.list_sessions()
    if not records:
        print("No sessions logged yet.")
        return

    print(f"{'Session':<14} {'Started':<20} {'Host':<28} Status")
    print("-" * 72)
    for record in records:
        started = record["started"][:19].replace("T", " ")
        print(f"{record['session_id']:<14} {started:<20} {record['host']:<28} {_status_text(record)}")


def cmd_show(session_id: str, reader: Optional[SessionLogReader] = None) -> None:
    """Print all events of one session."""
    reader = reader or SessionLogReader(get_config_value("logging.dir"))
    entries = reader.read_session(session_id)
    if not entries:
        print(f"No log found for session: {session_id}")
        raise SystemExit(1)

    for entry in entries:
        ts = entry.get("ts", "")[11:19]
        event = entry.get("event", "")
        details = {k: v for k, v in entry.items() if k not in ("ts", "event", "session_id")}
        detail_text = " ".join(f"{k}={v}" for k, v in details.items())
        print(f"{ts} {event:<15} {detail_text}".rstrip())


def main(args: List[str]) -> Optional[str]:
    """Main entry point for logs command."""
    if args and args[0] in ("-h", "--help"):
        print(usage)
        return None
    if args:
        cmd_show(args[0])
    else:
        cmd_list(args)
    return None
