# stabby data models
# Host records and selection outcomes

from dataclasses import dataclass, field
from typing import Any, Dict, Optional

from ..constants import DEFAULT_SSH_PORT


class HostConfigError(ValueError):
    """Invalid or unreadable host list."""
    def __init__(self, message: str, entry_num: int = 0):
        self.entry_num = entry_num
        if entry_num:
            message = f"Entry {entry_num}: {message}"
        super().__init__(message)


@dataclass(frozen=True)
class HostRecord:
    """One configured remote target."""
    host: str
    port: int = DEFAULT_SSH_PORT
    description: str = ""
    secret: str = field(default="", repr=False)
    username: Optional[str] = None

    def __post_init__(self):
        if not self.host:
            raise HostConfigError("host is required")
        if isinstance(self.port, bool) or not isinstance(self.port, int):
            raise HostConfigError(f"port must be an integer, got {self.port!r}")
        if not 1 <= self.port <= 65535:
            raise HostConfigError(f"port out of range: {self.port}")

    @property
    def address(self) -> str:
        return f"{self.host}:{self.port}"

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> "HostRecord":
        """Create from a host file entry (keys: host, port, desc, password, user)."""
        port = data.get("port", DEFAULT_SSH_PORT)
        if isinstance(port, str) and port.strip().isdigit():
            port = int(port.strip())
        description = data.get("desc")
        secret = data.get("password")
        username = data.get("user")
        return cls(
            host=str(data.get("host") or "").strip(),
            port=port,
            description="" if description is None else str(description),
            secret="" if secret is None else str(secret),
            username=str(username).strip() if username else None,
        )


@dataclass(frozen=True)
class SelectionOutcome:
    """Result of one selector run: a chosen index, or quit (index is None)."""
    index: Optional[int] = None

    def __post_init__(self):
        if self.index is not None and self.index < 0:
            raise ValueError(f"Invalid selection index: {self.index}")

    @classmethod
    def chosen(cls, index: int) -> "SelectionOutcome":
        return cls(index=index)

    @classmethod
    def quit(cls) -> "SelectionOutcome":
        return cls(index=None)

    @property
    def is_quit(self) -> bool:
        return self.index is None
