"""
Audit logging of authorization decisions.
"""

from abc import ABC, abstractmethod
from collections import deque
from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, List, Optional
import json
import logging
import threading
import uuid


logger = logging.getLogger(__name__)


@dataclass
class DecisionRecord:
    """One authorization decision as kept in the audit trail."""
    resource_id: str
    policy: str
    allowed: bool
    reason: str
    principal_id: Optional[str] = None
    event_id: str = field(default_factory=lambda: str(uuid.uuid4()))
    timestamp: datetime = field(default_factory=datetime.now)

    def to_dict(self) -> Dict[str, Any]:
        """Convert to dictionary representation."""
        return {
            'event_id': self.event_id,
            'timestamp': self.timestamp.isoformat(),
            'principal_id': self.principal_id,
            'resource_id': self.resource_id,
            'policy': self.policy,
            'allowed': self.allowed,
            'reason': self.reason
        }

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'DecisionRecord':
        """Create from dictionary representation."""
        return cls(
            event_id=data['event_id'],
            timestamp=datetime.fromisoformat(data['timestamp']),
            principal_id=data.get('principal_id'),
            resource_id=data['resource_id'],
            policy=data['policy'],
            allowed=data['allowed'],
            reason=data['reason']
        )

    def matches(self,
                resource_id: Optional[str] = None,
                principal_id: Optional[str] = None,
                allowed: Optional[bool] = None,
                start_time: Optional[datetime] = None,
                end_time: Optional[datetime] = None) -> bool:
        if resource_id and self.resource_id != resource_id:
            return False
        if principal_id and self.principal_id != principal_id:
            return False
        if allowed is not None and self.allowed != allowed:
            return False
        if start_time and self.timestamp < start_time:
            return False
        if end_time and self.timestamp > end_time:
            return False
        return True


class AuditLogger(ABC):
    """Abstract base class for audit logging"""

    @abstractmethod
    def log(self, record: DecisionRecord) -> None:
        """Log a decision record"""
        pass

    @abstractmethod
    def get_events(
        self,
        resource_id: Optional[str] = None,
        principal_id: Optional[str] = None,
        allowed: Optional[bool] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> List[DecisionRecord]:
        """Retrieve decision records with optional filtering"""
        pass

    def close(self) -> None:
        """Close the audit logger and release resources"""
        pass


class MemoryAuditLogger(AuditLogger):
    """In-memory audit logger for development and testing"""

    def __init__(self, max_entries: int = 1000):
        self.max_entries = max_entries
        self.events: deque = deque(maxlen=max_entries)
        self._lock = threading.Lock()

    def log(self, record: DecisionRecord) -> None:
        with self._lock:
            self.events.append(record)

    def get_events(
        self,
        resource_id: Optional[str] = None,
        principal_id: Optional[str] = None,
        allowed: Optional[bool] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> List[DecisionRecord]:
        with self._lock:
            return [
                e for e in self.events
                if e.matches(resource_id, principal_id, allowed, start_time, end_time)
            ]


class FileAuditLogger(AuditLogger):
    """File-based audit logger writing one JSON document per line"""

    def __init__(self, file_path: str):
        self.file_path = file_path
        self._lock = threading.Lock()

    def log(self, record: DecisionRecord) -> None:
        with self._lock:
            with open(self.file_path, "a", encoding="utf-8") as f:
                f.write(json.dumps(record.to_dict()) + "\n")

    def get_events(
        self,
        resource_id: Optional[str] = None,
        principal_id: Optional[str] = None,
        allowed: Optional[bool] = None,
        start_time: Optional[datetime] = None,
        end_time: Optional[datetime] = None,
    ) -> List[DecisionRecord]:
        events = []

        try:
            with open(self.file_path, "r", encoding="utf-8") as f:
                for line_no, line in enumerate(f, 1):
                    if not line.strip():
                        continue
                    try:
                        record = DecisionRecord.from_dict(json.loads(line))
                    except (json.JSONDecodeError, KeyError, TypeError, ValueError) as e:
                        logger.warning(f"Skipping malformed audit line {line_no} in {self.file_path}: {e}")
                        continue

                    if record.matches(resource_id, principal_id, allowed, start_time, end_time):
                        events.append(record)
        except FileNotFoundError:
            # Nothing logged yet
            pass

        return events


def create_audit_logger(logger_type: str = "memory", **kwargs) -> Optional[AuditLogger]:
    """
    Factory function to create audit loggers

    Args:
        logger_type: Type of logger ("none", "memory" or "file")
        **kwargs: Additional arguments for the logger

    Returns:
        AuditLogger instance, or None for "none"
    """
    if logger_type == "none":
        return None
    elif logger_type == "memory":
        max_entries = kwargs.get("max_entries", 1000)
        return MemoryAuditLogger(max_entries)
    elif logger_type == "file":
        file_path = kwargs.get("file_path") or "claimauthz-audit.log"
        return FileAuditLogger(file_path)
    else:
        raise ValueError(f"Unknown logger type: {logger_type}")
