"""
Audit module initialization
"""

from .logger import AuditLogger, DecisionRecord, MemoryAuditLogger, FileAuditLogger, create_audit_logger

__all__ = [
    "AuditLogger",
    "DecisionRecord",
    "MemoryAuditLogger",
    "FileAuditLogger",
    "create_audit_logger"
]
