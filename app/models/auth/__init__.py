# app/models/auth/__init__.py

from .audit_log import AuditLog

__all__ = [
    "AuditLog",
]
