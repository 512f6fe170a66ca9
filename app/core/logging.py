import logging
from typing import Any

logger = logging.getLogger("app")
audit_logger = logging.getLogger("audit")

def log_user_action(user_id: int, action: str, entity: str, entity_id: Any = None):
    """One line per audited user action, written to the audit log file"""
    audit_logger.info(f"User {user_id} performed {action} on {entity} {entity_id if entity_id is not None else ''}".rstrip())
