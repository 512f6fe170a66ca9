import logging
from typing import Any, Dict, Optional
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.permissions import Actor
from app.core.logging import log_user_action
from app.models.auth.audit_log import AuditLog
from app.utils.date_time_serializer import serialize_dates

logger = logging.getLogger(__name__)

class AuditService:
    """Writes audit entries. Never raises: a failed audit write must not undo the operation it describes."""

    def __init__(self, session: AsyncSession):
        self.session = session

    async def log(
        self,
        action: str,
        entity_type: str,
        entity_id: Optional[int],
        actor: Actor,
        changes: Optional[Dict[str, Any]] = None,
        metadata: Optional[Dict[str, Any]] = None,
        context: Optional[Dict[str, Optional[str]]] = None,
    ) -> None:
        """Log audit event"""
        context = context or {}
        try:
            audit_log = AuditLog(
                user_id=actor.employee_id,
                user_role=actor.role.value,
                action=action,
                entity_type=entity_type,
                entity_id=entity_id,
                changes=serialize_dates(changes) if changes else None,
                meta=serialize_dates(metadata) if metadata else None,
                ip_address=context.get("ip_address"),
                user_agent=context.get("user_agent"),
            )
            self.session.add(audit_log)
            await self.session.commit()
            log_user_action(actor.employee_id, action, entity_type, entity_id)
        except Exception as e:
            await self.session.rollback()
            logger.error(f"Error logging audit event {action} on {entity_type} {entity_id}: {str(e)}")
