"""
Recipe Share Activity Service
Append-only per-user activity log
"""

from typing import Any, Dict, List, Optional

import structlog
from sqlalchemy import select
from sqlalchemy.orm import Session

from models.audit_models import ActivityLog
from services.policy import EntityType, Operation, Principal, enforce, require_authenticated
from utils.date_utils import utcnow

logger = structlog.get_logger()


def log_activity(
    db: Session,
    principal: Principal,
    activity_type: str,
    recipe_id: Optional[str] = None,
    details: Optional[Dict[str, Any]] = None,
    ip_address: Optional[str] = None,
    user_agent: Optional[str] = None,
) -> Optional[ActivityLog]:
    """
    Stage an activity row for the principal in the caller's transaction.
    Anonymous activity is not recorded.
    """
    if not principal.is_authenticated:
        return None

    entry = ActivityLog(
        user_id=principal.user_id,
        activity_type=activity_type,
        recipe_id=recipe_id,
        details=details,
        ip_address=ip_address,
        user_agent=user_agent,
        created_at=utcnow(),
    )
    enforce(principal, Operation.CREATE, EntityType.ACTIVITY_LOG, entry)
    db.add(entry)
    return entry


def list_own_activity(db: Session, principal: Principal, limit: int = 50, offset: int = 0) -> List[ActivityLog]:
    require_authenticated(principal)
    rows = db.scalars(
        select(ActivityLog)
        .where(ActivityLog.user_id == principal.user_id)
        .order_by(ActivityLog.created_at.desc())
        .limit(limit)
        .offset(offset)
    ).all()
    return [row for row in rows if enforce(principal, Operation.READ, EntityType.ACTIVITY_LOG, row)]
