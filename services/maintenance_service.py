"""
Recipe Share Maintenance Service
Guest chat expiry sweep and counter reconciliation
"""

from dataclasses import dataclass
from datetime import datetime
from typing import Optional

import structlog
from sqlalchemy import delete, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from core.monitoring import record_reconciled, record_sweep
from models.chat_models import ChatConversation, ChatMessage
from services.collection_service import reconcile_collection_counts
from services.favorite_service import reconcile_favorite_counts
from utils.date_utils import as_naive_utc, utcnow

logger = structlog.get_logger()


@dataclass
class SweepResult:
    deleted: int = 0
    failed: int = 0


@dataclass
class ReconcileResult:
    favorite_counts_fixed: int = 0
    collection_counts_fixed: int = 0


def purge_expired_guest_conversations(
    db: Session, now: Optional[datetime] = None, batch_size: int = 500
) -> SweepResult:
    """
    Delete guest conversations whose expiry has passed.

    Only rows with no owning user and an expiry strictly before now are
    touched. Each row is removed in its own savepoint so one failure does
    not undo the others; a failed row stays for the next run. Running the
    sweep again with no new expirations deletes nothing.
    """
    cutoff = as_naive_utc(now) if now is not None else utcnow()
    result = SweepResult()

    expired_ids = db.scalars(
        select(ChatConversation.id)
        .where(
            ChatConversation.user_id.is_(None),
            ChatConversation.expires_at.is_not(None),
            ChatConversation.expires_at < cutoff,
        )
        .order_by(ChatConversation.expires_at)
        .limit(batch_size)
    ).all()

    for conversation_id in expired_ids:
        try:
            with db.begin_nested():
                db.execute(
                    delete(ChatMessage).where(ChatMessage.conversation_id == conversation_id),
                    execution_options={"synchronize_session": False},
                )
                deleted = db.execute(
                    delete(ChatConversation).where(
                        ChatConversation.id == conversation_id,
                        ChatConversation.user_id.is_(None),
                    ),
                    execution_options={"synchronize_session": False},
                ).rowcount
            result.deleted += deleted
        except SQLAlchemyError as e:
            result.failed += 1
            logger.error(
                "Failed to purge expired conversation",
                conversation_id=conversation_id,
                error=str(e),
                error_type=type(e).__name__,
            )

    db.commit()
    record_sweep(result.deleted, result.failed)

    if result.deleted or result.failed:
        logger.info("Expired guest conversations purged", deleted=result.deleted, failed=result.failed)
    return result


def reconcile_counters(db: Session) -> ReconcileResult:
    """Recount favorite_count and recipe_count from their source rows"""
    result = ReconcileResult(
        favorite_counts_fixed=reconcile_favorite_counts(db),
        collection_counts_fixed=reconcile_collection_counts(db),
    )
    db.commit()
    record_reconciled("favorite_count", result.favorite_counts_fixed)
    record_reconciled("recipe_count", result.collection_counts_fixed)
    return result


def run_maintenance(db: Session, now: Optional[datetime] = None):
    """One full pass: expiry sweep then counter reconciliation"""
    sweep = purge_expired_guest_conversations(db, now=now)
    counters = reconcile_counters(db)
    logger.info(
        "Maintenance pass complete",
        expired_deleted=sweep.deleted,
        expired_failed=sweep.failed,
        favorite_counts_fixed=counters.favorite_counts_fixed,
        collection_counts_fixed=counters.collection_counts_fixed,
    )
    return sweep, counters
