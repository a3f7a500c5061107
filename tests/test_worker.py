from datetime import timedelta

from sqlalchemy import func, select

import worker
from models.chat_models import ChatConversation
from utils.date_utils import utcnow


def test_run_once_purges_expired_guest_chats(db_session):
    now = utcnow()
    db_session.add(ChatConversation(
        session_id="gone", expires_at=now - timedelta(minutes=5), created_at=now, updated_at=now,
    ))
    db_session.commit()

    assert worker.run_once() is True
    assert db_session.scalar(select(func.count()).select_from(ChatConversation)) == 0


def test_run_once_reports_failure(monkeypatch):
    def broken(db):
        raise RuntimeError("database went away")

    monkeypatch.setattr(worker, "run_maintenance", broken)
    assert worker.run_once() is False
