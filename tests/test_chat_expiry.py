from datetime import timedelta

from sqlalchemy import func, select
from sqlalchemy.exc import OperationalError

from models.chat_models import ChatConversation, ChatMessage
from services.maintenance_service import purge_expired_guest_conversations, run_maintenance
from tests.conftest import auth_headers
from utils.date_utils import utcnow

API = "/api/v1/chat/conversations"


def guest(session_id):
    return {"X-Session-ID": session_id}


def add_conversation(db, user_id=None, session_id=None, expires_in_hours=None, messages=1):
    now = utcnow()
    conversation = ChatConversation(
        user_id=user_id,
        session_id=session_id,
        expires_at=now + timedelta(hours=expires_in_hours) if expires_in_hours is not None else None,
        created_at=now,
        updated_at=now,
    )
    db.add(conversation)
    db.flush()
    for index in range(messages):
        db.add(ChatMessage(conversation_id=conversation.id, role="user", content=f"hi {index}", created_at=now))
    db.commit()
    return conversation


def count(db, model):
    return db.scalar(select(func.count()).select_from(model))


class TestGuestConversations:
    def test_guest_conversation_bound_to_session(self, client):
        created = client.post(API, json={"title": "Dinner ideas"}, headers=guest("sess-a"))
        assert created.status_code == 201
        body = created.json()
        assert body["user_id"] is None
        assert body["session_id"] == "sess-a"
        assert body["expires_at"] is not None

        url = f"{API}/{body['id']}"
        assert client.get(url, headers=guest("sess-a")).status_code == 200
        assert client.get(url, headers=guest("sess-b")).status_code == 404
        assert client.get(url).status_code == 404

        message = client.post(f"{url}/messages", json={"content": "Something with leeks?"}, headers=guest("sess-a"))
        assert message.status_code == 201
        assert [m["content"] for m in client.get(url, headers=guest("sess-a")).json()["messages"]] == [
            "Something with leeks?"
        ]

    def test_guest_needs_session_header(self, client):
        response = client.post(API)
        assert response.status_code == 422
        assert response.json()["error"] == "validation_failed"

    def test_expired_guest_conversation_reads_as_missing(self, client, db_session):
        stale = add_conversation(db_session, session_id="sess-a", expires_in_hours=-1)
        assert client.get(f"{API}/{stale.id}", headers=guest("sess-a")).status_code == 404
        assert client.get(API, headers=guest("sess-a")).json() == []

    def test_user_conversation_has_no_expiry(self, client, alice, bob):
        created = client.post(API, headers={**auth_headers(alice), **guest("ignored")}).json()
        assert created["user_id"] == alice.id
        assert created["session_id"] is None
        assert created["expires_at"] is None
        assert client.get(f"{API}/{created['id']}", headers=auth_headers(bob)).status_code == 404

    def test_message_context_must_be_readable(self, client, alice, private_recipe):
        conversation = client.post(API, headers=guest("sess-a")).json()
        response = client.post(
            f"{API}/{conversation['id']}/messages",
            json={"content": "Tell me about this", "recipe_context_id": private_recipe.id},
            headers=guest("sess-a"),
        )
        assert response.status_code == 404


class TestExpirySweep:
    def test_sweep_removes_only_expired_guest_rows(self, db_session, alice):
        expired = add_conversation(db_session, session_id="old", expires_in_hours=-2, messages=3)
        live = add_conversation(db_session, session_id="new", expires_in_hours=5)
        owned = add_conversation(db_session, user_id=alice.id)
        # A user row carrying an expiry is still never swept
        owned_with_expiry = add_conversation(db_session, user_id=alice.id, expires_in_hours=-2)

        result = purge_expired_guest_conversations(db_session)
        assert result.deleted == 1
        assert result.failed == 0

        db_session.expire_all()
        assert db_session.get(ChatConversation, expired.id) is None
        for survivor in (live, owned, owned_with_expiry):
            assert db_session.get(ChatConversation, survivor.id) is not None
        assert count(db_session, ChatMessage) == 3

    def test_sweep_is_idempotent(self, db_session):
        add_conversation(db_session, session_id="old", expires_in_hours=-1)

        assert purge_expired_guest_conversations(db_session).deleted == 1
        assert purge_expired_guest_conversations(db_session).deleted == 0

    def test_expiry_is_strictly_before_now(self, db_session):
        conversation = add_conversation(db_session, session_id="edge", expires_in_hours=1)

        assert purge_expired_guest_conversations(db_session, now=conversation.expires_at).deleted == 0
        later = conversation.expires_at + timedelta(seconds=1)
        assert purge_expired_guest_conversations(db_session, now=later).deleted == 1

    def test_admin_sweep_endpoint(self, client, db_session, admin, alice):
        add_conversation(db_session, session_id="old", expires_in_hours=-1)

        assert client.post("/api/v1/admin/maintenance/sweep", headers=auth_headers(alice)).status_code == 403
        response = client.post("/api/v1/admin/maintenance/sweep", headers=auth_headers(admin))
        assert response.status_code == 200
        assert response.json()["expired_conversations_deleted"] == 1

    def test_run_maintenance_reports_both_passes(self, db_session):
        add_conversation(db_session, session_id="old", expires_in_hours=-1)
        sweep, counters = run_maintenance(db_session)
        assert sweep.deleted == 1
        assert counters.favorite_counts_fixed == 0
        assert counters.collection_counts_fixed == 0

    def test_failed_row_is_kept_for_next_run(self, db_session, monkeypatch):
        stuck = add_conversation(db_session, session_id="stuck", expires_in_hours=-3, messages=2)
        others = [add_conversation(db_session, session_id=f"old-{i}", expires_in_hours=-1) for i in range(2)]

        execute = db_session.execute
        failures = []

        def locked_once(statement, *args, **kwargs):
            if getattr(statement, "is_delete", False) and statement.table is ChatMessage.__table__ and not failures:
                failures.append(statement)
                raise OperationalError("DELETE FROM chat_messages", {}, Exception("database is locked"))
            return execute(statement, *args, **kwargs)

        monkeypatch.setattr(db_session, "execute", locked_once)
        result = purge_expired_guest_conversations(db_session)
        assert result.failed == 1
        assert result.deleted == 2

        db_session.expire_all()
        assert db_session.get(ChatConversation, stuck.id) is not None
        assert count(db_session, ChatMessage) == 2
        for conversation in others:
            assert db_session.get(ChatConversation, conversation.id) is None

        monkeypatch.undo()
        retry = purge_expired_guest_conversations(db_session)
        assert retry.deleted == 1
        assert retry.failed == 0
        assert count(db_session, ChatConversation) == 0
