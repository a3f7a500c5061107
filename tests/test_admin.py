import pytest
from sqlalchemy import func, select

from core.exceptions import Forbidden, NotFound, ValidationFailed
from models.audit_models import ActivityLog, AdminAction
from models.recipe_models import Recipe
from models.social_models import Collection, CollectionRecipe, Favorite, Review
from models.users import User, UserRole
from services import admin_service, favorite_service
from services.collection_service import collection_service
from schemas.social_schemas import CollectionCreate, ReviewCreate
from services.policy import EntityType
from services.review_service import review_service
from tests.conftest import auth_headers, make_recipe

API = "/api/v1/admin"


def count(db, model, *criteria):
    return db.scalar(select(func.count()).select_from(model).where(*criteria))


def test_role_change_is_audited(client, db_session, admin, bob):
    response = client.put(
        f"{API}/users/{bob.id}/role", json={"role": "admin", "reason": "moderator"}, headers=auth_headers(admin)
    )
    assert response.status_code == 200
    assert response.json()["role"] == "admin"

    actions = client.get(f"{API}/actions?action_type=change_role", headers=auth_headers(admin)).json()
    assert actions["total"] == 1
    assert actions["items"][0]["details"] == {"from": "user", "to": "admin"}
    assert actions["items"][0]["target_id"] == bob.id


def test_non_admin_is_rejected(client, alice, bob):
    assert client.get(f"{API}/actions", headers=auth_headers(alice)).status_code == 403
    assert client.put(f"{API}/users/{bob.id}/role", json={"role": "admin"}, headers=auth_headers(alice)).status_code == 403
    assert client.delete(f"{API}/users/{bob.id}", headers=auth_headers(alice)).status_code == 403
    assert client.get(f"{API}/actions").status_code == 401


def test_admin_cannot_target_self(db_session, admin, admin_principal):
    with pytest.raises(ValidationFailed):
        admin_service.change_user_role(db_session, admin_principal, admin.id, UserRole.USER)
    with pytest.raises(NotFound):
        admin_service.deactivate_user(db_session, admin_principal, "00000000-0000-0000-0000-000000000000")


def test_deactivated_user_loses_access(client, admin, bob):
    response = client.post(f"{API}/users/{bob.id}/deactivate", json={"reason": "spam"}, headers=auth_headers(admin))
    assert response.status_code == 200
    assert response.json()["is_active"] is False
    assert client.get("/api/v1/auth/me", headers=auth_headers(bob)).status_code == 401


def test_record_admin_action_requires_admin(db_session, alice_principal):
    with pytest.raises(Forbidden):
        admin_service.record_admin_action(
            db_session, alice_principal, "delete_recipe", EntityType.RECIPE, "r1"
        )


def test_hard_delete_cascades_and_fixes_counters(
    client, db_session, admin, alice, bob, alice_principal, bob_principal, public_recipe
):
    # Bob's content, plus his marks on Alice's content
    bob_recipe = make_recipe(db_session, bob, title="Bob's Bread", is_public=True)
    favorite_service.add_favorite(db_session, bob_principal, public_recipe.id)
    favorite_service.add_favorite(db_session, alice_principal, bob_recipe.id)
    review_service.create_review(db_session, bob_principal, public_recipe.id, ReviewCreate(rating=4))
    review_service.create_review(db_session, alice_principal, bob_recipe.id, ReviewCreate(rating=5))
    bob_box = collection_service.create_collection(db_session, bob_principal, CollectionCreate(name="Bob's"))
    collection_service.add_recipe(db_session, bob_principal, bob_box.id, public_recipe.id)
    alice_box = collection_service.create_collection(db_session, alice_principal, CollectionCreate(name="Alice's"))
    collection_service.add_recipe(db_session, alice_principal, alice_box.id, bob_recipe.id)
    collection_service.add_recipe(db_session, alice_principal, alice_box.id, public_recipe.id)

    response = client.delete(f"{API}/users/{bob.id}?reason=gdpr", headers=auth_headers(admin))
    assert response.status_code == 200
    removed = response.json()["removed"]
    assert removed["recipes"] == 1
    assert removed["favorites"] == 2
    assert removed["reviews"] == 2
    assert removed["collections"] == 1

    db_session.expire_all()
    assert db_session.get(User, bob.id) is None
    assert db_session.get(Recipe, bob_recipe.id) is None
    assert count(db_session, Favorite, Favorite.user_id == bob.id) == 0
    assert count(db_session, Review, Review.author_id == bob.id) == 0
    assert count(db_session, Collection, Collection.owner_id == bob.id) == 0
    assert count(db_session, ActivityLog, ActivityLog.user_id == bob.id) == 0

    # Alice's rows survive with counters matching what is left
    assert db_session.get(Recipe, public_recipe.id).favorite_count == 0
    assert db_session.get(Collection, alice_box.id).recipe_count == 1
    assert count(db_session, CollectionRecipe, CollectionRecipe.collection_id == alice_box.id) == 1
    assert count(db_session, Review, Review.recipe_id == public_recipe.id) == 0

    action = db_session.scalar(select(AdminAction).where(AdminAction.action_type == "delete_user"))
    assert action.target_id == bob.id
    assert action.reason == "gdpr"
    assert action.details["recipes"] == 1


def test_hard_delete_of_admin_keeps_audit_rows(client, db_session, admin, alice, public_recipe):
    second = User(
        email="ops@example.com", username="ops", password_hash=admin.password_hash, role=UserRole.ADMIN,
        is_active=True, created_at=admin.created_at, updated_at=admin.updated_at,
    )
    db_session.add(second)
    db_session.commit()

    client.delete(f"/api/v1/recipes/{public_recipe.id}?reason=spam", headers=auth_headers(admin))
    assert client.delete(f"{API}/users/{admin.id}", headers=auth_headers(second)).status_code == 200

    db_session.expire_all()
    kept = db_session.scalar(select(AdminAction).where(AdminAction.action_type == "delete_recipe"))
    assert kept is not None
    assert kept.admin_id is None
    assert db_session.get(Recipe, public_recipe.id).deleted_by is None
