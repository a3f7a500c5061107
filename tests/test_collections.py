from datetime import timedelta

from sqlalchemy import func, select, update

from models.social_models import Collection, CollectionRecipe
from services.collection_service import reconcile_collection_counts
from tests.conftest import auth_headers, make_recipe
from utils.date_utils import utcnow

API = "/api/v1/collections"


def create_collection(client, user, name="Weeknight", is_public=True):
    response = client.post(f"{API}/", json={"name": name, "is_public": is_public}, headers=auth_headers(user))
    assert response.status_code == 201
    return response.json()


def test_adding_and_removing_recipes_tracks_count(client, alice, public_recipe, private_recipe):
    collection = create_collection(client, alice)
    headers = auth_headers(alice)

    for recipe in (public_recipe, private_recipe):
        added = client.post(f"{API}/{collection['id']}/recipes/{recipe.id}", headers=headers)
        assert added.status_code == 201
        assert added.json()["added_by"] == alice.id

    assert client.get(f"{API}/{collection['id']}", headers=headers).json()["recipe_count"] == 2

    removed = client.delete(f"{API}/{collection['id']}/recipes/{public_recipe.id}", headers=headers)
    assert removed.status_code == 200
    assert removed.json()["recipe_count"] == 1


def test_duplicate_entry_is_conflict(client, alice, public_recipe):
    collection = create_collection(client, alice)
    url = f"{API}/{collection['id']}/recipes/{public_recipe.id}"
    client.post(url, json={"notes": "try with chili"}, headers=auth_headers(alice))

    assert client.post(url, headers=auth_headers(alice)).status_code == 409
    assert client.get(f"{API}/{collection['id']}").json()["recipe_count"] == 1


def test_cannot_file_someone_elses_private_recipe(client, db_session, alice, bob):
    hidden = make_recipe(db_session, bob, title="Bob's Secret", is_public=False)
    collection = create_collection(client, alice)

    response = client.post(f"{API}/{collection['id']}/recipes/{hidden.id}", headers=auth_headers(alice))
    assert response.status_code == 404
    assert db_session.scalar(select(func.count()).select_from(CollectionRecipe)) == 0


def test_only_owner_changes_collection(client, alice, bob, public_recipe):
    shared = create_collection(client, alice, is_public=True)
    drafts = create_collection(client, alice, name="Drafts", is_public=False)
    headers = auth_headers(bob)

    assert client.post(f"{API}/{shared['id']}/recipes/{public_recipe.id}", headers=headers).status_code == 403
    assert client.put(f"{API}/{shared['id']}", json={"name": "Bob's"}, headers=headers).status_code == 403
    assert client.post(f"{API}/{drafts['id']}/recipes/{public_recipe.id}", headers=headers).status_code == 404
    assert client.delete(f"{API}/{drafts['id']}", headers=headers).status_code == 404


def test_private_collection_hidden_from_listing(client, alice, bob):
    create_collection(client, alice, name="Shared", is_public=True)
    create_collection(client, alice, name="Drafts", is_public=False)

    assert sorted(c["name"] for c in client.get(f"{API}/").json()) == ["Shared"]
    assert sorted(c["name"] for c in client.get(f"{API}/", headers=auth_headers(bob)).json()) == ["Shared"]
    assert sorted(c["name"] for c in client.get(f"{API}/", headers=auth_headers(alice)).json()) == [
        "Drafts", "Shared",
    ]


def test_entries_of_unreadable_recipes_are_hidden(client, db_session, alice, bob, public_recipe):
    collection = create_collection(client, alice)
    client.post(f"{API}/{collection['id']}/recipes/{public_recipe.id}", headers=auth_headers(alice))

    assert len(client.get(f"{API}/{collection['id']}", headers=auth_headers(bob)).json()["entries"]) == 1

    client.delete(f"/api/v1/recipes/{public_recipe.id}", headers=auth_headers(alice))
    detail = client.get(f"{API}/{collection['id']}", headers=auth_headers(bob)).json()
    assert detail["entries"] == []
    # The entry survives the soft delete, so the counter does too
    assert detail["recipe_count"] == 1


def test_deleting_collection_removes_entries(client, db_session, alice, public_recipe):
    collection = create_collection(client, alice)
    client.post(f"{API}/{collection['id']}/recipes/{public_recipe.id}", headers=auth_headers(alice))

    assert client.delete(f"{API}/{collection['id']}", headers=auth_headers(alice)).status_code == 204

    db_session.expire_all()
    assert db_session.get(Collection, collection["id"]) is None
    assert db_session.scalar(select(func.count()).select_from(CollectionRecipe)) == 0


def test_reconcile_repairs_recipe_count(client, db_session, alice, public_recipe):
    collection = create_collection(client, alice)
    client.post(f"{API}/{collection['id']}/recipes/{public_recipe.id}", headers=auth_headers(alice))
    db_session.execute(update(Collection).where(Collection.id == collection["id"]).values(recipe_count=5))
    db_session.commit()

    assert reconcile_collection_counts(db_session) == 1
    db_session.commit()
    db_session.expire_all()
    assert db_session.get(Collection, collection["id"]).recipe_count == 1


def test_owner_update_stamps_updated_at(client, db_session, alice):
    collection = create_collection(client, alice)
    stale = utcnow() - timedelta(days=1)
    db_session.execute(update(Collection).where(Collection.id == collection["id"]).values(updated_at=stale))
    db_session.commit()

    response = client.put(f"{API}/{collection['id']}", json={"name": "Sunday"}, headers=auth_headers(alice))
    assert response.status_code == 200

    db_session.expire_all()
    assert db_session.get(Collection, collection["id"]).updated_at > stale


def test_null_for_required_field_is_validation_failure(client, alice):
    collection = create_collection(client, alice)
    for field in ("name", "is_public"):
        response = client.put(f"{API}/{collection['id']}", json={field: None}, headers=auth_headers(alice))
        assert response.status_code == 422, field
        assert response.json()["error"] == "validation_failed"
