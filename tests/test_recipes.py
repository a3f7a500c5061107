from sqlalchemy import select

from models.audit_models import AdminAction
from models.recipe_models import Recipe
from models.social_models import Favorite, Review
from tests.conftest import auth_headers, make_recipe

API = "/api/v1/recipes"


def test_create_recipe_sets_owner_and_nutrition(client, alice, tomato):
    payload = {
        "title": "Tomato Salad",
        "is_public": True,
        "servings": 2,
        "instructions": ["Slice", "  ", "Serve"],
        "ingredients": [{"name": "Tomato", "quantity": 2, "unit": "piece"}],
    }
    response = client.post(f"{API}/", json=payload, headers=auth_headers(alice))
    assert response.status_code == 201
    body = response.json()
    assert body["owner_id"] == alice.id
    assert body["instructions"] == ["Slice", "Serve"]
    assert body["ingredients"][0]["name"] == "tomato"
    assert body["favorite_count"] == 0

    nutrition = client.get(f"{API}/{body['id']}/nutrition").json()
    # 2 pieces x 100 g at 18 kcal per 100 g over 2 servings
    assert float(nutrition["calories_per_serving"]) == 18.0


def test_anonymous_cannot_create(client):
    response = client.post(f"{API}/", json={"title": "Nope"})
    assert response.status_code == 401
    assert response.json()["error"] == "unauthorized"


def test_soft_delete_hides_public_recipe(client, db_session, alice, public_recipe):
    assert client.get(f"{API}/{public_recipe.id}").status_code == 200

    response = client.delete(f"{API}/{public_recipe.id}", headers=auth_headers(alice))
    assert response.status_code == 204

    missing = client.get(f"{API}/{public_recipe.id}")
    assert missing.status_code == 404
    assert missing.json() == client.get(f"{API}/00000000-0000-0000-0000-000000000000").json()

    db_session.expire_all()
    row = db_session.get(Recipe, public_recipe.id)
    assert row.is_deleted is True
    assert row.deleted_by == alice.id
    assert row.deleted_at is not None


def test_soft_delete_keeps_children(client, db_session, alice, bob, public_recipe):
    headers = auth_headers(bob)
    assert client.post(f"{API}/{public_recipe.id}/favorite", headers=headers).status_code == 201
    assert client.post(
        f"{API}/{public_recipe.id}/reviews", json={"rating": 5}, headers=headers
    ).status_code == 201

    assert client.delete(f"{API}/{public_recipe.id}", headers=auth_headers(alice)).status_code == 204

    db_session.expire_all()
    assert db_session.get(Favorite, (bob.id, public_recipe.id)) is not None
    assert db_session.scalar(select(Review).where(Review.recipe_id == public_recipe.id)) is not None
    assert db_session.get(Recipe, public_recipe.id).favorite_count == 1


def test_private_recipe_is_not_found_for_others(client, bob, private_recipe):
    assert client.get(f"{API}/{private_recipe.id}").status_code == 404
    assert client.get(f"{API}/{private_recipe.id}", headers=auth_headers(bob)).status_code == 404
    update = client.put(f"{API}/{private_recipe.id}", json={"title": "Mine now"}, headers=auth_headers(bob))
    assert update.status_code == 404


def test_non_owner_update_of_public_recipe_is_forbidden(client, bob, public_recipe):
    response = client.put(f"{API}/{public_recipe.id}", json={"title": "Mine now"}, headers=auth_headers(bob))
    assert response.status_code == 403
    assert response.json()["reason"] == "not-owner"


def test_owner_update_stamps_updated_at(client, db_session, alice, public_recipe):
    before = public_recipe.updated_at
    response = client.put(
        f"{API}/{public_recipe.id}", json={"title": "Better Soup", "notes": "more salt"},
        headers=auth_headers(alice),
    )
    assert response.status_code == 200
    assert response.json()["title"] == "Better Soup"
    assert response.json()["notes"] == "more salt"

    db_session.expire_all()
    assert db_session.get(Recipe, public_recipe.id).updated_at >= before


def test_null_for_required_field_is_validation_failure(client, db_session, alice, public_recipe):
    headers = auth_headers(alice)
    for field in ("title", "servings", "is_public", "instructions"):
        response = client.put(f"{API}/{public_recipe.id}", json={field: None}, headers=headers)
        assert response.status_code == 422, field
        assert response.json()["error"] == "validation_failed"

    db_session.expire_all()
    assert db_session.get(Recipe, public_recipe.id).title == public_recipe.title


def test_owner_only_fields_hidden_from_others(client, db_session, alice, bob):
    recipe = make_recipe(db_session, alice, notes="family secret", rating=5)
    assert client.get(f"{API}/{recipe.id}", headers=auth_headers(alice)).json()["notes"] == "family secret"
    assert client.get(f"{API}/{recipe.id}", headers=auth_headers(bob)).json()["notes"] is None


def test_admin_cannot_change_owner_only_fields(client, admin, public_recipe):
    headers = auth_headers(admin)
    for field, value in (("notes", "too salty"), ("rating", 2)):
        response = client.put(f"{API}/{public_recipe.id}", json={field: value}, headers=headers)
        assert response.status_code == 422, field
        assert response.json()["error"] == "validation_failed"

    assert client.put(f"{API}/{public_recipe.id}", json={"title": "Soup"}, headers=headers).status_code == 200


def test_view_count_counts_non_owner_reads(client, db_session, alice, bob, public_recipe):
    client.get(f"{API}/{public_recipe.id}", headers=auth_headers(alice))
    client.get(f"{API}/{public_recipe.id}", headers=auth_headers(bob))
    client.get(f"{API}/{public_recipe.id}")

    db_session.expire_all()
    assert db_session.get(Recipe, public_recipe.id).view_count == 2


def test_admin_delete_is_audited(client, db_session, admin, public_recipe):
    response = client.delete(f"{API}/{public_recipe.id}?reason=spam", headers=auth_headers(admin))
    assert response.status_code == 204

    action = db_session.scalar(select(AdminAction).where(AdminAction.target_id == public_recipe.id))
    assert action.action_type == "delete_recipe"
    assert action.admin_id == admin.id
    assert action.reason == "spam"


def test_admin_sees_and_restores_deleted_recipe(client, db_session, alice, admin, public_recipe):
    client.delete(f"{API}/{public_recipe.id}", headers=auth_headers(alice))

    assert client.get(f"{API}/{public_recipe.id}", headers=auth_headers(admin)).status_code == 200
    assert client.post(f"{API}/{public_recipe.id}/restore", headers=auth_headers(alice)).status_code == 403

    restored = client.post(f"{API}/{public_recipe.id}/restore", headers=auth_headers(admin))
    assert restored.status_code == 200
    assert restored.json()["is_deleted"] is False
    assert client.get(f"{API}/{public_recipe.id}").status_code == 200


def test_list_returns_only_readable_rows(client, db_session, alice, bob):
    make_recipe(db_session, alice, title="Alice Public", is_public=True)
    make_recipe(db_session, alice, title="Alice Private", is_public=False)
    make_recipe(db_session, bob, title="Bob Private", is_public=False)
    gone = make_recipe(db_session, bob, title="Bob Deleted", is_public=True)
    gone.is_deleted = True
    db_session.commit()

    def titles(headers=None):
        items = client.get(f"{API}/", headers=headers or {}).json()["items"]
        return sorted(item["title"] for item in items)

    assert titles() == ["Alice Public"]
    assert titles(auth_headers(alice)) == ["Alice Private", "Alice Public"]
    assert titles(auth_headers(bob)) == ["Alice Public", "Bob Private"]


def test_list_search_and_pagination(client, db_session, alice):
    for index in range(5):
        make_recipe(db_session, alice, title=f"Curry {index}", cuisine_type="Indian")
    make_recipe(db_session, alice, title="Pancakes", description="fluffy", cuisine_type="American")

    page = client.get(f"{API}/?search=curry&limit=2&page=2").json()
    assert page["total"] == 5
    assert len(page["items"]) == 2
    assert client.get(f"{API}/?cuisine_type=american").json()["total"] == 1
    assert client.get(f"{API}/?search=FLUFFY").json()["total"] == 1
    assert client.get(f"{API}/?limit=1000").status_code == 400
