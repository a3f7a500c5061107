from sqlalchemy import func, select

from models.social_models import Review
from tests.conftest import auth_headers

API = "/api/v1/recipes"


def review_url(recipe):
    return f"{API}/{recipe.id}/reviews"


def test_create_and_list_reviews(client, alice, bob, public_recipe):
    response = client.post(
        review_url(public_recipe),
        json={"rating": 4, "review_text": "Lovely", "would_make_again": True},
        headers=auth_headers(bob),
    )
    assert response.status_code == 201
    assert response.json()["author_id"] == bob.id

    listed = client.get(review_url(public_recipe))
    assert listed.status_code == 200
    assert [row["rating"] for row in listed.json()] == [4]


def test_rating_outside_range_is_rejected(client, bob, public_recipe):
    for rating in (0, 6):
        response = client.post(review_url(public_recipe), json={"rating": rating}, headers=auth_headers(bob))
        assert response.status_code == 422
        assert response.json()["error"] == "validation_failed"


def test_non_integer_rating_is_rejected(client, bob, public_recipe):
    response = client.post(review_url(public_recipe), json={"rating": "great"}, headers=auth_headers(bob))
    assert response.status_code == 422


def test_second_review_conflicts_and_keeps_first(client, db_session, bob, public_recipe):
    headers = auth_headers(bob)
    client.post(review_url(public_recipe), json={"rating": 5, "review_text": "First"}, headers=headers)

    again = client.post(review_url(public_recipe), json={"rating": 1, "review_text": "Second"}, headers=headers)
    assert again.status_code == 409

    rows = db_session.scalars(select(Review).where(Review.recipe_id == public_recipe.id)).all()
    assert len(rows) == 1
    assert rows[0].rating == 5
    assert rows[0].review_text == "First"


def test_private_recipe_cannot_be_reviewed_by_others(client, db_session, bob, private_recipe):
    response = client.post(review_url(private_recipe), json={"rating": 3}, headers=auth_headers(bob))
    assert response.status_code == 404
    assert db_session.scalar(select(func.count()).select_from(Review)) == 0


def test_deleted_recipe_reviews_hidden(client, alice, bob, public_recipe):
    client.post(review_url(public_recipe), json={"rating": 3}, headers=auth_headers(bob))
    client.delete(f"{API}/{public_recipe.id}", headers=auth_headers(alice))

    assert client.get(review_url(public_recipe)).status_code == 404
    assert client.post(review_url(public_recipe), json={"rating": 3}, headers=auth_headers(alice)).status_code == 404


def test_only_author_edits_or_deletes(client, alice, bob, public_recipe):
    created = client.post(review_url(public_recipe), json={"rating": 2}, headers=auth_headers(bob)).json()
    url = f"/api/v1/reviews/{created['id']}"

    assert client.put(url, json={"rating": 5}, headers=auth_headers(alice)).status_code == 403
    assert client.delete(url, headers=auth_headers(alice)).status_code == 403

    updated = client.put(url, json={"rating": 5}, headers=auth_headers(bob))
    assert updated.status_code == 200
    assert updated.json()["rating"] == 5
    assert client.put(url, json={"rating": 9}, headers=auth_headers(bob)).status_code == 422

    assert client.delete(url, headers=auth_headers(bob)).status_code == 204
    assert client.get(review_url(public_recipe)).json() == []
