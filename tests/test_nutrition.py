from decimal import Decimal

from models.recipe_models import Ingredient
from services.nutrition_service import nutrition_service
from tests.conftest import auth_headers

API = "/api/v1/recipes"


def test_unit_conversions(tomato):
    assert nutrition_service.convert_to_grams(Decimal("2"), "cups", tomato) == Decimal("480")
    assert nutrition_service.convert_to_grams(Decimal("1"), "LB", tomato) == Decimal("453.592")
    assert nutrition_service.convert_to_grams(None, "g", tomato) == 0


def test_catalogue_unit_weight_used_for_bare_quantities(tomato):
    assert nutrition_service.convert_to_grams(Decimal("3"), None, tomato) == Decimal("360")
    bare = Ingredient(name="mystery")
    assert nutrition_service.convert_to_grams(Decimal("1"), "handful", bare) == Decimal("100")


def test_duplicate_lines_merge_and_servings_divide(client, db_session, alice, tomato):
    payload = {
        "title": "Tomato Tartare",
        "servings": 4,
        "ingredients": [
            {"name": "tomato", "quantity": 100, "unit": "g"},
            {"name": "TOMATO", "quantity": 300, "unit": "g"},
            {"name": "salt"},
        ],
    }
    created = client.post(f"{API}/", json=payload, headers=auth_headers(alice)).json()
    assert len(created["ingredients"]) == 2

    nutrition = client.get(f"{API}/{created['id']}/nutrition", headers=auth_headers(alice)).json()
    # 400 g at 18 kcal per 100 g split over 4 servings
    assert Decimal(nutrition["calories_per_serving"]) == Decimal("18.00")
    assert Decimal(nutrition["protein_per_serving"]) == Decimal("0.90")


def test_nutrition_follows_recipe_visibility(client, private_recipe):
    assert client.get(f"{API}/{private_recipe.id}/nutrition").status_code == 404
