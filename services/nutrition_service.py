"""
Recipe Share Nutrition Service
Per-serving nutrition facts from the ingredient catalogue
"""

from decimal import Decimal, ROUND_HALF_UP
from typing import Dict, Optional

import structlog
from sqlalchemy.orm import Session

from models.recipe_models import Ingredient, Recipe, RecipeIngredient, RecipeNutrition
from services.policy import EntityType, Operation, Principal, enforce
from utils.date_utils import utcnow

logger = structlog.get_logger()

CENTS = Decimal("0.01")


class NutritionService:
    """
    Nutrition calculator backed by catalogue values per 100 g.

    Ingredient lines are converted to grams from their quantity and unit;
    lines with no quantity, or whose ingredient has no catalogue data,
    contribute nothing.
    """

    # Common unit conversions to grams
    UNIT_TO_GRAMS: Dict[str, Decimal] = {
        # Volume to weight (approximate, varies by ingredient)
        "cup": Decimal("240"),
        "cups": Decimal("240"),
        "tablespoon": Decimal("15"),
        "tablespoons": Decimal("15"),
        "tbsp": Decimal("15"),
        "teaspoon": Decimal("5"),
        "teaspoons": Decimal("5"),
        "tsp": Decimal("5"),
        "ml": Decimal("1"),
        "l": Decimal("1000"),

        # Weight conversions
        "oz": Decimal("28.35"),
        "ounce": Decimal("28.35"),
        "ounces": Decimal("28.35"),
        "lb": Decimal("453.592"),
        "lbs": Decimal("453.592"),
        "pound": Decimal("453.592"),
        "pounds": Decimal("453.592"),
        "g": Decimal("1"),
        "gram": Decimal("1"),
        "grams": Decimal("1"),
        "kg": Decimal("1000"),
        "kilogram": Decimal("1000"),
        "kilograms": Decimal("1000"),

        # Count-based (varies significantly)
        "piece": Decimal("100"),
        "pieces": Decimal("100"),
        "clove": Decimal("3"),
        "cloves": Decimal("3"),
        "slice": Decimal("30"),
        "slices": Decimal("30"),
    }

    NUTRIENTS = ("calories", "protein", "fat", "carbs", "fiber")

    def convert_to_grams(self, quantity: Optional[Decimal], unit: Optional[str], ingredient: Ingredient) -> Decimal:
        """Convert a quantity and unit to grams"""
        if quantity is None:
            return Decimal("0")

        quantity = Decimal(str(quantity))
        key = (unit or "").strip().lower()

        if key in self.UNIT_TO_GRAMS:
            return quantity * self.UNIT_TO_GRAMS[key]

        # Catalogue knows the weight of its own common unit
        if ingredient.grams_per_unit is not None and (not key or key == (ingredient.common_unit or "").lower()):
            return quantity * Decimal(str(ingredient.grams_per_unit))

        # Default: assume 100g per unit for unknown units
        return quantity * Decimal("100")

    def calculate(self, recipe: Recipe) -> Dict[str, Decimal]:
        """Totals per serving for every tracked nutrient"""
        totals = {name: Decimal("0") for name in self.NUTRIENTS}

        for line in recipe.ingredients:
            ingredient = line.ingredient
            if ingredient is None:
                continue
            grams = self.convert_to_grams(line.quantity, line.unit, ingredient)
            if not grams:
                continue
            for name in self.NUTRIENTS:
                per_100g = getattr(ingredient, f"{name}_per_100g")
                if per_100g is not None:
                    totals[name] += grams * Decimal(str(per_100g)) / Decimal("100")

        servings = Decimal(recipe.servings or 1)
        return {name: (value / servings).quantize(CENTS, rounding=ROUND_HALF_UP) for name, value in totals.items()}

    def refresh(self, db: Session, recipe: Recipe) -> RecipeNutrition:
        """Recompute and store the facts; caller owns the transaction"""
        facts = self.calculate(recipe)
        nutrition = recipe.nutrition
        if nutrition is None:
            nutrition = RecipeNutrition(recipe_id=recipe.id)
            recipe.nutrition = nutrition

        for name, value in facts.items():
            setattr(nutrition, f"{name}_per_serving", value)
        nutrition.calculated_at = utcnow()

        db.add(nutrition)
        logger.debug("Nutrition recalculated", recipe_id=recipe.id, calories=str(facts["calories"]))
        return nutrition

    def get_nutrition(self, db: Session, principal: Principal, recipe_id: str) -> RecipeNutrition:
        """Nutrition facts are readable whenever the recipe is"""
        recipe = enforce(principal, Operation.READ, EntityType.RECIPE, db.get(Recipe, recipe_id))
        if recipe.nutrition is None:
            nutrition = self.refresh(db, recipe)
            db.commit()
            return nutrition
        return recipe.nutrition


def resolve_ingredient(db: Session, name: str) -> Ingredient:
    """Find a catalogue ingredient by name, adding a bare entry when unknown"""
    normalized = name.strip().lower()
    ingredient = db.query(Ingredient).filter(Ingredient.name == normalized).first()
    if ingredient is None:
        ingredient = Ingredient(name=normalized)
        db.add(ingredient)
        db.flush()
    return ingredient


def build_ingredient_lines(db: Session, recipe: Recipe, lines) -> None:
    """Replace the recipe's ingredient lines, merging duplicate names"""
    recipe.ingredients.clear()
    db.flush()

    seen = {}
    for order, line in enumerate(lines):
        ingredient = resolve_ingredient(db, line.name)
        if ingredient.id in seen:
            existing = seen[ingredient.id]
            if line.quantity is not None:
                existing.quantity = (existing.quantity or Decimal("0")) + line.quantity
            continue
        entry = RecipeIngredient(
            ingredient=ingredient,
            quantity=line.quantity,
            unit=line.unit,
            preparation=line.preparation,
            is_optional=line.is_optional,
            display_order=order,
        )
        recipe.ingredients.append(entry)
        seen[ingredient.id] = entry


# Create singleton instance
nutrition_service = NutritionService()
