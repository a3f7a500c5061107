import os

# Settings are read at import time, so the test environment goes first
os.environ["DATABASE_URL"] = "sqlite://"
os.environ["ENVIRONMENT"] = "test"
os.environ["BCRYPT_ROUNDS"] = "4"
os.environ["LOG_LEVEL"] = "WARNING"
os.environ["JWT_SECRET_KEY"] = "test-secret"

import pytest
from fastapi.testclient import TestClient

import core.database as database
from core.database import Base, get_db, init_db
from main import app
from models.recipe_models import Ingredient, Recipe
from models.users import User, UserRole
from services.auth_service import auth_service
from services.policy import Principal
from utils.date_utils import utcnow

PASSWORD = "Sup3rSecret"


@pytest.fixture(autouse=True)
def setup_database():
    """Fresh in-memory database per test."""
    engine = init_db("sqlite://", create_tables=True)
    yield
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


def override_get_db():
    db = database.SessionLocal()
    try:
        yield db
        db.commit()
    except Exception:
        db.rollback()
        raise
    finally:
        db.close()


@pytest.fixture
def client():
    """Test client with DB override (lifespan not started)."""
    app.dependency_overrides[get_db] = override_get_db
    yield TestClient(app)
    app.dependency_overrides.clear()


@pytest.fixture
def db_session():
    """Direct database session for setup."""
    session = database.SessionLocal()
    yield session
    session.close()


def make_user(db, username, role=UserRole.USER, is_active=True):
    now = utcnow()
    user = User(
        email=f"{username}@example.com",
        username=username,
        password_hash=auth_service.get_password_hash(PASSWORD),
        role=role,
        is_active=is_active,
        created_at=now,
        updated_at=now,
    )
    db.add(user)
    db.commit()
    db.refresh(user)
    return user


def make_recipe(db, owner, title="Tomato Soup", is_public=True, **fields):
    now = utcnow()
    recipe = Recipe(
        owner_id=owner.id,
        title=title,
        is_public=is_public,
        servings=fields.pop("servings", 2),
        created_at=now,
        updated_at=now,
        **fields,
    )
    db.add(recipe)
    db.commit()
    db.refresh(recipe)
    return recipe


def auth_headers(user):
    token = auth_service.create_access_token({"sub": str(user.id), "role": user.role.value})
    return {"Authorization": f"Bearer {token}"}


@pytest.fixture
def alice(db_session):
    return make_user(db_session, "alice")


@pytest.fixture
def bob(db_session):
    return make_user(db_session, "bob")


@pytest.fixture
def admin(db_session):
    return make_user(db_session, "root", role=UserRole.ADMIN)


@pytest.fixture
def alice_principal(alice):
    return Principal.for_user(alice)


@pytest.fixture
def bob_principal(bob):
    return Principal.for_user(bob)


@pytest.fixture
def admin_principal(admin):
    return Principal.for_user(admin)


@pytest.fixture
def public_recipe(db_session, alice):
    return make_recipe(db_session, alice, title="Public Soup", is_public=True)


@pytest.fixture
def private_recipe(db_session, alice):
    return make_recipe(db_session, alice, title="Secret Stew", is_public=False)


@pytest.fixture
def tomato(db_session):
    ingredient = Ingredient(
        name="tomato",
        common_unit="piece",
        grams_per_unit=120,
        calories_per_100g=18,
        protein_per_100g=0.9,
        fat_per_100g=0.2,
        carbs_per_100g=3.9,
        fiber_per_100g=1.2,
    )
    db_session.add(ingredient)
    db_session.commit()
    return ingredient
