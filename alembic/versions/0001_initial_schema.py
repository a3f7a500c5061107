"""initial schema

Revision ID: 0001
Revises:
Create Date: 2026-10-19 09:00:00

"""
from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "0001"
down_revision = None
branch_labels = None
depends_on = None

user_role = sa.Enum("admin", "user", "guest", name="user_role")


def _timestamp(name, nullable=False):
    return sa.Column(name, sa.DateTime(timezone=True), server_default=sa.func.now(), nullable=nullable)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.Uuid(as_uuid=False), nullable=False),
        sa.Column("email", sa.String(255), nullable=False),
        sa.Column("username", sa.String(50), nullable=False),
        sa.Column("full_name", sa.String(255), nullable=True),
        sa.Column("avatar_url", sa.String(500), nullable=True),
        sa.Column("password_hash", sa.String(255), nullable=False),
        sa.Column("role", user_role, nullable=False),
        sa.Column("is_active", sa.Boolean(), nullable=False),
        sa.Column("is_email_verified", sa.Boolean(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_users")),
    )
    op.create_index(op.f("ix_users_email"), "users", ["email"], unique=True)
    op.create_index(op.f("ix_users_username"), "users", ["username"], unique=True)
    op.create_index(op.f("ix_users_role"), "users", ["role"])
    op.create_index(op.f("ix_users_is_active"), "users", ["is_active"])

    op.create_table(
        "user_preferences",
        sa.Column("user_id", sa.Uuid(as_uuid=False), nullable=False),
        sa.Column("theme", sa.String(10), nullable=False),
        sa.Column("default_recipe_visibility", sa.String(10), nullable=False),
        sa.Column("email_notifications", sa.Boolean(), nullable=False),
        sa.Column("dietary_restrictions", sa.JSON(), nullable=True),
        sa.Column("favorite_cuisines", sa.JSON(), nullable=True),
        _timestamp("updated_at"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name=op.f("fk_user_preferences_user_id_users"), ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("user_id", name=op.f("pk_user_preferences")),
    )

    op.create_table(
        "ingredients",
        sa.Column("id", sa.Uuid(as_uuid=False), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("category", sa.String(50), nullable=True),
        sa.Column("common_unit", sa.String(50), nullable=True),
        sa.Column("grams_per_unit", sa.Numeric(10, 2), nullable=True),
        sa.Column("calories_per_100g", sa.Numeric(10, 2), nullable=True),
        sa.Column("protein_per_100g", sa.Numeric(10, 2), nullable=True),
        sa.Column("fat_per_100g", sa.Numeric(10, 2), nullable=True),
        sa.Column("carbs_per_100g", sa.Numeric(10, 2), nullable=True),
        sa.Column("fiber_per_100g", sa.Numeric(10, 2), nullable=True),
        _timestamp("created_at"),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_ingredients")),
    )
    op.create_index(op.f("ix_ingredients_name"), "ingredients", ["name"], unique=True)

    op.create_table(
        "recipes",
        sa.Column("id", sa.Uuid(as_uuid=False), nullable=False),
        sa.Column("user_id", sa.Uuid(as_uuid=False), nullable=False),
        sa.Column("title", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("instructions", sa.JSON(), nullable=True),
        sa.Column("prep_time_minutes", sa.Integer(), nullable=True),
        sa.Column("cook_time_minutes", sa.Integer(), nullable=True),
        sa.Column("servings", sa.Integer(), nullable=False),
        sa.Column("difficulty_level", sa.String(10), nullable=True),
        sa.Column("cuisine_type", sa.String(100), nullable=True),
        sa.Column("meal_type", sa.String(100), nullable=True),
        sa.Column("image_url", sa.String(500), nullable=True),
        sa.Column("source_url", sa.String(500), nullable=True),
        sa.Column("source_type", sa.String(20), nullable=False),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.Column("view_count", sa.Integer(), nullable=False),
        sa.Column("favorite_count", sa.Integer(), nullable=False),
        sa.Column("notes", sa.Text(), nullable=True),
        sa.Column("rating", sa.Integer(), nullable=True),
        sa.Column("times_cooked", sa.Integer(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.Column("is_deleted", sa.Boolean(), nullable=False),
        sa.Column("deleted_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("deleted_by", sa.Uuid(as_uuid=False), nullable=True),
        sa.CheckConstraint("favorite_count >= 0", name=op.f("ck_recipes_favorite_count_non_negative")),
        sa.CheckConstraint(
            "rating IS NULL OR (rating >= 1 AND rating <= 5)", name=op.f("ck_recipes_rating_range")
        ),
        sa.ForeignKeyConstraint(["user_id"], ["users.id"], name=op.f("fk_recipes_user_id_users"), ondelete="CASCADE"),
        sa.ForeignKeyConstraint(
            ["deleted_by"], ["users.id"], name=op.f("fk_recipes_deleted_by_users"), ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_recipes")),
    )
    for column in ("user_id", "title", "cuisine_type", "meal_type", "is_public", "is_deleted"):
        op.create_index(op.f(f"ix_recipes_{column}"), "recipes", [column])

    op.create_table(
        "recipe_ingredients",
        sa.Column("id", sa.Uuid(as_uuid=False), nullable=False),
        sa.Column("recipe_id", sa.Uuid(as_uuid=False), nullable=False),
        sa.Column("ingredient_id", sa.Uuid(as_uuid=False), nullable=False),
        sa.Column("quantity", sa.Numeric(10, 3), nullable=True),
        sa.Column("unit", sa.String(50), nullable=True),
        sa.Column("preparation", sa.String(255), nullable=True),
        sa.Column("is_optional", sa.Boolean(), nullable=False),
        sa.Column("display_order", sa.Integer(), nullable=False),
        sa.ForeignKeyConstraint(
            ["recipe_id"], ["recipes.id"], name=op.f("fk_recipe_ingredients_recipe_id_recipes"), ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["ingredient_id"], ["ingredients.id"], name=op.f("fk_recipe_ingredients_ingredient_id_ingredients")
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_recipe_ingredients")),
        sa.UniqueConstraint("recipe_id", "ingredient_id", name="uq_recipe_ingredients_recipe_ingredient"),
    )
    op.create_index(op.f("ix_recipe_ingredients_recipe_id"), "recipe_ingredients", ["recipe_id"])
    op.create_index(op.f("ix_recipe_ingredients_ingredient_id"), "recipe_ingredients", ["ingredient_id"])

    op.create_table(
        "recipe_nutrition",
        sa.Column("recipe_id", sa.Uuid(as_uuid=False), nullable=False),
        sa.Column("calories_per_serving", sa.Numeric(10, 2), nullable=True),
        sa.Column("protein_per_serving", sa.Numeric(10, 2), nullable=True),
        sa.Column("fat_per_serving", sa.Numeric(10, 2), nullable=True),
        sa.Column("carbs_per_serving", sa.Numeric(10, 2), nullable=True),
        sa.Column("fiber_per_serving", sa.Numeric(10, 2), nullable=True),
        _timestamp("calculated_at"),
        sa.ForeignKeyConstraint(
            ["recipe_id"], ["recipes.id"], name=op.f("fk_recipe_nutrition_recipe_id_recipes"), ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("recipe_id", name=op.f("pk_recipe_nutrition")),
    )

    op.create_table(
        "user_favorites",
        sa.Column("user_id", sa.Uuid(as_uuid=False), nullable=False),
        sa.Column("recipe_id", sa.Uuid(as_uuid=False), nullable=False),
        _timestamp("favorited_at"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name=op.f("fk_user_favorites_user_id_users"), ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["recipe_id"], ["recipes.id"], name=op.f("fk_user_favorites_recipe_id_recipes"), ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("user_id", "recipe_id", name=op.f("pk_user_favorites")),
    )
    op.create_index(op.f("ix_user_favorites_user_id"), "user_favorites", ["user_id"])
    op.create_index(op.f("ix_user_favorites_recipe_id"), "user_favorites", ["recipe_id"])

    op.create_table(
        "collections",
        sa.Column("id", sa.Uuid(as_uuid=False), nullable=False),
        sa.Column("user_id", sa.Uuid(as_uuid=False), nullable=False),
        sa.Column("name", sa.String(255), nullable=False),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("is_public", sa.Boolean(), nullable=False),
        sa.Column("cover_image_url", sa.String(500), nullable=True),
        sa.Column("recipe_count", sa.Integer(), nullable=False),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint("recipe_count >= 0", name=op.f("ck_collections_recipe_count_non_negative")),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name=op.f("fk_collections_user_id_users"), ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_collections")),
    )
    op.create_index(op.f("ix_collections_user_id"), "collections", ["user_id"])

    op.create_table(
        "collection_recipes",
        sa.Column("collection_id", sa.Uuid(as_uuid=False), nullable=False),
        sa.Column("recipe_id", sa.Uuid(as_uuid=False), nullable=False),
        sa.Column("added_by", sa.Uuid(as_uuid=False), nullable=True),
        sa.Column("notes", sa.Text(), nullable=True),
        _timestamp("added_at"),
        sa.ForeignKeyConstraint(
            ["collection_id"], ["collections.id"],
            name=op.f("fk_collection_recipes_collection_id_collections"), ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["recipe_id"], ["recipes.id"], name=op.f("fk_collection_recipes_recipe_id_recipes"), ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["added_by"], ["users.id"], name=op.f("fk_collection_recipes_added_by_users"), ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("collection_id", "recipe_id", name=op.f("pk_collection_recipes")),
    )

    op.create_table(
        "recipe_reviews",
        sa.Column("id", sa.Uuid(as_uuid=False), nullable=False),
        sa.Column("recipe_id", sa.Uuid(as_uuid=False), nullable=False),
        sa.Column("user_id", sa.Uuid(as_uuid=False), nullable=False),
        sa.Column("rating", sa.Integer(), nullable=False),
        sa.Column("review_text", sa.Text(), nullable=True),
        sa.Column("would_make_again", sa.Boolean(), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.CheckConstraint("rating >= 1 AND rating <= 5", name=op.f("ck_recipe_reviews_rating_range")),
        sa.ForeignKeyConstraint(
            ["recipe_id"], ["recipes.id"], name=op.f("fk_recipe_reviews_recipe_id_recipes"), ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name=op.f("fk_recipe_reviews_user_id_users"), ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_recipe_reviews")),
        sa.UniqueConstraint("recipe_id", "user_id", name="uq_recipe_reviews_recipe_user"),
    )
    op.create_index(op.f("ix_recipe_reviews_recipe_id"), "recipe_reviews", ["recipe_id"])
    op.create_index(op.f("ix_recipe_reviews_user_id"), "recipe_reviews", ["user_id"])

    op.create_table(
        "user_activity_log",
        sa.Column("id", sa.Uuid(as_uuid=False), nullable=False),
        sa.Column("user_id", sa.Uuid(as_uuid=False), nullable=True),
        sa.Column("activity_type", sa.String(50), nullable=False),
        sa.Column("recipe_id", sa.Uuid(as_uuid=False), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        sa.Column("ip_address", sa.String(45), nullable=True),
        sa.Column("user_agent", sa.Text(), nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name=op.f("fk_user_activity_log_user_id_users"), ondelete="CASCADE"
        ),
        sa.ForeignKeyConstraint(
            ["recipe_id"], ["recipes.id"], name=op.f("fk_user_activity_log_recipe_id_recipes"), ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_user_activity_log")),
    )
    op.create_index(op.f("ix_user_activity_log_user_id"), "user_activity_log", ["user_id"])
    op.create_index(op.f("ix_user_activity_log_created_at"), "user_activity_log", ["created_at"])

    op.create_table(
        "admin_actions",
        sa.Column("id", sa.Uuid(as_uuid=False), nullable=False),
        sa.Column("admin_id", sa.Uuid(as_uuid=False), nullable=True),
        sa.Column("action_type", sa.String(50), nullable=False),
        sa.Column("target_type", sa.String(50), nullable=False),
        sa.Column("target_id", sa.String(36), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("metadata", sa.JSON(), nullable=True),
        _timestamp("performed_at"),
        sa.ForeignKeyConstraint(
            ["admin_id"], ["users.id"], name=op.f("fk_admin_actions_admin_id_users"), ondelete="SET NULL"
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_admin_actions")),
    )
    op.create_index(op.f("ix_admin_actions_admin_id"), "admin_actions", ["admin_id"])
    op.create_index(op.f("ix_admin_actions_performed_at"), "admin_actions", ["performed_at"])

    op.create_table(
        "chat_conversations",
        sa.Column("id", sa.Uuid(as_uuid=False), nullable=False),
        sa.Column("user_id", sa.Uuid(as_uuid=False), nullable=True),
        sa.Column("session_id", sa.String(255), nullable=True),
        sa.Column("title", sa.String(255), nullable=True),
        _timestamp("created_at"),
        _timestamp("updated_at"),
        sa.Column("expires_at", sa.DateTime(timezone=True), nullable=True),
        sa.CheckConstraint(
            "(user_id IS NULL AND session_id IS NOT NULL) OR (user_id IS NOT NULL AND session_id IS NULL)",
            name=op.f("ck_chat_conversations_owner_xor_session"),
        ),
        sa.ForeignKeyConstraint(
            ["user_id"], ["users.id"], name=op.f("fk_chat_conversations_user_id_users"), ondelete="CASCADE"
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_chat_conversations")),
    )
    for column in ("user_id", "session_id", "expires_at"):
        op.create_index(op.f(f"ix_chat_conversations_{column}"), "chat_conversations", [column])

    op.create_table(
        "chat_messages",
        sa.Column("id", sa.Uuid(as_uuid=False), nullable=False),
        sa.Column("conversation_id", sa.Uuid(as_uuid=False), nullable=False),
        sa.Column("role", sa.String(20), nullable=False),
        sa.Column("content", sa.Text(), nullable=False),
        sa.Column("recipe_context_id", sa.Uuid(as_uuid=False), nullable=True),
        sa.Column("tokens_used", sa.Integer(), nullable=True),
        _timestamp("created_at"),
        sa.ForeignKeyConstraint(
            ["conversation_id"], ["chat_conversations.id"],
            name=op.f("fk_chat_messages_conversation_id_chat_conversations"), ondelete="CASCADE",
        ),
        sa.ForeignKeyConstraint(
            ["recipe_context_id"], ["recipes.id"],
            name=op.f("fk_chat_messages_recipe_context_id_recipes"), ondelete="SET NULL",
        ),
        sa.PrimaryKeyConstraint("id", name=op.f("pk_chat_messages")),
    )
    op.create_index(op.f("ix_chat_messages_conversation_id"), "chat_messages", ["conversation_id"])


def downgrade() -> None:
    for table in (
        "chat_messages",
        "chat_conversations",
        "admin_actions",
        "user_activity_log",
        "recipe_reviews",
        "collection_recipes",
        "collections",
        "user_favorites",
        "recipe_nutrition",
        "recipe_ingredients",
        "recipes",
        "ingredients",
        "user_preferences",
        "users",
    ):
        op.drop_table(table)
    user_role.drop(op.get_bind(), checkfirst=True)
