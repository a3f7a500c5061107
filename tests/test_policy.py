"""Grant table decisions on in-memory rows, no database involved."""

import pytest

from core.exceptions import Forbidden, NotFound, Unauthorized
from models.audit_models import ActivityLog, AdminAction
from models.chat_models import ChatConversation
from models.recipe_models import Recipe
from models.social_models import Collection, CollectionRecipe, Favorite, Review
from models.users import User, UserRole
from services.policy import (
    Allow, Deny, DenyReason, EntityType, Operation, Principal, authorize, enforce,
)

ALICE = "11111111-1111-1111-1111-111111111111"
BOB = "22222222-2222-2222-2222-222222222222"
ROOT = "33333333-3333-3333-3333-333333333333"

anon = Principal.anonymous()
alice = Principal(user_id=ALICE, role=UserRole.USER)
bob = Principal(user_id=BOB, role=UserRole.USER)
admin = Principal(user_id=ROOT, role=UserRole.ADMIN)


def recipe(is_public=True, is_deleted=False, owner=ALICE):
    return Recipe(id="r1", owner_id=owner, title="Soup", is_public=is_public, is_deleted=is_deleted)


class TestPrincipal:
    def test_inactive_user_is_anonymous(self):
        user = User(id=ALICE, role=UserRole.USER, is_active=False)
        assert not Principal.for_user(user).is_authenticated

    def test_admin_flag_needs_identity(self):
        assert Principal.for_user(User(id=ROOT, role=UserRole.ADMIN, is_active=True)).is_admin
        assert not Principal(role=UserRole.ADMIN).is_admin


class TestRecipeRead:
    def test_public_recipe_readable_by_anyone(self):
        assert authorize(anon, Operation.READ, EntityType.RECIPE, recipe()) == Allow()
        assert authorize(bob, Operation.READ, EntityType.RECIPE, recipe()).allowed

    def test_soft_deleted_public_recipe_hidden_from_others(self):
        decision = authorize(anon, Operation.READ, EntityType.RECIPE, recipe(is_deleted=True))
        assert decision == Deny(DenyReason.TARGET_NOT_FOUND_OR_DELETED)
        assert not authorize(bob, Operation.READ, EntityType.RECIPE, recipe(is_deleted=True)).allowed

    def test_private_recipe_denial_looks_like_absence(self):
        private = authorize(bob, Operation.READ, EntityType.RECIPE, recipe(is_public=False))
        missing = authorize(bob, Operation.READ, EntityType.RECIPE, None)
        assert private == missing == Deny(DenyReason.TARGET_NOT_FOUND_OR_DELETED)

    def test_owner_and_admin_read_everything(self):
        hidden = recipe(is_public=False, is_deleted=True)
        assert authorize(alice, Operation.READ, EntityType.RECIPE, hidden).allowed
        assert authorize(admin, Operation.READ, EntityType.RECIPE, hidden).allowed


class TestRecipeMutations:
    def test_create_only_as_self(self):
        assert authorize(alice, Operation.CREATE, EntityType.RECIPE, recipe()).allowed
        assert authorize(bob, Operation.CREATE, EntityType.RECIPE, recipe()) == Deny(DenyReason.NOT_OWNER)
        assert authorize(anon, Operation.CREATE, EntityType.RECIPE, recipe()) == Deny(
            DenyReason.NOT_AUTHENTICATED
        )

    def test_non_owner_update_of_public_recipe_is_not_owner(self):
        assert authorize(bob, Operation.UPDATE, EntityType.RECIPE, recipe()) == Deny(DenyReason.NOT_OWNER)

    def test_non_owner_update_of_private_recipe_is_target_private(self):
        decision = authorize(bob, Operation.DELETE, EntityType.RECIPE, recipe(is_public=False))
        assert decision == Deny(DenyReason.TARGET_PRIVATE)

    def test_admin_override(self):
        assert authorize(admin, Operation.UPDATE, EntityType.RECIPE, recipe(owner=BOB)).allowed
        assert authorize(admin, Operation.DELETE, EntityType.RECIPE, recipe(is_public=False)).allowed


class TestFavoritesAndActivity:
    def test_favorite_rows_belong_to_their_user(self):
        row = Favorite(user_id=ALICE, recipe_id="r1")
        for op in Operation:
            assert authorize(alice, op, EntityType.FAVORITE, row).allowed
        assert authorize(bob, Operation.DELETE, EntityType.FAVORITE, row) == Deny(DenyReason.TARGET_PRIVATE)

    def test_activity_log_private_to_user(self):
        row = ActivityLog(user_id=ALICE, activity_type="view_recipe")
        assert authorize(alice, Operation.READ, EntityType.ACTIVITY_LOG, row).allowed
        assert not authorize(admin, Operation.READ, EntityType.ACTIVITY_LOG, row).allowed

    def test_no_update_grant_on_activity_log(self):
        row = ActivityLog(user_id=ALICE, activity_type="view_recipe")
        assert not authorize(alice, Operation.UPDATE, EntityType.ACTIVITY_LOG, row).allowed


class TestCollections:
    def test_public_collection_readable_private_not(self):
        public = Collection(owner_id=ALICE, name="Soups", is_public=True)
        private = Collection(owner_id=ALICE, name="Drafts", is_public=False)
        assert authorize(anon, Operation.READ, EntityType.COLLECTION, public).allowed
        assert not authorize(bob, Operation.READ, EntityType.COLLECTION, private).allowed

    def test_entries_follow_parent_collection(self):
        collection = Collection(owner_id=ALICE, name="Soups", is_public=False)
        entry = CollectionRecipe(collection_id="c1", recipe_id="r1", added_by=ALICE)
        entry.collection = collection
        assert authorize(alice, Operation.CREATE, EntityType.COLLECTION_RECIPE, entry).allowed
        assert not authorize(bob, Operation.READ, EntityType.COLLECTION_RECIPE, entry).allowed

    def test_entry_must_name_acting_user(self):
        collection = Collection(owner_id=ALICE, name="Soups", is_public=True)
        entry = CollectionRecipe(collection_id="c1", recipe_id="r1", added_by=BOB)
        entry.collection = collection
        assert not authorize(alice, Operation.CREATE, EntityType.COLLECTION_RECIPE, entry).allowed


class TestReviews:
    def review(self, target):
        row = Review(recipe_id="r1", author_id=BOB, rating=4)
        row.recipe = target
        return row

    def test_reviews_of_public_recipes_are_public(self):
        assert authorize(anon, Operation.READ, EntityType.REVIEW, self.review(recipe())).allowed

    def test_reviews_of_private_recipes_visible_to_author_only(self):
        row = self.review(recipe(is_public=False))
        assert authorize(bob, Operation.READ, EntityType.REVIEW, row).allowed
        assert not authorize(alice, Operation.READ, EntityType.REVIEW, row).allowed

    def test_only_author_edits(self):
        row = self.review(recipe())
        assert authorize(bob, Operation.UPDATE, EntityType.REVIEW, row).allowed
        assert authorize(alice, Operation.UPDATE, EntityType.REVIEW, row) == Deny(DenyReason.NOT_OWNER)


class TestAdminOnly:
    @pytest.mark.parametrize("op", [Operation.READ, Operation.CREATE])
    def test_admin_actions(self, op):
        row = AdminAction(admin_id=ROOT, action_type="delete_recipe", target_type="recipe", target_id="r1")
        assert authorize(admin, op, EntityType.ADMIN_ACTION, row).allowed
        assert authorize(alice, op, EntityType.ADMIN_ACTION, row) == Deny(DenyReason.NOT_ADMIN)
        assert authorize(anon, op, EntityType.ADMIN_ACTION, row) == Deny(DenyReason.NOT_AUTHENTICATED)

    def test_admin_actions_are_append_only(self):
        row = AdminAction(admin_id=ROOT, action_type="delete_recipe", target_type="recipe", target_id="r1")
        assert not authorize(admin, Operation.UPDATE, EntityType.ADMIN_ACTION, row).allowed
        assert not authorize(admin, Operation.DELETE, EntityType.ADMIN_ACTION, row).allowed

    def test_user_delete_is_admin_only(self):
        target = User(id=BOB, role=UserRole.USER, is_active=True)
        assert authorize(admin, Operation.DELETE, EntityType.USER, target).allowed
        assert authorize(bob, Operation.DELETE, EntityType.USER, target) == Deny(DenyReason.NOT_ADMIN)


class TestChat:
    def test_guest_conversation_bound_to_session(self):
        row = ChatConversation(user_id=None, session_id="sess-1")
        assert authorize(Principal.anonymous("sess-1"), Operation.READ, EntityType.CHAT_CONVERSATION, row).allowed
        assert not authorize(Principal.anonymous("sess-2"), Operation.READ, EntityType.CHAT_CONVERSATION, row).allowed
        assert not authorize(alice, Operation.READ, EntityType.CHAT_CONVERSATION, row).allowed

    def test_user_conversation_private_even_to_admin(self):
        row = ChatConversation(user_id=ALICE, session_id=None)
        assert authorize(alice, Operation.UPDATE, EntityType.CHAT_CONVERSATION, row).allowed
        assert not authorize(admin, Operation.READ, EntityType.CHAT_CONVERSATION, row).allowed


class TestEnforce:
    def test_returns_entity_when_allowed(self):
        row = recipe()
        assert enforce(anon, Operation.READ, EntityType.RECIPE, row) is row

    def test_error_mapping(self):
        with pytest.raises(NotFound):
            enforce(bob, Operation.READ, EntityType.RECIPE, recipe(is_public=False))
        with pytest.raises(Unauthorized):
            enforce(anon, Operation.UPDATE, EntityType.RECIPE, recipe())
        with pytest.raises(Forbidden):
            enforce(bob, Operation.UPDATE, EntityType.RECIPE, recipe())
        with pytest.raises(Forbidden):
            enforce(alice, Operation.READ, EntityType.ADMIN_ACTION)
        with pytest.raises(NotFound):
            enforce(bob, Operation.UPDATE, EntityType.RECIPE, recipe(is_public=False))
