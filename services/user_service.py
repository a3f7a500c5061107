"""
Recipe Share User Service
Profile and preference updates
"""

import structlog
from sqlalchemy.orm import Session

from core.database import transaction
from models.users import User, UserPreference
from schemas.auth_schemas import UserUpdate
from services.policy import EntityType, Operation, Principal, enforce
from utils.date_utils import utcnow

logger = structlog.get_logger()

PROFILE_FIELDS = {"full_name", "avatar_url"}
PREFERENCE_FIELDS = {
    "theme", "default_recipe_visibility", "email_notifications", "dietary_restrictions", "favorite_cuisines",
}


def update_profile(db: Session, principal: Principal, user_id: str, data: UserUpdate) -> User:
    """Update profile fields and preferences; role is never changed here"""
    user = enforce(principal, Operation.UPDATE, EntityType.USER, db.get(User, user_id))
    changes = data.model_dump(exclude_unset=True)

    with transaction(db):
        for field in PROFILE_FIELDS & changes.keys():
            setattr(user, field, changes[field])

        preference_changes = PREFERENCE_FIELDS & changes.keys()
        if preference_changes:
            if user.preferences is None:
                user.preferences = UserPreference()
            for field in preference_changes:
                if changes[field] is not None:
                    setattr(user.preferences, field, changes[field])
            user.preferences.updated_at = utcnow()

        user.updated_at = utcnow()

    logger.info("Profile updated", user_id=user.id, fields=sorted(changes))
    return user
