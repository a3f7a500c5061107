"""
Recipe Share Authentication Service
JWT authentication, sign-up and sign-in
"""

from datetime import datetime, timedelta, timezone
from typing import Optional, Dict, Any, Tuple

import structlog
from jose import JWTError, jwt
from sqlalchemy import func, or_, select
from sqlalchemy.orm import Session

from core.config import get_settings
from core.database import transaction
from core.exceptions import Conflict, Unauthorized, ValidationFailed
from core.monitoring import auth_failed_total
from models.users import User, UserPreference, UserRole
from schemas.auth_schemas import UserCreate, UserLogin, TokenResponse
from utils.date_utils import utcnow
from utils.security import SecurityUtils

settings = get_settings()
logger = structlog.get_logger()


class AuthenticationError(Unauthorized):
    """Invalid or missing credentials"""
    pass


class AuthService:
    def __init__(self):
        self.security_utils = SecurityUtils(bcrypt_rounds=settings.BCRYPT_ROUNDS)

        # JWT settings
        self.secret_key = settings.JWT_SECRET_KEY
        self.algorithm = settings.JWT_ALGORITHM
        self.access_token_expire_minutes = settings.JWT_ACCESS_TOKEN_EXPIRE_MINUTES

    def verify_password(self, plain_password: str, hashed_password: str) -> bool:
        """Verify a password against its hash"""
        return self.security_utils.verify_password(plain_password, hashed_password)

    def get_password_hash(self, password: str) -> str:
        """Hash a password"""
        return self.security_utils.hash_password(password)

    def create_access_token(
        self,
        data: Dict[str, Any],
        expires_delta: Optional[timedelta] = None
    ) -> str:
        """Create JWT access token"""
        to_encode = data.copy()
        now = datetime.now(timezone.utc)
        expire = now + (expires_delta or timedelta(minutes=self.access_token_expire_minutes))

        to_encode.update({
            "exp": expire,
            "iat": now,
            "type": "access"
        })

        return jwt.encode(to_encode, self.secret_key, algorithm=self.algorithm)

    def verify_token(self, token: str, token_type: str = "access") -> Dict[str, Any]:
        """Verify and decode JWT token"""
        try:
            payload = jwt.decode(token, self.secret_key, algorithms=[self.algorithm])
        except JWTError as e:
            raise AuthenticationError(f"Invalid token: {str(e)}")

        if payload.get("type") != token_type:
            raise AuthenticationError("Invalid token type")

        return payload

    def _token_response(self, user: User) -> TokenResponse:
        access_token = self.create_access_token(
            data={"sub": str(user.id), "role": user.role.value}
        )
        return TokenResponse(
            access_token=access_token,
            token_type="bearer",
            expires_in=self.access_token_expire_minutes * 60
        )

    def register_user(self, user_data: UserCreate, db: Session) -> Tuple[User, TokenResponse]:
        """Sign up: create the account row with the default role"""
        email = user_data.email.lower()
        username = user_data.username

        check = self.security_utils.validate_password_strength(
            user_data.password, {"username": username, "email": email.split("@")[0]}
        )
        if not check["is_valid"]:
            raise ValidationFailed("; ".join(check["errors"]))

        with transaction(db):
            existing_user = db.scalar(
                select(User).where(
                    or_(func.lower(User.email) == email, func.lower(User.username) == username.lower())
                )
            )
            if existing_user:
                logger.info("Registration rejected", reason="user_exists", event_type="registration_failed")
                raise Conflict("User with this email or username already exists")

            now = utcnow()
            user = User(
                email=email,
                username=username,
                full_name=user_data.full_name,
                password_hash=self.get_password_hash(user_data.password),
                role=UserRole.USER,
                is_active=True,
                created_at=now,
                updated_at=now,
            )
            user.preferences = UserPreference()
            db.add(user)

        db.refresh(user)
        logger.info("User registered", user_id=user.id, event_type="registration_success")
        return user, self._token_response(user)

    def authenticate_user(self, login_data: UserLogin, db: Session) -> Tuple[User, TokenResponse]:
        """Sign in with email and password"""
        user = db.scalar(select(User).where(func.lower(User.email) == login_data.email.lower()))

        if not user or not self.verify_password(login_data.password, user.password_hash):
            logger.info("Login failed", reason="invalid_credentials", event_type="login_failed")
            auth_failed_total.labels(reason="invalid_credentials").inc()
            raise AuthenticationError("Invalid email or password")

        if not user.is_active:
            logger.info("Login failed", user_id=user.id, reason="account_disabled", event_type="login_failed")
            auth_failed_total.labels(reason="account_disabled").inc()
            raise AuthenticationError("Account is disabled. Please contact support.")

        with transaction(db):
            user.last_login_at = utcnow()

        logger.info("Login succeeded", user_id=user.id, event_type="login_success")
        return user, self._token_response(user)

    def get_current_user(self, token: str, db: Session) -> User:
        """Get current user from JWT token"""
        payload = self.verify_token(token)
        user_id = payload.get("sub")

        if not user_id:
            raise AuthenticationError("Invalid token payload")

        user = db.get(User, user_id)
        if not user:
            raise AuthenticationError("User not found")

        if not user.is_active:
            raise AuthenticationError("User account is disabled")

        return user


# Create singleton instance
auth_service = AuthService()
