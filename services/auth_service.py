"""
Authentication and token lifecycle.

AuthService orchestrates signup, login, refresh, logout and profile
reads/updates over the DBStorage, the PasswordHasher and the TokenIssuer it
is constructed with. Every method is a single transaction: it either
commits everything it touched or raises with nothing left behind.
"""
from __future__ import annotations

import logging
from typing import Optional, Dict, Any

from sqlalchemy.exc import IntegrityError

from models.cart import Cart
from models.db_storage import DBStorage
from models.refresh_token import RefreshToken
from models.user import User, UserRole
from utils.errors import ConflictError, NotFoundError, UnauthorizedError
from utils.security import PasswordHasher, TokenIssuer, REFRESH, as_utc, utcnow

logger = logging.getLogger(__name__)

INVALID_CREDENTIALS = "Invalid email or password"


class AuthService:
    def __init__(self, storage: DBStorage, hasher: PasswordHasher, tokens: TokenIssuer):
        self.storage = storage
        self.hasher = hasher
        self.tokens = tokens

    def _find_by_email(self, email: str) -> Optional[User]:
        session = self.storage.get_session()
        return session.query(User).filter(User.email == email).first()

    def _issue_tokens(self, user: User) -> Dict[str, str]:
        """Sign both tokens and stage the refresh token row; the caller commits."""
        now = utcnow()
        role = user.role.value if hasattr(user.role, "value") else user.role
        access_token = self.tokens.issue_access_token(user.id, user.email, role, issued_at=now)
        refresh_token = self.tokens.issue_refresh_token(user.id, issued_at=now)
        self.storage.new(
            RefreshToken(
                token=refresh_token,
                user_id=user.id,
                expires_at=self.tokens.refresh_expiry(now),
            )
        )
        return {"accessToken": access_token, "refreshToken": refresh_token}

    def signup(self, email: str, password: str, first_name: str, last_name: str,
               phone: Optional[str] = None) -> Dict[str, Any]:
        """
        Create a user, their empty cart and a first refresh token in one commit.

        The existence check only gives a friendly message; the unique index on
        users.email decides races, and that violation is reported the same way.
        """
        if self._find_by_email(email):
            raise ConflictError("User with this email already exists")

        user = User(
            email=email,
            password_hash=self.hasher.hash(password),
            first_name=first_name,
            last_name=last_name,
            phone=phone,
            role=UserRole.CUSTOMER,
        )
        user.cart = Cart()
        self.storage.new(user)
        tokens = self._issue_tokens(user)
        try:
            self.storage.save()
        except IntegrityError:
            logger.warning("Signup raced on an existing email")
            raise ConflictError("User with this email already exists")

        logger.info("New user registered: %s", user.email)
        return {"user": user, **tokens}

    def login(self, email: str, password: str) -> Dict[str, Any]:
        user = self._find_by_email(email)
        if not user:
            raise UnauthorizedError(INVALID_CREDENTIALS)

        # checked before the password
        if not user.is_active:
            raise UnauthorizedError("Account is deactivated")

        if not self.hasher.verify(password, user.password_hash):
            raise UnauthorizedError(INVALID_CREDENTIALS)

        tokens = self._issue_tokens(user)
        self.storage.save()

        logger.info("User logged in: %s", user.email)
        return {"user": user, **tokens}

    def refresh_access_token(self, refresh_token: str) -> Dict[str, str]:
        """
        Exchange a stored, unexpired refresh token for a new access token.
        The refresh token itself is not rotated.
        """
        self.tokens.verify(refresh_token, REFRESH)

        session = self.storage.get_session()
        stored = session.query(RefreshToken).filter(RefreshToken.token == refresh_token).first()
        if not stored:
            raise UnauthorizedError("Invalid refresh token")

        if as_utc(stored.expires_at) < utcnow():
            # expired rows are purged lazily, on their next use
            self.storage.delete(stored)
            self.storage.save()
            raise UnauthorizedError("Refresh token expired")

        user = stored.user
        role = user.role.value if hasattr(user.role, "value") else user.role
        return {"accessToken": self.tokens.issue_access_token(user.id, user.email, role)}

    def logout(self, refresh_token: str) -> None:
        """Delete every row holding this token. Unknown tokens are not an error."""
        session = self.storage.get_session()
        deleted = (
            session.query(RefreshToken)
            .filter(RefreshToken.token == refresh_token)
            .delete(synchronize_session=False)
        )
        self.storage.save()
        logger.info("User logged out (%d token(s) removed)", deleted)

    def get_profile(self, user_id: str) -> User:
        user = self.storage.get(User, user_id)
        if not user:
            raise NotFoundError("User not found")
        return user

    def update_profile(self, user_id: str, first_name: Optional[str] = None,
                       last_name: Optional[str] = None, phone: Optional[str] = None) -> User:
        """
        Write whichever fields were given. No existence pre-check: a missing
        user surfaces as RecordNotFoundError from the storage layer.
        """
        values = {
            key: value
            for key, value in (("first_name", first_name), ("last_name", last_name), ("phone", phone))
            if value is not None
        }
        if not values:
            return self.get_profile(user_id)

        user = self.storage.update(User, user_id, values)
        self.storage.save()
        logger.info("User profile updated: %s", user.email)
        return user
