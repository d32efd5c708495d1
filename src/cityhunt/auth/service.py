"""Registration and login against pre-hashed password digests.

Clients hash passwords themselves; the service only ever sees and stores
64-character hex digests and compares them in constant time.
"""

from __future__ import annotations

import secrets
from typing import TYPE_CHECKING, Any

import structlog

from cityhunt.database import utcnow
from cityhunt.errors import AuthenticationError, NotFoundError, ValidationFailedError
from cityhunt.users.repository import USERS, UserRepository, normalize_username, public_user
from cityhunt.validation import PASSWORD_ERROR, is_valid_digest, validate_login, validate_user

if TYPE_CHECKING:
    from cityhunt.database import Document, DocumentStore

logger = structlog.get_logger()

INVALID_CREDENTIALS = "Invalid username or password"


class AuthService:
    """Credential checks layered over the users collection."""

    def __init__(self, store: DocumentStore) -> None:
        self.store = store
        self.users = UserRepository(store)

    async def register(self, data: Document) -> Document:
        """Create a user with a username and password digest.

        Raises:
            ValidationFailedError: If profile or credential fields are invalid.
            ConflictError: If the email or username is already registered.
        """
        errors = validate_user(data).errors + validate_login(data).errors
        if errors:
            raise ValidationFailedError(errors)

        email = data.get("email")
        payload = {
            **data,
            "email": email.strip().lower() if isinstance(email, str) and email.strip() else None,
            "username": normalize_username(data["username"]),
            "status": "active",
        }
        user = await self.users.create(payload)
        logger.info("user_registered", user_id=str(user["_id"]), username=payload["username"])
        return user

    async def authenticate(self, username: Any, password: Any) -> Document:  # noqa: ANN401
        """Check a username/digest pair and stamp ``lastLogin``.

        Raises:
            ValidationFailedError: If the username is missing or the digest malformed.
            AuthenticationError: If the credentials do not match an active account.
        """
        validation = validate_login({"username": username, "password": password})
        if not validation.is_valid:
            raise ValidationFailedError(validation.errors)

        user = await self.users.find_by_username(str(username))
        if user is None:
            logger.info("login_failed", username=str(username), reason="unknown_user")
            raise AuthenticationError(INVALID_CREDENTIALS)

        stored = user.get("password")
        if not stored:
            msg = "User account is not properly configured"
            raise AuthenticationError(msg)
        if not secrets.compare_digest(stored.lower(), password.lower()):
            logger.info("login_failed", username=user.get("username"), reason="bad_password")
            raise AuthenticationError(INVALID_CREDENTIALS)
        if user.get("status") and user["status"] != "active":
            msg = "Account is not active"
            raise AuthenticationError(msg)

        login_time = utcnow()
        await self.store.update_one(USERS, {"_id": user["_id"]}, {"$set": {"lastLogin": login_time}})
        logger.info("login_succeeded", user_id=str(user["_id"]))
        return {"user": public_user({**user, "lastLogin": login_time}), "loginTime": login_time}

    async def change_password(self, user_id: str, old_password: Any, new_password: Any) -> None:  # noqa: ANN401
        if not is_valid_digest(old_password) or not is_valid_digest(new_password):
            raise ValidationFailedError([PASSWORD_ERROR])

        user = await self.store.find_by_id(USERS, self.store.object_id(user_id, "user ID"))
        if user is None:
            msg = "User not found"
            raise NotFoundError(msg)
        if not secrets.compare_digest(str(user.get("password", "")).lower(), old_password.lower()):
            msg = "Current password is incorrect"
            raise AuthenticationError(msg)

        await self.store.update_by_id(USERS, user["_id"], {"$set": {"password": new_password}})
        logger.info("password_changed", user_id=user_id)

    async def reset_password(self, user_id: str, new_password: Any) -> None:  # noqa: ANN401
        """Administrative reset; does not require the current password."""
        if not is_valid_digest(new_password):
            raise ValidationFailedError([PASSWORD_ERROR])

        matched = await self.store.update_by_id(
            USERS, self.store.object_id(user_id, "user ID"), {"$set": {"password": new_password}}
        )
        if matched == 0:
            msg = "User not found"
            raise NotFoundError(msg)
        logger.info("password_reset", user_id=user_id)

    async def get_login_stats(self) -> Document:
        total = await self.store.count(USERS)
        active = await self.store.count(USERS, {"status": "active"})
        with_password = await self.store.count(USERS, {"password": {"$exists": True, "$ne": None}})
        recent = await self.store.find(
            USERS,
            {"lastLogin": {"$exists": True, "$ne": None}},
            sort=[("lastLogin", -1)],
            limit=10,
        )
        return {
            "totalUsers": total,
            "activeUsers": active,
            "usersWithPassword": with_password,
            "recentLogins": [
                {"_id": u["_id"], "name": u.get("name"), "email": u.get("email"), "lastLogin": u.get("lastLogin")}
                for u in recent
            ],
        }

