"""Service for sign-in, business registration and team membership."""

from __future__ import annotations

import logging
from typing import Protocol

from pydantic import ValidationError

from ..models import Business, Member, MemberRole, NotificationSettings, User
from ..repositories import BUSINESSES, USERS, DocumentStoreError, DocumentStoreProtocol
from ..utils import now_utc, to_iso
from .board_store import BoardStore
from .errors import AuthError

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6

# Identity provider error codes -> user-presentable messages
SIGN_IN_MESSAGES = {
    "invalid-credential": "Invalid email or password",
    "user-not-found": "User not found",
    "wrong-password": "Invalid password",
    "too-many-requests": "Too many failed attempts. Please try again later",
}
REGISTER_MESSAGES = {
    "email-already-in-use": "Email is already registered",
    "invalid-email": "Invalid email format",
    "weak-password": f"Password should be at least {MIN_PASSWORD_LENGTH} characters",
}


class IdentityError(Exception):
    """Raised by identity providers, carrying a provider error code."""

    def __init__(self, code: str, message: str = "") -> None:
        super().__init__(message or code)
        self.code = code


class IdentityProviderProtocol(Protocol):
    """The hosted identity provider. Only stable uids cross this boundary."""

    def sign_in(self, email: str, password: str) -> str:
        """Authenticate and return the user's uid.

        Raises:
            IdentityError: Authentication failed.
        """
        ...

    def register(self, email: str, password: str) -> str:
        """Create a login and return its uid.

        Raises:
            IdentityError: The account could not be created.
        """
        ...

    def sign_out(self) -> None: ...


class AccountService:
    """Resolves who is signed in and which business they act for."""

    def __init__(
        self,
        identity: IdentityProviderProtocol,
        documents: DocumentStoreProtocol,
    ) -> None:
        self.identity = identity
        self.documents = documents

    # --- Authentication ---

    def sign_in(self, email: str, password: str) -> User:
        """Sign in and load the user's profile."""
        try:
            uid = self.identity.sign_in(email, password)
        except IdentityError as e:
            logger.error("Sign in error: %s", e.code)
            raise AuthError(SIGN_IN_MESSAGES.get(e.code, "Failed to sign in")) from e

        user = self.get_user(uid)
        if user is None:
            logger.error("Sign in error: no profile for %s", uid)
            raise AuthError("User data not found")
        logger.info("Signed in: %s", uid)
        return user

    def sign_out(self) -> None:
        try:
            self.identity.sign_out()
        except IdentityError as e:
            logger.error("Sign out error: %s", e.code)
            raise AuthError("Failed to sign out") from e

    def register_business(
        self,
        email: str,
        password: str,
        business_name: str,
        owner_name: str,
    ) -> Business:
        """
        Create a login, its business and the owner's profile.

        The business document is keyed by the owner's uid.
        """
        if len(password) < MIN_PASSWORD_LENGTH:
            raise AuthError(REGISTER_MESSAGES["weak-password"])

        uid = self._register_login(email, password, "Failed to register business")
        now = now_utc()
        business = Business(
            id=uid,
            name=business_name,
            email=email,
            owner_id=uid,
            created_at=now,
            updated_at=now,
        )
        owner = User(
            uid=uid,
            email=email,
            display_name=owner_name,
            business_id=uid,
            role=MemberRole.OWNER,
            created_at=now,
            updated_at=now,
        )

        try:
            batch = self.documents.batch()
            batch.set(BUSINESSES, uid, business.model_dump(mode="json", exclude={"id"}))
            batch.set(USERS, uid, owner.model_dump(mode="json", exclude={"uid"}))
            batch.commit()
        except DocumentStoreError as e:
            logger.error("Registration error: %s", e)
            raise AuthError("Failed to register business") from e

        logger.info("Business registered: %s (%s)", uid, business_name)
        return business

    # --- Context ---

    def get_user(self, uid: str) -> User | None:
        doc = self.documents.get(USERS, uid)
        if doc is None:
            return None
        return _parse(User, doc.id, doc.data)

    def get_business(self, business_id: str) -> Business | None:
        doc = self.documents.get(BUSINESSES, business_id)
        if doc is None:
            return None
        return _parse(Business, doc.id, doc.data)

    def store_for(self, user: User) -> BoardStore:
        """The board store for the user's business (unresolved if they have none)."""
        return BoardStore(self.documents, user.business_id)

    # --- Team ---

    def invite_member(
        self,
        business_id: str,
        email: str,
        password: str,
        display_name: str,
        role: MemberRole = MemberRole.MEMBER,
    ) -> User:
        """Create a login for a team member and attach it to the business."""
        uid = self._register_login(email, password, "Failed to add team member")
        now = now_utc()
        user = User(
            uid=uid,
            email=email,
            display_name=display_name,
            business_id=business_id,
            role=role,
            created_at=now,
            updated_at=now,
        )
        try:
            self.documents.set(USERS, uid, user.model_dump(mode="json", exclude={"uid"}))
        except DocumentStoreError as e:
            logger.error("Error adding team member: %s", e)
            raise AuthError("Failed to add team member") from e

        logger.info("Team member added: %s to business %s", uid, business_id)
        return user

    def list_members(self, business_id: str) -> list[Member]:
        """Users of a business as assignable members."""
        members = []
        for doc in self.documents.query(USERS, business_id=business_id):
            user = _parse(User, doc.id, doc.data)
            if user is not None:
                members.append(
                    Member(
                        id=user.uid,
                        name=user.display_name,
                        email=user.email,
                        role=user.role,
                        avatar=user.avatar,
                    )
                )
        return members

    def update_member_role(self, uid: str, role: MemberRole) -> None:
        self._update(USERS, uid, {"role": role.value}, "Failed to update member role")

    def update_notification_settings(
        self, business_id: str, settings: NotificationSettings
    ) -> None:
        self._update(
            BUSINESSES,
            business_id,
            {"notification_settings": settings.model_dump(mode="json")},
            "Failed to save notification settings",
        )

    # --- Private Methods ---

    def _register_login(self, email: str, password: str, fallback: str) -> str:
        try:
            return self.identity.register(email, password)
        except IdentityError as e:
            logger.error("Registration error: %s", e.code)
            raise AuthError(REGISTER_MESSAGES.get(e.code, fallback)) from e

    def _update(self, collection: str, doc_id: str, data: dict, message: str) -> None:
        data = {**data, "updated_at": to_iso(now_utc())}
        try:
            self.documents.update(collection, doc_id, data)
        except DocumentStoreError as e:
            logger.error("%s: %s", message, e)
            raise AuthError(message) from e


def _parse(model: type[User] | type[Business], doc_id: str, data: dict) -> User | Business | None:
    try:
        return model.from_document(doc_id, data)
    except ValidationError as e:
        logger.warning("Skipping malformed %s %s: %s", model.__name__, doc_id, e)
        return None
