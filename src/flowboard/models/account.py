"""Business and user account models."""

from __future__ import annotations

from datetime import datetime
from typing import Any

from pydantic import BaseModel, Field

from .enums import MemberRole


class NotificationSettings(BaseModel):
    """Per-business webhook notification preferences."""

    enabled: bool = False
    notify_email: str | None = None  # Falls back to the business email


class Business(BaseModel):
    """A registered business; every board and task belongs to one."""

    id: str
    name: str
    email: str
    owner_id: str
    notification_settings: NotificationSettings = Field(default_factory=NotificationSettings)
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @property
    def notification_email(self) -> str:
        """Address notifications go to."""
        return self.notification_settings.notify_email or self.email

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> Business:
        return cls.model_validate({**data, "id": doc_id})


class User(BaseModel):
    """A signed-in user, keyed by the identity provider's uid."""

    uid: str
    email: str
    display_name: str
    business_id: str | None = None
    role: MemberRole = MemberRole.MEMBER
    avatar: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

    @classmethod
    def from_document(cls, doc_id: str, data: dict[str, Any]) -> User:
        return cls.model_validate({**data, "uid": doc_id})
