# Typed payloads for the platform's Socket.IO notification channel.
# Created: 2026-10-18

from __future__ import annotations

from typing import Any

from pydantic import BaseModel, ConfigDict, Field

NEW_NOTIFICATION = "notification_new"
JOIN_NOTIFICATIONS = "joinNotifications"
JOIN_ALERTS = "joinAlerts"


class NotificationEvent(BaseModel):
    """A notification pushed by the platform as it is created."""

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    id: str = Field(..., alias="_id")
    user_id: str | None = Field(None, alias="userId")
    from_user_id: str | None = Field(None, alias="fromUserId")
    type: str = ""
    title: str = ""
    content: str = ""
    meta: dict[str, Any] = Field(default_factory=dict)
    is_read: bool = Field(False, alias="isRead")
    created_at: str | None = Field(None, alias="createdAt")
    updated_at: str | None = Field(None, alias="updatedAt")
