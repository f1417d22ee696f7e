"""
Value objects handed out by the storage layer.

Every entity is frozen: callers get copies and all mutation goes through
the storage operations.
"""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Optional

from utils.time_utils import utcnow


@dataclass(frozen=True)
class Account:
    id: int
    username: str
    password: str
    guest_id: Optional[str] = None
    is_guest: bool = False

    def public_dict(self) -> Dict[str, Any]:
        """JSON view without the password hash."""
        return {
            "id": self.id,
            "username": self.username,
            "guestId": self.guest_id,
            "isGuest": self.is_guest,
        }


@dataclass(frozen=True)
class AccountDraft:
    username: str
    password: str
    guest_id: Optional[str] = None
    is_guest: bool = False


@dataclass(frozen=True)
class GuestUsageRecord:
    id: int
    guest_id: str
    usage_count: int
    max_usage: int
    created_at: datetime

    @property
    def remaining_uses(self) -> int:
        # not clamped: an over-quota record shows up as negative
        return self.max_usage - self.usage_count


@dataclass(frozen=True)
class GuestUsageDraft:
    guest_id: str
    usage_count: int = 0
    max_usage: int = 10
    created_at: datetime = field(default_factory=utcnow)


@dataclass(frozen=True)
class TransformationRecord:
    id: int
    account_id: Optional[int]
    guest_id: Optional[str]
    original_text: str
    transformed_text: str
    from_style: str
    to_style: str
    created_at: datetime

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "userId": self.account_id,
            "guestId": self.guest_id,
            "originalText": self.original_text,
            "transformedText": self.transformed_text,
            "fromStyle": self.from_style,
            "toStyle": self.to_style,
            "createdAt": self.created_at.isoformat(),
        }


@dataclass(frozen=True)
class TransformationDraft:
    original_text: str
    transformed_text: str
    to_style: str
    from_style: str = "default"
    account_id: Optional[int] = None
    guest_id: Optional[str] = None
    created_at: datetime = field(default_factory=utcnow)
