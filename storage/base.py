"""
Storage contract shared by the in-memory and relational backends.

Both implementations must be observably identical: same entities, same
error kinds, list results in insertion order, per-entity ids starting at 1.
"""

from abc import ABC, abstractmethod
from contextlib import contextmanager
from typing import Iterator, List, Optional, Tuple

from domain.entities import (
    Account,
    AccountDraft,
    GuestUsageDraft,
    GuestUsageRecord,
    TransformationDraft,
    TransformationRecord,
)
from domain.errors import InvalidInput


class Storage(ABC):
    """Uniform data access over accounts, guest usage records and transformations."""

    name = "abstract"

    # ---- accounts ----
    @abstractmethod
    def get_account(self, account_id: int) -> Optional[Account]:
        ...

    @abstractmethod
    def get_account_by_username(self, username: str) -> Optional[Account]:
        ...

    @abstractmethod
    def get_account_by_guest_id(self, guest_id: str) -> Optional[Account]:
        """Only guest accounts are matched."""

    @abstractmethod
    def create_account(self, draft: AccountDraft) -> Account:
        """Raises DuplicateUsername if the username is taken."""

    # ---- transformations ----
    @abstractmethod
    def create_transformation(self, draft: TransformationDraft) -> TransformationRecord:
        ...

    @abstractmethod
    def list_transformations_by_account(self, account_id: int) -> List[TransformationRecord]:
        ...

    @abstractmethod
    def list_transformations_by_guest(self, guest_id: str) -> List[TransformationRecord]:
        ...

    # ---- guest usage ----
    @abstractmethod
    def get_guest_usage(self, guest_id: str) -> Optional[GuestUsageRecord]:
        ...

    @abstractmethod
    def create_guest_usage(self, draft: GuestUsageDraft) -> GuestUsageRecord:
        """Raises DuplicateGuestId if a record exists for draft.guest_id."""

    @abstractmethod
    def increment_guest_usage(self, guest_id: str) -> GuestUsageRecord:
        """+1 on usage_count. Raises NotFound if absent."""

    # ---- grouping ----
    @abstractmethod
    @contextmanager
    def atomic(self) -> Iterator[None]:
        """Group writes so callers see all of them or none."""

    def create_guest(
        self, usage: GuestUsageDraft, account: AccountDraft
    ) -> Tuple[GuestUsageRecord, Account]:
        """Create a guest usage record and its synthetic account together."""
        with self.atomic():
            record = self.create_guest_usage(usage)
            acct = self.create_account(account)
        return record, acct

    def init_schema(self) -> None:
        return None

    # ---- shared validation ----
    @staticmethod
    def _check_transformation_owner(draft: TransformationDraft) -> None:
        if (draft.account_id is None) == (draft.guest_id is None):
            raise InvalidInput("A transformation must belong to exactly one of account or guest")

    @staticmethod
    def _check_account(draft: AccountDraft) -> None:
        if not draft.username:
            raise InvalidInput("username must not be empty")
        if draft.is_guest and not draft.guest_id:
            raise InvalidInput("guest accounts require a guest_id")

    @staticmethod
    def _check_guest_usage(draft: GuestUsageDraft) -> None:
        if not draft.guest_id:
            raise InvalidInput("guest_id must not be empty")
        if draft.usage_count < 0:
            raise InvalidInput("usage_count must be >= 0")
        if draft.max_usage <= 0:
            raise InvalidInput("max_usage must be > 0")
