"""
In-process storage backend.

All state lives in one MemoryState owned by the MemoryStorage instance; the
instance is built once at startup and passed around explicitly.
"""

import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional

from domain.entities import (
    Account,
    AccountDraft,
    GuestUsageDraft,
    GuestUsageRecord,
    TransformationDraft,
    TransformationRecord,
)
from domain.errors import DuplicateGuestId, DuplicateUsername, NotFound
from storage.base import Storage

logger = logging.getLogger(__name__)


@dataclass
class MemoryState:
    accounts: Dict[int, Account] = field(default_factory=dict)
    transformations: Dict[int, TransformationRecord] = field(default_factory=dict)
    guest_usage: Dict[str, GuestUsageRecord] = field(default_factory=dict)
    next_account_id: int = 1
    next_transformation_id: int = 1
    next_guest_usage_id: int = 1


class MemoryStorage(Storage):
    name = "memory"

    def __init__(self, state: Optional[MemoryState] = None):
        self._state = state or MemoryState()
        # re-entrant so atomic() can wrap the single-operation methods
        self._lock = threading.RLock()

    # ---- accounts ----
    def get_account(self, account_id: int) -> Optional[Account]:
        return self._state.accounts.get(account_id)

    def get_account_by_username(self, username: str) -> Optional[Account]:
        with self._lock:
            for acct in self._state.accounts.values():
                if acct.username == username:
                    return acct
        return None

    def get_account_by_guest_id(self, guest_id: str) -> Optional[Account]:
        with self._lock:
            for acct in self._state.accounts.values():
                if acct.guest_id == guest_id and acct.is_guest:
                    return acct
        return None

    def create_account(self, draft: AccountDraft) -> Account:
        self._check_account(draft)
        with self._lock:
            if self.get_account_by_username(draft.username) is not None:
                raise DuplicateUsername()
            acct = Account(
                id=self._state.next_account_id,
                username=draft.username,
                password=draft.password,
                guest_id=draft.guest_id,
                is_guest=bool(draft.is_guest),
            )
            self._state.next_account_id += 1
            self._state.accounts[acct.id] = acct
            return acct

    # ---- transformations ----
    def create_transformation(self, draft: TransformationDraft) -> TransformationRecord:
        self._check_transformation_owner(draft)
        with self._lock:
            if draft.account_id is not None and draft.account_id not in self._state.accounts:
                raise NotFound("Account not found")
            rec = TransformationRecord(
                id=self._state.next_transformation_id,
                account_id=draft.account_id,
                guest_id=draft.guest_id,
                original_text=draft.original_text,
                transformed_text=draft.transformed_text,
                from_style=draft.from_style,
                to_style=draft.to_style,
                created_at=draft.created_at,
            )
            self._state.next_transformation_id += 1
            self._state.transformations[rec.id] = rec
            return rec

    def list_transformations_by_account(self, account_id: int) -> List[TransformationRecord]:
        with self._lock:
            return [t for t in self._state.transformations.values() if t.account_id == account_id]

    def list_transformations_by_guest(self, guest_id: str) -> List[TransformationRecord]:
        with self._lock:
            return [t for t in self._state.transformations.values() if t.guest_id == guest_id]

    # ---- guest usage ----
    def get_guest_usage(self, guest_id: str) -> Optional[GuestUsageRecord]:
        return self._state.guest_usage.get(guest_id)

    def create_guest_usage(self, draft: GuestUsageDraft) -> GuestUsageRecord:
        self._check_guest_usage(draft)
        with self._lock:
            if draft.guest_id in self._state.guest_usage:
                raise DuplicateGuestId()
            rec = GuestUsageRecord(
                id=self._state.next_guest_usage_id,
                guest_id=draft.guest_id,
                usage_count=draft.usage_count,
                max_usage=draft.max_usage,
                created_at=draft.created_at,
            )
            self._state.next_guest_usage_id += 1
            self._state.guest_usage[rec.guest_id] = rec
            return rec

    def increment_guest_usage(self, guest_id: str) -> GuestUsageRecord:
        with self._lock:
            cur = self._state.guest_usage.get(guest_id)
            if cur is None:
                raise NotFound("Guest session not found")
            updated = replace(cur, usage_count=cur.usage_count + 1)
            self._state.guest_usage[guest_id] = updated
            return updated

    # ---- grouping ----
    @contextmanager
    def atomic(self):
        with self._lock:
            # entities are immutable, so shallow copies are a full snapshot;
            # id counters are not rolled back so ids are never reused
            accounts = dict(self._state.accounts)
            transformations = dict(self._state.transformations)
            guest_usage = dict(self._state.guest_usage)
            try:
                yield
            except Exception:
                logger.debug("memory storage rollback")
                self._state.accounts = accounts
                self._state.transformations = transformations
                self._state.guest_usage = guest_usage
                raise
