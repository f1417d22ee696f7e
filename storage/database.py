"""
Relational storage backend on Flask-SQLAlchemy.

Every public operation needs an application context. Each write commits on
its own unless it runs inside atomic(), where the outermost block commits.
"""

import logging
import threading
from contextlib import contextmanager
from typing import List, Optional

from sqlalchemy import select, update
from sqlalchemy.exc import IntegrityError

from domain.entities import (
    Account,
    AccountDraft,
    GuestUsageDraft,
    GuestUsageRecord,
    TransformationDraft,
    TransformationRecord,
)
from domain.errors import DuplicateGuestId, DuplicateUsername, InvalidInput, NotFound
from domain.models import AccountRow, GuestUsageRow, TransformationRow, db
from storage.base import Storage
from utils.time_utils import _to_utc_aware

logger = logging.getLogger(__name__)


def _account(row: AccountRow) -> Account:
    return Account(
        id=row.id,
        username=row.username,
        password=row.password,
        guest_id=row.guest_id,
        is_guest=bool(row.is_guest),
    )


def _transformation(row: TransformationRow) -> TransformationRecord:
    return TransformationRecord(
        id=row.id,
        account_id=row.account_id,
        guest_id=row.guest_id,
        original_text=row.original_text,
        transformed_text=row.transformed_text,
        from_style=row.from_style,
        to_style=row.to_style,
        created_at=_to_utc_aware(row.created_at),
    )


def _guest_usage(row: GuestUsageRow) -> GuestUsageRecord:
    return GuestUsageRecord(
        id=row.id,
        guest_id=row.guest_id,
        usage_count=row.usage_count or 0,
        max_usage=row.max_usage if row.max_usage is not None else 10,
        created_at=_to_utc_aware(row.created_at),
    )


class DatabaseStorage(Storage):
    name = "database"

    def __init__(self):
        self._local = threading.local()

    def _depth(self) -> int:
        return getattr(self._local, "depth", 0)

    def _commit(self) -> None:
        if self._depth() == 0:
            db.session.commit()
        else:
            db.session.flush()

    def init_schema(self) -> None:
        db.create_all()

    # ---- accounts ----
    def get_account(self, account_id: int) -> Optional[Account]:
        row = db.session.get(AccountRow, account_id)
        return _account(row) if row else None

    def get_account_by_username(self, username: str) -> Optional[Account]:
        row = db.session.execute(
            select(AccountRow).where(AccountRow.username == username)
        ).scalar_one_or_none()
        return _account(row) if row else None

    def get_account_by_guest_id(self, guest_id: str) -> Optional[Account]:
        row = db.session.execute(
            select(AccountRow)
            .where(AccountRow.guest_id == guest_id, AccountRow.is_guest.is_(True))
            .order_by(AccountRow.id)
        ).scalars().first()
        return _account(row) if row else None

    def create_account(self, draft: AccountDraft) -> Account:
        self._check_account(draft)
        if self.get_account_by_username(draft.username) is not None:
            raise DuplicateUsername()
        row = AccountRow(
            username=draft.username,
            password=draft.password,
            guest_id=draft.guest_id,
            is_guest=bool(draft.is_guest),
        )
        try:
            db.session.add(row)
            db.session.flush()
        except IntegrityError:
            # 경쟁 INSERT 에서 짐 → 이미 같은 username 이 있음
            db.session.rollback()
            raise DuplicateUsername()
        acct = _account(row)
        self._commit()
        return acct

    # ---- transformations ----
    def create_transformation(self, draft: TransformationDraft) -> TransformationRecord:
        self._check_transformation_owner(draft)
        if draft.account_id is not None and db.session.get(AccountRow, draft.account_id) is None:
            raise NotFound("Account not found")
        row = TransformationRow(
            account_id=draft.account_id,
            guest_id=draft.guest_id,
            original_text=draft.original_text,
            transformed_text=draft.transformed_text,
            from_style=draft.from_style,
            to_style=draft.to_style,
            created_at=draft.created_at,
        )
        try:
            db.session.add(row)
            db.session.flush()
        except IntegrityError:
            # FK / owner 제약 위반 → 세션을 되돌려 다음 요청이 쓸 수 있게
            db.session.rollback()
            raise InvalidInput("Transformation violates a storage constraint")
        rec = _transformation(row)
        self._commit()
        return rec

    def list_transformations_by_account(self, account_id: int) -> List[TransformationRecord]:
        rows = db.session.execute(
            select(TransformationRow)
            .where(TransformationRow.account_id == account_id)
            .order_by(TransformationRow.id)
        ).scalars()
        return [_transformation(r) for r in rows]

    def list_transformations_by_guest(self, guest_id: str) -> List[TransformationRecord]:
        rows = db.session.execute(
            select(TransformationRow)
            .where(TransformationRow.guest_id == guest_id)
            .order_by(TransformationRow.id)
        ).scalars()
        return [_transformation(r) for r in rows]

    # ---- guest usage ----
    def _guest_row(self, guest_id: str, refresh: bool = False) -> Optional[GuestUsageRow]:
        stmt = select(GuestUsageRow).where(GuestUsageRow.guest_id == guest_id)
        if refresh:
            stmt = stmt.execution_options(populate_existing=True)
        return db.session.execute(stmt).scalar_one_or_none()

    def get_guest_usage(self, guest_id: str) -> Optional[GuestUsageRecord]:
        row = self._guest_row(guest_id, refresh=True)
        return _guest_usage(row) if row else None

    def create_guest_usage(self, draft: GuestUsageDraft) -> GuestUsageRecord:
        self._check_guest_usage(draft)
        if self._guest_row(draft.guest_id) is not None:
            raise DuplicateGuestId()
        row = GuestUsageRow(
            guest_id=draft.guest_id,
            usage_count=draft.usage_count,
            max_usage=draft.max_usage,
            created_at=draft.created_at,
        )
        try:
            db.session.add(row)
            db.session.flush()
        except IntegrityError:
            db.session.rollback()
            raise DuplicateGuestId()
        rec = _guest_usage(row)
        self._commit()
        return rec

    def increment_guest_usage(self, guest_id: str) -> GuestUsageRecord:
        # 단일 UPDATE 로 원자적 증가 (read-modify-write 없음)
        result = db.session.execute(
            update(GuestUsageRow)
            .where(GuestUsageRow.guest_id == guest_id)
            .values(usage_count=GuestUsageRow.usage_count + 1)
            .execution_options(synchronize_session=False)
        )
        if result.rowcount == 0:
            if self._depth() == 0:
                db.session.rollback()
            raise NotFound("Guest session not found")
        self._commit()
        return _guest_usage(self._guest_row(guest_id, refresh=True))

    # ---- grouping ----
    @contextmanager
    def atomic(self):
        self._local.depth = self._depth() + 1
        try:
            yield
        except Exception:
            self._local.depth -= 1
            logger.debug("database storage rollback")
            db.session.rollback()
            raise
        else:
            self._local.depth -= 1
            if self._local.depth == 0:
                db.session.commit()
