import logging
import uuid
from dataclasses import dataclass
from typing import Any, Dict, Optional

from flask import current_app, g, session

from auth.passwords import random_password_hash
from domain.entities import Account, AccountDraft, GuestUsageDraft, GuestUsageRecord
from domain.policies import LIMITS
from storage.base import Storage

logger = logging.getLogger(__name__)

SESSION_USER_KEY = "user"
SESSION_GUEST_KEY = "guest_id"


@dataclass(frozen=True)
class GuestView:
    guest_id: str
    usage_count: int
    max_usage: int

    @property
    def remaining_uses(self) -> int:
        return self.max_usage - self.usage_count

    @classmethod
    def from_record(cls, record: GuestUsageRecord) -> "GuestView":
        return cls(guest_id=record.guest_id, usage_count=record.usage_count, max_usage=record.max_usage)

    def usage_dict(self) -> Dict[str, Any]:
        return {
            "usageCount": self.usage_count,
            "maxUsage": self.max_usage,
            "remainingUses": self.remaining_uses,
        }

    def to_dict(self) -> Dict[str, Any]:
        return {"guestId": self.guest_id, **self.usage_dict()}


@dataclass(frozen=True)
class CallerContext:
    account: Optional[Account] = None
    guest_id: Optional[str] = None

    @property
    def is_authenticated(self) -> bool:
        return self.account is not None


def new_guest_id() -> str:
    return str(uuid.uuid4())


def resolve_guest(storage: Storage, existing_guest_id: Optional[str], max_usage: Optional[int] = None) -> GuestView:
    """
    세션에 있던 guest id 를 확인하거나 새로 발급한다.
    - 유효한 id(레코드 존재): 그대로 반환, 아무것도 만들지 않음
    - 레코드 없는 id(stale) / id 없음: 새 id 발급 + GuestUsageRecord + 게스트 계정 생성
    """
    if existing_guest_id:
        record = storage.get_guest_usage(existing_guest_id)
        if record is not None:
            return GuestView.from_record(record)
        logger.info("stale guest id in session, minting a new one")

    cap = max_usage if max_usage is not None else LIMITS["guest"]["max_usage"]
    guest_id = new_guest_id()
    record, _ = storage.create_guest(
        GuestUsageDraft(guest_id=guest_id, usage_count=0, max_usage=cap),
        AccountDraft(
            username=f"guest-{guest_id}",
            password=random_password_hash(),
            guest_id=guest_id,
            is_guest=True,
        ),
    )
    logger.info("guest created guest_id=%s max_usage=%s", guest_id, cap)
    return GuestView.from_record(record)


# -------------------- 요청 단위 헬퍼 (Flask) --------------------

def load_current_account() -> Optional[Account]:
    """before_request 훅: 세션의 계정 id 로 계정을 읽어 g 에 저장"""
    sess = session.get(SESSION_USER_KEY) or {}
    account_id = sess.get("id")
    if not account_id:
        g.current_account = None
        return None

    account = current_app.storage.get_account(account_id)
    if account is None or account.is_guest:
        # 삭제되었거나 잘못된 세션 → 비로그인 취급
        session.pop(SESSION_USER_KEY, None)
        account = None
    g.current_account = account
    return account


def get_current_account() -> Optional[Account]:
    return getattr(g, "current_account", None)


def login_account(account: Account) -> None:
    session[SESSION_USER_KEY] = {"id": account.id, "username": account.username}
    session.permanent = True
    g.current_account = account


def logout_account() -> None:
    session.pop(SESSION_USER_KEY, None)
    g.current_account = None


def session_guest_id() -> Optional[str]:
    return session.get(SESSION_GUEST_KEY)


def remember_guest(guest_id: str) -> None:
    session[SESSION_GUEST_KEY] = guest_id
    session.permanent = True


def caller_from_request() -> CallerContext:
    return CallerContext(account=get_current_account(), guest_id=session_guest_id())
