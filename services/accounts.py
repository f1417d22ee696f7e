import logging
from typing import Optional

from auth.passwords import hash_password, verify_password
from domain.entities import Account, AccountDraft
from domain.errors import DuplicateUsername, InvalidInput
from storage.base import Storage

logger = logging.getLogger(__name__)


def register_account(storage: Storage, username: str, password: str) -> Account:
    username = (username or "").strip()
    if not username:
        raise InvalidInput("Username is required")
    if username.startswith("guest-"):
        # 게스트 합성 계정 이름 공간은 예약
        raise InvalidInput("Usernames starting with 'guest-' are reserved")
    if not password:
        raise InvalidInput("Password is required")

    if storage.get_account_by_username(username) is not None:
        raise DuplicateUsername()

    account = storage.create_account(AccountDraft(username=username, password=hash_password(password)))
    logger.info("account registered id=%s", account.id)
    return account


def authenticate(storage: Storage, username: str, password: str) -> Optional[Account]:
    account = storage.get_account_by_username((username or "").strip())
    if account is None or account.is_guest:
        return None
    if not verify_password(password or "", account.password):
        return None
    return account
