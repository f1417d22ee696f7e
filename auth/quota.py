import logging
from contextlib import contextmanager
from typing import Iterator

from auth.identity import GuestView
from domain.entities import GuestUsageRecord
from domain.errors import NotFound, QuotaExceeded
from storage.base import Storage
from utils.locks import KeyedLock

logger = logging.getLogger(__name__)


class UsageLedger:
    """
    게스트 사용량 게이트 (성공시에만 +1)
    check_and_reserve / increment 는 단독 호출도 가능하지만,
    reserve() 안에서 호출하면 같은 guest id 에 대한 요청은 직렬화된다.
    """

    def __init__(self, storage: Storage):
        self.storage = storage
        self._locks = KeyedLock()

    def _record(self, guest_id: str) -> GuestUsageRecord:
        record = self.storage.get_guest_usage(guest_id)
        if record is None:
            raise NotFound("Guest session not found")
        return record

    def check_and_reserve(self, guest_id: str) -> GuestUsageRecord:
        record = self._record(guest_id)
        if record.usage_count >= record.max_usage:
            logger.info(
                "guest quota exceeded guest_id=%s usage=%s/%s",
                guest_id, record.usage_count, record.max_usage,
            )
            raise QuotaExceeded()
        return record

    def increment(self, guest_id: str) -> GuestUsageRecord:
        return self.storage.increment_guest_usage(guest_id)

    @contextmanager
    def reserve(self, guest_id: str) -> Iterator[GuestUsageRecord]:
        """Hold the guest's lock from the quota check until the caller has incremented."""
        with self._locks.hold(guest_id):
            yield self.check_and_reserve(guest_id)

    def usage(self, guest_id: str) -> GuestView:
        return GuestView.from_record(self._record(guest_id))
