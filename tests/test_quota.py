import threading

import pytest

from auth.identity import CallerContext, resolve_guest
from auth.quota import UsageLedger
from domain.errors import NotFound, QuotaExceeded
from services.transform import TransformOrchestrator
from storage.memory import MemoryStorage
from tests.conftest import FakeRewriter
from utils.locks import KeyedLock


class TestUsageLedger:
    def test_check_allows_under_limit(self, storage):
        view = resolve_guest(storage, None, max_usage=2)
        ledger = UsageLedger(storage)
        assert ledger.check_and_reserve(view.guest_id).usage_count == 0

    def test_check_refuses_at_limit(self, storage):
        view = resolve_guest(storage, None, max_usage=1)
        ledger = UsageLedger(storage)
        ledger.increment(view.guest_id)
        with pytest.raises(QuotaExceeded) as exc:
            ledger.check_and_reserve(view.guest_id)
        assert exc.value.to_dict()["remainingUses"] == 0
        assert exc.value.http_status == 403

    def test_unknown_guest(self, storage):
        ledger = UsageLedger(storage)
        with pytest.raises(NotFound):
            ledger.check_and_reserve("ghost")
        with pytest.raises(NotFound):
            ledger.usage("ghost")

    def test_usage_view(self, storage):
        view = resolve_guest(storage, None)
        ledger = UsageLedger(storage)
        ledger.increment(view.guest_id)
        usage = ledger.usage(view.guest_id)
        assert (usage.usage_count, usage.remaining_uses) == (1, 9)


class TestKeyedLock:
    def test_locks_are_released(self):
        locks = KeyedLock()
        with locks.hold("a"):
            assert len(locks) == 1
        assert len(locks) == 0

    def test_different_keys_do_not_block(self):
        locks = KeyedLock()
        with locks.hold("a"):
            done = threading.Event()

            def other():
                with locks.hold("b"):
                    done.set()

            t = threading.Thread(target=other)
            t.start()
            assert done.wait(2)
            t.join()


def test_concurrent_guest_requests_never_exceed_limit():
    storage = MemoryStorage()
    ledger = UsageLedger(storage)
    orchestrator = TransformOrchestrator(storage, ledger, FakeRewriter())
    view = resolve_guest(storage, None, max_usage=10)
    caller = CallerContext(guest_id=view.guest_id)

    results = []
    start = threading.Barrier(25)

    def worker(i):
        start.wait()
        try:
            orchestrator.transform(caller, f"text {i}", "formal")
            results.append("ok")
        except QuotaExceeded:
            results.append("quota")

    threads = [threading.Thread(target=worker, args=(i,)) for i in range(25)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    assert results.count("ok") == 10
    assert results.count("quota") == 15
    assert storage.get_guest_usage(view.guest_id).usage_count == 10
    assert len(storage.list_transformations_by_guest(view.guest_id)) == 10
