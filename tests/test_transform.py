import pytest

from auth.identity import CallerContext, resolve_guest
from auth.quota import UsageLedger
from domain.entities import AccountDraft, GuestUsageDraft
from domain.errors import (
    InvalidInput,
    NotFound,
    QuotaExceeded,
    RewriteFailed,
    TextStylerError,
    Unauthenticated,
)
from domain.models import db
from services.ai.base import RATE_LIMITED
from services.transform import TransformOrchestrator
from storage.memory import MemoryStorage
from tests.conftest import FakeRewriter, make_app


@pytest.fixture
def fake():
    return FakeRewriter()


@pytest.fixture
def orchestrator(storage, fake):
    return TransformOrchestrator(storage, UsageLedger(storage), fake)


@pytest.fixture
def guest(storage):
    view = resolve_guest(storage, None)
    return CallerContext(guest_id=view.guest_id)


@pytest.fixture
def member(storage):
    acct = storage.create_account(AccountDraft(username="carol", password="x"))
    return CallerContext(account=acct)


class TestGuestTransform:
    def test_ten_then_refused(self, orchestrator, guest, storage):
        for i in range(10):
            result = orchestrator.transform(guest, f"hello {i}", "formal")
            assert result.guest_usage.usage_count == i + 1
        assert result.guest_usage.remaining_uses == 0

        with pytest.raises(QuotaExceeded):
            orchestrator.transform(guest, "one more", "formal")
        assert storage.get_guest_usage(guest.guest_id).usage_count == 10
        assert len(storage.list_transformations_by_guest(guest.guest_id)) == 10

    def test_result_payload(self, orchestrator, guest):
        result = orchestrator.transform(guest, "hi there", "pirate", from_style="plain")
        assert result.to_dict() == {
            "transformedText": "[pirate] hi there",
            "guestUsage": {"usageCount": 1, "maxUsage": 10, "remainingUses": 9},
        }
        assert result.record.guest_id == guest.guest_id
        assert result.record.account_id is None
        assert result.record.from_style == "plain"

    def test_provider_failure_changes_nothing(self, orchestrator, guest, storage, fake):
        fake.fail = RATE_LIMITED
        with pytest.raises(RewriteFailed) as exc:
            orchestrator.transform(guest, "hello", "formal")
        assert exc.value.reason == RATE_LIMITED
        assert exc.value.http_status == 500
        assert storage.get_guest_usage(guest.guest_id).usage_count == 0
        assert storage.list_transformations_by_guest(guest.guest_id) == []

    def test_refused_guest_never_reaches_provider(self, orchestrator, guest, storage, fake):
        for _ in range(10):
            storage.increment_guest_usage(guest.guest_id)
        with pytest.raises(QuotaExceeded):
            orchestrator.transform(guest, "hello", "formal")
        assert fake.calls == []

    def test_over_quota_record_reports_negative_remaining(self, orchestrator, guest, storage):
        for _ in range(12):
            storage.increment_guest_usage(guest.guest_id)
        with pytest.raises(QuotaExceeded):
            orchestrator.transform(guest, "hello", "formal")
        assert storage.get_guest_usage(guest.guest_id).remaining_uses == -2

    def test_stale_guest(self, orchestrator):
        with pytest.raises(NotFound):
            orchestrator.transform(CallerContext(guest_id="gone"), "hello", "formal")


class TestAccountTransform:
    def test_unlimited(self, orchestrator, member, storage):
        for i in range(12):
            result = orchestrator.transform(member, f"t{i}", "formal")
            assert result.guest_usage is None
        rows = orchestrator.history(member)
        assert len(rows) == 12
        assert all(r.account_id == member.account.id and r.guest_id is None for r in rows)

    def test_account_wins_over_guest_session(self, orchestrator, storage, member):
        view = resolve_guest(storage, None)
        caller = CallerContext(account=member.account, guest_id=view.guest_id)
        orchestrator.transform(caller, "hello", "formal")
        assert storage.get_guest_usage(view.guest_id).usage_count == 0
        assert storage.list_transformations_by_guest(view.guest_id) == []


class TestValidation:
    def test_no_identity(self, orchestrator):
        with pytest.raises(Unauthenticated):
            orchestrator.transform(CallerContext(), "hello", "formal")

    @pytest.mark.parametrize("text,style", [("", "formal"), ("   ", "formal"), ("hello", ""), (None, "formal")])
    def test_required_fields(self, orchestrator, guest, text, style):
        with pytest.raises(InvalidInput):
            orchestrator.transform(guest, text, style)

    @pytest.mark.parametrize("pct", [-1, 101, "50", True, 50.5, 0.1, float("nan")])
    def test_bad_preservation(self, orchestrator, guest, pct):
        with pytest.raises(InvalidInput):
            orchestrator.transform(guest, "hello", "formal", preservation_percentage=pct)

    def test_preservation_defaults_to_fifty(self, orchestrator, guest, fake):
        orchestrator.transform(guest, "hello", "formal", preservation_percentage=None)
        assert fake.calls[-1] == ("hello", None, "formal", 50)

    def test_whole_float_preservation_is_accepted(self, orchestrator, guest, fake):
        orchestrator.transform(guest, "hello", "formal", preservation_percentage=80.0)
        assert fake.calls[-1][3] == 80
        assert isinstance(fake.calls[-1][3], int)

    def test_history_requires_identity(self, orchestrator):
        with pytest.raises(Unauthenticated):
            orchestrator.history(CallerContext())

    def test_text_length_cap(self, storage, fake, guest):
        orchestrator = TransformOrchestrator(storage, UsageLedger(storage), fake, max_text_length=5)
        with pytest.raises(InvalidInput):
            orchestrator.transform(guest, "too long", "formal")
        assert orchestrator.transform(guest, "short", "formal").transformed_text == "[formal] short"


def _scripted_session(storage):
    """alice + guest g1 (cap 3): three transforms succeed, the fourth is refused."""
    orchestrator = TransformOrchestrator(storage, UsageLedger(storage), FakeRewriter())
    outcomes = []

    alice = storage.create_account(AccountDraft(username="alice", password="x"))
    outcomes.append(("account", alice.id, alice.username, alice.is_guest))

    usage, guest_acct = storage.create_guest(
        GuestUsageDraft(guest_id="g1", max_usage=3),
        AccountDraft(username="guest-g1", password="x", guest_id="g1", is_guest=True),
    )
    outcomes.append(("guest", usage.id, usage.usage_count, usage.max_usage, guest_acct.id))

    caller = CallerContext(guest_id="g1")
    for i in range(4):
        try:
            result = orchestrator.transform(caller, f"text {i}", "formal")
        except TextStylerError as e:
            outcomes.append(("error", type(e).__name__, e.code, e.http_status))
        else:
            rec = result.record
            outcomes.append(("ok", rec.id, rec.guest_id, rec.account_id, rec.transformed_text,
                             result.to_dict()["guestUsage"]))

    rows = storage.list_transformations_by_guest("g1")
    outcomes.append(("history", [(r.id, r.original_text) for r in rows]))
    final = storage.get_guest_usage("g1")
    outcomes.append(("usage", final.usage_count, final.remaining_uses))
    return outcomes


def test_scripted_session_matches_across_backends():
    memory_outcomes = _scripted_session(MemoryStorage())

    app = make_app("database")
    with app.app_context():
        try:
            database_outcomes = _scripted_session(app.storage)
        finally:
            db.session.remove()
            db.drop_all()

    assert memory_outcomes == database_outcomes
    assert memory_outcomes[-3][:2] == ("error", "QuotaExceeded")
    assert memory_outcomes[-1] == ("usage", 3, 0)
    assert [o[0] for o in memory_outcomes] == ["account", "guest", "ok", "ok", "ok", "error", "history", "usage"]
