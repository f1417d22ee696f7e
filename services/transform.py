"""
Transform orchestration: identity → quota → rewrite → persist → increment.

The storage handle, ledger and rewriter are passed in once at startup; this
module holds no global state.
"""

import logging
from dataclasses import dataclass
from numbers import Real
from typing import Any, Dict, List, Optional

from auth.identity import CallerContext, GuestView
from auth.quota import UsageLedger
from domain.entities import TransformationDraft, TransformationRecord
from domain.errors import InvalidInput, RewriteFailed, Unauthenticated
from domain.policies import DEFAULT_FROM_STYLE, DEFAULT_PRESERVATION
from domain.schema import MAX_TEXT_LENGTH
from services.ai.base import Rewriter, as_provider_error
from storage.base import Storage

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class TransformResult:
    transformed_text: str
    record: TransformationRecord
    guest_usage: Optional[GuestView] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "transformedText": self.transformed_text,
            "guestUsage": self.guest_usage.usage_dict() if self.guest_usage else None,
        }


def _validate(original_text, to_style, preservation_percentage, max_text_length=MAX_TEXT_LENGTH) -> int:
    if not isinstance(original_text, str) or not original_text.strip():
        raise InvalidInput("Original text is required")
    if len(original_text) > max_text_length:
        raise InvalidInput(f"Original text must be at most {max_text_length} characters")
    if not isinstance(to_style, str) or not to_style.strip():
        raise InvalidInput("Target style is required")
    if preservation_percentage is None:
        return DEFAULT_PRESERVATION
    if isinstance(preservation_percentage, bool) or not isinstance(preservation_percentage, Real):
        raise InvalidInput("preservationPercentage must be a number")
    if not 0 <= preservation_percentage <= 100:
        raise InvalidInput("preservationPercentage must be between 0 and 100")
    if not float(preservation_percentage).is_integer():
        raise InvalidInput("preservationPercentage must be a whole number")
    return int(preservation_percentage)


class TransformOrchestrator:
    def __init__(self, storage: Storage, ledger: UsageLedger, rewriter: Rewriter,
                 max_text_length: int = MAX_TEXT_LENGTH):
        self.storage = storage
        self.ledger = ledger
        self.rewriter = rewriter
        self.max_text_length = max_text_length

    def transform(
        self,
        caller: CallerContext,
        original_text: str,
        to_style: str,
        from_style: Optional[str] = None,
        preservation_percentage: Optional[float] = DEFAULT_PRESERVATION,
    ) -> TransformResult:
        pct = _validate(original_text, to_style, preservation_percentage, self.max_text_length)
        from_style = from_style or None

        if caller.is_authenticated:
            return self._run(caller, original_text, from_style, to_style, pct)
        if not caller.guest_id:
            raise Unauthenticated()

        # 같은 guest 의 동시 요청은 여기서 직렬화 → 한도 초과 불가
        with self.ledger.reserve(caller.guest_id):
            return self._run(caller, original_text, from_style, to_style, pct)

    def _run(self, caller, original_text, from_style, to_style, pct) -> TransformResult:
        try:
            transformed = self.rewriter.rewrite(original_text, from_style, to_style, pct)
        except Exception as e:
            err = as_provider_error(self.rewriter.name, e)
            logger.exception("rewrite failed provider=%s kind=%s", err.provider, err.kind)
            raise RewriteFailed(str(err), reason=err.kind) from e

        draft = TransformationDraft(
            original_text=original_text,
            transformed_text=transformed,
            from_style=from_style or DEFAULT_FROM_STYLE,
            to_style=to_style,
            account_id=caller.account.id if caller.is_authenticated else None,
            guest_id=None if caller.is_authenticated else caller.guest_id,
        )
        record = self.storage.create_transformation(draft)

        if caller.is_authenticated:
            return TransformResult(transformed_text=transformed, record=record)

        try:
            usage = self.ledger.increment(caller.guest_id)
        except Exception:
            # 변환 기록은 이미 저장됨 → 변환은 성공으로 간주
            logger.exception("usage increment failed after transformation id=%s", record.id)
            usage = self.storage.get_guest_usage(caller.guest_id)
        guest_usage = GuestView.from_record(usage) if usage else None
        return TransformResult(transformed_text=transformed, record=record, guest_usage=guest_usage)

    def history(self, caller: CallerContext) -> List[TransformationRecord]:
        if caller.is_authenticated:
            return self.storage.list_transformations_by_account(caller.account.id)
        if caller.guest_id:
            return self.storage.list_transformations_by_guest(caller.guest_id)
        raise Unauthenticated("User must be authenticated")
