"""Manual awards, redemptions and penalties."""

from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Iterable, List, Optional, Tuple

from sqlalchemy.orm import Session

from ..core.config import PointsConfig
from ..models import LedgerEntry
from . import balance_service, ledger_service
from .balance_service import REASON_AWARDED, REASON_PENALTY, REASON_REDEEMED, StudentBalance
from .ledger_service import InsufficientBalanceError, InvalidAmountError, PointsRuleViolation

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AwardRequest:
    student_id: int
    points: int
    reason: Optional[str] = None


@dataclass
class BulkAwardResult:
    """Outcome of a bulk award; failed items carry the rejection detail."""

    successful: List[LedgerEntry] = field(default_factory=list)
    failed: List[Tuple[AwardRequest, str]] = field(default_factory=list)

    @property
    def total_processed(self) -> int:
        return len(self.successful) + len(self.failed)


def _check_amount(points: int, config: PointsConfig) -> None:
    if points <= 0:
        raise InvalidAmountError("Points amount must be positive.")
    if points > config.max_transaction:
        raise InvalidAmountError(
            f"Points amount cannot exceed {config.max_transaction} per transaction."
        )


def award_points(
    session: Session,
    *,
    student_id: int,
    points: int,
    reason: str = REASON_AWARDED,
    config: Optional[PointsConfig] = None,
) -> Tuple[LedgerEntry, StudentBalance]:
    """Credit points outside the goal rules."""

    _check_amount(points, config or PointsConfig())
    entry = ledger_service.append(session, student_id=student_id, amount=points, reason=reason)
    return entry, balance_service.get_balance(session, student_id)


def bulk_award(
    session: Session,
    awards: Iterable[AwardRequest],
    *,
    config: Optional[PointsConfig] = None,
) -> BulkAwardResult:
    """Award each request independently, collecting the ones that were rejected.

    Rejected requests are refused before anything is written for them, so
    the accepted entries can be committed together.
    """

    config = config or PointsConfig()
    result = BulkAwardResult()
    for request in awards:
        try:
            _check_amount(request.points, config)
            entry = ledger_service.append(
                session,
                student_id=request.student_id,
                amount=request.points,
                reason=request.reason or REASON_AWARDED,
            )
        except PointsRuleViolation as exc:
            result.failed.append((request, exc.detail))
            continue
        result.successful.append(entry)

    logger.info(
        "bulk award processed %d requests: %d awarded, %d rejected",
        result.total_processed,
        len(result.successful),
        len(result.failed),
    )
    return result


def redeem_points(
    session: Session,
    *,
    student_id: int,
    points: int,
    config: PointsConfig,
    reason: str = REASON_REDEEMED,
) -> Tuple[LedgerEntry, StudentBalance]:
    """Spend points, never past the current balance."""

    _check_amount(points, config)
    if points < config.min_redemption:
        raise InvalidAmountError(f"Minimum redemption amount is {config.min_redemption} points.")

    student = ledger_service.lock_student(session, student_id)
    available = ledger_service.ledger_sum(session, student.id)
    if points > available:
        raise InsufficientBalanceError(
            f"Requested points exceed available balance ({available} points)."
        )

    entry = ledger_service.append(session, student_id=student_id, amount=-points, reason=reason)
    return entry, balance_service.get_balance(session, student_id)


def apply_penalty(
    session: Session,
    *,
    student_id: int,
    points: int,
    reason: str = REASON_PENALTY,
    config: Optional[PointsConfig] = None,
) -> Tuple[LedgerEntry, StudentBalance]:
    """Deduct points for an infraction; the balance may go negative."""

    _check_amount(points, config or PointsConfig())
    entry = ledger_service.append(session, student_id=student_id, amount=-points, reason=reason)
    return entry, balance_service.get_balance(session, student_id)
