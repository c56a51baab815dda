"""Point rules triggered by goal lifecycle transitions."""

from __future__ import annotations

from dataclasses import dataclass
from datetime import date, datetime
from typing import List, Optional

from ..core.config import PointsConfig
from ..utils.datetime import completed_on_time

REASON_COMPLETED = "Completed goal"
REASON_COMPLETED_ON_TIME = "Completed goal on time"
REASON_REOPENED = "Reopened goal"
REASON_REOPENED_ON_TIME = "Reopened goal completed on time"


@dataclass(frozen=True)
class PointsAward:
    """Signed amount and reason for one ledger entry to be appended."""

    amount: int
    reason: str


@dataclass(frozen=True)
class GoalCompletedEvent:
    """Payload describing a goal reaching (or leaving) the completed state."""

    student_id: int
    goal_id: int
    completed_at: datetime
    target_date: Optional[date] = None

    @property
    def on_time(self) -> bool:
        return completed_on_time(self.completed_at, self.target_date)


def evaluate_completion(event: GoalCompletedEvent, config: PointsConfig) -> List[PointsAward]:
    """Return the base award plus the on-time bonus when it applies."""

    awards = [PointsAward(config.complete_goal, REASON_COMPLETED)]
    if event.on_time:
        awards.append(PointsAward(config.complete_on_time, REASON_COMPLETED_ON_TIME))
    return awards


def evaluate_reopen(event: GoalCompletedEvent, config: PointsConfig) -> List[PointsAward]:
    """Return deductions for reopening the completion described by ``event``.

    Both reopen values default to 0, in which case nothing is returned and
    reopening leaves the ledger untouched.
    """

    deductions = [PointsAward(-config.reopen_goal, REASON_REOPENED)]
    if event.on_time:
        deductions.append(PointsAward(-config.reopen_on_time, REASON_REOPENED_ON_TIME))
    return [award for award in deductions if award.amount != 0]
