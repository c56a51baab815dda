"""Public schema exports."""

from .goal import GoalComplete, GoalCreate, GoalRead, GoalTransition
from .leaderboard import LeaderboardStudent
from .points import (
	BalanceRead,
	BulkAward,
	BulkAwardFailure,
	BulkAwardReceipt,
	LedgerEntryRead,
	LedgerHistory,
	LedgerStatsRead,
	PointsChange,
	PointsReceipt,
)
from .student import StudentCreate, StudentRead

__all__ = [
	"BalanceRead",
	"BulkAward",
	"BulkAwardFailure",
	"BulkAwardReceipt",
	"GoalComplete",
	"GoalCreate",
	"GoalRead",
	"GoalTransition",
	"LeaderboardStudent",
	"LedgerEntryRead",
	"LedgerHistory",
	"LedgerStatsRead",
	"PointsChange",
	"PointsReceipt",
	"StudentCreate",
	"StudentRead",
]
