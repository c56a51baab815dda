"""Service layer exports."""

from . import (
	balance_service,
	goal_service,
	leaderboard_service,
	ledger_service,
	points_rules,
	points_service,
	reconcile_service,
	student_service,
)

__all__ = [
	"balance_service",
	"goal_service",
	"leaderboard_service",
	"ledger_service",
	"points_rules",
	"points_service",
	"reconcile_service",
	"student_service",
]
