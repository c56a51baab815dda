"""Scheduled background jobs."""

from .points_reconcile import register_scheduler, run_reconcile_once

__all__ = ["register_scheduler", "run_reconcile_once"]
