"""Tests for the append-only ledger store."""

from datetime import datetime

import pytest

from conftest import assert_cache_matches_ledger, cached_points
from roadmap.services import ledger_service
from roadmap.services.ledger_service import EntryNotFound, ReferentialError
from roadmap.services.points_rules import PointsAward


class TestAppend:
    """Appending entries and keeping the cached balance in sync."""

    def test_append_inserts_entry_and_increments_cache(self, session, make_student):
        student = make_student("Amaya")

        entry = ledger_service.append(session, student_id=student.id, amount=4, reason="Points awarded")
        session.commit()

        assert entry.id is not None
        assert entry.amount == 4
        assert entry.related_goal_id is None
        assert cached_points(session, student.id) == 4

    def test_cache_matches_ledger_after_every_append(self, session, make_student):
        student = make_student()

        for amount in (2, 1, -3, 5, 0, -7, 2):
            ledger_service.append(session, student_id=student.id, amount=amount, reason="Adjustment")
            assert_cache_matches_ledger(session, student.id)

        session.commit()
        assert cached_points(session, student.id) == 0

    def test_explicit_timestamp_is_kept(self, session, make_student):
        student = make_student()
        stamp = datetime(2025, 10, 14, 9, 30)

        entry = ledger_service.append(
            session, student_id=student.id, amount=2, reason="Completed goal", created_at=stamp
        )

        assert entry.created_at == stamp

    def test_zero_amount_entry_is_accepted(self, session, make_student):
        student = make_student()

        entry = ledger_service.append(session, student_id=student.id, amount=0, reason="Adjustment")

        assert entry.amount == 0
        assert ledger_service.count_by_student(session, student.id) == 1
        assert cached_points(session, student.id) == 0

    def test_append_many_keeps_order(self, session, make_student, make_goal):
        student = make_student()
        goal = make_goal(student)

        entries = ledger_service.append_many(
            session,
            student_id=student.id,
            awards=[PointsAward(2, "Completed goal"), PointsAward(1, "Completed goal on time")],
            related_goal_id=goal.id,
        )

        assert [e.reason for e in entries] == ["Completed goal", "Completed goal on time"]
        assert all(e.related_goal_id == goal.id for e in entries)
        assert cached_points(session, student.id) == 3


class TestReferentialIntegrity:
    """Appends referencing missing rows are rejected without writing."""

    def test_unknown_student_is_rejected(self, session, make_student):
        student = make_student()
        ledger_service.append(session, student_id=student.id, amount=2, reason="Completed goal")
        session.commit()
        before = ledger_service.count_by_student(session, student.id)

        with pytest.raises(ReferentialError) as excinfo:
            ledger_service.append(session, student_id=9999, amount=5, reason="Points awarded")
        session.rollback()

        assert excinfo.value.status_code == 404
        assert ledger_service.list_by_student(session, 9999) == []
        assert ledger_service.count_by_student(session, student.id) == before

    def test_unknown_goal_is_rejected(self, session, make_student):
        student = make_student()
        session.commit()

        with pytest.raises(ReferentialError):
            ledger_service.append(
                session, student_id=student.id, amount=2, reason="Completed goal", related_goal_id=404
            )
        session.rollback()

        assert ledger_service.count_by_student(session, student.id) == 0
        assert cached_points(session, student.id) == 0

    def test_goal_of_another_student_is_rejected(self, session, make_student, make_goal):
        owner = make_student("Owner")
        other = make_student("Other")
        goal = make_goal(owner)

        with pytest.raises(ReferentialError):
            ledger_service.append(
                session, student_id=other.id, amount=2, reason="Completed goal", related_goal_id=goal.id
            )

        assert ledger_service.count_by_student(session, other.id) == 0


class TestListByStudent:
    """Audit listing in append order."""

    def test_entries_are_returned_in_append_order(self, session, make_student):
        student = make_student()
        other = make_student()
        for amount in (3, -1, 2):
            ledger_service.append(session, student_id=student.id, amount=amount, reason="Adjustment")
            ledger_service.append(session, student_id=other.id, amount=10, reason="Adjustment")

        entries = ledger_service.list_by_student(session, student.id)

        assert [e.amount for e in entries] == [3, -1, 2]
        assert [e.id for e in entries] == sorted(e.id for e in entries)

    def test_pagination(self, session, make_student):
        student = make_student()
        for amount in range(1, 6):
            ledger_service.append(session, student_id=student.id, amount=amount, reason="Adjustment")

        page = ledger_service.list_by_student(session, student.id, limit=2, offset=2)

        assert [e.amount for e in page] == [3, 4]
        assert ledger_service.count_by_student(session, student.id) == 5

    def test_date_range_is_inclusive(self, session, make_student):
        student = make_student()
        for day in (1, 2, 3, 4):
            ledger_service.append(
                session, student_id=student.id, amount=day, reason="Adjustment", created_at=datetime(2025, 10, day)
            )

        entries = ledger_service.list_by_student(
            session, student.id, start_date=datetime(2025, 10, 2), end_date=datetime(2025, 10, 3)
        )

        assert [e.amount for e in entries] == [2, 3]


class TestLookup:

    def test_get_entry(self, session, make_student):
        student = make_student()
        appended = ledger_service.append(session, student_id=student.id, amount=4, reason="Adjustment")

        entry = ledger_service.get_entry(session, appended.id)

        assert (entry.student_id, entry.amount, entry.reason) == (student.id, 4, "Adjustment")

    def test_missing_entry(self, session):
        with pytest.raises(EntryNotFound) as excinfo:
            ledger_service.get_entry(session, 31337)
        assert excinfo.value.status_code == 404

    def test_list_all_spans_students_in_append_order(self, session, make_student):
        first = make_student()
        second = make_student()
        ledger_service.append(session, student_id=first.id, amount=1, reason="Adjustment", created_at=datetime(2025, 10, 1))
        ledger_service.append(session, student_id=second.id, amount=2, reason="Adjustment", created_at=datetime(2025, 10, 2))
        ledger_service.append(session, student_id=first.id, amount=3, reason="Adjustment", created_at=datetime(2025, 10, 3))

        assert [e.amount for e in ledger_service.list_all(session)] == [1, 2, 3]
        assert [e.amount for e in ledger_service.list_all(session, end_date=datetime(2025, 10, 2))] == [1, 2]
