# Storage adapters: ledger queries, the enrollment writer and joining.
from datetime import timedelta

import pytest

from finquest.core.challenge_modes import ChallengeStatus, ChallengeType
from finquest.core.domain import ProgressUpdate
from finquest.core.errors import AlreadyEnrolledError, ChallengeNotFoundError, ExpenseNotFoundError
from finquest.db.init_db import DEFAULT_CHALLENGES, seed_challenges
from finquest.db.repositories import EnrollmentRepository, LedgerRepository

from tests.helpers import DAY0, USER_ID, day


def test_list_entries_filters_category_and_half_open_range(db, add_expense):
    add_expense(10, DAY0, category="food")
    add_expense(20, day(1), category="transport")
    add_expense(30, DAY0 + timedelta(days=2), category="food")

    ledger = LedgerRepository(db)
    window = (DAY0, DAY0 + timedelta(days=2))

    assert sorted(e.amount for e in ledger.list_entries(USER_ID, "food", window)) == [10]
    assert sorted(e.amount for e in ledger.list_entries(USER_ID, "all", window)) == [10, 20]
    assert sorted(e.amount for e in ledger.list_entries(USER_ID)) == [10, 20, 30]


def test_list_entries_ordered_is_ascending(db, add_expense):
    add_expense(1, day(3))
    add_expense(2, day(1))
    add_expense(3, day(2))

    dates = [e.expense_date for e in LedgerRepository(db).list_entries_ordered(USER_ID)]

    assert dates == sorted(dates)


def test_geocoded_entries_require_coordinates(db, add_expense):
    add_expense(1, day(1), location_name="A", lat=1.0, lng=2.0)
    add_expense(2, day(1), location_name="B")

    entries = LedgerRepository(db).list_geocoded_entries(USER_ID)

    assert [e.location_name for e in entries] == ["A"]


def test_delete_unknown_expense(db):
    with pytest.raises(ExpenseNotFoundError):
        LedgerRepository(db).delete_expense(USER_ID, "missing")


def test_active_enrollments_are_partitioned_by_type(db, make_challenge, enroll):
    spending = enroll(make_challenge("spending", "all"))
    enroll(make_challenge("logging", "count"))
    enroll(make_challenge("spending", "food"), status="completed")

    repo = EnrollmentRepository(db)
    tracked = repo.list_active_enrollments(USER_ID, ChallengeType.SPENDING)

    assert [t.id for t in tracked] == [spending.id]
    assert tracked[0].status is ChallengeStatus.ACTIVE
    assert tracked[0].window == (DAY0, DAY0 + timedelta(days=7))


def test_writer_overwrites_active_enrollment(db, make_challenge, enroll, reload):
    enrollment = enroll(make_challenge("exploration", "locations"))
    repo = EnrollmentRepository(db)

    applied = repo.update_enrollment(
        enrollment.id,
        ProgressUpdate(enrollment.id, 1.0, ChallengeStatus.ACTIVE, progress_data={"locations": ["A"]}),
    )

    stored = reload(enrollment.id)
    assert applied is True
    assert stored.current_amount == 1.0
    assert stored.progress_data == {"locations": ["A"]}


def test_writer_never_leaves_terminal_state(db, make_challenge, enroll, reload):
    enrollment = enroll(make_challenge("logging", "count"), status="completed", current_amount=5.0, completed_at=day(1))
    repo = EnrollmentRepository(db)

    applied = repo.update_enrollment(
        enrollment.id,
        ProgressUpdate(enrollment.id, 9.0, ChallengeStatus.COMPLETED, completed_at=day(4)),
    )

    stored = reload(enrollment.id)
    assert applied is False
    assert stored.current_amount == 5.0
    assert stored.completed_at == day(1)


def test_join_creates_active_enrollment(db, make_challenge):
    challenge = make_challenge("logging", "streak", target_amount=7)
    enrollment = EnrollmentRepository(db).join_challenge(USER_ID, challenge.id, started_at=DAY0)

    assert enrollment.status == "active"
    assert enrollment.current_amount == 0.0
    assert enrollment.started_at == DAY0
    assert enrollment.completed_at is None


def test_join_rejects_duplicate_active_enrollment(db, make_challenge):
    challenge = make_challenge("logging", "streak")
    repo = EnrollmentRepository(db)
    repo.join_challenge(USER_ID, challenge.id)

    with pytest.raises(AlreadyEnrolledError):
        repo.join_challenge(USER_ID, challenge.id)


def test_rejoin_after_terminal_outcome_creates_new_enrollment(db, make_challenge, enroll):
    challenge = make_challenge("logging", "streak")
    old = enroll(challenge, status="failed")

    fresh = EnrollmentRepository(db).join_challenge(USER_ID, challenge.id)

    assert fresh.id != old.id
    assert fresh.status == "active"


def test_join_inactive_or_unknown_challenge(db, make_challenge):
    retired = make_challenge("spending", "all", is_active=False)
    repo = EnrollmentRepository(db)

    with pytest.raises(ChallengeNotFoundError):
        repo.join_challenge(USER_ID, retired.id)
    with pytest.raises(ChallengeNotFoundError):
        repo.join_challenge(USER_ID, "nope")


def test_status_counts(db, make_challenge, enroll):
    challenge = make_challenge("spending", "all")
    enroll(challenge)
    enroll(challenge, status="failed")
    enroll(challenge, status="completed", completed_at=day(1))
    enroll(challenge, status="completed", completed_at=day(2))

    assert EnrollmentRepository(db).status_counts(USER_ID) == {"active": 1, "completed": 2, "failed": 1}


def test_seed_is_applied_once(db):
    assert seed_challenges(db) == len(DEFAULT_CHALLENGES)
    assert seed_challenges(db) == 0
    assert len(EnrollmentRepository(db).list_catalog()) == len(DEFAULT_CHALLENGES)
