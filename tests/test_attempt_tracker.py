import uuid
from datetime import timedelta

import pytest

from app.core.errors import AuthError
from app.models import VisualPasswordChallenge
from app.services import attempt_tracker
from app.services.attempt_tracker import (
    AttemptState,
    AttemptTracker,
    issue_challenge_token,
    load_challenge,
    read_challenge_token,
    start_challenge,
    submit_guess,
    tracker_for,
)
from app.services.session_service import utcnow


# ── pure state machine ────────────────────────────────────────────────

def test_fresh_tracker_is_presenting():
    tracker = AttemptTracker()
    assert tracker.state is AttemptState.PRESENTING
    assert tracker.attempts_remaining == 3


def test_correct_first_try_is_success():
    tracker = AttemptTracker()
    outcome = tracker.submit(True)
    assert outcome.state is AttemptState.SUCCESS
    assert outcome.accepted
    assert outcome.error is None


def test_wrong_guesses_count_down_then_lock():
    tracker = AttemptTracker()

    first = tracker.submit(False)
    assert (first.state, first.attempts_remaining) == (AttemptState.RETRY, 2)
    assert first.error is AuthError.WRONG_SELECTION

    second = tracker.submit(False)
    assert (second.state, second.attempts_remaining) == (AttemptState.RETRY, 1)

    third = tracker.submit(False)
    assert (third.state, third.attempts_remaining) == (AttemptState.LOCKED, 0)
    assert third.error is AuthError.LOCKED_OUT


def test_locked_tracker_rejects_even_the_right_answer():
    tracker = AttemptTracker(wrong_guesses=3)
    outcome = tracker.submit(True)
    assert outcome.state is AttemptState.LOCKED
    assert outcome.accepted is False
    assert tracker.completed is False


def test_success_after_retries_is_still_success():
    tracker = AttemptTracker()
    tracker.submit(False)
    tracker.submit(False)
    assert tracker.submit(True).state is AttemptState.SUCCESS


def test_completed_tracker_ignores_further_guesses():
    tracker = AttemptTracker(completed=True)
    outcome = tracker.submit(True)
    assert outcome.accepted is False
    assert outcome.error is AuthError.CHALLENGE_INVALID


def test_custom_max_attempts():
    tracker = AttemptTracker(max_attempts=1)
    assert tracker.submit(False).state is AttemptState.LOCKED


# ── challenge tokens ──────────────────────────────────────────────────

def _challenge(student_id):
    return VisualPasswordChallenge(
        id="cid-123",
        student_id=student_id,
        wrong_attempts=0,
        expires_at=utcnow() + timedelta(minutes=10),
    )


def test_challenge_token_is_bound_to_student():
    student_id = uuid.uuid4()
    token = issue_challenge_token(_challenge(student_id))

    assert read_challenge_token(token, student_id) == "cid-123"
    assert read_challenge_token(token, uuid.uuid4()) is None
    assert read_challenge_token(token + "x", student_id) is None
    assert read_challenge_token("garbage", student_id) is None


def test_challenge_token_expires(monkeypatch):
    student_id = uuid.uuid4()
    token = issue_challenge_token(_challenge(student_id))
    monkeypatch.setattr(attempt_tracker, "challenge_ttl_seconds", lambda: -1)
    assert read_challenge_token(token, student_id) is None


# ── persisted challenges ──────────────────────────────────────────────

@pytest.mark.anyio
async def test_restarting_resumes_the_same_counter(db, make_student):
    student = await make_student()

    challenge = await start_challenge(db, student.id)
    await submit_guess(db, challenge, matched=False)
    await db.commit()

    again = await start_challenge(db, student.id)
    assert again.id == challenge.id
    assert tracker_for(again).attempts_remaining == 2


@pytest.mark.anyio
async def test_lockout_persists_across_restarts(db, make_student):
    student = await make_student()
    challenge = await start_challenge(db, student.id)
    for _ in range(3):
        await submit_guess(db, challenge, matched=False)
    await db.commit()

    assert challenge.locked_at is not None
    restarted = await start_challenge(db, student.id)
    assert tracker_for(restarted).state is AttemptState.LOCKED


@pytest.mark.anyio
async def test_completed_challenge_cannot_be_loaded_again(db, make_student):
    student = await make_student()
    challenge = await start_challenge(db, student.id)
    token = issue_challenge_token(challenge)

    outcome = await submit_guess(db, challenge, matched=True)
    await db.commit()

    assert outcome.state is AttemptState.SUCCESS
    assert await load_challenge(db, token, student.id) is None
    # a new login starts a new challenge
    fresh = await start_challenge(db, student.id)
    assert fresh.id != challenge.id


@pytest.mark.anyio
async def test_stale_copy_cannot_score_a_guess_after_lockout(session_factory, make_student):
    student = await make_student()
    async with session_factory() as first, session_factory() as second:
        challenge = await start_challenge(first, student.id)
        await first.commit()
        # loaded while the counter was still at zero
        stale = await second.get(VisualPasswordChallenge, challenge.id)

        for _ in range(3):
            await submit_guess(first, challenge, matched=False)
        await first.commit()

        outcome = await submit_guess(second, stale, matched=True)
        await second.commit()

    assert outcome.state is AttemptState.LOCKED
    assert outcome.accepted is False


@pytest.mark.anyio
async def test_stale_copy_cannot_complete_twice(session_factory, make_student):
    student = await make_student()
    async with session_factory() as first, session_factory() as second:
        challenge = await start_challenge(first, student.id)
        await first.commit()
        stale = await second.get(VisualPasswordChallenge, challenge.id)

        assert (await submit_guess(first, challenge, matched=True)).accepted
        await first.commit()

        outcome = await submit_guess(second, stale, matched=True)
        await second.commit()

    assert outcome.state is AttemptState.SUCCESS
    assert outcome.accepted is False


@pytest.mark.anyio
async def test_lockout_ends_when_the_challenge_expires(db, make_student):
    student = await make_student()
    challenge = await start_challenge(db, student.id)
    for _ in range(3):
        await submit_guess(db, challenge, matched=False)
    challenge.expires_at = utcnow() - timedelta(seconds=1)
    await db.commit()

    fresh = await start_challenge(db, student.id)

    assert fresh.id != challenge.id
    assert tracker_for(fresh).state is AttemptState.PRESENTING


@pytest.mark.anyio
async def test_starting_a_challenge_stamps_the_student(db, make_student):
    from app.models import Student

    student = await make_student()
    await start_challenge(db, student.id)
    await db.commit()

    row = await db.get(Student, student.id, populate_existing=True)
    assert row.last_challenge_at is not None
