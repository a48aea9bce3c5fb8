from __future__ import annotations

from datetime import datetime

import pytest

from worksite_tracking.core.enums import CorrectionStatus
from worksite_tracking.core.exceptions import (
    InvalidInputError,
    InvalidStateTransitionError,
    NotFoundError,
    PreconditionFailedError,
)

from ..conftest import BYPASS_PROJECT

EMP = 7
SUPERVISOR = 99


@pytest.fixture
def corrections(container):
    return container.correction_service


@pytest.fixture
def worked_day(container, clock):
    container.attendance_service.clock_in(EMP, BYPASS_PROJECT)
    clock.advance(hours=10)
    return container.attendance_service.clock_out(EMP, BYPASS_PROJECT)


def _at(hour: int, minute: int = 0) -> datetime:
    return datetime(2024, 3, 4, hour, minute)


def test_submit_requires_existing_record(corrections, clock):
    with pytest.raises(NotFoundError):
        corrections.submit(EMP, BYPASS_PROJECT, clock.now.date(), EMP, "forgot", requested_check_in_at=_at(6))


def test_submit_requires_a_change_and_a_reason(corrections, worked_day):
    with pytest.raises(InvalidInputError):
        corrections.submit(EMP, BYPASS_PROJECT, worked_day.work_date, EMP, "nothing to change")
    with pytest.raises(InvalidInputError):
        corrections.submit(EMP, BYPASS_PROJECT, worked_day.work_date, EMP, "   ", requested_check_in_at=_at(6))
    with pytest.raises(InvalidInputError):
        corrections.submit(EMP, BYPASS_PROJECT, worked_day.work_date, EMP, "x", requested_lunch_minutes=-5)


def test_submit_creates_pending_correction(corrections, worked_day, clock):
    c = corrections.submit(
        EMP, BYPASS_PROJECT, worked_day.work_date, EMP, " phone died ", requested_check_in_at=_at(6)
    )

    assert c.correction_id is not None
    assert c.attendance_id == worked_day.attendance_id
    assert c.status == CorrectionStatus.PENDING
    assert c.reason == "phone died"
    assert c.created_at == clock.now
    assert corrections.list_pending() == [c]


def test_approved_correction_is_joined_at_read_time(corrections, worked_day, container):
    c = corrections.submit(EMP, BYPASS_PROJECT, worked_day.work_date, EMP, "phone died", requested_check_in_at=_at(6))

    approved = corrections.approve(c.correction_id, SUPERVISOR, note="ok")
    view = corrections.corrected_view(EMP, BYPASS_PROJECT, worked_day.work_date)

    assert approved.status == CorrectionStatus.APPROVED
    assert approved.decided_by == SUPERVISOR
    assert approved.reviewer_note == "ok"
    assert view.effective_check_in_at == _at(6)
    assert (view.regular_hours, view.overtime_hours) == (8, 3)
    assert view.applied_correction_ids == (c.correction_id,)
    # stored record untouched
    stored = container.attendance_repo.get_for_employee_and_date(EMP, BYPASS_PROJECT, worked_day.work_date)
    assert stored == worked_day
    assert corrections.list_pending() == []


def test_requester_cannot_review_own_correction(corrections, worked_day):
    c = corrections.submit(EMP, BYPASS_PROJECT, worked_day.work_date, EMP, "x", requested_check_out_at=_at(16))

    with pytest.raises(PreconditionFailedError):
        corrections.approve(c.correction_id, EMP)


def test_decided_correction_cannot_be_decided_again(corrections, worked_day):
    c = corrections.submit(EMP, BYPASS_PROJECT, worked_day.work_date, EMP, "x", requested_check_out_at=_at(16))
    corrections.reject(c.correction_id, SUPERVISOR, note="badge log says 17:00")

    with pytest.raises(InvalidStateTransitionError) as exc:
        corrections.approve(c.correction_id, SUPERVISOR)
    assert exc.value.current_state == "REJECTED"

    with pytest.raises(NotFoundError):
        corrections.approve(12345, SUPERVISOR)


def test_rejected_correction_is_not_applied(corrections, worked_day):
    c = corrections.submit(EMP, BYPASS_PROJECT, worked_day.work_date, EMP, "x", requested_check_out_at=_at(16))
    corrections.reject(c.correction_id, SUPERVISOR)

    view = corrections.corrected_view(EMP, BYPASS_PROJECT, worked_day.work_date)

    assert not view.is_corrected
    assert view.effective_check_out_at == worked_day.check_out_at
    assert (view.regular_hours, view.overtime_hours) == (8, 2)


def test_approval_rejects_check_out_before_check_in(corrections, worked_day):
    c = corrections.submit(EMP, BYPASS_PROJECT, worked_day.work_date, EMP, "x", requested_check_out_at=_at(6))

    with pytest.raises(InvalidInputError):
        corrections.approve(c.correction_id, SUPERVISOR)
    assert corrections.list_pending()[0].status == CorrectionStatus.PENDING


def test_corrections_apply_in_decision_order(corrections, worked_day, clock):
    day = worked_day.work_date
    first = corrections.submit(EMP, BYPASS_PROJECT, day, EMP, "a", requested_check_out_at=_at(16))
    second = corrections.submit(EMP, BYPASS_PROJECT, day, EMP, "b", requested_check_out_at=_at(15), requested_lunch_minutes=30)

    corrections.approve(second.correction_id, SUPERVISOR)
    clock.advance(minutes=1)
    corrections.approve(first.correction_id, SUPERVISOR)

    view = corrections.corrected_view(EMP, BYPASS_PROJECT, day)

    assert view.applied_correction_ids == (second.correction_id, first.correction_id)
    assert view.effective_check_out_at == _at(16)
    assert view.effective_lunch_minutes == 30
    assert (view.regular_hours, view.overtime_hours) == (8, 0.5)
    assert len(corrections.list_for_record(EMP, BYPASS_PROJECT, day)) == 2
