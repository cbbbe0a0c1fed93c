from datetime import date, time

import pytest

from src.hr_hub.hr_hub.attendance.schemas import TeamAttendanceUpdate
from src.hr_hub.hr_hub.common.request_parsing import validate_model
from src.hr_hub.hr_hub.core.constants import NOTE_MAX_LENGTH
from src.hr_hub.hr_hub.core.enums import AttendanceStatus, RegularizationType
from src.hr_hub.hr_hub.core.exceptions import ValidationError
from src.hr_hub.hr_hub.regularizations.schemas import Decision, RegularizationCreate
from src.hr_hub.hr_hub.timesheets.schemas import SaveWeek, TimesheetDecision


def test_camel_case_keys_and_hhmm_times():
    body = validate_model(
        TeamAttendanceUpdate,
        {"userId": 3, "workDate": "2026-03-02", "status": "present", "checkInTime": "08:45"},
    )

    assert body.user_id == 3
    assert body.work_date == date(2026, 3, 2)
    assert body.status == AttendanceStatus.PRESENT
    assert body.check_in_time == time(8, 45)
    assert body.check_out_time is None


def test_bad_time_format_becomes_domain_validation_error():
    with pytest.raises(ValidationError, match="checkInTime: Time must be in HH:MM format"):
        validate_model(
            TeamAttendanceUpdate,
            {"userId": 3, "workDate": "2026-03-02", "status": "present", "checkInTime": "8.45am"},
        )


def test_unknown_status_rejected():
    with pytest.raises(ValidationError):
        validate_model(TeamAttendanceUpdate, {"userId": 3, "workDate": "2026-03-02", "status": "late"})


def test_regularization_reason_is_stripped_before_length_check():
    with pytest.raises(ValidationError):
        validate_model(
            RegularizationCreate,
            {"workDate": "2026-03-02", "type": "check_in", "proposedTime": "09:00", "reason": "   ab   "},
        )

    body = validate_model(
        RegularizationCreate,
        {"workDate": "2026-03-02", "type": "check_out", "proposedTime": "18:30", "reason": "  Left late  "},
    )
    assert body.type == RegularizationType.CHECK_OUT
    assert body.reason == "Left late"
    assert body.proposed_time == time(18, 30)


@pytest.mark.parametrize(
    "model, body, field",
    [
        (
            SaveWeek,
            {"weekStartDate": "2026-03-02", "entries": [{"projectId": 1, "workDate": "2026-03-02", "hours": 2}]},
            "entries.0.note",
        ),
        (TimesheetDecision, {"action": "reject", "reason": "r"}, "reason"),
        (Decision, {"action": "reject", "comment": "c"}, "comment"),
    ],
)
def test_free_text_fits_its_column(model, body, field):
    target = body["entries"][0] if "entries" in body else body
    key = field.rsplit(".", 1)[-1]

    target[key] = "x" * NOTE_MAX_LENGTH
    validate_model(model, body)

    target[key] = "x" * (NOTE_MAX_LENGTH + 1)
    with pytest.raises(ValidationError, match=f"{field}: String should have at most {NOTE_MAX_LENGTH} characters"):
        validate_model(model, body)
