from timesheet_ledger.entries.validation import validate_changes, validate_draft, validate_settings


def test_valid_draft_has_no_problems(draft):
    assert validate_draft(draft) == []


def test_overnight_draft_is_valid(draft):
    draft.update(startTime="22:00", endTime="02:00")
    assert validate_draft(draft) == []


def test_missing_fields_are_reported():
    problems = validate_draft({})
    assert "date is required in YYYY-MM-DD format" in problems
    assert "startTime is required in HH:MM format" in problems
    assert "endTime is required in HH:MM format" in problems
    assert "description is required" in problems


def test_zero_length_duration_is_rejected(draft):
    draft.update(startTime="09:00", endTime="09:00")
    assert validate_draft(draft) == ["endTime must differ from startTime"]


def test_blank_description_is_rejected(draft):
    draft["description"] = "   "
    assert validate_draft(draft) == ["description is required"]


def test_non_positive_rate_is_rejected(draft):
    draft["hourlyRate"] = 0
    assert validate_draft(draft) == ["hourlyRate must be greater than zero"]


def test_absent_rate_is_allowed(draft):
    draft["hourlyRate"] = None
    assert validate_draft(draft) == []


def test_is_paid_must_be_boolean(draft):
    draft["isPaid"] = "yes"
    assert validate_draft(draft) == ["isPaid must be true or false"]


def test_bad_date_is_rejected(draft):
    draft["date"] = "01/02/2024"
    assert validate_draft(draft) == ["date is required in YYYY-MM-DD format"]


def test_settings_validation():
    assert validate_settings({"defaultHourlyRate": 50}) == []
    assert validate_settings({"defaultHourlyRate": 0}) == ["defaultHourlyRate must be greater than zero"]
    assert validate_settings({}) == ["defaultHourlyRate must be greater than zero"]


def test_null_changes_are_rejected():
    assert validate_changes({"hourlyRate": None, "endTime": "18:00"}) == ["hourlyRate cannot be null"]
    assert validate_changes({}) == []
