from datetime import date, datetime, timezone

from legal_analysis_core.timeline import (
    build_timeline,
    days_until,
    export_calendar,
    parse_date,
    urgency_color,
    urgency_label,
)
from model.models import DocumentAnalysis, EventType

TODAY = date(2025, 1, 1)


def test_events_sorted_with_tbd_last(sample_analysis):
    events = build_timeline(sample_analysis, today=TODAY)
    assert [e.date for e in events] == ["2025-01-01", "2025-03-01", "TBD"]
    assert events[0].type == EventType.DEADLINE
    assert events[1].type == EventType.OBLIGATION
    assert events[1].title == "Beta LLC: Deliver the first milestone"
    assert events[1].consequence == "Obligation not fulfilled"


def test_obligations_without_deadline_are_skipped(sample_analysis):
    titles = [e.title for e in build_timeline(sample_analysis, today=TODAY)]
    assert not any(title.startswith("Acme Corp") for title in titles)


def test_unparseable_dates_keep_their_order():
    analysis = DocumentAnalysis(deadlines=[
        {"description": "first", "date": "upon termination"},
        {"description": "dated", "date": "2025-02-01"},
        {"description": "second", "date": None},
    ])
    events = build_timeline(analysis, today=TODAY)
    assert [e.title for e in events] == ["dated", "first", "second"]
    assert events[2].date == "TBD"
    assert events[2].priority == "medium"
    assert events[0].priority == "high"


def test_urgency_fields_are_filled(sample_analysis):
    events = build_timeline(sample_analysis, today=TODAY)
    assert events[0].days_until == 0
    assert events[0].urgency_label == "TODAY"
    assert events[1].days_until == 59
    assert events[1].urgency_label == "2 months"
    assert events[2].urgency_label == "Date TBD"
    assert events[2].urgency_color == "gray-500"


def test_urgency_labels():
    assert urgency_label(-3) == "OVERDUE"
    assert urgency_label(1) == "Tomorrow"
    assert urgency_label(5) == "5 days"
    assert urgency_label(10) == "2 weeks"
    assert urgency_label(45) == "2 months"
    assert urgency_color(-1) == "red-600"
    assert urgency_color(20) == "yellow-500"
    assert urgency_color(90) == "green-500"


def test_parse_date():
    assert parse_date("March 15, 2025") == date(2025, 3, 15)
    assert parse_date("TBD") is None
    assert parse_date("within thirty days") is None
    assert days_until("2024-12-31", TODAY) == -1


def test_calendar_export(sample_analysis):
    events = build_timeline(sample_analysis, today=TODAY)
    ics = export_calendar(events, now=datetime(2025, 1, 1, 12, 0, tzinfo=timezone.utc))

    assert ics.startswith("BEGIN:VCALENDAR\r\n")
    assert ics.endswith("END:VCALENDAR\r\n")
    # TBD entries are not exported
    assert ics.count("BEGIN:VEVENT") == 2
    assert "DTSTART;VALUE=DATE:20250101" in ics
    assert "DTSTART;VALUE=DATE:20250301" in ics
    assert "TRIGGER:-P1D" in ics
    assert "SUMMARY:Beta LLC: Deliver the first milestone" in ics


def test_calendar_escapes_text():
    analysis = DocumentAnalysis(deadlines=[
        {"description": "Pay rent, utilities; fees", "date": "2025-05-01", "consequence": "Late fee"},
    ])
    ics = export_calendar(build_timeline(analysis, today=TODAY))
    assert "SUMMARY:Pay rent\\, utilities\\; fees" in ics


def test_deadlines_only_ordering():
    analysis = DocumentAnalysis(deadlines=[
        {"description": "b", "date": "2025-03-01"},
        {"description": "a", "date": "2025-01-01"},
        {"description": "c"},
    ])
    assert [e.date for e in build_timeline(analysis, today=TODAY)] == ["2025-01-01", "2025-03-01", "TBD"]
