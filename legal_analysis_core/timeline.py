"""
Deadline timeline for Legal Analysis Core.
Merges deadlines and dated obligations into one chronologically sorted list with
urgency labels, and exports dated entries as an iCalendar file.
"""
import math
from datetime import date, datetime, timezone
from typing import Iterable, List, Optional

from dateutil import parser as date_parser

from logger import GLOBAL_LOGGER as log
from model.models import DocumentAnalysis, EventType, TimelineEvent

TBD = "TBD"


def parse_date(value: Optional[str]) -> Optional[date]:
    """Parse a free-form date string; None for TBD, empty or unparseable values."""
    if not value or value == TBD:
        return None
    try:
        return date_parser.parse(value).date()
    except (ValueError, OverflowError):
        return None


def days_until(value: Optional[str], today: Optional[date] = None) -> Optional[int]:
    target = parse_date(value)
    if target is None:
        return None
    return (target - (today or date.today())).days


def urgency_label(days: Optional[int]) -> str:
    if days is None:
        return "Date TBD"
    if days < 0:
        return "OVERDUE"
    if days == 0:
        return "TODAY"
    if days == 1:
        return "Tomorrow"
    if days <= 7:
        return f"{days} days"
    if days <= 30:
        return f"{math.ceil(days / 7)} weeks"
    return f"{math.ceil(days / 30)} months"


def urgency_color(days: Optional[int]) -> str:
    if days is None:
        return "gray-500"
    if days < 0:
        return "red-600"
    if days <= 7:
        return "red-500"
    if days <= 30:
        return "yellow-500"
    return "green-500"


def _event(event_type: EventType, title: str, when: Optional[str], consequence: str,
           priority: str, today: date) -> TimelineEvent:
    days = days_until(when, today)
    return TimelineEvent(
        type=event_type,
        title=title,
        date=when or TBD,
        consequence=consequence,
        priority=priority,
        days_until=days,
        urgency_label=urgency_label(days),
        urgency_color=urgency_color(days),
    )


def build_timeline(analysis: DocumentAnalysis, today: Optional[date] = None) -> List[TimelineEvent]:
    """
    Timeline events sorted by date. Undated and unparseable entries go last,
    keeping their original relative order.
    """
    today = today or date.today()
    events = [
        _event(EventType.DEADLINE, deadline.description, deadline.date, deadline.consequence,
               "high" if deadline.date else "medium", today)
        for deadline in analysis.deadlines
    ]
    events.extend(
        _event(EventType.OBLIGATION, f"{obligation.party}: {obligation.description}", obligation.deadline,
               "Obligation not fulfilled", "medium", today)
        for obligation in analysis.obligations
        if obligation.deadline
    )

    # sorted() is stable, so TBD entries keep their order
    return sorted(events, key=lambda e: (parse_date(e.date) is None, parse_date(e.date) or date.min))


def export_calendar(events: Iterable[TimelineEvent], now: Optional[datetime] = None) -> str:
    """
    Serialize dated events to iCalendar text, one VEVENT per event with a
    reminder one day before.
    """
    now = now or datetime.now(timezone.utc)
    stamp = now.strftime("%Y%m%dT%H%M%SZ")
    lines = [
        "BEGIN:VCALENDAR",
        "VERSION:2.0",
        "PRODID:-//Legal Analyzer//Timeline//EN",
        "CALSCALE:GREGORIAN",
    ]
    exported = 0
    for index, event in enumerate(events):
        when = parse_date(event.date)
        if when is None:
            continue
        lines.extend([
            "BEGIN:VEVENT",
            f"UID:legal-analyzer-{index}-{int(now.timestamp())}@legal-analyzer",
            f"DTSTAMP:{stamp}",
            f"DTSTART;VALUE=DATE:{when.strftime('%Y%m%d')}",
            f"SUMMARY:{_escape(event.title)}",
            f"DESCRIPTION:{_escape(event.consequence or 'No description')}",
            "STATUS:CONFIRMED",
            "BEGIN:VALARM",
            "TRIGGER:-P1D",
            "ACTION:DISPLAY",
            f"DESCRIPTION:Reminder: {_escape(event.title)}",
            "END:VALARM",
            "END:VEVENT",
        ])
        exported += 1
    lines.append("END:VCALENDAR")
    log.info("Calendar exported", events=exported)
    return "\r\n".join(lines) + "\r\n"


def _escape(text: str) -> str:
    return (
        text.replace("\\", "\\\\")
        .replace(";", "\\;")
        .replace(",", "\\,")
        .replace("\n", "\\n")
    )
