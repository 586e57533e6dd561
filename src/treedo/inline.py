"""
Inline task language: ``title words #tag @date !priority``.

Tokens are classified by their leading sigil wherever they appear; everything
else is title text, joined back with single spaces.
"""

import re
from dataclasses import dataclass, field
from datetime import date, datetime, timedelta
from typing import List, Optional

from .models import Priority

PRIORITY_KEYWORDS = {
    'high': Priority.HIGH, 'h': Priority.HIGH,
    'low': Priority.LOW, 'l': Priority.LOW,
    'blocked': Priority.BLOCKED, 'b': Priority.BLOCKED,
    'normal': Priority.NORMAL, 'n': Priority.NORMAL,
}

WEEKDAYS = {
    'mon': 0, 'monday': 0,
    'tue': 1, 'tuesday': 1,
    'wed': 2, 'wednesday': 2,
    'thu': 3, 'thursday': 3,
    'fri': 4, 'friday': 4,
    'sat': 5, 'saturday': 5,
    'sun': 6, 'sunday': 6,
}

FULL_DATE = re.compile(r'^[0-9]{4}-[0-9]{2}-[0-9]{2}$')
MONTH_DAY = re.compile(r'^([0-9]{2})-([0-9]{2})$')


@dataclass
class ParsedTask:
    title: str = ""
    tags: List[str] = field(default_factory=list)
    due_date: str = ""
    priority: Priority = Priority.NORMAL


def parse_priority(keyword: str, numeric: bool = False) -> Optional[Priority]:
    """Map a priority keyword to its value, or None when unrecognized.

    With ``numeric`` the bare values ``2``, ``1``, ``0`` and ``-1`` are also
    accepted (the ``:priority`` command form).
    """
    keyword = keyword.strip().lower()
    if keyword in PRIORITY_KEYWORDS:
        return PRIORITY_KEYWORDS[keyword]
    if numeric:
        try:
            return Priority(int(keyword))
        except ValueError:
            return None
    return None


def next_weekday(today: date, weekday: int) -> date:
    """Next occurrence of ``weekday`` strictly after ``today``."""
    days_until = weekday - today.weekday()
    if days_until <= 0:
        days_until += 7
    return today + timedelta(days=days_until)


def parse_due_date(token: str, today: Optional[date] = None) -> str:
    """Resolve a due-date token to ``YYYY-MM-DD``.

    Unrecognized tokens are returned verbatim (lower-cased) and stored as-is.
    """
    token = token.lower()
    today = today or date.today()

    if token == 'today':
        return today.isoformat()
    if token in ('tomorrow', 'tmr'):
        return (today + timedelta(days=1)).isoformat()
    if token in ('week', 'nextweek'):
        return (today + timedelta(days=7)).isoformat()
    if token in WEEKDAYS:
        return next_weekday(today, WEEKDAYS[token]).isoformat()

    if FULL_DATE.match(token):
        try:
            return datetime.strptime(token, '%Y-%m-%d').date().isoformat()
        except ValueError:
            return token

    match = MONTH_DAY.match(token)
    if match:
        month, day = int(match.group(1)), int(match.group(2))
        try:
            date(2000, month, day)  # leap year, so 02-29 is accepted
        except ValueError:
            return token
        # 02-29 in a common year rolls over to 03-01
        return (date(today.year, month, 1) + timedelta(days=day - 1)).isoformat()

    return token


def parse_task_input(text: str, today: Optional[date] = None) -> ParsedTask:
    """Split free text into title, tags, due date and priority.

    Tags accumulate; the last date and the last recognized priority win.
    An empty title means there is nothing to save.
    """
    result = ParsedTask()
    title_parts = []

    for word in text.split():
        if word.startswith('#'):
            tag = word[1:]
            if tag:
                result.tags.append(tag)
        elif word.startswith('!'):
            priority = parse_priority(word[1:])
            if priority is not None:
                result.priority = priority
        elif word.startswith('@'):
            result.due_date = parse_due_date(word[1:], today)
        else:
            title_parts.append(word)

    result.title = ' '.join(title_parts)
    return result


def describe(parsed: ParsedTask) -> str:
    """One-line summary used when a task is added from the command line."""
    line = f"Added: {parsed.title}"
    if parsed.tags:
        line += f" [tags: {' '.join(parsed.tags)}]"
    if parsed.due_date:
        line += f" [due: {parsed.due_date}]"
    if parsed.priority != Priority.NORMAL:
        line += f" [priority: {parsed.priority.label}]"
    return line
