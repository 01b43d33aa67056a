"""
Calendar placement logic shared by the HTML views, the JSON API and the PDF
export. Everything here is pure: functions take event-like objects (anything
with start_date, end_date, category, event_type, title and description
attributes) and plain dates, and never touch the database.
"""

from datetime import date, datetime, timedelta
import calendar

VIEWS = ('month', 'week', 'agenda')
DEFAULT_VIEW = 'month'

# Month cells only have room for a couple of events; the rest become "+N"
MONTH_CELL_EVENT_LIMIT = 2

# Highest priority first: a holiday beats a recess, which beats a special event
SPECIAL_DAY_PRECEDENCE = ('feriado', 'recesso', 'evento')

WEEKDAY_NAMES = ('Sunday', 'Monday', 'Tuesday', 'Wednesday', 'Thursday', 'Friday', 'Saturday')
WEEKDAY_SHORT = ('Sun', 'Mon', 'Tue', 'Wed', 'Thu', 'Fri', 'Sat')


def parse_iso_date(value):
    """
    Parse 'YYYY-MM-DD' (or an ISO datetime, whose time part is ignored).

    Raises:
        ValueError: when the value is empty or not a date.
    """
    if isinstance(value, datetime):
        return value.date()
    if isinstance(value, date):
        return value
    if not value or not isinstance(value, str):
        raise ValueError('A date in YYYY-MM-DD format is required.')
    return date.fromisoformat(value.strip().split('T')[0])


def normalize_view(view):
    return view if view in VIEWS else DEFAULT_VIEW


def event_end(event):
    return event.end_date or event.start_date


def covers(event, day):
    """True when day falls inside [start_date, end_date or start_date]."""
    return event.start_date <= day <= event_end(event)


def overlaps(event, start, end):
    """True when the event shares at least one day with [start, end]."""
    return event.start_date <= end and event_end(event) >= start


def _sunday_on_or_before(day):
    # date.weekday(): Monday == 0 ... Sunday == 6
    return day - timedelta(days=(day.weekday() + 1) % 7)


def events_for_date(events, day, selected_categories=None, sort_by_title=False):
    """Events covering day, optionally restricted to the selected categories."""
    matches = [
        e for e in events
        if covers(e, day) and (selected_categories is None or e.category in selected_categories)
    ]
    if sort_by_title:
        matches.sort(key=lambda e: e.title.casefold())
    return matches


def special_day_type(day_events):
    """The special type that styles a day ('feriado', 'recesso', 'evento') or None."""
    types = {e.event_type for e in day_events}
    for event_type in SPECIAL_DAY_PRECEDENCE:
        if event_type in types:
            return event_type
    return None


def month_grid_days(anchor):
    """Every date shown on the month grid: whole Sunday-first weeks around the month."""
    first = anchor.replace(day=1)
    last = first.replace(day=calendar.monthrange(first.year, first.month)[1])
    start = _sunday_on_or_before(first)
    end = _sunday_on_or_before(last) + timedelta(days=6)
    return [start + timedelta(days=i) for i in range((end - start).days + 1)]


def week_days(anchor):
    start = _sunday_on_or_before(anchor)
    return [start + timedelta(days=i) for i in range(7)]


def view_range(view, anchor):
    """First and last date displayed by a view."""
    view = normalize_view(view)
    if view == 'month':
        days = month_grid_days(anchor)
        return days[0], days[-1]
    if view == 'week':
        days = week_days(anchor)
        return days[0], days[-1]
    return anchor, anchor


def _add_months(day, months):
    month_index = day.month - 1 + months
    year = day.year + month_index // 12
    return date(year, month_index % 12 + 1, 1)


def shift(anchor, view, direction, today=None):
    """
    Navigate from anchor. 'today' jumps to today; 'prev'/'next' move by one
    month (landing on the 1st), one week, or one day for the agenda.
    """
    if direction == 'today':
        return today or date.today()
    step = 1 if direction == 'next' else -1
    view = normalize_view(view)
    if view == 'month':
        return _add_months(anchor, step)
    if view == 'week':
        return anchor + timedelta(days=7 * step)
    return anchor + timedelta(days=step)


def matches_query(event, query):
    if not query:
        return True
    needle = query.strip().casefold()
    return needle in event.title.casefold() or needle in (event.description or '').casefold()


def filter_events(events, query=None, selected_categories=None):
    """Search on title/description and keep only the selected categories."""
    return [
        e for e in events
        if matches_query(e, query) and (selected_categories is None or e.category in selected_categories)
    ]


def _cell(day, events, today, anchor=None, limit=None):
    day_events = events_for_date(events, day)
    shown = day_events[:limit] if limit else day_events
    return {
        'date': day,
        'day': day.day,
        'weekday': WEEKDAY_SHORT[(day.weekday() + 1) % 7],
        'in_month': anchor is None or (day.month == anchor.month and day.year == anchor.year),
        'is_today': day == today,
        'special_type': special_day_type(day_events),
        'events': shown,
        'hidden_count': len(day_events) - len(shown),
    }


def build_month_view(events, anchor, today=None):
    """Month grid as a list of weeks, each a list of seven day cells."""
    today = today or date.today()
    cells = [_cell(d, events, today, anchor=anchor, limit=MONTH_CELL_EVENT_LIMIT) for d in month_grid_days(anchor)]
    return {
        'view': 'month',
        'date': anchor,
        'title': f'{calendar.month_name[anchor.month]} {anchor.year}',
        'weekdays': list(WEEKDAY_SHORT),
        'weeks': [cells[i:i + 7] for i in range(0, len(cells), 7)],
    }


def build_week_view(events, anchor, today=None):
    today = today or date.today()
    days = week_days(anchor)
    return {
        'view': 'week',
        'date': anchor,
        'title': f'{days[0].strftime("%d/%m/%Y")} - {days[-1].strftime("%d/%m/%Y")}',
        'weekdays': list(WEEKDAY_SHORT),
        'days': [_cell(d, events, today) for d in days],
    }


def build_agenda_view(events, anchor, today=None):
    today = today or date.today()
    return {
        'view': 'agenda',
        'date': anchor,
        'title': f'{WEEKDAY_NAMES[(anchor.weekday() + 1) % 7]}, {anchor.day:02d} {calendar.month_name[anchor.month]} {anchor.year}',
        'is_today': anchor == today,
        'events': events_for_date(events, anchor, sort_by_title=True),
    }


VIEW_BUILDERS = {
    'month': build_month_view,
    'week': build_week_view,
    'agenda': build_agenda_view,
}


def build_view(view, events, anchor, today=None):
    return VIEW_BUILDERS[normalize_view(view)](events, anchor, today=today)


def month_events_by_day(events, year, month):
    """
    Map day-of-month -> events for one month. A multi-day event is listed on
    every day it covers inside the month, once per day.
    """
    first = date(year, month, 1)
    last = date(year, month, calendar.monthrange(year, month)[1])
    by_day = {}
    for event in events:
        if not overlaps(event, first, last):
            continue
        day = max(event.start_date, first)
        stop = min(event_end(event), last)
        while day <= stop:
            bucket = by_day.setdefault(day.day, [])
            if event not in bucket:
                bucket.append(event)
            day += timedelta(days=1)
    return by_day
