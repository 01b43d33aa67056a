"""
PDF export of the calendar: Jinja templates rendered to PDF with WeasyPrint.

Two layouts:
    calendar  landscape A4 month grid, one page per month
    agenda    portrait A4 table of Date | Activity | Segment

Every page carries the header, a legend of the selected active categories,
the generation timestamp and "Page i of N" (see templates/pdf/). Callers pass
the events already filtered to the selected categories.
"""

import calendar
import textwrap
from datetime import date, datetime
from io import BytesIO

from flask import render_template, current_app

from utils.calendar_views import month_events_by_day, WEEKDAY_NAMES
from utils.colors import to_hex

# Landscape A4 height (595pt) minus page margins, title block and weekday row; matches templates/pdf/calendar.html
GRID_HEIGHT = 435
DAY_NUMBER_HEIGHT = 26
OVERFLOW_LINE_HEIGHT = 10
EVENT_LINE_HEIGHT = 10
EVENT_GAP = 2

MAX_LINES_PER_EVENT = 3
CHARS_PER_LINE = 24


def month_title(year, month):
    return f'{calendar.month_name[month]} {year}'


def export_filename(layout, scope, year, month=None):
    """'calendar-2025-03.pdf', 'agenda-2025.pdf' and so on."""
    if scope == 'month':
        return f'{layout}-{year}-{month:02d}.pdf'
    return f'{layout}-{year}.pdf'


def legend_categories(categories, selected):
    """Active categories that are part of the selection, for the page legend."""
    selected = set(selected) if selected is not None else None
    return [
        {'label': c.label, 'color': to_hex(c.color)}
        for c in categories
        if c.is_active and (selected is None or c.value in selected)
    ]


def wrap_title(title):
    """At most three lines per event; the last one gets an ellipsis when cut."""
    lines = textwrap.wrap(title, CHARS_PER_LINE) or ['']
    if len(lines) > MAX_LINES_PER_EVENT:
        lines = lines[:MAX_LINES_PER_EVENT]
        lines[-1] = lines[-1][:CHARS_PER_LINE - 3].rstrip() + '...'
    return lines


def fit_cell_events(day_events, cell_height, category_colors):
    """
    Lay out one day's events top to bottom. Whatever no longer fits becomes
    the hidden count shown as "+ N more...".
    """
    used = DAY_NUMBER_HEIGHT
    limit = cell_height - OVERFLOW_LINE_HEIGHT
    shown = []
    for index, event in enumerate(day_events):
        lines = wrap_title(event.title)
        required = len(lines) * EVENT_LINE_HEIGHT + EVENT_GAP
        if used + required > limit:
            return shown, len(day_events) - index
        shown.append({'lines': lines, 'color': category_colors.get(event.category, to_hex(None))})
        used += required
    return shown, 0


def month_grid(year, month, events, category_colors):
    """Weeks (Sunday first) of cells; cells outside the month have day None."""
    starting_index = (date(year, month, 1).weekday() + 1) % 7
    days_in_month = calendar.monthrange(year, month)[1]
    num_weeks = -(-(starting_index + days_in_month) // 7)
    cell_height = GRID_HEIGHT / num_weeks
    events_by_day = month_events_by_day(events, year, month)

    cells = []
    for i in range(num_weeks * 7):
        day_of_month = i - starting_index + 1
        if not 1 <= day_of_month <= days_in_month:
            cells.append({'day': None, 'events': [], 'hidden': 0})
            continue
        shown, hidden = fit_cell_events(events_by_day.get(day_of_month, []), cell_height, category_colors)
        cells.append({'day': day_of_month, 'events': shown, 'hidden': hidden})
    return {
        'title': month_title(year, month),
        'cell_height': cell_height,
        'weeks': [cells[i:i + 7] for i in range(0, len(cells), 7)],
    }


def _format_range(event):
    start = event.start_date.strftime('%d/%m/%Y')
    if event.end_date and event.end_date != event.start_date:
        return f"{start} to {event.end_date.strftime('%d/%m/%Y')}"
    return start


def events_starting_in(events, year, month):
    # Agenda rows belong to the month the event starts in
    return sorted(
        (e for e in events if e.start_date.year == year and e.start_date.month == month),
        key=lambda e: (e.start_date, e.title.casefold()),
    )


def agenda_rows(events, categories_by_value):
    rows = []
    for event in events:
        category = categories_by_value.get(event.category)
        rows.append({
            'date': _format_range(event),
            'title': event.title,
            'description': event.description,
            'segment': category.label if category else event.category,
            'color': to_hex(category.color if category else None),
        })
    return rows


def _common_context(categories, selected, app_name):
    return {
        'app_name': app_name or current_app.config.get('APP_NAME', 'School Calendar'),
        'legend': legend_categories(categories, selected),
        'generated_at': datetime.now().strftime('%d/%m/%Y %H:%M'),
    }


def render_calendar_html(months, events, categories, selected=None, app_name=None):
    category_colors = {c.value: to_hex(c.color) for c in categories}
    return render_template(
        'pdf/calendar.html',
        pages=[month_grid(year, month, events, category_colors) for year, month in months],
        weekdays=WEEKDAY_NAMES,
        **_common_context(categories, selected, app_name),
    )


def render_agenda_html(sections, title, categories, selected=None, app_name=None):
    """sections: list of (heading or None, events) in display order."""
    categories_by_value = {c.value: c for c in categories}
    return render_template(
        'pdf/agenda.html',
        title=title,
        sections=[(heading, agenda_rows(section_events, categories_by_value)) for heading, section_events in sections],
        **_common_context(categories, selected, app_name),
    )


def write_pdf(html_content):
    from weasyprint import HTML

    pdf_buffer = BytesIO()
    HTML(string=html_content).write_pdf(pdf_buffer)
    return pdf_buffer.getvalue()


def export_month_calendar(year, month, events, categories, selected=None, app_name=None):
    return write_pdf(render_calendar_html([(year, month)], events, categories, selected, app_name))


def export_year_calendar(year, events, categories, selected=None, app_name=None):
    months = [(year, m) for m in range(1, 13)]
    return write_pdf(render_calendar_html(months, events, categories, selected, app_name))


def month_agenda_sections(year, month, events):
    month_events = events_starting_in(events, year, month)
    return [(None, month_events)] if month_events else []


def year_agenda_sections(year, events):
    sections = []
    for month in range(1, 13):
        month_events = events_starting_in(events, year, month)
        if month_events:
            sections.append((month_title(year, month), month_events))
    return sections


def export_month_agenda(year, month, events, categories, selected=None, app_name=None):
    html_content = render_agenda_html(
        month_agenda_sections(year, month, events), month_title(year, month), categories, selected, app_name
    )
    return write_pdf(html_content)


def export_year_agenda(year, events, categories, selected=None, app_name=None):
    html_content = render_agenda_html(
        year_agenda_sections(year, events), f'Full Year {year}', categories, selected, app_name
    )
    return write_pdf(html_content)
