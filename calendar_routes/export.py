"""
PDF downloads of the calendar, honouring the user's category selection.
"""

import calendar as calendar_module
from datetime import date
from io import BytesIO

from flask import Blueprint, send_file, current_app, abort
from flask_login import login_required, current_user

from services.categories import list_categories
from services.events import list_events
from services import pdf_export
from .filters import selected_categories

bp = Blueprint('export', __name__)

MONTH_EXPORTS = {
    'calendar': pdf_export.export_month_calendar,
    'agenda': pdf_export.export_month_agenda,
}
YEAR_EXPORTS = {
    'calendar': pdf_export.export_year_calendar,
    'agenda': pdf_export.export_year_agenda,
}


def _events_between(start, end, selected):
    return list_events(start=start, end=end, category=selected) if selected else []


def _pdf_response(content, filename):
    return send_file(
        BytesIO(content),
        mimetype='application/pdf',
        as_attachment=True,
        download_name=filename,
    )


@bp.route('/<any(calendar, agenda):layout>/month/<int:year>/<int:month>')
@login_required
def export_month(layout, year, month):
    if not 1 <= month <= 12 or not 1 <= year <= 9999:
        abort(404)
    selected = selected_categories()
    last_day = calendar_module.monthrange(year, month)[1]
    events = _events_between(date(year, month, 1), date(year, month, last_day), selected)
    content = MONTH_EXPORTS[layout](
        year, month, events, list_categories(), selected,
        app_name=current_app.config.get('APP_NAME', 'School Calendar'),
    )
    current_app.logger.info(f"{current_user.email} exported {layout} for {year}-{month:02d} ({len(events)} events)")
    return _pdf_response(content, pdf_export.export_filename(layout, 'month', year, month))


@bp.route('/<any(calendar, agenda):layout>/year/<int:year>')
@login_required
def export_year(layout, year):
    if not 1 <= year <= 9999:
        abort(404)
    selected = selected_categories()
    events = _events_between(date(year, 1, 1), date(year, 12, 31), selected)
    content = YEAR_EXPORTS[layout](
        year, events, list_categories(), selected,
        app_name=current_app.config.get('APP_NAME', 'School Calendar'),
    )
    current_app.logger.info(f"{current_user.email} exported {layout} for {year} ({len(events)} events)")
    return _pdf_response(content, pdf_export.export_filename(layout, 'year', year))
