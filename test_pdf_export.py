from datetime import date
from types import SimpleNamespace

import pytest

from services import pdf_export
from services.pdf_export import (
    agenda_rows,
    export_filename,
    fit_cell_events,
    legend_categories,
    month_agenda_sections,
    month_grid,
    render_agenda_html,
    render_calendar_html,
    wrap_title,
    year_agenda_sections,
)


def _weasyprint_usable():
    try:
        import weasyprint  # noqa: F401
    except (ImportError, OSError):
        return False
    return True


requires_weasyprint = pytest.mark.skipif(not _weasyprint_usable(), reason='WeasyPrint or its system libraries are missing')

CATEGORIES = [
    SimpleNamespace(value='geral', label='General', color='hsl(0, 100%, 50%)', is_active=True),
    SimpleNamespace(value='esportes', label='Sports', color='#00ff00', is_active=True),
    SimpleNamespace(value='nap', label='NAP', color='#0000ff', is_active=False),
]
COLORS = {'geral': '#ff0000', 'esportes': '#00ff00'}


def make_event(title, start, end=None, category='geral', description=None):
    return SimpleNamespace(
        title=title, start_date=start, end_date=end, category=category,
        event_type='normal', description=description,
    )


class TestHelpers:
    def test_filenames(self):
        assert export_filename('calendar', 'month', 2025, 3) == 'calendar-2025-03.pdf'
        assert export_filename('agenda', 'year', 2025) == 'agenda-2025.pdf'

    def test_legend_lists_selected_active_categories(self):
        assert legend_categories(CATEGORIES, ['geral', 'nap']) == [{'label': 'General', 'color': '#ff0000'}]
        assert [c['label'] for c in legend_categories(CATEGORIES, None)] == ['General', 'Sports']

    def test_short_title_is_one_line(self):
        assert wrap_title('Parents meeting') == ['Parents meeting']

    def test_long_title_is_cut_to_three_lines(self):
        lines = wrap_title('Interschool mathematics olympiad final round with awards ceremony and closing lunch')
        assert len(lines) == 3
        assert lines[-1].endswith('...')
        assert all(len(line) <= pdf_export.CHARS_PER_LINE for line in lines)


class TestMonthLayout:
    def test_six_week_month(self):
        grid = month_grid(2025, 3, [], COLORS)
        assert grid['title'] == 'March 2025'
        assert len(grid['weeks']) == 6
        assert grid['cell_height'] == pytest.approx(72.5)
        # March 1st 2025 is a Saturday
        assert [c['day'] for c in grid['weeks'][0]] == [None] * 6 + [1]
        assert grid['weeks'][5][1]['day'] == 31

    def test_four_week_month_has_taller_cells(self):
        grid = month_grid(2026, 2, [], COLORS)
        assert len(grid['weeks']) == 4
        assert grid['cell_height'] == pytest.approx(108.75)
        assert grid['weeks'][0][0]['day'] == 1

    def test_overflow_count(self):
        day_events = [make_event(f'Event {i}', date(2025, 3, 12)) for i in range(5)]
        shown, hidden = fit_cell_events(day_events, 72.5, COLORS)
        assert len(shown) == 3
        assert hidden == 2
        assert shown[0] == {'lines': ['Event 0'], 'color': '#ff0000'}

    def test_taller_cells_fit_more(self):
        day_events = [make_event(f'Event {i}', date(2026, 2, 12)) for i in range(8)]
        shown, hidden = fit_cell_events(day_events, 108.75, COLORS)
        assert (len(shown), hidden) == (6, 2)

    def test_wrapped_titles_take_more_room(self):
        long_title = 'Interschool mathematics olympiad final round'
        day_events = [make_event(long_title, date(2025, 3, 12)) for _ in range(3)]
        shown, hidden = fit_cell_events(day_events, 72.5, COLORS)
        assert len(shown) == 1
        assert hidden == 2

    def test_unknown_category_gets_default_color(self):
        shown, _ = fit_cell_events([make_event('x', date(2025, 3, 1), category='gone')], 72.5, COLORS)
        assert shown[0]['color'] == pdf_export.to_hex(None)

    def test_multi_day_event_appears_on_each_day(self):
        grid = month_grid(2025, 3, [make_event('Trip', date(2025, 3, 30), date(2025, 4, 2))], COLORS)
        cells = {c['day']: c for week in grid['weeks'] for c in week if c['day']}
        assert cells[30]['events'] and cells[31]['events']
        assert not cells[29]['events']


class TestAgendaLayout:
    def test_rows(self):
        events = [make_event('Trip', date(2025, 3, 10), date(2025, 3, 12), category='esportes', description='Bring lunch')]
        row = agenda_rows(events, {c.value: c for c in CATEGORIES})[0]
        assert row == {
            'date': '10/03/2025 to 12/03/2025',
            'title': 'Trip',
            'description': 'Bring lunch',
            'segment': 'Sports',
            'color': '#00ff00',
        }

    def test_single_day_row(self):
        row = agenda_rows([make_event('Exam', date(2025, 3, 10))], {})[0]
        assert row['date'] == '10/03/2025'
        assert row['segment'] == 'geral'

    def test_events_belong_to_their_start_month(self):
        events = [
            make_event('b', date(2025, 3, 20)),
            make_event('A', date(2025, 3, 20)),
            make_event('Crossing', date(2025, 2, 27), date(2025, 3, 2)),
            make_event('May', date(2025, 5, 1)),
        ]
        assert [e.title for _, section in month_agenda_sections(2025, 3, events) for e in section] == ['A', 'b']
        assert month_agenda_sections(2025, 4, events) == []
        assert [heading for heading, _ in year_agenda_sections(2025, events)] == [
            'February 2025', 'March 2025', 'May 2025',
        ]


class TestHtml:
    def test_calendar_html(self, app):
        events = [make_event(f'Event {i}', date(2025, 3, 12)) for i in range(4)]
        with app.app_context():
            html = render_calendar_html([(2025, 3)], events, CATEGORIES, ['geral'], app_name='Test School')
        assert 'Test School' in html
        assert 'March 2025' in html
        assert '+ 1 more...' in html
        assert 'Sunday' in html
        assert 'General' in html
        assert 'Sports' not in html
        assert 'counter(pages)' in html

    def test_year_calendar_has_twelve_months(self, app):
        with app.app_context():
            html = render_calendar_html([(2025, m) for m in range(1, 13)], [], CATEGORIES)
        assert html.count('class="month"') == 12
        assert 'School Calendar' in html

    def test_agenda_html(self, app):
        events = [make_event('Trip', date(2025, 3, 10), category='esportes')]
        with app.app_context():
            html = render_agenda_html(year_agenda_sections(2025, events), 'Full Year 2025', CATEGORIES)
        assert 'Full Year 2025' in html
        assert '<h2>March 2025</h2>' in html
        assert 'background: #00ff00' in html

    def test_empty_agenda(self, app):
        with app.app_context():
            html = render_agenda_html([], 'April 2025', CATEGORIES)
        assert 'No events for this period.' in html


@requires_weasyprint
class TestPdfBytes:
    def test_month_calendar(self, app):
        with app.app_context():
            content = pdf_export.export_month_calendar(2025, 3, [make_event('Exam', date(2025, 3, 10))], CATEGORIES)
        assert content.startswith(b'%PDF')

    def test_year_agenda(self, app):
        with app.app_context():
            content = pdf_export.export_year_agenda(2025, [make_event('Exam', date(2025, 3, 10))], CATEGORIES)
        assert content.startswith(b'%PDF')


class TestExportRoutes:
    @pytest.fixture
    def rendered(self, monkeypatch):
        """Capture the HTML handed to the PDF writer instead of running WeasyPrint."""
        captured = []

        def fake_write_pdf(html):
            captured.append(html)
            return b'%PDF-1.7 fake'

        monkeypatch.setattr(pdf_export, 'write_pdf', fake_write_pdf)
        return captured

    def test_month_calendar_download(self, rendered, editor_client):
        editor_client.post('/api/events', json={'title': 'Exam week', 'start_date': '2025-03-10', 'category': 'medio'})
        response = editor_client.get('/export/calendar/month/2025/3')
        assert response.status_code == 200
        assert response.mimetype == 'application/pdf'
        assert 'calendar-2025-03.pdf' in response.headers['Content-Disposition']
        assert response.data == b'%PDF-1.7 fake'
        assert 'Exam week' in rendered[0]

    def test_year_agenda_download(self, rendered, viewer_client):
        response = viewer_client.get('/export/agenda/year/2025')
        assert response.status_code == 200
        assert 'agenda-2025.pdf' in response.headers['Content-Disposition']
        assert 'Full Year 2025' in rendered[0]

    def test_respects_category_selection(self, rendered, editor_client):
        editor_client.post('/api/events', json={'title': 'Exam week', 'start_date': '2025-03-10', 'category': 'medio'})
        editor_client.post('/api/calendar/filters', json={'categories': ['esportes']})
        editor_client.get('/export/agenda/month/2025/3')
        assert 'Exam week' not in rendered[0]
        assert 'No events for this period.' in rendered[0]

    def test_invalid_month(self, rendered, viewer_client):
        assert viewer_client.get('/export/calendar/month/2025/13').status_code == 404
        assert viewer_client.get('/export/poster/month/2025/3').status_code == 404

    def test_requires_login(self, client, users):
        assert client.get('/export/calendar/year/2025').status_code == 302
