"""
Category filter selection, remembered in the session between requests.
"""

from flask import request, session

from services.categories import active_category_values

SESSION_KEY = 'selected_categories'


def _parse_values(raw):
    values = []
    for item in raw:
        values.extend(v.strip() for v in str(item).split(',') if v.strip())
    return values


def save_selected_categories(values):
    """Store the selection, keeping only active categories. Returns what was kept."""
    active = active_category_values()
    kept = [v for v in active if v in set(values)]
    session[SESSION_KEY] = kept
    return kept


def selected_categories():
    """
    The categories the current user is looking at.

    A 'categories' query parameter replaces the saved selection (an empty
    value selects nothing). Without one, the saved selection is used, or
    every active category the first time.
    """
    active = active_category_values()
    if 'categories' in request.args:
        return save_selected_categories(_parse_values(request.args.getlist('categories')))
    saved = session.get(SESSION_KEY)
    if saved is None:
        return active
    # Categories deactivated since the selection was saved drop out
    return [v for v in active if v in set(saved)]
