"""
Calendar Routes Package

Everything a signed-in user reaches from the calendar screen, split by area:
    views   calendar pages and their JSON counterparts (blueprint 'calendar')
    events  event CRUD API under /api/events (blueprint 'events')
    export  PDF downloads under /export (blueprint 'export')
"""

from .views import bp as calendar_blueprint
from .events import bp as events_blueprint
from .export import bp as export_blueprint

__all__ = ['calendar_blueprint', 'events_blueprint', 'export_blueprint']
