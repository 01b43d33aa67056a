#!/usr/bin/env python3
"""
WSGI entry point for the school calendar.
Gunicorn and other WSGI servers load `wsgi:app`; running this file directly
starts the Flask development server with DEBUG taken from the config.
"""

from app import create_app

app = create_app()

if __name__ == "__main__":
    app.run(debug=app.config.get('DEBUG', False))
