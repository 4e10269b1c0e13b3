"""
asgi.py -- ASGI entry point for EmpRecords.

Run with:  uvicorn asgi:app --reload
           python main.py serve

Kept separate from api/main.py so process managers (uvicorn, gunicorn) have
one stable import path while the application module stays free to grow.
"""

from api.main import app

__all__ = ["app"]
