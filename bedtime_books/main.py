"""
ASGI entry point: ``uvicorn bedtime_books.main:app``.
"""

from bedtime_books.web import create_app

app = create_app()
