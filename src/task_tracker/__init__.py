"""
Task Tracker package.

The FastAPI application lives in task_tracker.main (task_tracker.main:app for
ASGI servers); the HTTP client and board state live in task_tracker.client.
"""

__version__ = "0.1.0"
