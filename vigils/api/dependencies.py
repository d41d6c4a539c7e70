"""
FastAPI dependencies.
"""

from fastapi import Request

from ..core.state import AppState


def get_state(request: Request) -> AppState:
    """The AppState owned by the running app."""
    return request.app.state.vigils
