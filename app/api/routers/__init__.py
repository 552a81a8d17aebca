"""
app/api/routers package marker.
"""

from app.api.routers.report_router import router as report_router

__all__ = [
    "report_router",
]
