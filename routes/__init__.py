"""
API route modules.

Each module defines routes for one domain area.
"""

from routes.bulk_orders import router as bulk_orders_router

__all__ = [
    "bulk_orders_router",
]
