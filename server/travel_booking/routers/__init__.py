"""FastAPI routers package."""

from .auth import router as auth_router
from .flights import router as flights_router
from .health import router as health_router
from .hotels import router as hotels_router
from .metrics import router as metrics_router
from .reservations import router as reservations_router
from .support import router as support_router
from .visas import router as visas_router

__all__ = [
    "auth_router",
    "flights_router",
    "health_router",
    "hotels_router",
    "metrics_router",
    "reservations_router",
    "support_router",
    "visas_router",
]

# Registration order used by the application factory and the test app
ALL_ROUTERS = [
    health_router,
    auth_router,
    flights_router,
    hotels_router,
    reservations_router,
    visas_router,
    support_router,
    metrics_router,
]
