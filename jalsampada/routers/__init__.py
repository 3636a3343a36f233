# FastAPI Routers
from jalsampada.routers.forms import router as forms_router
from jalsampada.routers.health import router as health_router

__all__ = [
    "forms_router",
    "health_router",
]
