# Routers package
from . import user_router
from . import doctor_router
from . import admin_router

__all__ = [
    "user_router",
    "doctor_router",
    "admin_router",
]
