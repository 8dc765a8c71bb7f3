from fastapi import FastAPI

from . import auth, health, menu, staff


def register_routes(app: FastAPI) -> None:
    """Attach all API routers to the FastAPI application."""
    app.include_router(health.router)
    app.include_router(auth.router)
    app.include_router(staff.router)
    app.include_router(menu.router)
