from fastapi import FastAPI

from tradedocs.api.errors import register_error_handlers
from tradedocs.api.routers import clients, documents, files, system
from tradedocs.api.services import Services


def create_app(services: Services) -> FastAPI:
    app = FastAPI(title="Trade Documents API", version="0.1.0")
    app.state.services = services
    register_error_handlers(app)
    app.include_router(system.router)
    app.include_router(clients.router)
    app.include_router(documents.router)
    app.include_router(files.router)
    return app
