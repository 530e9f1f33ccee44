import sys
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, PlainTextResponse
from loguru import logger
from starlette.exceptions import HTTPException as StarletteHTTPException

from categories import router as categories_router
from config import Settings
from crud import RESOURCES, build_resource_router
from database import Store
from users import router as users_router


def configure_logging(level: str) -> None:
    logger.remove()
    logger.add(
        sys.stdout,
        level=level,
        format="<green>{time:YYYY-MM-DD HH:mm:ss}</green> | <level>{level: <8}</level> | <cyan>{name}</cyan>:<cyan>{function}</cyan> - <level>{message}</level>",
    )


async def http_error_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    return JSONResponse(
        status_code=exc.status_code,
        content={"message": exc.detail},
        headers=getattr(exc, "headers", None),
    )


async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    logger.debug("Invalid request body on {}: {}", request.url.path, exc.errors())
    return JSONResponse(status_code=400, content={"message": "Invalid request body"})


async def unhandled_error_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.opt(exception=exc).error("Unhandled error on {} {}", request.method, request.url.path)
    return JSONResponse(status_code=500, content={"message": "Internal Server Error"})


def create_app(settings: Optional[Settings] = None, store: Optional[Store] = None) -> FastAPI:
    """Build the API. An injected store is used as-is and never closed by the app."""
    settings = settings or Settings.from_env()

    @asynccontextmanager
    async def lifespan(app: FastAPI):
        owned = app.state.store is None
        if owned:
            app.state.store = Store.connect(settings)
        try:
            yield
        finally:
            if owned:
                app.state.store.close()
                app.state.store = None

    app = FastAPI(title="Content Library API", lifespan=lifespan)
    app.state.settings = settings
    app.state.store = store
    if store is not None:
        store.ensure_indexes()

    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_exception_handler(StarletteHTTPException, http_error_handler)
    app.add_exception_handler(RequestValidationError, validation_error_handler)
    app.add_exception_handler(Exception, unhandled_error_handler)

    @app.get("/", response_class=PlainTextResponse)
    def read_root():
        return "Server is running"

    @app.get("/test")
    def test_database(request: Request):
        """Check that the database is reachable and list a few collections"""
        response = {
            "backend": "Running",
            "database": "Not Available",
            "database_name": settings.database_name,
            "connection_status": "Not Connected",
            "collections": [],
        }
        db_store = request.app.state.store
        if db_store is None:
            return response
        try:
            db_store.ping()
            response["connection_status"] = "Connected"
            response["collections"] = db_store.collection_names()[:10]
            response["database"] = "Connected & Working"
        except Exception as e:
            response["database"] = f"Error: {str(e)[:50]}"
        return response

    for spec in RESOURCES:
        app.include_router(build_resource_router(spec))
    app.include_router(categories_router)
    app.include_router(users_router)

    return app


_settings = Settings.from_env()
configure_logging(_settings.log_level)
app = create_app(_settings)


if __name__ == "__main__":
    import uvicorn
    logger.info("Server is running on port {}", _settings.port)
    uvicorn.run(app, host=_settings.host, port=_settings.port)
