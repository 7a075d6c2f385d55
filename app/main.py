import logging
from contextlib import asynccontextmanager

import uvicorn
from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from app.api import health, subscriptions
from app.core import config
from app.core.middleware import RequestContextMiddleware, RequestTimeoutMiddleware
from app.database import create_db_and_tables, create_engine_from_config, create_session_maker
from app.repositories.subscriptions import SubscriptionRepository
from app.utils.logging_config import setup_logging

setup_logging()
logger = logging.getLogger(__name__)


@asynccontextmanager
async def lifespan(app: FastAPI):
    logger.info("starting subscription service")
    engine = create_engine_from_config()
    if config.AUTO_CREATE_TABLES:
        await create_db_and_tables(engine)
    app.state.engine = engine
    app.state.subscription_store = SubscriptionRepository(create_session_maker(engine))
    logger.info("database connection open")
    yield
    await engine.dispose()
    logger.info("service stopped")


app = FastAPI(
    title="Subscriptions Service",
    description="CRUD and period totals for user subscriptions",
    version="1.0.0",
    lifespan=lifespan,
)

# El último middleware añadido es el más externo
app.add_middleware(RequestTimeoutMiddleware, timeout_seconds=config.REQUEST_TIMEOUT_SECONDS)
app.add_middleware(RequestContextMiddleware)


def _describe_validation_errors(exc: RequestValidationError) -> str:
    messages = []
    for error in exc.errors():
        location = ".".join(str(part) for part in error.get("loc", ())[1:])
        message = error.get("msg", "invalid value")
        messages.append(f"{location}: {message}" if location else message)
    return "; ".join(messages) or "invalid request"


@app.exception_handler(RequestValidationError)
async def validation_exception_handler(request: Request, exc: RequestValidationError):
    detail = _describe_validation_errors(exc)
    logger.warning("invalid request %s %s: %s", request.method, request.url.path, detail)
    return JSONResponse(status_code=400, content={"detail": detail})


app.include_router(health.router)
app.include_router(subscriptions.router)


@app.get("/")
async def root():
    return {"message": "Subscriptions service"}


if __name__ == "__main__":
    uvicorn.run("app.main:app", host=config.APP_HOST, port=config.APP_PORT)
