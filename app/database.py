from typing import Any, Dict, Tuple
from urllib.parse import parse_qs, urlencode, urlparse, urlunparse

from fastapi import Request
from sqlalchemy.ext.asyncio import AsyncEngine, AsyncSession, async_sessionmaker, create_async_engine
from sqlmodel import SQLModel

from app.core import config
from app.repositories.subscriptions import SubscriptionStore

# valores de sslmode (libpq) que asyncpg acepta como argumento ssl
_SSL_MODES = ("disable", "allow", "prefer", "require", "verify-ca", "verify-full")


def convert_database_url(url: str) -> Tuple[str, Dict[str, Any]]:
    """Adapta una URL postgres:// al driver asyncpg.

    Devuelve la URL sin ``sslmode`` y los connect_args equivalentes.
    Otras URLs (p. ej. sqlite+aiosqlite en pruebas) pasan sin cambios.
    """
    parsed = urlparse(url)
    if parsed.scheme not in ("postgres", "postgresql", "postgresql+asyncpg"):
        return url, {}

    query_params = parse_qs(parsed.query)
    sslmode = query_params.pop("sslmode", [None])[0]
    new_query = urlencode(query_params, doseq=True)
    new_url = urlunparse(parsed._replace(scheme="postgresql+asyncpg", query=new_query))

    connect_args: Dict[str, Any] = {}
    if sslmode is not None:
        if sslmode not in _SSL_MODES:
            raise ValueError(f"unsupported sslmode: {sslmode}")
        connect_args["ssl"] = False if sslmode == "disable" else sslmode
    return new_url, connect_args


def create_engine_from_config(url: str = config.DATABASE_URL) -> AsyncEngine:
    database_url, connect_args = convert_database_url(url)
    options: Dict[str, Any] = {
        "echo": config.DB_ECHO,  # echo=True imprime las queries
        "pool_pre_ping": True,
        "connect_args": connect_args,
    }
    if database_url.startswith("postgresql"):
        options.update(pool_size=config.DB_POOL_SIZE, pool_recycle=300)
    return create_async_engine(database_url, **options)


def create_session_maker(engine: AsyncEngine) -> async_sessionmaker[AsyncSession]:
    # expire_on_commit=False: los objetos siguen legibles tras cerrar la sesión
    return async_sessionmaker(engine, class_=AsyncSession, expire_on_commit=False)


async def create_db_and_tables(engine: AsyncEngine) -> None:
    import app.models.subscription  # noqa: F401  registra el modelo en el metadata

    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


def get_subscription_store(request: Request) -> SubscriptionStore:
    return request.app.state.subscription_store
