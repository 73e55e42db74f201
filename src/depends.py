from typing import Callable, Optional

from fastapi import Depends, Request, status
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer
from sqlalchemy.ext.asyncio import create_async_engine
from sqlalchemy.orm import sessionmaker
from sqlmodel import SQLModel
from sqlmodel.ext.asyncio.session import AsyncSession

from config import ApplicationConfig
from libs.result import Error
from src.adapter.services.unit_of_work import SqlAlchemyUnitOfWork
from src.api.error import ClientError
from src.app.services.retry import RetryPolicy
from src.app.services.session_store import SessionStore
from src.app.services.token_codec import TokenCodec
from src.app.services.unit_of_work import UnitOfWork
from src.app.use_cases.auth import AuthSettings

engine = create_async_engine(ApplicationConfig.DB_URI, echo=False, future=True)

AsyncSessionLocal = sessionmaker(
    engine, class_=AsyncSession, expire_on_commit=False, autoflush=False
)

# Signing key and algorithm are fixed for the lifetime of the process
token_codec = TokenCodec(ApplicationConfig.JWT_SECRET, ApplicationConfig.JWT_ALGORITHM)
retry_policy = RetryPolicy.from_config(ApplicationConfig)

security = HTTPBearer(auto_error=False)


async def init_db() -> None:
    async with engine.begin() as conn:
        await conn.run_sync(SQLModel.metadata.create_all)


def get_unit_of_work_factory() -> Callable[[], UnitOfWork]:
    return lambda: SqlAlchemyUnitOfWork(AsyncSessionLocal)


def get_session_store(
    uow_factory: Callable[[], UnitOfWork] = Depends(get_unit_of_work_factory),
) -> SessionStore:
    return SessionStore(uow_factory, retry_policy)


def get_token_codec() -> TokenCodec:
    return token_codec


def get_auth_settings(request: Request) -> AuthSettings:
    """Token lifetimes parsed by create_app at startup"""
    return request.app.state.auth_settings


async def get_bearer_token(
    credentials: Optional[HTTPAuthorizationCredentials] = Depends(security),
) -> str:
    """
    Extract the token from an `Authorization: Bearer <token>` header.

    Raises:
        ClientError: 401 if the header is missing or not a bearer credential
    """
    if credentials is None or not credentials.credentials:
        raise ClientError(
            Error("UNAUTHORIZED", "Token not provided or invalid format"),
            status_code=status.HTTP_401_UNAUTHORIZED,
        )

    return credentials.credentials
