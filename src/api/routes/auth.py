from fastapi import APIRouter, Depends, Request, status
from pydantic import BaseModel, Field

from src.api.error import ClientError, ServerError
from src.app.services.session_store import SessionStore
from src.app.services.token_codec import TokenCodec
from src.app.use_cases.auth import (
    UNAUTHORIZED_CODES,
    AuthSettings,
    AuthTokensResponse,
    GenerateTokensUseCase,
    LogoutResponse,
    LogoutUseCase,
    RefreshTokenUseCase,
    ValidateTokenResponse,
    ValidateTokenUseCase,
)
from src.depends import (
    get_auth_settings,
    get_bearer_token,
    get_session_store,
    get_token_codec,
)

router = APIRouter(prefix="/auth", tags=["Authentication"])


class LoginRequest(BaseModel):
    """
    Login HTTP request payload

    The caller (e.g. an API gateway) has already verified the user's
    credentials and passes the trusted user identifier.
    """

    user_id: str = Field(..., min_length=1, max_length=255, description="User ID")


@router.post("/login", status_code=status.HTTP_200_OK, response_model=AuthTokensResponse)
async def login(
    payload: LoginRequest,
    request: Request,
    store: SessionStore = Depends(get_session_store),
    codec: TokenCodec = Depends(get_token_codec),
    settings: AuthSettings = Depends(get_auth_settings),
):
    """
    Issue Tokens

    Returns an access token, an opaque refresh token and the access token
    lifetime in seconds. The client's User-Agent and address are recorded on
    the session.

    Raises:
        - 422 Unprocessable Entity: Invalid input (handled by FastAPI)
        - 503 Service Unavailable: Session storage unavailable
    """
    use_case = GenerateTokensUseCase(store, codec, settings)
    result = await use_case.execute(
        payload.user_id,
        device_info=request.headers.get("user-agent"),
        ip_address=request.client.host if request.client else None,
    )

    if result.is_err():
        raise ServerError(result.error)

    return result.value


@router.get("/validate", status_code=status.HTTP_200_OK, response_model=ValidateTokenResponse)
async def validate(
    token: str = Depends(get_bearer_token),
    codec: TokenCodec = Depends(get_token_codec),
):
    """
    Validate Access Token

    Reports validity as data: an expired or tampered token returns
    is_valid=false rather than an error.

    Raises:
        - 401 Unauthorized: Missing or malformed Authorization header
    """
    return ValidateTokenUseCase(codec).execute(token)


@router.post("/refresh", status_code=status.HTTP_200_OK, response_model=AuthTokensResponse)
async def refresh(
    token: str = Depends(get_bearer_token),
    store: SessionStore = Depends(get_session_store),
    codec: TokenCodec = Depends(get_token_codec),
    settings: AuthSettings = Depends(get_auth_settings),
):
    """
    Refresh Tokens

    Exchanges a refresh token (Authorization: Bearer <refresh_token>) for a
    new pair. The presented refresh token can never be used again.

    Raises:
        - 401 Unauthorized: Invalid, expired or already rotated refresh token
        - 503 Service Unavailable: Session storage unavailable
    """
    use_case = RefreshTokenUseCase(store, GenerateTokensUseCase(store, codec, settings))
    result = await use_case.execute(token)

    if result.is_err():
        error = result.error
        if error.code in UNAUTHORIZED_CODES:
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        raise ServerError(error)

    return result.value


@router.post("/logout", status_code=status.HTTP_200_OK, response_model=LogoutResponse)
async def logout(
    token: str = Depends(get_bearer_token),
    store: SessionStore = Depends(get_session_store),
    codec: TokenCodec = Depends(get_token_codec),
):
    """
    Logout

    Invalidates all active sessions of the token's owner. Accepts an access
    token or a refresh token.

    Raises:
        - 401 Unauthorized: Token cannot be verified
        - 404 Not Found: No active session for the user
        - 503 Service Unavailable: Session storage unavailable
    """
    use_case = LogoutUseCase(store, codec)
    result = await use_case.execute(token)

    if result.is_err():
        error = result.error
        if error.code in UNAUTHORIZED_CODES:
            raise ClientError(error, status_code=status.HTTP_401_UNAUTHORIZED)
        elif error.code == "SESSION_NOT_FOUND":
            raise ClientError(error, status_code=status.HTTP_404_NOT_FOUND)
        raise ServerError(error)

    return result.value
