"""
Validate Token Use Case

Reports whether an access token is currently valid.
"""

from libs.result import Result
from src.app.services.logger import get_logger, log_event
from src.app.services.token_codec import TokenClaims, TokenCodec
from src.domain.entities import SessionEvent
from .dtos import ValidateTokenResponse

logger = get_logger(__name__)


class ValidateTokenUseCase:
    """
    Use case for access token validation.

    Validity is reported as data: an expired, tampered or undecodable token
    yields is_valid=False instead of an error.
    """

    def __init__(self, codec: TokenCodec):
        self.codec = codec

    def execute(self, token: str) -> ValidateTokenResponse:
        result: Result[TokenClaims] = self.codec.verify(token)

        if result.is_err():
            log_event(
                logger,
                SessionEvent.token_validation_failed,
                level="warning",
                reason=result.error.code,
            )
            return ValidateTokenResponse.invalid()

        claims = result.value
        return ValidateTokenResponse(
            user_id=claims.user_id,
            is_valid=True,
            expires_in=claims.expires_in(),
        )
