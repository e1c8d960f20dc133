import logging

from fastapi import APIRouter, Depends, HTTPException, Response, status

from src.config import settings

from .exceptions import (
    ConfigurationError,
    DeadlineExceededError,
    ExhaustedRetriesError,
    InvalidInputError,
)
from .login_url import build_login_url
from .schemas import ExchangeTokenRequest, ExchangeTokenResponse, LoginURLResponse
from .service import SessionExchanger, exponential_backoff

logger = logging.getLogger(__name__)
logger.setLevel(settings.LOG_LEVEL)

router = APIRouter(prefix="/auth", tags=["auth"])

cors_headers = {
    "Access-Control-Allow-Headers": "Content-Type",
    "Access-Control-Allow-Methods": "GET,POST,OPTIONS",
    "Access-Control-Allow-Origin": "*",
}


def get_session_exchanger() -> SessionExchanger:
    try:
        return SessionExchanger(
            base_url=settings.KITE_API_URL,
            retries=settings.EXCHANGE_RETRIES,
            backoff=exponential_backoff(settings.EXCHANGE_BACKOFF_BASE, settings.EXCHANGE_BACKOFF_MAX),
            timeout=settings.EXCHANGE_REQUEST_TIMEOUT,
        )
    except ConfigurationError as e:
        logger.error(f"Invalid session exchange settings: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Session exchange is misconfigured"
        )


@router.get("/login-url", response_model=LoginURLResponse)
async def login_url(response: Response, redirect_params: str = ""):
    for key, value in cors_headers.items():
        response.headers[key] = value

    if not settings.KITE_API_KEY:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Kite API key is not configured"
        )

    try:
        url = build_login_url(settings.KITE_API_KEY, redirect_params, login_url=settings.KITE_LOGIN_URL)
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))

    return LoginURLResponse(login_url=url)


@router.post("/exchange-token", response_model=ExchangeTokenResponse)
async def exchange_token(
        body: ExchangeTokenRequest,
        response: Response,
        exchanger: SessionExchanger = Depends(get_session_exchanger),
):
    for key, value in cors_headers.items():
        response.headers[key] = value

    if not settings.KITE_API_KEY or not settings.KITE_API_SECRET:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Kite API credentials are not configured"
        )

    try:
        session = await exchanger.exchange(
            settings.KITE_API_KEY,
            settings.KITE_API_SECRET,
            body.request_token,
            timeout=settings.EXCHANGE_DEADLINE,
        )
    except InvalidInputError as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))
    except DeadlineExceededError as e:
        logger.error(f"Session exchange timed out: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_504_GATEWAY_TIMEOUT,
            detail="Timed out exchanging request token"
        )
    except ExhaustedRetriesError as e:
        logger.error(f"Session exchange failed: {str(e)}")
        raise HTTPException(
            status_code=status.HTTP_502_BAD_GATEWAY,
            detail=f"Error exchanging request token: {str(e.last_error)}"
        )

    return ExchangeTokenResponse(
        status=session.status,
        access_token=session.access_token,
        user_id=session.user_id,
    )
