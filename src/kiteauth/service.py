import asyncio
import hashlib
import logging
from dataclasses import dataclass, field
from typing import Callable

import httpx
from pydantic import ValidationError

from src.config import settings

from .exceptions import (
    ConfigurationError,
    DeadlineExceededError,
    ExchangeAttemptError,
    ExhaustedRetriesError,
    InvalidInputError,
    MalformedResponseError,
    RemoteRejectedError,
    TransportError,
)
from .schemas import ExchangeRequest, SessionData, SessionResponse, SessionResult

logger = logging.getLogger(__name__)
logger.setLevel(settings.LOG_LEVEL)

DEFAULT_BASE_URL = "https://auth.kite.trade"
DEFAULT_RETRIES = 2
DEFAULT_BACKOFF_BASE = 0.1
DEFAULT_BACKOFF_MAX = 10.0
DEFAULT_TIMEOUT = 20.0

SESSION_TOKEN_PATH = "/session/token"
UNKNOWN_ERROR = "unknown error occurred"

SESSION_TOKEN_HEADERS = {
    "Content-Type": "application/x-www-form-urlencoded",
    "X-Kite-Version": "3",
}


def exponential_backoff(
        base: float = DEFAULT_BACKOFF_BASE,
        cap: float | None = DEFAULT_BACKOFF_MAX,
) -> Callable[[int], float]:
    """Return a backoff of base * 2**attempt seconds, never above cap."""
    def backoff(attempt: int) -> float:
        # exponent bounded so the float product cannot overflow
        delay = base * 2 ** min(attempt, 64)
        return delay if cap is None else min(delay, cap)

    return backoff


def compute_checksum(api_key: str, api_secret: str, request_token: str) -> str:
    return hashlib.sha256(f"{api_key}{api_secret}{request_token}".encode("utf-8")).hexdigest()


def classify_response(status_code: int, body: bytes) -> SessionResult:
    """
    Interpret one /session/token response.

    Returns the session only when Kite reports success and hands out an
    access token. Any other outcome raises an ExchangeAttemptError.
    """
    try:
        parsed = SessionResponse.model_validate_json(body)
    except ValidationError as e:
        if not httpx.codes.is_success(status_code):
            raise TransportError(f"Unexpected HTTP status {status_code} from Kite") from e
        raise MalformedResponseError(f"Invalid session response: {e}") from e

    data = parsed.data or SessionData()
    if (parsed.status or "").lower() == "success" and data.access_token:
        return SessionResult(
            status=parsed.status,
            access_token=data.access_token,
            user_id=data.user_id,
            error_message=parsed.error,
        )

    raise RemoteRejectedError(parsed.error or parsed.message or UNKNOWN_ERROR, error_type=parsed.error_type)


@dataclass(frozen=True)
class ExchangeConfig:
    client: httpx.AsyncClient | None = None
    base_url: str = DEFAULT_BASE_URL
    retries: int = DEFAULT_RETRIES
    backoff: Callable[[int], float] = field(default_factory=exponential_backoff)
    timeout: float = DEFAULT_TIMEOUT

    def __post_init__(self) -> None:
        if not self.base_url:
            raise ConfigurationError("base_url cannot be empty")
        if self.retries < 0:
            raise ConfigurationError(f"retries cannot be negative, got {self.retries}")
        if self.timeout <= 0:
            raise ConfigurationError(f"timeout must be positive, got {self.timeout}")

    @property
    def session_token_url(self) -> str:
        return f"{self.base_url.rstrip('/')}{SESSION_TOKEN_PATH}"


class SessionExchanger:
    """
    Exchanges a Kite request token for a session access token.

    The exchanger keeps no per-call state, so a single instance can serve
    concurrent exchanges. When no client is given, each call opens its own
    httpx.AsyncClient. The per-request timeout applies to every POST,
    including those sent through a supplied client.
    """

    def __init__(
            self,
            *,
            client: httpx.AsyncClient | None = None,
            base_url: str = DEFAULT_BASE_URL,
            retries: int = DEFAULT_RETRIES,
            backoff: Callable[[int], float] | None = None,
            max_backoff: float | None = DEFAULT_BACKOFF_MAX,
            timeout: float = DEFAULT_TIMEOUT,
    ):
        self.config = ExchangeConfig(
            client=client,
            base_url=base_url,
            retries=retries,
            backoff=backoff or exponential_backoff(cap=max_backoff),
            timeout=timeout,
        )

    async def exchange(
            self,
            api_key: str,
            api_secret: str,
            request_token: str,
            *,
            timeout: float | None = None,
    ) -> SessionResult:
        """
        Exchange request_token for an access token.

        timeout bounds the whole call, retries and backoff waits included.
        Cancelling the calling task propagates asyncio.CancelledError.

        Raises:
            InvalidInputError: a credential is empty; nothing is sent
            DeadlineExceededError: timeout expired before a session was obtained
            ExhaustedRetriesError: every attempt failed
        """
        request = self._build_request(api_key, api_secret, request_token)

        loop = asyncio.get_running_loop()
        deadline = loop.time() + timeout if timeout is not None else None
        scope = asyncio.timeout_at(deadline)
        try:
            async with scope:
                if self.config.client is not None:
                    return await self._exchange(self.config.client, request, deadline)
                async with httpx.AsyncClient(timeout=self.config.timeout) as client:
                    return await self._exchange(client, request, deadline)
        except TimeoutError as e:
            if scope.expired():
                raise DeadlineExceededError(f"Session exchange did not complete within {timeout}s") from e
            raise

    @staticmethod
    def _build_request(api_key: str, api_secret: str, request_token: str) -> ExchangeRequest:
        missing = [
            name for name, value in (
                ("api_key", api_key),
                ("api_secret", api_secret),
                ("request_token", request_token),
            ) if not value
        ]
        if missing:
            raise InvalidInputError(f"Missing required fields: {', '.join(missing)}")

        return ExchangeRequest(api_key=api_key, api_secret=api_secret, request_token=request_token)

    async def _exchange(
            self,
            client: httpx.AsyncClient,
            request: ExchangeRequest,
            deadline: float | None,
    ) -> SessionResult:
        loop = asyncio.get_running_loop()
        url = self.config.session_token_url
        form = {
            "api_key": request.api_key,
            "request_token": request.request_token,
            "checksum": compute_checksum(request.api_key, request.api_secret, request.request_token),
        }

        attempts = self.config.retries + 1
        last_error: ExchangeAttemptError | None = None
        for attempt in range(attempts):
            if deadline is not None and loop.time() >= deadline:
                raise DeadlineExceededError(f"Deadline expired before attempt {attempt + 1}/{attempts}")

            logger.info(f"Exchanging request token at {url} (attempt {attempt + 1}/{attempts})")
            try:
                session = await self._attempt(client, url, form)
            except ExchangeAttemptError as e:
                last_error = e
            else:
                logger.info(f"Obtained session for user_id: {session.user_id}")
                return session

            if attempt + 1 < attempts:
                delay = max(0.0, self.config.backoff(attempt))
                logger.warning(f"Session exchange attempt {attempt + 1} failed: {last_error}. "
                               f"Retrying in {delay:.2f}s")
                await asyncio.sleep(delay)

        raise ExhaustedRetriesError(last_error, attempts) from last_error

    async def _attempt(self, client: httpx.AsyncClient, url: str, form: dict[str, str]) -> SessionResult:
        try:
            response = await client.post(url, data=form, headers=SESSION_TOKEN_HEADERS, timeout=self.config.timeout)
        except httpx.HTTPError as e:
            raise TransportError(f"Error communicating with Kite: {str(e)}") from e

        return classify_response(response.status_code, response.content)
