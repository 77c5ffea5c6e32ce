"""
Relance automatique des requetes TMDB limitees en debit (HTTP 429).

Le delai respecte l'en-tete Retry-After quand il est fourni, sinon un
backoff exponentiel avec jitter est applique.

Usage:
    response = await request_with_retry(client, "GET", "/movie/603")
"""

from typing import Optional

import httpx
from loguru import logger
from tenacity import (
    RetryCallState,
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_random_exponential,
)


class RateLimitError(Exception):
    """
    Exception levee quand l'API retourne 429 Too Many Requests.

    Attributes:
        retry_after: Secondes a attendre (en-tete Retry-After), ou None
    """

    def __init__(self, retry_after: Optional[int] = None) -> None:
        self.retry_after = retry_after
        super().__init__(f"Rate limited. Retry after: {retry_after}s")


def _wait_for_rate_limit(max_wait: int):
    """Strategie d'attente : Retry-After si present, sinon backoff exponentiel."""
    backoff = wait_random_exponential(multiplier=1, min=1, max=max_wait)

    def _wait(retry_state: RetryCallState) -> float:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        if isinstance(error, RateLimitError) and error.retry_after is not None:
            return float(min(error.retry_after, max_wait))
        return backoff(retry_state)

    return _wait


def _log_retry(retry_state: RetryCallState) -> None:
    logger.warning(
        f"TMDB rate limit, tentative {retry_state.attempt_number} "
        f"(nouvel essai dans {retry_state.next_action.sleep:.1f}s)"
    )


def with_retry(max_attempts: int = 5, max_wait: int = 60):
    """
    Decorateur relancant une coroutine sur RateLimitError.

    Args:
        max_attempts: Nombre maximum de tentatives
        max_wait: Delai maximum entre deux tentatives (secondes)
    """
    return retry(
        retry=retry_if_exception_type(RateLimitError),
        wait=_wait_for_rate_limit(max_wait),
        stop=stop_after_attempt(max_attempts),
        before_sleep=_log_retry,
        reraise=True,
    )


async def request_with_retry(
    client: httpx.AsyncClient,
    method: str,
    url: str,
    max_attempts: int = 5,
    max_wait: int = 60,
    **kwargs,
) -> httpx.Response:
    """
    Execute une requete HTTP avec relance automatique sur 429.

    Les autres erreurs HTTP sont propagees immediatement.

    Raises:
        RateLimitError: Si 429 persiste apres toutes les tentatives
        httpx.HTTPStatusError: Pour les autres codes d'erreur
    """

    @with_retry(max_attempts=max_attempts, max_wait=max_wait)
    async def _do_request() -> httpx.Response:
        response = await client.request(method, url, **kwargs)
        if response.status_code == 429:
            header = response.headers.get("Retry-After")
            raise RateLimitError(int(header) if header and header.isdigit() else None)
        response.raise_for_status()
        return response

    return await _do_request()
