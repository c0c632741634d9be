"""
Judge0 execution client
Submits one (source, stdin, expected output) unit and polls the token until
the engine reports a terminal status.
"""

import asyncio
from typing import Optional, Type

import httpx
from pydantic import ValidationError as PayloadError

from codenest import config
from codenest.errors import DispatchError, ExecutionError, PollTimeoutError, ResultFetchError
from codenest.judge.models import ExecutionResult
from codenest.logger import get_logger

logger = get_logger(__name__)

# Judge0 status ids: 1 = In Queue, 2 = Processing, anything above is terminal
LAST_PENDING_STATUS_ID = 2

# Language ID mapping for Judge0
LANGUAGE_IDS = {
    "python": 71,
    "java": 62,
    "javascript": 63,
    "cpp": 54,
    "c": 50,
}

LANGUAGE_ALIASES = {
    "py": "python",
    "python3": "python",
    "js": "javascript",
    "node": "javascript",
    "c++": "cpp",
}


def resolve_language_id(language: str) -> Optional[int]:
    """Map a language name (python, C++, JavaScript...) to its Judge0 id"""
    if not isinstance(language, str):
        return None
    key = language.strip().lower()
    return LANGUAGE_IDS.get(LANGUAGE_ALIASES.get(key, key))


def _json_object(response: httpx.Response, error_cls: Type[ExecutionError], action: str) -> dict:
    """Decode a 2xx reply body, which must be a JSON object"""
    try:
        body = response.json()
    except ValueError as e:
        raise error_cls(f"{action}: malformed response body") from e
    if not isinstance(body, dict):
        raise error_cls(f"{action}: expected a JSON object, got {type(body).__name__}")
    return body


class Judge0Client:
    def __init__(
        self,
        http_client: httpx.AsyncClient,
        base_url: str = config.JUDGE0_API_URL,
        api_key: str = config.JUDGE0_API_KEY,
        api_host: str = config.JUDGE0_API_HOST,
        poll_interval: float = config.JUDGE_POLL_INTERVAL_SECONDS,
        request_timeout: float = config.JUDGE_REQUEST_TIMEOUT_SECONDS,
    ):
        self._http = http_client
        self._base_url = base_url.rstrip("/")
        self._headers = {
            "Content-Type": "application/json",
            "X-RapidAPI-Key": api_key,
            "X-RapidAPI-Host": api_host,
        }
        self._poll_interval = poll_interval
        self._timeout = request_timeout

    async def submit(self, source_code: str, language_id: int, stdin: str, expected_output: str) -> str:
        """Queue one execution and return the engine's opaque token"""
        payload = {
            "source_code": source_code,
            "language_id": language_id,
            "stdin": stdin,
            "expected_output": expected_output.strip(),
        }
        try:
            response = await self._http.post(
                f"{self._base_url}/submissions",
                params={"base64_encoded": "false", "wait": "false"},
                json=payload,
                headers=self._headers,
                timeout=self._timeout,
            )
        except httpx.HTTPError as e:
            raise DispatchError(f"Judge0 submission failed: {e}") from e

        if not response.is_success:
            raise DispatchError(f"Judge0 submission failed: HTTP {response.status_code}")

        token = _json_object(response, DispatchError, "Judge0 submission failed").get("token")
        if not token:
            raise DispatchError("Judge0 submission failed: no token returned")
        return token

    async def await_result(self, token: str, max_attempts: int = config.JUDGE_MAX_POLL_ATTEMPTS) -> ExecutionResult:
        """
        Poll a token until its status is terminal.

        Suspends for the poll interval between attempts; giving up after
        max_attempts raises PollTimeoutError and is not retried here.
        """
        for attempt in range(1, max_attempts + 1):
            try:
                response = await self._http.get(
                    f"{self._base_url}/submissions/{token}",
                    params={"base64_encoded": "false"},
                    headers=self._headers,
                    timeout=self._timeout,
                )
            except httpx.HTTPError as e:
                raise ResultFetchError(f"Judge0 result fetch failed: {e}") from e

            if not response.is_success:
                raise ResultFetchError(f"Judge0 result fetch failed: HTTP {response.status_code}")

            body = _json_object(response, ResultFetchError, "Judge0 result fetch failed")
            try:
                result = ExecutionResult.from_judge0(body)
            except PayloadError as e:
                raise ResultFetchError(f"Judge0 result fetch failed: unreadable result ({e.error_count()} errors)") from e
            if result.status_id > LAST_PENDING_STATUS_ID:
                return result

            logger.debug("Token %s still pending after attempt %d/%d", token, attempt, max_attempts)
            if attempt < max_attempts:
                await asyncio.sleep(self._poll_interval)

        raise PollTimeoutError(f"Judge0 execution timeout: no result after {max_attempts} attempts")

    async def run(
        self,
        source_code: str,
        language_id: int,
        stdin: str,
        expected_output: str,
        max_attempts: int = config.JUDGE_MAX_POLL_ATTEMPTS,
    ) -> ExecutionResult:
        token = await self.submit(source_code, language_id, stdin, expected_output)
        return await self.await_result(token, max_attempts)
