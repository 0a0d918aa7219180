import asyncio
import base64
import binascii
import logging
from typing import Optional, Dict, Any
from urllib.parse import urlparse, urlunparse

import httpx

from app.Core.config import Settings, get_settings
from app.common.errors import (
    DispatchFailed,
    ExecutionCancelled,
    ExecutionTimeout,
    ResultFetchFailed,
)
from .schemas import (
    ExecutionResult,
    Judge0ExecutionResult,
    Judge0SubmissionRequest,
    Judge0SubmissionResponse,
)

# Judge0 status ids 1 (In Queue) and 2 (Processing); every other id is terminal
PENDING_STATUS_IDS = (1, 2)


def encode_b64(text: Optional[str]) -> str:
    return base64.b64encode((text or "").encode("utf-8")).decode("ascii")


def decode_b64(value: Any) -> str:
    if value is None:
        return ""
    if not isinstance(value, str):
        return str(value)
    s = value.strip()
    if not s:
        return ""
    try:
        return base64.b64decode(s, validate=False).decode("utf-8", errors="replace")
    except (binascii.Error, ValueError):
        # Some Judge0 builds ignore base64_encoded for error messages
        return value


def normalise_base_url(raw: str) -> str:
    base = (raw or "").strip()
    if base and not base.startswith("http://") and not base.startswith("https://"):
        # assume http if scheme omitted
        base = "http://" + base
    # If no explicit port provided, default to 2358 (common Judge0 CE port)
    if base:
        parsed = urlparse(base)
        netloc = parsed.netloc
        if ':' not in netloc:
            netloc = f"{netloc}:2358"
            parsed = parsed._replace(netloc=netloc)
            base = urlunparse(parsed)
    # strip trailing slash to make joining paths predictable
    return base.rstrip("/")


class Judge0Service:
    """Client for a Judge0-compatible execution service.

    ``submit_code`` is the dispatcher (one POST, never retried) and
    ``wait_for_result`` is the poller (sequential fetches on a fixed interval,
    bounded by ``max_attempts``).
    """

    def __init__(
        self,
        settings: Optional[Settings] = None,
        *,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.settings = settings or get_settings()
        self.base_url = normalise_base_url(self.settings.judge0_api_url)
        self.headers = {"Content-Type": "application/json"}
        if self.settings.judge0_api_key and self.settings.judge0_host:
            self.headers.update({
                "X-RapidAPI-Key": self.settings.judge0_api_key,
                "X-RapidAPI-Host": self.settings.judge0_host,
            })
        self.poll_interval = max(0.0, float(self.settings.judge0_poll_interval_s))
        self.max_attempts = max(1, int(self.settings.judge0_max_poll_attempts))
        self._transport = transport
        self._logger = logging.getLogger(__name__)

    async def _request(self, method: str, path: str, **kwargs) -> httpx.Response:
        """Perform one HTTP request against the configured Judge0 base URL.

        Transport errors propagate as ``httpx.HTTPError`` and a missing or malformed
        base URL as ``httpx.InvalidURL``; callers translate both into the per-job
        error they represent.
        """
        if not self.base_url:
            raise httpx.InvalidURL("Judge0 base URL is not configured (JUDGE0_BASE_URL).")
        if not path.startswith("/"):
            path = "/" + path
        url = self.base_url + path

        def _mask_headers(h: dict) -> dict:
            return {k: ("[REDACTED]" if k.lower() == "x-rapidapi-key" else v) for k, v in (h or {}).items()}

        self._logger.debug("Judge0 request: %s %s headers=%s", method, url, _mask_headers(self.headers))
        timeout = httpx.Timeout(connect=3.0, read=self.settings.judge0_timeout_s, write=5.0, pool=5.0)
        limits = httpx.Limits(max_connections=20, max_keepalive_connections=10)
        async with httpx.AsyncClient(timeout=timeout, limits=limits, transport=self._transport) as client:
            return await client.request(method, url, headers=self.headers, **kwargs)

    @staticmethod
    def _ensure_status(payload: Dict[str, Any]) -> Dict[str, Any]:
        if not isinstance(payload, dict):
            return payload
        status_val = payload.get("status")
        if not status_val:
            payload = dict(payload)
            payload["status"] = {
                "id": payload.get("status_id"),
                "description": payload.get("status_description") or "",
            }
        elif isinstance(status_val, dict) and "description" not in status_val:
            payload = dict(payload)
            status_copy = dict(status_val)
            status_copy["description"] = payload.get("status_description") or ""
            payload["status"] = status_copy
        return payload

    @staticmethod
    def _status_id(raw: Judge0ExecutionResult) -> Optional[int]:
        status = raw.status or {}
        try:
            return int(status.get("id")) if status.get("id") is not None else None
        except (TypeError, ValueError):
            return None

    async def submit_code(self, source_code: str, language_id: int, stdin: Optional[str] = None) -> str:
        """Create one execution job and return its token."""
        judge0_request = Judge0SubmissionRequest(
            source_code=encode_b64(source_code),
            language_id=language_id,
            stdin=encode_b64(stdin),
        )
        try:
            response = await self._request(
                "POST",
                "/submissions?base64_encoded=true&wait=false",
                json=judge0_request.model_dump(),
            )
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise DispatchFailed(f"Failed to submit code to Judge0: {exc}") from exc
        if not response.is_success:
            raise DispatchFailed(f"Failed to submit code to Judge0: {response.status_code} {response.text[:200]}")
        try:
            token = Judge0SubmissionResponse(**response.json()).token
        except (TypeError, ValueError) as exc:
            raise DispatchFailed(f"Judge0 returned an unreadable submission response: {exc}") from exc
        if not token:
            raise DispatchFailed("Judge0 returned an empty token")
        self._logger.debug("Judge0 job %s created (language_id=%s)", token, language_id)
        return token

    async def get_submission_result(self, token: str) -> Judge0ExecutionResult:
        try:
            resp = await self._request("GET", f"/submissions/{token}?base64_encoded=true&fields=*")
        except (httpx.HTTPError, httpx.InvalidURL) as exc:
            raise ResultFetchFailed(f"Failed to get submission result from Judge0: {exc}") from exc
        if resp.status_code != 200:
            raise ResultFetchFailed(f"Failed to get submission result: {resp.status_code} body={resp.text[:200]}")
        try:
            payload = self._ensure_status(resp.json())
            return Judge0ExecutionResult(**payload)
        except (TypeError, ValueError) as exc:
            raise ResultFetchFailed(f"Judge0 returned an unreadable submission result: {exc}") from exc

    async def _pause(self, cancel_event: Optional[asyncio.Event]) -> None:
        if cancel_event is None:
            await asyncio.sleep(self.poll_interval)
            return
        try:
            await asyncio.wait_for(cancel_event.wait(), timeout=self.poll_interval)
        except asyncio.TimeoutError:
            return
        raise ExecutionCancelled("Execution cancelled")

    async def wait_for_result(
        self,
        token: str,
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ExecutionResult:
        """Poll ``token`` until the job leaves the queued/running states."""
        for attempt in range(1, self.max_attempts + 1):
            if cancel_event is not None and cancel_event.is_set():
                raise ExecutionCancelled("Execution cancelled")
            raw = await self.get_submission_result(token)
            status_id = self._status_id(raw)
            if status_id not in PENDING_STATUS_IDS:
                return self._decode(token, raw)
            self._logger.debug("Judge0 job %s pending (status=%s, attempt %d/%d)", token, status_id, attempt, self.max_attempts)
            if attempt < self.max_attempts:
                await self._pause(cancel_event)
        raise ExecutionTimeout(
            f"Execution timed out after {self.max_attempts} attempts ({self.max_attempts * self.poll_interval:g}s)"
        )

    async def execute(
        self,
        source_code: str,
        language_id: int,
        stdin: Optional[str] = None,
        *,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> ExecutionResult:
        token = await self.submit_code(source_code, language_id, stdin)
        return await self.wait_for_result(token, cancel_event=cancel_event)

    def _decode(self, token: str, raw: Judge0ExecutionResult) -> ExecutionResult:
        status = raw.status or {}
        status_id = self._status_id(raw)
        return ExecutionResult(
            token=raw.token or token,
            stdout=decode_b64(raw.stdout),
            stderr=decode_b64(raw.stderr),
            compile_output=decode_b64(raw.compile_output),
            time=raw.time,
            status_id=status_id if status_id is not None else -1,
            status_description=status.get("description") or "unknown",
        )


judge0_service = Judge0Service()
