"""Client for the external detection backend that produces comparison payloads."""
from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, Optional

import httpx
from pydantic import ValidationError
from tenacity import AsyncRetrying, retry_if_exception_type, stop_after_attempt, wait_exponential

from duplicate_review.core.config import Settings, get_settings
from duplicate_review.core.errors import DetectionBackendError, ResourceNotFoundError
from duplicate_review.core.logging import LogEvent, get_logger
from duplicate_review.models.comparison import ComparisonPayload

logger = get_logger(__name__)


@dataclass(frozen=True)
class BackendSession:
    """Caller credentials forwarded to the detection backend."""

    token: Optional[str] = None

    @classmethod
    def from_authorization(cls, header: Optional[str]) -> "BackendSession":
        if not header:
            return cls()
        scheme, _, value = header.partition(" ")
        if scheme.lower() == "bearer" and value.strip():
            return cls(token=value.strip())
        return cls()

    def headers(self) -> Dict[str, str]:
        if not self.token:
            return {}
        return {"Authorization": f"Bearer {self.token}"}


class _RetryableStatusError(Exception):
    """5xx from the backend; retried like a transport failure."""

    def __init__(self, response: httpx.Response):
        self.response = response
        super().__init__(f"detection backend returned {response.status_code}")


class DetectionBackendClient:
    """Fetches comparison payloads, retrying transport failures and 5xx responses."""

    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        max_retries: int = 3,
        retry_multiplier: float = 0.5,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        self.base_url = base_url.rstrip("/")
        self.max_retries = max(1, max_retries)
        self.retry_multiplier = retry_multiplier
        self.client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout),
            headers={"Accept": "application/json"},
            transport=transport,
        )

    @classmethod
    def from_settings(cls, settings: Optional[Settings] = None) -> "DetectionBackendClient":
        settings = settings or get_settings()
        return cls(
            base_url=settings.detection_base_url,
            timeout=settings.detection_timeout,
            max_retries=settings.detection_max_retries,
        )

    async def fetch_comparison(
        self,
        check_id: str,
        session: Optional[BackendSession] = None,
    ) -> ComparisonPayload:
        """获取某次检测的全部文档比对结果"""
        session = session or BackendSession()
        path = f"/plagiarism/{check_id}/detailed-all-documents-comparison"
        logger.info(LogEvent.BACKEND_CALL, check_id=check_id, path=path)

        try:
            response = await self._get(path, session)
        except _RetryableStatusError as exc:
            response = exc.response
        except httpx.HTTPError as exc:
            logger.error(LogEvent.BACKEND_ERROR, check_id=check_id, error=str(exc))
            raise DetectionBackendError("request failed", original_error=exc) from exc

        if response.status_code == 404:
            raise ResourceNotFoundError("Comparison", check_id)
        if response.status_code >= 400:
            logger.error(
                LogEvent.BACKEND_ERROR,
                check_id=check_id,
                status_code=response.status_code,
                detail=response.text[:200],
            )
            raise DetectionBackendError(
                f"unexpected status {response.status_code}",
                upstream_status=response.status_code,
            )

        try:
            payload = ComparisonPayload.model_validate(response.json())
        except (ValueError, ValidationError) as exc:
            logger.error(LogEvent.BACKEND_ERROR, check_id=check_id, error=str(exc))
            raise DetectionBackendError("invalid comparison payload", original_error=exc) from exc

        logger.info(
            LogEvent.BACKEND_SUCCESS,
            check_id=check_id,
            matches=len(payload.detailed_matches),
            candidates=len(payload.matching_documents),
        )
        return payload

    async def _get(self, path: str, session: BackendSession) -> httpx.Response:
        retrying = AsyncRetrying(
            stop=stop_after_attempt(self.max_retries),
            wait=wait_exponential(multiplier=self.retry_multiplier, max=10),
            retry=retry_if_exception_type((httpx.TransportError, _RetryableStatusError)),
            reraise=True,
        )
        async for attempt in retrying:
            with attempt:
                response = await self.client.get(path, headers=session.headers())
                if response.status_code >= 500:
                    raise _RetryableStatusError(response)
                return response
        raise DetectionBackendError("retries exhausted")

    async def aclose(self) -> None:
        await self.client.aclose()
