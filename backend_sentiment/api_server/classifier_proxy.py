"""
Pass-through proxy to the external classification service.

POST /api/predict and /api/batch_predict forward the request body verbatim and relay
the upstream status and body unchanged. Upstream responses are not parsed. Requests
are bounded by CLASSIFIER_TIMEOUT_SEC; a timeout or transport error becomes a 500.
"""

from __future__ import annotations

import httpx
from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse, Response

from backend_sentiment.api_server.dependencies import get_classifier
from backend_sentiment.core.exceptions import ClassifierUnavailableError
from backend_sentiment.sentiment_logging import get_logger

logger = get_logger(__name__)

CONNECTIVITY_ERROR = "Failed to connect to classification service"

router = APIRouter(tags=["Classifier proxy"])


class ClassifierProxy:
    """Async HTTP client bound to the classifier base URL."""

    def __init__(
        self,
        base_url: str,
        *,
        timeout_sec: float = 30.0,
        transport: httpx.AsyncBaseTransport | None = None,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self._client = httpx.AsyncClient(
            base_url=self.base_url,
            timeout=httpx.Timeout(timeout_sec),
            transport=transport,
        )

    async def forward(self, path: str, body: bytes, content_type: str | None = None) -> httpx.Response:
        """POST body to base_url + path. Raises ClassifierUnavailableError when no response arrives."""
        headers = {"Content-Type": content_type or "application/json"}
        try:
            return await self._client.post(path, content=body, headers=headers)
        except httpx.TimeoutException as e:
            raise ClassifierUnavailableError("Classification service timed out") from e
        except httpx.HTTPError as e:
            raise ClassifierUnavailableError(CONNECTIVITY_ERROR) from e

    async def aclose(self) -> None:
        await self._client.aclose()


async def _relay(request: Request, classifier: ClassifierProxy, path: str) -> Response:
    body = await request.body()
    try:
        upstream = await classifier.forward(path, body, request.headers.get("content-type"))
    except ClassifierUnavailableError as e:
        logger.warning("classifier_unreachable", path=path, error=str(e), cause=repr(e.__cause__))
        return JSONResponse(
            status_code=500,
            content={"success": False, "error": CONNECTIVITY_ERROR, "message": str(e)},
        )
    logger.info("classifier_relayed", path=path, status_code=upstream.status_code)
    return Response(
        content=upstream.content,
        status_code=upstream.status_code,
        media_type=upstream.headers.get("content-type", "application/json"),
    )


@router.post("/predict")
async def predict(request: Request, classifier: ClassifierProxy = Depends(get_classifier)) -> Response:
    return await _relay(request, classifier, "/predict")


@router.post("/batch_predict")
async def batch_predict(request: Request, classifier: ClassifierProxy = Depends(get_classifier)) -> Response:
    return await _relay(request, classifier, "/batch_predict")
