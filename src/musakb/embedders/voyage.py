"""Voyage AI embedding provider over HTTP."""

import logging

import httpx
import numpy as np

from musakb.exceptions import (
    EmbeddingError,
    EmbeddingNotConfiguredError,
    EmbeddingRejectedError,
    EmbeddingUnavailableError,
)
from musakb.protocols.embedder import DOCUMENT

logger = logging.getLogger(__name__)


class VoyageEmbedder:
    """Embedding provider calling the Voyage AI ``/embeddings`` endpoint.

    Required:
        - api_key (the caller passes ``Settings.voyage_api_key``)

    Optional:
        - model: Embedding model (default: voyage-code-3)
        - input_type: "document" for indexing, "query" for search
        - output_dimension: vector width (default: 1024)

    Failures are raised as ``EmbeddingRejectedError`` for bad credentials
    and ``EmbeddingUnavailableError`` for network, rate limit and server
    errors, so callers can tell the user what to fix.
    """

    DEFAULT_MODEL = "voyage-code-3"
    BASE_URL = "https://api.voyageai.com/v1"

    def __init__(
        self,
        api_key: str | None,
        model: str | None = None,
        input_type: str = DOCUMENT,
        output_dimension: int = 1024,
        timeout: float = 60.0,
        client: httpx.Client | None = None,
    ):
        if not api_key or "${" in api_key:
            raise EmbeddingNotConfiguredError(
                "Voyage API key not configured: no VOYAGE_API_KEY environment variable found."
            )
        self._model_name = model or self.DEFAULT_MODEL
        self.input_type = input_type
        self.output_dimension = output_dimension
        self._client = client or httpx.Client(
            base_url=self.BASE_URL,
            headers={
                "Authorization": f"Bearer {api_key}",
                "Content-Type": "application/json",
            },
            timeout=timeout,
        )

    @property
    def dimension(self) -> int:
        return self.output_dimension

    @property
    def model_name(self) -> str:
        return self._model_name

    def embed(self, texts: list[str]) -> np.ndarray:
        """Embed ``texts`` in one request; rows follow the input order."""
        if not texts:
            return np.array([])

        payload = {
            "input": texts,
            "model": self._model_name,
            "input_type": self.input_type,
            "output_dimension": self.output_dimension,
        }

        try:
            response = self._client.post("/embeddings", json=payload)
            response.raise_for_status()
        except httpx.HTTPStatusError as exc:
            status = exc.response.status_code
            detail = exc.response.text[:200]
            if status in (401, 403):
                raise EmbeddingRejectedError(
                    f"Voyage AI rejected the API key (HTTP {status}): {detail}"
                ) from exc
            if status == 429 or status >= 500:
                raise EmbeddingUnavailableError(
                    f"Voyage AI is unavailable (HTTP {status}): {detail}"
                ) from exc
            raise EmbeddingError(f"Voyage AI request failed (HTTP {status}): {detail}") from exc
        except httpx.TransportError as exc:
            raise EmbeddingUnavailableError(f"Could not reach Voyage AI: {exc}") from exc

        try:
            data = response.json()["data"]
            rows = sorted(data, key=lambda item: item["index"])
            embeddings = np.array([row["embedding"] for row in rows], dtype=np.float32)
        except (ValueError, KeyError, TypeError) as exc:
            raise EmbeddingError(f"Voyage AI returned a malformed response: {exc}") from exc

        if embeddings.shape != (len(texts), self.output_dimension):
            raise EmbeddingError(
                f"Voyage AI returned embeddings of shape {embeddings.shape} "
                f"for {len(texts)} texts of dimension {self.output_dimension}"
            )
        logger.debug(f"Embedded {len(rows)} texts with {self._model_name}")
        return embeddings

    def close(self) -> None:
        self._client.close()
