"""Ollama client wrapper for embeddings and generation."""
import httpx
from typing import List, Dict, Optional
from pydantic import BaseModel, ValidationError
import structlog

from bookrag import config
from bookrag.errors import EmbeddingBackendError, GenerationError

logger = structlog.get_logger()


class EmbeddingResponse(BaseModel):
    """Payload of /api/embeddings.

    Older Ollama builds return ``embedding``; newer ones return a batch
    under ``embeddings``.
    """

    embedding: Optional[List[float]] = None
    embeddings: Optional[List[List[float]]] = None

    def vector(self) -> List[float]:
        if self.embedding:
            return self.embedding
        if self.embeddings and self.embeddings[0]:
            return self.embeddings[0]
        return []


class GenerateResponse(BaseModel):
    """Payload of a non-streaming /api/generate call."""

    model: Optional[str] = None
    response: str


class OllamaClient:
    """Async client for interacting with Ollama API."""

    def __init__(
        self,
        base_url: str = None,
        timeout: float = None,
        transport: Optional[httpx.AsyncBaseTransport] = None,
    ):
        """Initialize Ollama client.

        Args:
            base_url: Ollama API base URL (defaults to config.OLLAMA_BASE_URL)
            timeout: Request timeout in seconds (defaults to config.OLLAMA_TIMEOUT)
            transport: Optional httpx transport, used to stub the backend in tests
        """
        self.base_url = base_url or config.OLLAMA_BASE_URL
        self.timeout = timeout or config.OLLAMA_TIMEOUT
        self.transport = transport

    def _client(self, timeout: float = None) -> httpx.AsyncClient:
        return httpx.AsyncClient(
            base_url=self.base_url,
            timeout=timeout or self.timeout,
            transport=self.transport,
        )

    async def embeddings(self, prompt: str, model: str = None) -> Dict:
        """Request embeddings for a text prompt.

        Args:
            prompt: Text to embed
            model: Model to use (defaults to config.EMBEDDING_MODEL)

        Returns:
            Raw response dict

        Raises:
            httpx.HTTPError: On API errors
        """
        model = model or config.EMBEDDING_MODEL

        payload = {
            "model": model,
            "prompt": prompt,
        }

        try:
            async with self._client() as client:
                logger.debug(
                    "ollama_embedding_request",
                    model=model,
                    prompt_length=len(prompt),
                )

                response = await client.post("/api/embeddings", json=payload)
                response.raise_for_status()

                return response.json()

        except httpx.HTTPError as e:
            logger.error("ollama_embedding_error", error=str(e), base_url=self.base_url)
            raise

    async def embed(self, text: str, model: str = None) -> List[float]:
        """Embed a text and return its vector.

        Args:
            text: Text to embed
            model: Model to use (defaults to config.EMBEDDING_MODEL)

        Returns:
            Embedding vector

        Raises:
            EmbeddingBackendError: If the request fails or no vector comes back
        """
        try:
            data = await self.embeddings(text, model=model)
        except (httpx.HTTPError, ValueError) as e:
            raise EmbeddingBackendError(f"Embedding request failed: {e}") from e

        try:
            vector = EmbeddingResponse.model_validate(data).vector()
        except ValidationError as e:
            raise EmbeddingBackendError(
                f"Invalid Ollama embedding response: {str(data)[:200]}"
            ) from e

        if not vector:
            raise EmbeddingBackendError("Empty embedding returned from Ollama")

        logger.debug("ollama_embedding_response", dimension=len(vector))
        return vector

    async def generate(
        self,
        prompt: str,
        system: Optional[str] = None,
        model: str = None,
    ) -> str:
        """Run a single non-streaming completion.

        Args:
            prompt: Prompt text
            system: System prompt (defaults to config.SYSTEM_PROMPT)
            model: Model to use (defaults to config.CHAT_MODEL)

        Returns:
            Generated text

        Raises:
            GenerationError: On API errors or a malformed response
        """
        model = model or config.CHAT_MODEL

        payload = {
            "model": model,
            "prompt": prompt,
            "system": system if system is not None else config.SYSTEM_PROMPT,
            "stream": False,
        }

        try:
            async with self._client() as client:
                logger.info(
                    "ollama_generate_request",
                    model=model,
                    prompt_length=len(prompt),
                )

                response = await client.post("/api/generate", json=payload)
                response.raise_for_status()

                data = GenerateResponse.model_validate(response.json())

        except httpx.HTTPError as e:
            logger.error(
                "ollama_http_error",
                error=str(e),
                status_code=getattr(getattr(e, "response", None), "status_code", None),
            )
            raise GenerationError(f"Generation request failed: {e}") from e
        except ValueError as e:
            raise GenerationError(f"Invalid Ollama generate response: {e}") from e

        logger.info(
            "ollama_generate_response",
            model=model,
            response_length=len(data.response),
        )

        return data.response

    async def list_models(self) -> List[str]:
        """List all available Ollama models.

        Returns:
            List of model names

        Raises:
            httpx.HTTPError: On API errors
        """
        try:
            async with self._client(timeout=5.0) as client:
                response = await client.get("/api/tags")
                response.raise_for_status()
                data = response.json()
                return [m["name"] for m in data.get("models", [])]
        except httpx.HTTPError as e:
            logger.error("ollama_list_models_error", error=str(e))
            raise


# Global client instance
ollama_client = OllamaClient()
