"""OpenAI Embeddings API client."""

from dataclasses import dataclass

from openai import AsyncOpenAI

from image_catalog.services.contributions import EmbeddingClient


@dataclass
class OpenAIEmbeddingClient(EmbeddingClient):
    """Embedding client backed by the OpenAI Embeddings API."""

    client: AsyncOpenAI

    @classmethod
    def create(cls, api_key: str) -> "OpenAIEmbeddingClient":
        """Create an OpenAI embedding client."""
        return cls(client=AsyncOpenAI(api_key=api_key))

    async def embed(self, text: str, *, model: str, dimensions: int) -> list[float]:
        """Return a float embedding for a single text input."""
        response = await self.client.embeddings.create(
            model=model,
            input=text,
            dimensions=dimensions,
            encoding_format="float",
        )
        if not response.data:
            raise RuntimeError("OpenAI returned no embeddings")
        return [float(value) for value in response.data[0].embedding]

    async def close(self) -> None:
        """Close the underlying HTTP session."""
        await self.client.close()
