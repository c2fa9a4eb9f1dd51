"""Text embedding: tokenise, run the transformer, mean-pool and project."""

from __future__ import annotations

from abc import ABC, abstractmethod
from collections.abc import Iterable, Sequence
from types import TracebackType
from typing import Protocol

from lumber.embedding.pooling import mean_pool
from lumber.embedding.projection import Projection
from lumber.embedding.tokenizer import Tokenizer


class EmbeddingError(RuntimeError):
    """Raised when model inference fails."""


class Embedder(ABC):
    """Produces vector embeddings from text. Usable as a context manager."""

    @abstractmethod
    def embed(self, text: str) -> list[float]:
        """Embed a single text."""

    @abstractmethod
    def embed_batch(self, texts: Iterable[str]) -> list[list[float]]:
        """Embed several texts, one vector per text in input order."""

    @abstractmethod
    def close(self) -> None:
        """Release resources held by the embedder."""

    def __enter__(self) -> Embedder:
        return self

    def __exit__(
        self,
        exc_type: type[BaseException] | None,
        exc: BaseException | None,
        tb: TracebackType | None,
    ) -> None:
        self.close()


class _InferenceSession(Protocol):
    """A transformer whose output is per-token hidden states."""

    @property
    def embed_dim(self) -> int: ...

    def infer(
        self,
        input_ids: Sequence[int],
        attention_mask: Sequence[int],
        token_type_ids: Sequence[int],
        batch_size: int,
        seq_len: int,
    ) -> Sequence[float]: ...

    def close(self) -> None: ...


class TransformerEmbedder(Embedder):
    """Embeds text with a BERT-style model, mean pooling and a dense projection.

    The session receives flat ``batch_size * seq_len`` inputs and returns flat
    ``batch_size * seq_len * embed_dim`` hidden states.
    """

    def __init__(
        self, session: _InferenceSession, tokenizer: Tokenizer, projection: Projection
    ) -> None:
        if session.embed_dim != projection.in_dim:
            session.close()
            raise ValueError(
                f"model output dim {session.embed_dim} != "
                f"projection input dim {projection.in_dim}"
            )
        self._session = session
        self._tokenizer = tokenizer
        self._projection = projection
        self._closed = False

    def embed_dim(self) -> int:
        """Return the dimensionality of produced vectors."""
        return self._projection.out_dim

    def embed(self, text: str) -> list[float]:
        """Embed a single text."""
        return self.embed_batch([text])[0]

    def embed_batch(self, texts: Iterable[str]) -> list[list[float]]:
        """Embed several texts with one inference call."""
        texts = list(texts)
        if not texts:
            return []
        batch = self._tokenizer.tokenize_batch(texts)
        try:
            hidden = self._session.infer(
                batch.input_ids,
                batch.attention_mask,
                batch.token_type_ids,
                batch.batch_size,
                batch.seq_len,
            )
        except Exception as exc:
            raise EmbeddingError(f"inference failed: {exc}") from exc

        dim = self._session.embed_dim
        pooled = mean_pool(hidden, batch.attention_mask, batch.batch_size, batch.seq_len, dim)
        return [
            self._projection.apply(pooled[i * dim : (i + 1) * dim])
            for i in range(batch.batch_size)
        ]

    def close(self) -> None:
        """Release the inference session; later calls do nothing."""
        if not self._closed:
            self._closed = True
            self._session.close()