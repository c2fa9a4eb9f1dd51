"""The embed, classify and compact pipeline."""

from __future__ import annotations

from collections.abc import Iterable, Sequence

from lumber.classifier import UNCLASSIFIED, Classifier
from lumber.compactor import Compactor
from lumber.embedding.embedder import Embedder
from lumber.model import CanonicalEvent, RawLog
from lumber.taxonomy import Taxonomy


def _empty_input_event(raw: RawLog) -> CanonicalEvent:
    return CanonicalEvent(
        type=UNCLASSIFIED,
        category="empty_input",
        severity="warning",
        timestamp=raw.timestamp,
        confidence=0.0,
        raw=raw.raw,
    )


class Engine:
    """Turns raw logs into classified, compacted canonical events."""

    def __init__(
        self,
        embedder: Embedder,
        taxonomy: Taxonomy,
        classifier: Classifier,
        compactor: Compactor,
    ) -> None:
        self.embedder = embedder
        self.taxonomy = taxonomy
        self.classifier = classifier
        self.compactor = compactor

    def process(self, raw: RawLog) -> CanonicalEvent:
        """Classify and compact a single raw log.

        Empty or whitespace-only input is returned as an UNCLASSIFIED
        ``empty_input`` event without consulting the embedder.
        """
        if not raw.raw.strip():
            return _empty_input_event(raw)
        return self._build_event(raw, self.embedder.embed(raw.raw))

    def process_batch(self, raws: Iterable[RawLog]) -> list[CanonicalEvent]:
        """Classify and compact several raw logs with one batched embedding call.

        Results keep the input order. Empty inputs never reach the embedder.
        """
        raws = list(raws)
        events: list[CanonicalEvent | None] = [None] * len(raws)
        pending: list[int] = []
        for index, raw in enumerate(raws):
            if raw.raw.strip():
                pending.append(index)
            else:
                events[index] = _empty_input_event(raw)

        if pending:
            vectors = self.embedder.embed_batch([raws[i].raw for i in pending])
            if len(vectors) != len(pending):
                raise ValueError(
                    f"embedder returned {len(vectors)} vectors for {len(pending)} texts"
                )
            for index, vector in zip(pending, vectors):
                events[index] = self._build_event(raws[index], vector)

        return [event for event in events if event is not None]

    def _build_event(self, raw: RawLog, vector: Sequence[float]) -> CanonicalEvent:
        result = self.classifier.classify(vector, self.taxonomy.labels())
        event_type, _, category = result.label.path.partition(".")
        compacted, summary = self.compactor.compact(raw.raw, event_type)

        severity = result.label.severity
        if event_type == UNCLASSIFIED and not severity:
            severity = "warning"

        return CanonicalEvent(
            type=event_type,
            category=category,
            severity=severity,
            timestamp=raw.timestamp,
            summary=summary,
            confidence=result.confidence,
            raw=compacted,
        )