from collections.abc import Iterable
from datetime import datetime, timezone

import pytest

from lumber.classifier import Classifier
from lumber.compactor import Compactor, Verbosity
from lumber.embedding.embedder import Embedder, EmbeddingError
from lumber.engine import Engine
from lumber.model import ZERO_TIME, RawLog, TaxonomyNode
from lumber.taxonomy import Taxonomy

KEYWORDS = ("connection", "refused", "200", "ok")


class PanicEmbedder(Embedder):
    """Fails the test if the engine ever asks it for an embedding."""

    def embed(self, text: str) -> list[float]:
        raise AssertionError("embed called on empty input")

    def embed_batch(self, texts: Iterable[str]) -> list[list[float]]:
        raise AssertionError("embed_batch called on empty input")

    def close(self) -> None:
        pass


class KeywordEmbedder(Embedder):
    """One dimension per keyword: 1.0 when the lower-cased text contains it."""

    def __init__(self) -> None:
        self.batches: list[list[str]] = []

    def embed(self, text: str) -> list[float]:
        lowered = text.lower()
        return [1.0 if word in lowered else 0.0 for word in KEYWORDS]

    def embed_batch(self, texts: Iterable[str]) -> list[list[float]]:
        texts = list(texts)
        self.batches.append(texts)
        return [self.embed(text) for text in texts]

    def close(self) -> None:
        pass


class FailingEmbedder(KeywordEmbedder):
    def embed(self, text: str) -> list[float]:
        if "boom" in text:
            raise EmbeddingError("inference failed")
        return super().embed(text)


def _sample_roots() -> list[TaxonomyNode]:
    return [
        TaxonomyNode(
            name="ERROR",
            desc="Errors",
            children=[
                TaxonomyNode(name="connection_failure", desc="connection refused", severity="error"),
            ],
        ),
        TaxonomyNode(
            name="REQUEST",
            desc="Requests",
            children=[TaxonomyNode(name="success", desc="http 200 ok", severity="info")],
        ),
    ]


def make_engine(embedder: Embedder | None = None, verbosity=Verbosity.STANDARD) -> Engine:
    emb = embedder or KeywordEmbedder()
    tax = Taxonomy(_sample_roots(), emb)
    if isinstance(emb, KeywordEmbedder):
        emb.batches.clear()
    return Engine(emb, tax, Classifier(0.5), Compactor(verbosity))


def empty_engine() -> Engine:
    emb = PanicEmbedder()
    return Engine(emb, Taxonomy([], emb), Classifier(0.5), Compactor(Verbosity.STANDARD))


TS = datetime(2026, 2, 24, 12, 0, 0, tzinfo=timezone.utc)


def test_process_empty_log_returns_unclassified():
    event = empty_engine().process(RawLog(raw="", timestamp=TS))
    assert event.type == "UNCLASSIFIED"
    assert event.category == "empty_input"
    assert event.severity == "warning"
    assert event.confidence == 0
    assert event.timestamp == TS


def test_process_whitespace_log_returns_unclassified():
    event = empty_engine().process(RawLog(raw="   \n\t  ", timestamp=TS))
    assert event.type == "UNCLASSIFIED"
    assert event.category == "empty_input"
    assert event.severity == "warning"
    assert event.raw == "   \n\t  "


def test_process_batch_all_empty_skips_embedder():
    events = empty_engine().process_batch(
        [RawLog(raw="", timestamp=TS), RawLog(raw="   \n\t  ", timestamp=TS)]
    )
    assert len(events) == 2
    assert all(e.type == "UNCLASSIFIED" for e in events)
    assert all(e.category == "empty_input" for e in events)


def test_process_empty_batch():
    assert empty_engine().process_batch([]) == []


def test_process_single_log():
    ts = datetime(2026, 2, 19, 12, 0, 0, tzinfo=timezone.utc)
    raw = RawLog(
        timestamp=ts,
        source="test",
        raw="ERROR [2026-02-19 12:00:00] UserService — connection refused (host=db-primary, port=5432)",
    )
    event = make_engine().process(raw)
    assert event.type == "ERROR"
    assert event.category == "connection_failure"
    assert event.severity == "error"
    assert event.confidence == pytest.approx(1.0)
    assert event.summary == raw.raw
    assert event.raw == raw.raw
    assert event.timestamp == ts


def test_process_request_log():
    event = make_engine().process(RawLog(raw="INFO HTTP 200 OK GET /api/users", timestamp=TS))
    assert (event.type, event.category, event.severity) == ("REQUEST", "success", "info")


def test_process_unclassified_log():
    event = make_engine().process(
        RawLog(raw="xkcd 927 lorem ipsum dolor sit amet 42 foo bar baz", timestamp=TS)
    )
    assert event.type == "UNCLASSIFIED"
    assert event.category == ""
    assert event.severity == "warning"
    assert event.confidence == 0


def test_process_batch_mixed_keeps_positions_and_embeds_only_text():
    emb = KeywordEmbedder()
    engine = make_engine(emb)
    events = engine.process_batch(
        [
            RawLog(raw="", timestamp=TS),
            RawLog(raw="connection refused", timestamp=TS),
            RawLog(raw="  ", timestamp=TS),
            RawLog(raw="HTTP 200 OK", timestamp=TS),
        ]
    )
    assert emb.batches == [["connection refused", "HTTP 200 OK"]]
    assert [(e.type, e.category) for e in events] == [
        ("UNCLASSIFIED", "empty_input"),
        ("ERROR", "connection_failure"),
        ("UNCLASSIFIED", "empty_input"),
        ("REQUEST", "success"),
    ]


def test_process_timestamp_preservation():
    ts = datetime(2026, 2, 19, 12, 34, 56, 789000, tzinfo=timezone.utc)
    event = make_engine().process(RawLog(raw="INFO test log", timestamp=ts))
    assert event.timestamp == ts


def test_process_zero_timestamp():
    event = make_engine().process(RawLog(raw="INFO test log"))
    assert event.timestamp == ZERO_TIME


def test_process_metadata_not_in_output():
    raw = RawLog(
        raw="ERROR connection refused",
        timestamp=TS,
        source="vercel",
        metadata={"project_id": "prj_123", "deployment_id": "dpl_456"},
    )
    event = make_engine().process(raw)
    assert event.type == "ERROR"
    assert "project_id" not in event.to_dict()


def test_process_applies_compaction():
    long = "ERROR connection refused to database " + "extra padding data filler text here " * 100
    event = make_engine(verbosity=Verbosity.MINIMAL).process(RawLog(raw=long, timestamp=TS))
    assert event.type == "ERROR"
    assert event.raw.endswith("...")
    assert len(event.raw) == 203
    assert event.summary.endswith("...")
    assert len(event.summary) <= 123


def test_process_binary_content():
    binary = "ERROR \x00\x01\x02\ufffd some binary \x80\x81 data \x00 connection refused"
    event = make_engine().process(RawLog(raw=binary, timestamp=TS))
    assert event.type == "ERROR"


def test_process_propagates_embedding_error():
    engine = make_engine(FailingEmbedder())
    with pytest.raises(EmbeddingError):
        engine.process(RawLog(raw="boom connection refused", timestamp=TS))


def test_process_batch_propagates_embedding_error():
    engine = make_engine(FailingEmbedder())
    with pytest.raises(EmbeddingError):
        engine.process_batch([RawLog(raw="boom", timestamp=TS)])