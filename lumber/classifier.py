"""Nearest-label classification of embedding vectors."""

from __future__ import annotations

import math
from collections.abc import Sequence
from dataclasses import dataclass

from lumber.model import EmbeddedLabel

UNCLASSIFIED = "UNCLASSIFIED"


@dataclass(frozen=True)
class Result:
    """The best-matching label and its cosine similarity."""

    label: EmbeddedLabel
    confidence: float


@dataclass
class Classifier:
    """Scores an embedding against pre-embedded taxonomy labels."""

    threshold: float

    def classify(self, vector: Sequence[float], labels: Sequence[EmbeddedLabel]) -> Result:
        """Return the top match, or an UNCLASSIFIED label below the threshold."""
        if not labels:
            return Result(EmbeddedLabel(path=UNCLASSIFIED), 0.0)

        best_label = labels[0]
        best_score = -1.0
        for label in labels:
            score = cosine_similarity(vector, label.vector)
            if score > best_score:
                best_label, best_score = label, score

        if best_score < self.threshold:
            return Result(EmbeddedLabel(path=UNCLASSIFIED), best_score)
        return Result(best_label, best_score)


def cosine_similarity(a: Sequence[float], b: Sequence[float]) -> float:
    """Cosine similarity of two vectors; 0 for empty, mismatched or zero vectors."""
    if len(a) != len(b) or not a:
        return 0.0
    dot = sum(x * y for x, y in zip(a, b))
    norm_a = sum(x * x for x in a)
    norm_b = sum(y * y for y in b)
    if norm_a == 0 or norm_b == 0:
        return 0.0
    return dot / (math.sqrt(norm_a) * math.sqrt(norm_b))