"""WordPiece vocabulary loaded from a vocab.txt file."""

from __future__ import annotations

from collections.abc import Iterable
from dataclasses import dataclass
from os import PathLike

SPECIAL_TOKENS: tuple[str, ...] = ("[PAD]", "[UNK]", "[CLS]", "[SEP]")


class VocabError(ValueError):
    """Raised when a vocabulary is empty or lacks a special token."""


@dataclass(frozen=True, eq=False)
class Vocab:
    """Token table where a token's ID is its 0-based line number."""

    tokens: tuple[str, ...]
    token_to_id: dict[str, int]
    pad_id: int
    unk_id: int
    cls_id: int
    sep_id: int

    @classmethod
    def from_tokens(cls, tokens: Iterable[str]) -> Vocab:
        """Build a vocabulary from tokens in ID order; a repeated token keeps its last ID."""
        ordered = tuple(tokens)
        if not ordered:
            raise VocabError("vocabulary is empty")
        token_to_id = {token: index for index, token in enumerate(ordered)}
        for special in SPECIAL_TOKENS:
            if special not in token_to_id:
                raise VocabError(f"missing special token {special}")
        return cls(ordered, token_to_id, *(token_to_id[s] for s in SPECIAL_TOKENS))

    @classmethod
    def load(cls, path: str | PathLike[str]) -> Vocab:
        """Read a vocab.txt file with one token per line."""
        with open(path, encoding="utf-8", newline="") as handle:
            text = handle.read()
        lines = text.split("\n")
        if lines and lines[-1] == "":
            lines.pop()
        tokens = [line[:-1] if line.endswith("\r") else line for line in lines]
        if not tokens:
            raise VocabError(f"vocabulary file is empty: {path}")
        return cls.from_tokens(tokens)

    def lookup(self, token: str) -> int:
        """Return the token's ID, or the [UNK] ID when it is unknown."""
        return self.token_to_id.get(token, self.unk_id)

    def contains(self, token: str) -> bool:
        """Report whether the token is in the vocabulary."""
        return token in self.token_to_id

    def __contains__(self, token: object) -> bool:
        return token in self.token_to_id

    def __len__(self) -> int:
        return len(self.tokens)