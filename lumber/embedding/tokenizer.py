"""BERT-style basic and WordPiece tokenisation."""

from __future__ import annotations

import unicodedata
from collections.abc import Iterable
from dataclasses import dataclass
from itertools import groupby
from os import PathLike

from lumber.embedding.vocab import Vocab

MAX_SEQ_LEN = 128
MAX_WORD_CHARS = 200
UNKNOWN_TOKEN = "[UNK]"

_CJK_RANGES = (
    (0x4E00, 0x9FFF),
    (0x3400, 0x4DBF),
    (0x20000, 0x2A6DF),
    (0x2A700, 0x2B73F),
    (0x2B740, 0x2B81F),
    (0x2B820, 0x2CEAF),
    (0xF900, 0xFAFF),
    (0x2F800, 0x2FA1F),
)


@dataclass(frozen=True)
class TokenizedBatch:
    """Flat ``batch_size * seq_len`` inputs ready for model inference."""

    input_ids: list[int]
    attention_mask: list[int]
    token_type_ids: list[int]
    batch_size: int
    seq_len: int


def _is_whitespace(c: str) -> bool:
    return c in " \t\n\r" or unicodedata.category(c) == "Zs"


def _is_control(c: str) -> bool:
    return c not in "\t\n\r" and unicodedata.category(c) == "Cc"


def _is_punctuation(c: str) -> bool:
    cp = ord(c)
    if 33 <= cp <= 47 or 58 <= cp <= 64 or 91 <= cp <= 96 or 123 <= cp <= 126:
        return True
    return unicodedata.category(c).startswith("P")


def _is_chinese_char(c: str) -> bool:
    cp = ord(c)
    return any(lo <= cp <= hi for lo, hi in _CJK_RANGES)


def _clean_text(text: str) -> str:
    return "".join(
        " " if _is_whitespace(c) else c
        for c in text
        if c != "\x00" and c != "\ufffd" and not _is_control(c)
    )


def _space_chinese_chars(text: str) -> str:
    return "".join(f" {c} " if _is_chinese_char(c) else c for c in text)


def _lower_char(c: str) -> str:
    lowered = c.lower()
    return lowered if len(lowered) == 1 else lowered[0]


def _lower(text: str) -> str:
    return "".join(_lower_char(c) for c in text)


def _strip_accents(text: str) -> str:
    return "".join(
        c for c in unicodedata.normalize("NFD", text) if unicodedata.category(c) != "Mn"
    )


def _split_on_punctuation(word: str) -> list[str]:
    pieces: list[str] = []
    for is_punct, run in groupby(word, key=_is_punctuation):
        if is_punct:
            pieces.extend(run)
        else:
            pieces.append("".join(run))
    return pieces


@dataclass(frozen=True)
class Tokenizer:
    """Lower-casing WordPiece tokenizer over a fixed vocabulary."""

    vocab: Vocab

    @classmethod
    def from_file(cls, vocab_path: str | PathLike[str]) -> Tokenizer:
        """Create a tokenizer from a vocab.txt file."""
        return cls(Vocab.load(vocab_path))

    def tokenize(self, text: str) -> tuple[list[int], list[int], list[int]]:
        """Encode one text as [CLS] tokens [SEP], padded to ``MAX_SEQ_LEN``.

        Returns input IDs, attention mask and token type IDs.
        """
        pieces = self.wordpiece(self.basic_tokenize(text))[: MAX_SEQ_LEN - 2]
        real = [
            self.vocab.cls_id,
            *(self.vocab.lookup(piece) for piece in pieces),
            self.vocab.sep_id,
        ]
        padding = MAX_SEQ_LEN - len(real)
        input_ids = real + [0] * padding
        attention_mask = [1] * len(real) + [0] * padding
        token_type_ids = [0] * MAX_SEQ_LEN
        return input_ids, attention_mask, token_type_ids

    def tokenize_batch(self, texts: Iterable[str]) -> TokenizedBatch:
        """Encode several texts, padded to the longest sequence among them."""
        encoded = [self.tokenize(text) for text in texts]
        if not encoded:
            return TokenizedBatch([], [], [], 0, 0)
        seq_len = max(sum(mask) for _, mask, _ in encoded)
        input_ids = [i for ids, _, _ in encoded for i in ids[:seq_len]]
        attention_mask = [m for _, mask, _ in encoded for m in mask[:seq_len]]
        return TokenizedBatch(
            input_ids=input_ids,
            attention_mask=attention_mask,
            token_type_ids=[0] * (len(encoded) * seq_len),
            batch_size=len(encoded),
            seq_len=seq_len,
        )

    def basic_tokenize(self, text: str) -> list[str]:
        """Clean, lower-case, strip accents and split on spaces and punctuation."""
        text = _strip_accents(_lower(_space_chinese_chars(_clean_text(text))))
        return [piece for word in text.split() for piece in _split_on_punctuation(word)]

    def wordpiece(self, tokens: Iterable[str]) -> list[str]:
        """Split basic tokens into WordPiece subwords."""
        return [sub for token in tokens if token for sub in self._wordpiece_token(token)]

    def _wordpiece_token(self, token: str) -> list[str]:
        if len(token) > MAX_WORD_CHARS:
            return [UNKNOWN_TOKEN]
        pieces: list[str] = []
        start = 0
        while start < len(token):
            for end in range(len(token), start, -1):
                sub = token[start:end]
                if start > 0:
                    sub = "##" + sub
                if sub in self.vocab:
                    pieces.append(sub)
                    break
            else:
                return [UNKNOWN_TOKEN]
            start = end
        return pieces