"""Dense linear projection loaded from a safetensors file."""

from __future__ import annotations

import json
import struct
from collections.abc import Sequence
from dataclasses import dataclass
from functools import cached_property
from os import PathLike
from pathlib import Path

TENSOR_NAME = "linear.weight"


class ProjectionError(ValueError):
    """Raised when projection weights cannot be read."""


def _is_int_list(value: object, length: int) -> bool:
    return (
        isinstance(value, list)
        and len(value) == length
        and all(isinstance(v, int) and not isinstance(v, bool) for v in value)
    )


@dataclass(frozen=True, eq=False)
class Projection:
    """Maps vectors from ``in_dim`` to ``out_dim`` by a row-major weight matrix."""

    weights: tuple[float, ...]
    in_dim: int
    out_dim: int

    def __post_init__(self) -> None:
        if len(self.weights) != self.in_dim * self.out_dim:
            raise ValueError(
                f"{len(self.weights)} weights do not fill a "
                f"{self.out_dim}x{self.in_dim} matrix"
            )

    @cached_property
    def _rows(self) -> list[tuple[float, ...]]:
        return [
            self.weights[row * self.in_dim : (row + 1) * self.in_dim]
            for row in range(self.out_dim)
        ]

    @classmethod
    def load(cls, path: str | PathLike[str]) -> Projection:
        """Read the F32 'linear.weight' tensor from a safetensors file."""
        data = Path(path).read_bytes()
        if len(data) < 8:
            raise ProjectionError(f"file too small: {len(data)} bytes")

        (header_len,) = struct.unpack_from("<Q", data)
        header_end = 8 + header_len
        if len(data) < header_end:
            raise ProjectionError(f"header length {header_len} exceeds file size")

        try:
            header = json.loads(data[8:header_end])
        except ValueError as exc:
            raise ProjectionError(f"failed to parse header: {exc}") from exc
        if not isinstance(header, dict):
            raise ProjectionError("failed to parse header: not a JSON object")

        meta = header.get(TENSOR_NAME)
        if meta is None:
            raise ProjectionError(f"tensor '{TENSOR_NAME}' not found in header")
        if not isinstance(meta, dict):
            raise ProjectionError("failed to parse tensor metadata")

        dtype = meta.get("dtype", "")
        if dtype != "F32":
            raise ProjectionError(f"expected dtype F32, got {dtype}")
        shape = meta.get("shape", [])
        if not _is_int_list(shape, 2) or min(shape) < 0:
            raise ProjectionError(f"expected 2D tensor, got shape {shape}")
        offsets = meta.get("data_offsets", [0, 0])
        if not _is_int_list(offsets, 2):
            raise ProjectionError("failed to parse tensor metadata: bad data_offsets")

        out_dim, in_dim = shape
        count = out_dim * in_dim
        start = header_end + offsets[0]
        end = header_end + offsets[1]
        if end - start != count * 4:
            raise ProjectionError(
                f"data size {end - start} doesn't match shape {shape}"
            )
        if start < 0 or end > len(data):
            raise ProjectionError(
                f"data range [{start}:{end}] exceeds file size {len(data)}"
            )

        weights = struct.unpack_from(f"<{count}f", data, start)
        return cls(weights=weights, in_dim=in_dim, out_dim=out_dim)

    def apply(self, vec: Sequence[float]) -> list[float]:
        """Project one vector of at least ``in_dim`` values to ``out_dim`` values."""
        if len(vec) < self.in_dim:
            raise ValueError(f"vector has {len(vec)} values, need {self.in_dim}")
        return [sum(w * v for w, v in zip(row, vec)) for row in self._rows]