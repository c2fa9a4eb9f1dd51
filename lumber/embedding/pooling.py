"""Mean pooling of transformer hidden states."""

from __future__ import annotations

from collections.abc import Sequence


def mean_pool(
    hidden: Sequence[float],
    mask: Sequence[int],
    batch_size: int,
    seq_len: int,
    dim: int,
) -> list[float]:
    """Average per-token hidden states over positions where the mask is 1.

    ``hidden`` is flat ``[batch_size * seq_len * dim]`` and ``mask`` flat
    ``[batch_size * seq_len]``. Returns flat ``[batch_size * dim]``; a sample
    with no real tokens pools to zeros.
    """
    if len(mask) < batch_size * seq_len:
        raise ValueError(f"mask has {len(mask)} values, need {batch_size * seq_len}")
    if len(hidden) < batch_size * seq_len * dim:
        raise ValueError(
            f"hidden has {len(hidden)} values, need {batch_size * seq_len * dim}"
        )

    pooled: list[float] = []
    for sample in range(batch_size):
        sample_mask = mask[sample * seq_len : (sample + 1) * seq_len]
        base = sample * seq_len * dim
        rows = [
            hidden[base + pos * dim : base + (pos + 1) * dim]
            for pos, flag in enumerate(sample_mask)
            if flag == 1
        ]
        if rows:
            pooled.extend(sum(column) / len(rows) for column in zip(*rows))
        else:
            pooled.extend([0.0] * dim)
    return pooled