"""Interaction ledger -- sorting, period segmentation, and position summary."""

from vault_yield.ledger.segmenter import (
    SegmentBoundary,
    SegmentationResult,
    SegmenterState,
    advance,
    apply_interaction,
    segment,
    sort_interactions,
)
from vault_yield.ledger.summary import summarize_ledger

__all__ = [
    "SegmentBoundary",
    "SegmentationResult",
    "SegmenterState",
    "advance",
    "apply_interaction",
    "segment",
    "sort_interactions",
    "summarize_ledger",
]
