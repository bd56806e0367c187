"""Timing-free position summary of an interaction ledger."""

from collections.abc import Sequence

from vault_yield.ledger.segmenter import sort_interactions
from vault_yield.models import Interaction, PositionSummary


def summarize_ledger(
    interactions: Sequence[Interaction],
    final_shares: int,
    current_value: int | None,
) -> PositionSummary:
    """Build a PositionSummary from the ledger and the final position.

    Args:
        interactions: The user's interactions in any order.
        final_shares: Share balance after the last interaction, as tracked
            by the segmenter (respects the overdraw policy).
        current_value: final_shares valued at the current price, or None
            if the current price could not be sampled.

    Returns:
        PositionSummary with deposit/withdraw totals and time range.
    """
    ordered = sort_interactions(interactions)
    total_deposited = sum(i.assets for i in ordered if i.is_deposit)
    total_withdrawn = sum(i.assets for i in ordered if not i.is_deposit)

    return PositionSummary(
        total_deposited=total_deposited,
        total_withdrawn=total_withdrawn,
        current_shares=final_shares,
        current_value=current_value,
        first_interaction_timestamp=ordered[0].timestamp if ordered else None,
        last_interaction_timestamp=ordered[-1].timestamp if ordered else None,
        interaction_count=len(ordered),
    )
