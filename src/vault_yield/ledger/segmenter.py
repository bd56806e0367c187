"""Period segmentation of a user's interaction ledger.

Turns an unordered stream of deposit/withdraw events into ordered,
non-overlapping intervals of constant share balance. Implemented as an
explicit fold over the sorted ledger:

    (state, interaction, end_ref) -> (new_state, boundary | None, notes)

so segmentation is a pure, restartable transformation. The only carried
state is the running share balance and the cumulative deposited assets.

Rules applied after each interaction:
  - balance == 0: position is closed, no period starts here
  - end block == start block (or no elapsed time): degenerate, dropped
  - elapsed time < min_period_seconds: dropped, the compounding exponent
    seconds_per_year / duration is unstable over very short windows
"""

from collections.abc import Iterable, Sequence
from dataclasses import dataclass

from vault_yield.config import YieldSettings
from vault_yield.exceptions import ShareBalanceError
from vault_yield.logging import get_logger
from vault_yield.models import BlockRef, Diagnostic, DiagnosticReason, Interaction

logger = get_logger(__name__)


@dataclass(frozen=True)
class SegmenterState:
    """Running position carried between fold steps."""

    shares_held: int = 0
    deposited_to_date: int = 0

    @property
    def is_active(self) -> bool:
        return self.shares_held > 0


@dataclass(frozen=True)
class SegmentBoundary:
    """An active-position interval opened by one interaction."""

    start: Interaction
    end_block: int
    end_timestamp: int
    shares_held: int
    deposited_to_date: int

    @property
    def start_block(self) -> int:
        return self.start.block_number

    @property
    def start_timestamp(self) -> int:
        return self.start.timestamp

    @property
    def duration_seconds(self) -> int:
        return self.end_timestamp - self.start.timestamp


@dataclass(frozen=True)
class SegmentationResult:
    """Output of a full segmentation pass."""

    boundaries: tuple[SegmentBoundary, ...]
    diagnostics: tuple[Diagnostic, ...]
    final_state: SegmenterState


def sort_interactions(interactions: Iterable[Interaction]) -> list[Interaction]:
    """Sort by block, deposits before withdrawals within the same block.

    The tie-break keeps a same-block deposit+withdraw pair from being read
    as a transient zero or negative balance. sorted() is stable, so any
    remaining ties keep their input order.
    """
    return sorted(interactions, key=lambda i: (i.block_number, 0 if i.is_deposit else 1))


def apply_interaction(
    state: SegmenterState,
    interaction: Interaction,
    overdraw_policy: str = "error",
) -> tuple[SegmenterState, Diagnostic | None]:
    """Apply one interaction's signed share delta to the running state.

    Args:
        state: Balance before the interaction.
        interaction: The deposit or withdrawal to apply.
        overdraw_policy: "error" raises on a withdrawal larger than the
            balance; "clamp" floors the balance at zero and returns a
            SHARES_CLAMPED diagnostic.

    Returns:
        Tuple of (new state, optional diagnostic).

    Raises:
        ShareBalanceError: On overdraw under the "error" policy.
    """
    deposited = state.deposited_to_date
    if interaction.is_deposit:
        deposited += interaction.assets

    shares = state.shares_held + interaction.signed_shares
    if shares >= 0:
        return SegmenterState(shares_held=shares, deposited_to_date=deposited), None

    if overdraw_policy != "clamp":
        raise ShareBalanceError(
            block_number=interaction.block_number,
            shares_held=state.shares_held,
            shares_withdrawn=interaction.shares,
        )

    logger.warning(
        "share_balance_clamped",
        block_number=interaction.block_number,
        shares_held=str(state.shares_held),
        shares_withdrawn=str(interaction.shares),
    )
    note = Diagnostic(
        reason=DiagnosticReason.SHARES_CLAMPED,
        start_block=interaction.block_number,
        end_block=interaction.block_number,
        detail=f"withdrew {interaction.shares} shares with {state.shares_held} held",
    )
    return SegmenterState(shares_held=0, deposited_to_date=deposited), note


def advance(
    state: SegmenterState,
    interaction: Interaction,
    end: BlockRef,
    settings: YieldSettings,
) -> tuple[SegmenterState, SegmentBoundary | None, tuple[Diagnostic, ...]]:
    """One fold step: apply an interaction and decide whether it opens a period.

    Args:
        state: Running state before the interaction.
        interaction: The next interaction in sorted order.
        end: Where a period opened here would end -- the next interaction,
            or the current block for the last one.
        settings: Supplies overdraw_policy and min_period_seconds.

    Returns:
        Tuple of (new state, boundary or None, diagnostics for this step).
    """
    new_state, clamp_note = apply_interaction(state, interaction, settings.overdraw_policy)
    notes: tuple[Diagnostic, ...] = (clamp_note,) if clamp_note is not None else ()

    if not new_state.is_active:
        return new_state, None, notes

    duration = end.timestamp - interaction.timestamp
    if end.block_number <= interaction.block_number or duration <= 0:
        # Same-block pair: the position never existed on its own
        notes += (
            Diagnostic(
                reason=DiagnosticReason.DEGENERATE_PERIOD,
                start_block=interaction.block_number,
                end_block=end.block_number,
                detail=f"duration {duration}s",
            ),
        )
        return new_state, None, notes

    if duration < settings.min_period_seconds:
        notes += (
            Diagnostic(
                reason=DiagnosticReason.BELOW_MIN_DURATION,
                start_block=interaction.block_number,
                end_block=end.block_number,
                detail=f"duration {duration}s < {settings.min_period_seconds}s",
            ),
        )
        return new_state, None, notes

    boundary = SegmentBoundary(
        start=interaction,
        end_block=end.block_number,
        end_timestamp=end.timestamp,
        shares_held=new_state.shares_held,
        deposited_to_date=new_state.deposited_to_date,
    )
    return new_state, boundary, notes


def segment(
    interactions: Sequence[Interaction],
    now: BlockRef,
    settings: YieldSettings,
) -> SegmentationResult:
    """Segment a ledger into yield-bearing period boundaries.

    Args:
        interactions: The user's interactions in any order.
        now: Current block; closes the final period if the position is
            still open after the last interaction.
        settings: Yield policy settings.

    Returns:
        SegmentationResult with ordered boundaries, skip diagnostics, and
        the final running state.

    Raises:
        ShareBalanceError: If a withdrawal overdraws the balance under the
            "error" overdraw policy.
    """
    ordered = sort_interactions(interactions)
    state = SegmenterState()
    boundaries: list[SegmentBoundary] = []
    diagnostics: list[Diagnostic] = []

    for i, interaction in enumerate(ordered):
        end = ordered[i + 1].ref if i + 1 < len(ordered) else now
        state, boundary, notes = advance(state, interaction, end, settings)
        diagnostics.extend(notes)
        if boundary is not None:
            boundaries.append(boundary)

    logger.info(
        "ledger_segmented",
        interactions=len(ordered),
        periods=len(boundaries),
        diagnostics=len(diagnostics),
        final_shares=str(state.shares_held),
    )

    return SegmentationResult(
        boundaries=tuple(boundaries),
        diagnostics=tuple(diagnostics),
        final_state=state,
    )
