"""Tests for ledger segmentation into constant-balance periods."""

import pytest

from vault_yield.config import YieldSettings
from vault_yield.exceptions import InvariantViolationError, ShareBalanceError
from vault_yield.ledger.segmenter import (
    SegmenterState,
    advance,
    apply_interaction,
    segment,
    sort_interactions,
)
from vault_yield.models import BlockRef, DiagnosticReason, Interaction, InteractionKind

DAY = 86400


def _deposit(block: int, timestamp: int, amount: int) -> Interaction:
    return Interaction(block, timestamp, InteractionKind.DEPOSIT, assets=amount, shares=amount)


def _withdraw(block: int, timestamp: int, amount: int) -> Interaction:
    return Interaction(block, timestamp, InteractionKind.WITHDRAW, assets=amount, shares=amount)


class TestSortInteractions:
    """Test ordering by block with deposits first inside a block."""

    def test_orders_by_block(self) -> None:
        a = _deposit(30, 300, 1)
        b = _deposit(10, 100, 1)
        c = _withdraw(20, 200, 1)
        assert sort_interactions([a, b, c]) == [b, c, a]

    def test_deposit_before_withdraw_in_same_block(self) -> None:
        """A same-block withdraw listed first must not be applied first."""
        w = _withdraw(10, 100, 5)
        d = _deposit(10, 100, 5)
        assert sort_interactions([w, d]) == [d, w]


class TestInteractionValidation:
    """Test the unsigned-amount contract on ledger events."""

    def test_negative_withdraw_shares_rejected(self) -> None:
        """A negative withdrawal would otherwise raise the balance."""
        with pytest.raises(InvariantViolationError, match="negative"):
            Interaction(20, 100, InteractionKind.WITHDRAW, assets=500, shares=-500)

    def test_negative_deposit_assets_rejected(self) -> None:
        with pytest.raises(InvariantViolationError):
            Interaction(10, 0, InteractionKind.DEPOSIT, assets=-1, shares=1)

    def test_zero_amounts_allowed(self) -> None:
        assert Interaction(10, 0, InteractionKind.DEPOSIT, assets=0, shares=0).shares == 0

    def test_string_kind_coerced(self) -> None:
        interaction = Interaction(10, 0, "withdraw", assets=1, shares=1)  # type: ignore[arg-type]
        assert interaction.kind is InteractionKind.WITHDRAW
        assert interaction.signed_shares == -1

    def test_unknown_kind_rejected(self) -> None:
        with pytest.raises(ValueError):
            Interaction(10, 0, "transfer", assets=1, shares=1)  # type: ignore[arg-type]


class TestApplyInteraction:
    """Test the running balance update."""

    def test_deposit_tracks_assets_and_shares(self) -> None:
        state, note = apply_interaction(SegmenterState(), _deposit(1, 0, 100))
        assert state == SegmenterState(shares_held=100, deposited_to_date=100)
        assert note is None

    def test_withdraw_does_not_reduce_deposited(self) -> None:
        state, _ = apply_interaction(
            SegmenterState(shares_held=100, deposited_to_date=100), _withdraw(2, 10, 40)
        )
        assert state == SegmenterState(shares_held=60, deposited_to_date=100)

    def test_overdraw_raises_by_default(self) -> None:
        with pytest.raises(ShareBalanceError) as exc_info:
            apply_interaction(SegmenterState(shares_held=10), _withdraw(7, 0, 11))
        assert exc_info.value.block_number == 7
        assert exc_info.value.shares_held == 10
        assert exc_info.value.shares_withdrawn == 11

    def test_overdraw_clamped_when_configured(self) -> None:
        state, note = apply_interaction(
            SegmenterState(shares_held=10), _withdraw(7, 0, 11), overdraw_policy="clamp"
        )
        assert state.shares_held == 0
        assert note is not None
        assert note.reason == DiagnosticReason.SHARES_CLAMPED


class TestAdvance:
    """Test a single fold step."""

    def test_opens_period_until_end_ref(self, settings: YieldSettings) -> None:
        state, boundary, notes = advance(
            SegmenterState(), _deposit(10, 0, 100), BlockRef(20, DAY), settings
        )
        assert state.shares_held == 100
        assert boundary is not None
        assert boundary.start_block == 10
        assert boundary.end_block == 20
        assert boundary.duration_seconds == DAY
        assert boundary.shares_held == 100
        assert notes == ()

    def test_zero_balance_opens_nothing(self, settings: YieldSettings) -> None:
        state, boundary, notes = advance(
            SegmenterState(shares_held=100, deposited_to_date=100),
            _withdraw(10, 0, 100),
            BlockRef(20, DAY),
            settings,
        )
        assert state.shares_held == 0
        assert boundary is None
        assert notes == ()

    def test_same_block_end_is_degenerate(self, settings: YieldSettings) -> None:
        _, boundary, notes = advance(
            SegmenterState(), _deposit(10, 0, 100), BlockRef(10, 0), settings
        )
        assert boundary is None
        assert [n.reason for n in notes] == [DiagnosticReason.DEGENERATE_PERIOD]

    def test_short_period_dropped(self, settings: YieldSettings) -> None:
        _, boundary, notes = advance(
            SegmenterState(), _deposit(10, 0, 100), BlockRef(11, 3599), settings
        )
        assert boundary is None
        assert [n.reason for n in notes] == [DiagnosticReason.BELOW_MIN_DURATION]

    def test_exactly_min_duration_kept(self, settings: YieldSettings) -> None:
        _, boundary, _ = advance(
            SegmenterState(), _deposit(10, 0, 100), BlockRef(11, 3600), settings
        )
        assert boundary is not None


class TestSegment:
    """Test full-ledger segmentation."""

    def test_empty_ledger(self, settings: YieldSettings) -> None:
        result = segment([], BlockRef(100, DAY), settings)
        assert result.boundaries == ()
        assert result.diagnostics == ()
        assert result.final_state == SegmenterState()

    def test_single_deposit_runs_to_now(self, settings: YieldSettings) -> None:
        result = segment([_deposit(10, 0, 100)], BlockRef(100, 30 * DAY), settings)
        assert len(result.boundaries) == 1
        boundary = result.boundaries[0]
        assert (boundary.start_block, boundary.end_block) == (10, 100)
        assert boundary.duration_seconds == 30 * DAY

    def test_unsorted_input_gives_ordered_periods(self, settings: YieldSettings) -> None:
        ledger = [_deposit(20, DAY, 50), _deposit(10, 0, 100)]
        result = segment(ledger, BlockRef(30, 2 * DAY), settings)
        assert [b.start_block for b in result.boundaries] == [10, 20]
        assert [b.shares_held for b in result.boundaries] == [100, 150]
        assert [b.deposited_to_date for b in result.boundaries] == [100, 150]

    def test_periods_do_not_overlap(self, settings: YieldSettings) -> None:
        ledger = [
            _deposit(10, 0, 100),
            _deposit(20, DAY, 100),
            _withdraw(30, 2 * DAY, 50),
            _deposit(40, 3 * DAY, 25),
        ]
        result = segment(ledger, BlockRef(50, 4 * DAY), settings)
        for prev, nxt in zip(result.boundaries, result.boundaries[1:]):
            assert prev.end_block <= nxt.start_block
            assert prev.end_timestamp <= nxt.start_timestamp

    def test_closed_gap_is_not_a_period(self, settings: YieldSettings) -> None:
        """Full exit then re-entry: the closed interval produces no boundary."""
        ledger = [
            _deposit(10, 0, 100),
            _withdraw(20, 10 * DAY, 100),
            _deposit(30, 20 * DAY, 100),
        ]
        result = segment(ledger, BlockRef(40, 30 * DAY), settings)
        assert [(b.start_block, b.end_block) for b in result.boundaries] == [(10, 20), (30, 40)]
        assert sum(b.duration_seconds for b in result.boundaries) == 20 * DAY

    def test_fully_withdrawn_has_no_trailing_period(self, settings: YieldSettings) -> None:
        ledger = [_deposit(10, 0, 100), _withdraw(20, DAY, 100)]
        result = segment(ledger, BlockRef(30, 2 * DAY), settings)
        assert len(result.boundaries) == 1
        assert result.final_state.shares_held == 0

    def test_same_block_deposit_and_withdraw(self, settings: YieldSettings) -> None:
        """Pair in one block: no period and no overdraw from ordering."""
        ledger = [_withdraw(10, 0, 100), _deposit(10, 0, 100)]
        result = segment(ledger, BlockRef(20, DAY), settings)
        assert result.boundaries == ()
        assert [d.reason for d in result.diagnostics] == [DiagnosticReason.DEGENERATE_PERIOD]
        assert result.final_state.shares_held == 0

    def test_overdraw_propagates(self, settings: YieldSettings) -> None:
        ledger = [_deposit(10, 0, 100), _withdraw(20, DAY, 101)]
        with pytest.raises(ShareBalanceError):
            segment(ledger, BlockRef(30, 2 * DAY), settings)

    def test_overdraw_clamped(self, clamp_settings: YieldSettings) -> None:
        ledger = [_deposit(10, 0, 100), _withdraw(20, DAY, 101), _deposit(30, 2 * DAY, 10)]
        result = segment(ledger, BlockRef(40, 3 * DAY), clamp_settings)
        assert [b.shares_held for b in result.boundaries] == [100, 10]
        assert DiagnosticReason.SHARES_CLAMPED in [d.reason for d in result.diagnostics]

    def test_min_period_is_configurable(self) -> None:
        settings = YieldSettings(min_period_seconds=60)
        result = segment([_deposit(10, 0, 100)], BlockRef(11, 120), settings)
        assert len(result.boundaries) == 1
