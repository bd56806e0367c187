"""Custom exceptions for vault yield analysis.

All exceptions live here to avoid circular imports between the ledger,
oracle and yield modules.
"""


class VaultYieldError(Exception):
    """Base exception for all vault yield errors."""


class DataUnavailableError(VaultYieldError):
    """Raised by an oracle that cannot answer for a block or time window.

    The analysis converts this into an omitted period plus a diagnostic;
    it never aborts a whole run.
    """


class InvariantViolationError(VaultYieldError):
    """Raised when the interaction ledger is internally inconsistent."""


class ShareBalanceError(InvariantViolationError):
    """Raised when a withdrawal exceeds the tracked share balance.

    Indicates a ledger ordering bug or shares moved outside the tracked
    deposit/withdraw events (e.g. a plain ERC-20 transfer).
    """

    def __init__(self, block_number: int, shares_held: int, shares_withdrawn: int) -> None:
        self.block_number = block_number
        self.shares_held = shares_held
        self.shares_withdrawn = shares_withdrawn
        super().__init__(
            f"withdrawal of {shares_withdrawn} shares at block {block_number} "
            f"exceeds tracked balance of {shares_held}"
        )
