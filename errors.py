from __future__ import annotations

from typing import TYPE_CHECKING, Optional

if TYPE_CHECKING:  # pragma: no cover
    from recurrence import ReconciliationResult


class LedgerValidationError(ValueError):
    pass


class NotFoundError(LookupError):
    pass


class StoreError(RuntimeError):
    def __init__(
        self,
        message: str,
        *,
        obligation_id: Optional[int] = None,
        transaction_id: Optional[int] = None,
    ) -> None:
        super().__init__(message)
        self.obligation_id = obligation_id
        self.transaction_id = transaction_id


class PartialReconciliationError(RuntimeError):
    """Some obligations were materialised and others failed.

    The attached result carries the per-obligation failures so the caller can
    report or retry just those.
    """

    def __init__(self, result: "ReconciliationResult") -> None:
        super().__init__(
            f"Reconciliation for {result.period} finished with "
            f"{result.generated} generated and {len(result.failures)} failed"
        )
        self.result = result
