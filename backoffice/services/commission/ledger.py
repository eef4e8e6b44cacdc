"""
Commission ledger service.

Settlement state machine for ledger entries. `pending` is the only state an
entry can leave; confirming credits the recipient exactly once, cancelling
moves no money.
"""

from decimal import Decimal

from backoffice.models.commission_entry import CommissionEntry, SettlementStatus
from backoffice.repositories.commission_repository import CommissionRepository
from backoffice.repositories.member_repository import MemberRepository
from backoffice.services.base_service import BaseService, transaction
from backoffice.utils.datetime_utils import utc_now
from backoffice.utils.exceptions import (
    InvalidStatusTransitionError,
    LedgerEntryNotFoundError,
    MemberNotFoundError,
)


class CommissionLedger(BaseService):
    """Confirm / cancel commission entries and report on the ledger."""

    def __init__(self, session) -> None:
        """Initialize commission ledger."""
        super().__init__(session)
        self.commission_repo = CommissionRepository(session)
        self.member_repo = MemberRepository(session)

    @transaction
    async def confirm(self, entry_id: int) -> CommissionEntry:
        """
        Confirm a pending entry and credit its recipient.

        Args:
            entry_id: Ledger entry ID

        Returns:
            Confirmed entry

        Raises:
            LedgerEntryNotFoundError: Entry does not exist
            InvalidStatusTransitionError: Entry is not pending
            MemberNotFoundError: Recipient no longer exists
        """
        entry = await self._settle(entry_id, SettlementStatus.CONFIRMED)

        credited = await self.member_repo.increment(
            entry.recipient_id,
            available_commission=entry.commission_amount,
            total_commission=entry.commission_amount,
        )
        if not credited:
            raise MemberNotFoundError(entry.recipient_id)

        self.logger.info(
            "Commission confirmed",
            extra={
                "entry_id": entry.id,
                "recipient_id": entry.recipient_id,
                "amount": str(entry.commission_amount),
            },
        )
        return entry

    @transaction
    async def cancel(self, entry_id: int) -> CommissionEntry:
        """
        Cancel a pending entry.

        Args:
            entry_id: Ledger entry ID

        Returns:
            Cancelled entry

        Raises:
            LedgerEntryNotFoundError: Entry does not exist
            InvalidStatusTransitionError: Entry is not pending
        """
        entry = await self._settle(entry_id, SettlementStatus.CANCELLED)
        self.logger.info(
            "Commission cancelled",
            extra={"entry_id": entry.id, "recipient_id": entry.recipient_id},
        )
        return entry

    async def get_stats(self) -> dict[str, int | Decimal]:
        """Get ledger counts per status and the confirmed amount."""
        return await self.commission_repo.get_stats()

    async def list_for_order(self, order_id: int) -> list[CommissionEntry]:
        """List ledger entries produced for an order."""
        return await self.commission_repo.get_by_order(order_id)

    async def _settle(
        self, entry_id: int, target: SettlementStatus
    ) -> CommissionEntry:
        # Row lock serializes concurrent confirm/cancel of one entry
        entry = await self.commission_repo.get_for_update(entry_id)
        if entry is None:
            raise LedgerEntryNotFoundError(entry_id)

        if entry.status != SettlementStatus.PENDING.value:
            raise InvalidStatusTransitionError(
                entry_id, entry.status, target.value
            )

        entry.status = target.value
        entry.settled_at = utc_now()
        await self.session.flush()
        return entry
