# MIT License
# Copyright (c) 2025 Hashborn

"""
Extrinsic receipt tracking.

Records the outcome of every extrinsic the runtime executes, keyed by
(block number, index within the block).
"""
from dataclasses import dataclass, field
from typing import Optional, Dict, List, Tuple
import time
import logging

logger = logging.getLogger(__name__)

APPLIED = "applied"
FAILED = "failed"

ReceiptKey = Tuple[int, int]


@dataclass
class ExtrinsicReceipt:
    """
    Outcome of one extrinsic.

    Attributes:
        block_number: Block the extrinsic was executed in
        index: Position of the extrinsic in the block (from 0)
        caller: Account that submitted it
        pallet: Pallet the call was routed to
        status: 'applied' or 'failed'
        error: Error kind and message if it failed (None otherwise)
        timestamp: When the receipt was recorded (unix timestamp)
    """
    block_number: int
    index: int
    caller: str
    pallet: str
    status: str
    error: Optional[str] = None
    timestamp: float = field(default_factory=time.time)

    @property
    def key(self) -> ReceiptKey:
        return (self.block_number, self.index)

    def to_dict(self) -> dict:
        return {
            "block_number": self.block_number,
            "index": self.index,
            "caller": self.caller,
            "pallet": self.pallet,
            "status": self.status,
            "error": self.error,
            "timestamp": self.timestamp,
        }


class ReceiptStore:
    """In-memory receipt store with cleanup of the oldest receipts."""

    def __init__(self, max_receipts: int = 10000):
        self.receipts: Dict[ReceiptKey, ExtrinsicReceipt] = {}
        self.max_receipts = max_receipts

    def _put(self, receipt: ExtrinsicReceipt) -> ExtrinsicReceipt:
        self.receipts[receipt.key] = receipt
        if len(self.receipts) > self.max_receipts:
            self._cleanup_old_receipts()
        return receipt

    def mark_applied(self, block_number: int, index: int, caller: str, pallet: str) -> ExtrinsicReceipt:
        receipt = ExtrinsicReceipt(
            block_number=block_number,
            index=index,
            caller=caller,
            pallet=pallet,
            status=APPLIED,
        )
        logger.debug(f"Receipt #{block_number}/{index}: applied")
        return self._put(receipt)

    def mark_failed(self, block_number: int, index: int, caller: str, pallet: str, error: str) -> ExtrinsicReceipt:
        receipt = ExtrinsicReceipt(
            block_number=block_number,
            index=index,
            caller=caller,
            pallet=pallet,
            status=FAILED,
            error=error,
        )
        logger.debug(f"Receipt #{block_number}/{index}: failed - {error}")
        return self._put(receipt)

    def get(self, block_number: int, index: int) -> Optional[ExtrinsicReceipt]:
        return self.receipts.get((block_number, index))

    def for_block(self, block_number: int) -> List[ExtrinsicReceipt]:
        """Receipts of one block, in execution order."""
        found = [r for r in self.receipts.values() if r.block_number == block_number]
        return sorted(found, key=lambda r: r.index)

    def failed(self) -> List[ExtrinsicReceipt]:
        return sorted(
            (r for r in self.receipts.values() if r.status == FAILED),
            key=lambda r: r.key,
        )

    def _cleanup_old_receipts(self) -> None:
        """
        Remove oldest receipts to stay under max_receipts limit.

        Removes 10% of the receipts (at least one), oldest block first.
        """
        num_to_remove = max(1, len(self.receipts) // 10)

        for key in sorted(self.receipts)[:num_to_remove]:
            del self.receipts[key]

        logger.info(f"Cleaned up {num_to_remove} old receipts (total: {len(self.receipts)})")

    def clear(self) -> None:
        self.receipts.clear()
        logger.debug("Cleared all receipts")
