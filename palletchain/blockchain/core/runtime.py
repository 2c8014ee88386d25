# MIT License
# Copyright (c) 2025 Hashborn

from typing import Dict, Optional
import json
import logging

import pydantic

from ...protocol.config.params import RuntimeConfig, CURRENT_CONFIG
from ...protocol.types.block import Block, Genesis, RuntimeState
from ...protocol.types.call import (
    BalancesRuntimeCall,
    ProofOfExistenceRuntimeCall,
    pallet_of,
)
from ...protocol.types.common import BlockNumberMismatch, DispatchError, ValidationError
from ..observability.metrics import (
    update_block_metrics,
    update_extrinsic_metrics,
    record_block_rejection,
)
from .balances import BalancesPallet
from .events import EventBus, EXTRINSIC_APPLIED, EXTRINSIC_FAILED, BLOCK_EXECUTED
from .proof_of_existence import ProofOfExistencePallet
from .receipts import ReceiptStore, APPLIED, FAILED
from .system import SystemPallet

logger = logging.getLogger(__name__)


class Runtime:
    """
    The state transition function.

    Owns one instance of every pallet, routes calls to them and executes
    blocks. All state lives in the pallets and is only mutated through
    execute_block() (and apply_genesis() before the first block).
    """

    def __init__(self,
                 config: RuntimeConfig = CURRENT_CONFIG,
                 event_bus: Optional[EventBus] = None,
                 receipts: Optional[ReceiptStore] = None):
        self.config = config
        self.system = SystemPallet(config)
        self.balances = BalancesPallet(config)
        self.proof_of_existence = ProofOfExistencePallet(config)

        self.event_bus = event_bus if event_bus is not None else EventBus()
        self.receipts = receipts if receipts is not None else ReceiptStore()

    # --- Genesis ---

    def apply_genesis(self, alloc: Dict[str, int]):
        """Sets initial balances. Bypasses dispatch; meant for chain start only."""
        for who, amount in alloc.items():
            self.balances.set_balance(who, int(amount))
        logger.info(f"Applied genesis allocation to {len(alloc)} accounts.")

    @classmethod
    def from_genesis_file(cls, path: str, config: RuntimeConfig = CURRENT_CONFIG, **kwargs) -> "Runtime":
        """
        Builds a runtime from a genesis JSON file.

        Accepts {"alloc": {account: balance}} or a bare {account: balance} mapping.
        """
        with open(path, "r") as f:
            data = json.load(f)

        runtime = cls(config, **kwargs)
        runtime.apply_genesis(parse_genesis(data).alloc)
        return runtime

    # --- Dispatch ---

    def dispatch(self, caller: str, runtime_call):
        """Routes a call to the pallet it names. Raises whatever the pallet raises."""
        if isinstance(runtime_call, BalancesRuntimeCall):
            return self.balances.dispatch(caller, runtime_call.call)
        elif isinstance(runtime_call, ProofOfExistenceRuntimeCall):
            return self.proof_of_existence.dispatch(caller, runtime_call.call)
        raise TypeError(f"Unknown runtime call: {runtime_call!r}")

    # --- Block execution ---

    def execute_block(self, block: Block) -> None:
        """
        Executes a block.

        The block number is advanced first and must then equal the header's
        number, otherwise BlockNumberMismatch is raised before any extrinsic
        runs. Each extrinsic bumps its caller's nonce and is dispatched; a
        DispatchError is reported and the next extrinsic runs, earlier state
        changes are kept.

        Raises:
            BlockNumberMismatch: header carries the wrong block number
            CounterOverflow: block number or a nonce hit its maximum
        """
        self.system.inc_block_number()
        current = self.system.block_number()

        if block.header.block_number != current:
            record_block_rejection(current)
            logger.error(f"Rejected block: expected #{current}, got #{block.header.block_number}")
            raise BlockNumberMismatch(expected=current, got=block.header.block_number)

        failed = 0
        for index, extrinsic in enumerate(block.extrinsics):
            caller = extrinsic.caller
            pallet = pallet_of(extrinsic.call).value

            # Nonce is consumed whether or not the call succeeds
            self.system.inc_nonce(caller)

            try:
                self.dispatch(caller, extrinsic.call)
            except DispatchError as e:
                failed += 1
                error = f"{e.kind}: {e.message}"
                logger.warning(
                    f"Extrinsic error. Block #{current}, extrinsic {index} ({pallet}, caller {caller}): {error}"
                )
                self.receipts.mark_failed(current, index, caller, pallet, error)
                update_extrinsic_metrics(pallet, FAILED)
                self.event_bus.emit(
                    EXTRINSIC_FAILED,
                    block_number=current,
                    index=index,
                    caller=caller,
                    pallet=pallet,
                    error=e,
                )
                continue

            logger.debug(f"Block #{current}, extrinsic {index} ({pallet}) applied")
            self.receipts.mark_applied(current, index, caller, pallet)
            update_extrinsic_metrics(pallet, APPLIED)
            self.event_bus.emit(
                EXTRINSIC_APPLIED,
                block_number=current,
                index=index,
                caller=caller,
                pallet=pallet,
            )

        update_block_metrics(self)
        logger.info(
            f"Executed block #{current}: {len(block.extrinsics)} extrinsics, {failed} failed"
        )
        self.event_bus.emit(
            BLOCK_EXECUTED,
            block_number=current,
            extrinsics=len(block.extrinsics),
            failed=failed,
        )

    # --- Inspection ---

    def snapshot(self) -> RuntimeState:
        return RuntimeState(
            config_id=self.config.config_id,
            block_number=self.system.block_number(),
            nonces=self.system.nonces(),
            balances=self.balances.balances(),
            claims=self.proof_of_existence.claims(),
        )

    def __repr__(self) -> str:
        return f"Runtime({self.system!r}, {self.balances!r}, {self.proof_of_existence!r})"


def parse_genesis(data) -> Genesis:
    """Validates a genesis document, wrapping pydantic errors in ValidationError."""
    if isinstance(data, dict) and "alloc" not in data:
        # Bare {account: balance} mapping
        data = {"alloc": data}
    try:
        return Genesis.model_validate(data)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid genesis: {e}") from e
