# MIT License
# Copyright (c) 2025 Hashborn

from enum import Enum


class Pallet(str, Enum):
    SYSTEM = "system"
    BALANCES = "balances"
    PROOF_OF_EXISTENCE = "proof_of_existence"


class ProtocolError(Exception):
    pass


class ValidationError(ProtocolError):
    pass


class BlockNumberMismatch(ProtocolError):
    """Block header does not carry the next block number. Aborts the whole block."""

    def __init__(self, expected: int, got: int):
        self.expected = expected
        self.got = got
        super().__init__(f"Block number mismatch: expected {expected}, got {got}")


class CounterOverflow(OverflowError):
    """
    A block number or nonce ran past its type's maximum.

    Not a ProtocolError: the runtime never catches it, execution stops.
    """


# --- Dispatch errors (extrinsic-local) ---

class DispatchError(ProtocolError):
    pallet: Pallet = Pallet.SYSTEM
    default_message = "dispatch failed"

    def __init__(self, message: str = None):
        self.message = message or self.default_message
        super().__init__(self.message)

    @property
    def kind(self) -> str:
        return type(self).__name__


class InsufficientBalance(DispatchError):
    pallet = Pallet.BALANCES
    default_message = "insufficient balance"


class Overflow(DispatchError):
    pallet = Pallet.BALANCES
    default_message = "overflow when adding to balance"


class AlreadyClaimed(DispatchError):
    pallet = Pallet.PROOF_OF_EXISTENCE
    default_message = "this content is already claimed"


class ClaimNotFound(DispatchError):
    pallet = Pallet.PROOF_OF_EXISTENCE
    default_message = "claim does not exist"


class NotOwner(DispatchError):
    pallet = Pallet.PROOF_OF_EXISTENCE
    default_message = "caller is not the owner of the claim"
