# MIT License
# Copyright (c) 2025 Hashborn

from typing import Dict
import logging

from ...protocol.config.params import RuntimeConfig, CURRENT_CONFIG
from ...protocol.types.call import Transfer
from ...protocol.types.common import InsufficientBalance, Overflow
from .support import checked_add, checked_sub

logger = logging.getLogger(__name__)


class BalancesPallet:
    """Account balances. Balances only move through transfer()."""

    def __init__(self, config: RuntimeConfig = CURRENT_CONFIG):
        self.config = config
        # account -> balance, absent means 0
        self._balances: Dict[str, int] = {}

    def set_balance(self, who: str, amount: int):
        """Overwrites the balance of `who`. Genesis/admin use only, not dispatchable."""
        if amount < 0 or amount > self.config.max_balance:
            raise ValueError(f"Balance {amount} out of range [0, {self.config.max_balance}]")
        self._balances[who] = amount
        logger.debug(f"Set balance of {who} to {amount}")

    def balance(self, who: str) -> int:
        return self._balances.get(who, 0)

    def transfer(self, caller: str, to: str, amount: int):
        """
        Moves `amount` from `caller` to `to`.

        Both new balances are computed from the pre-transfer state before
        anything is written, so a failure leaves both accounts untouched.

        Raises:
            InsufficientBalance: caller holds less than `amount`
            Overflow: the recipient balance would exceed the balance type
            ValueError: `amount` is negative
        """
        if amount < 0:
            raise ValueError(f"Transfer amount {amount} must not be negative")

        caller_balance = self.balance(caller)
        to_balance = self.balance(to)

        new_caller_balance = checked_sub(caller_balance, amount)
        if new_caller_balance is None:
            raise InsufficientBalance(f"insufficient balance: have {caller_balance}, need {amount}")

        new_to_balance = checked_add(to_balance, amount, self.config.max_balance)
        if new_to_balance is None:
            raise Overflow(f"overflow when adding {amount} to balance {to_balance}")

        # Self-transfer is a no-op once both checks pass
        if caller == to:
            return

        self._balances[caller] = new_caller_balance
        self._balances[to] = new_to_balance

    def dispatch(self, caller: str, call: Transfer):
        if isinstance(call, Transfer):
            return self.transfer(caller, call.to, call.amount)
        raise TypeError(f"Unknown balances call: {call!r}")

    def total_issuance(self) -> int:
        return sum(self._balances.values())

    def balances(self) -> Dict[str, int]:
        return dict(self._balances)

    def __repr__(self) -> str:
        return f"BalancesPallet(balances={self._balances})"
