# MIT License
# Copyright (c) 2025 Hashborn

from typing import Dict

from ...protocol.config.params import RuntimeConfig, CURRENT_CONFIG
from ...protocol.types.common import CounterOverflow
from .support import checked_add


class SystemPallet:
    """
    Low level chain state: the current block number and per-account nonces.

    Not callable through extrinsics; only the runtime drives it.
    """

    def __init__(self, config: RuntimeConfig = CURRENT_CONFIG):
        self.config = config
        self._block_number = 0
        # account -> nonce, absent means 0
        self._nonces: Dict[str, int] = {}

    def block_number(self) -> int:
        return self._block_number

    def inc_block_number(self):
        """Increases the block number by one. Raises CounterOverflow instead of wrapping."""
        new_number = checked_add(self._block_number, 1, self.config.max_block_number)
        if new_number is None:
            raise CounterOverflow(
                f"block number overflow at {self._block_number} (max {self.config.max_block_number})"
            )
        self._block_number = new_number

    def inc_nonce(self, who: str):
        current = self.get_nonce(who)
        new_nonce = checked_add(current, 1, self.config.max_nonce)
        if new_nonce is None:
            raise CounterOverflow(f"nonce overflow for {who} at {current}")
        self._nonces[who] = new_nonce

    def get_nonce(self, who: str) -> int:
        return self._nonces.get(who, 0)

    def nonces(self) -> Dict[str, int]:
        return dict(self._nonces)

    def __repr__(self) -> str:
        return f"SystemPallet(block_number={self._block_number}, nonces={self._nonces})"
