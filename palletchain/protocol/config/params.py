# MIT License
# Copyright (c) 2025 Hashborn

from typing import Dict


class RuntimeConfig:
    """
    Primitive types the pallets need from the runtime hosting them.

    Account identifiers and claim contents are plain strings; the numeric
    types are unsigned integers of the given bit width.
    """

    def __init__(self,
                 config_id: str,
                 balance_bits: int = 128,
                 block_number_bits: int = 32,
                 nonce_bits: int = 32):
        self.config_id = config_id
        self.balance_bits = balance_bits
        self.block_number_bits = block_number_bits
        self.nonce_bits = nonce_bits

    @property
    def max_balance(self) -> int:
        return 2**self.balance_bits - 1

    @property
    def max_block_number(self) -> int:
        return 2**self.block_number_bits - 1

    @property
    def max_nonce(self) -> int:
        return 2**self.nonce_bits - 1

    def __repr__(self) -> str:
        return (
            f"RuntimeConfig({self.config_id!r}, balance=u{self.balance_bits}, "
            f"block_number=u{self.block_number_bits}, nonce=u{self.nonce_bits})"
        )


CONFIGS: Dict[str, RuntimeConfig] = {
    "default": RuntimeConfig(
        config_id="default",
        balance_bits=128,
        block_number_bits=32,
        nonce_bits=32,
    ),
    # Narrow counters, handy for hitting overflow paths in tests
    "compact": RuntimeConfig(
        config_id="compact",
        balance_bits=64,
        block_number_bits=16,
        nonce_bits=16,
    ),
}

# Default to u128 balances / u32 counters
CURRENT_CONFIG = CONFIGS["default"]
