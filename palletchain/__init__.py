"""palletchain - a pallet based state transition runtime."""

__version__ = "0.1.0"
