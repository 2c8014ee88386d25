# MIT License
# Copyright (c) 2025 Hashborn

from pydantic import BaseModel, Field
from typing import Dict, List

from .call import RuntimeCall


class Header(BaseModel):
    block_number: int = Field(ge=0)


class Extrinsic(BaseModel):
    caller: str             # account id of the submitter
    call: RuntimeCall


class Block(BaseModel):
    header: Header
    # Execution order == list order
    extrinsics: List[Extrinsic] = Field(default_factory=list)


class RuntimeState(BaseModel):
    """Point-in-time copy of every pallet's storage."""
    config_id: str
    block_number: int
    nonces: Dict[str, int] = Field(default_factory=dict)
    balances: Dict[str, int] = Field(default_factory=dict)
    claims: Dict[str, str] = Field(default_factory=dict)


class Genesis(BaseModel):
    """Initial account balances, applied once before the first block."""
    alloc: Dict[str, int] = Field(default_factory=dict)
