# MIT License
# Copyright (c) 2025 Hashborn

"""
Call types.

Each pallet exposes a closed set of calls; a call carries only the
non-caller arguments of one pallet operation. The caller is supplied by the
dispatcher from the extrinsic. RuntimeCall is the union of all pallets'
calls, tagged by pallet.
"""

from typing import Annotated, Literal, Union
from pydantic import BaseModel, Field

from .common import Pallet


# --- Balances ---

class Transfer(BaseModel):
    call: Literal["transfer"] = "transfer"
    to: str
    amount: int = Field(ge=0)


BalancesCall = Transfer


# --- Proof of Existence ---

class CreateClaim(BaseModel):
    call: Literal["create_claim"] = "create_claim"
    claim: str


class RevokeClaim(BaseModel):
    call: Literal["revoke_claim"] = "revoke_claim"
    claim: str


ProofOfExistenceCall = Annotated[Union[CreateClaim, RevokeClaim], Field(discriminator="call")]


# --- Runtime ---

class BalancesRuntimeCall(BaseModel):
    pallet: Literal["balances"] = "balances"
    call: BalancesCall


class ProofOfExistenceRuntimeCall(BaseModel):
    pallet: Literal["proof_of_existence"] = "proof_of_existence"
    call: ProofOfExistenceCall


RuntimeCall = Annotated[
    Union[BalancesRuntimeCall, ProofOfExistenceRuntimeCall],
    Field(discriminator="pallet"),
]

# Every pallet a RuntimeCall can be routed to
ROUTED_PALLETS = {
    BalancesRuntimeCall: Pallet.BALANCES,
    ProofOfExistenceRuntimeCall: Pallet.PROOF_OF_EXISTENCE,
}


def pallet_of(runtime_call) -> Pallet:
    try:
        return ROUTED_PALLETS[type(runtime_call)]
    except KeyError:
        raise TypeError(f"Unknown runtime call: {runtime_call!r}") from None


def balances_transfer(to: str, amount: int) -> BalancesRuntimeCall:
    return BalancesRuntimeCall(call=Transfer(to=to, amount=amount))


def poe_create_claim(claim: str) -> ProofOfExistenceRuntimeCall:
    return ProofOfExistenceRuntimeCall(call=CreateClaim(claim=claim))


def poe_revoke_claim(claim: str) -> ProofOfExistenceRuntimeCall:
    return ProofOfExistenceRuntimeCall(call=RevokeClaim(claim=claim))
