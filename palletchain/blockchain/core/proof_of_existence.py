# MIT License
# Copyright (c) 2025 Hashborn

from typing import Dict, Optional

from ...protocol.config.params import RuntimeConfig, CURRENT_CONFIG
from ...protocol.types.call import CreateClaim, RevokeClaim
from ...protocol.types.common import AlreadyClaimed, ClaimNotFound, NotOwner


class ProofOfExistencePallet:
    """
    Lets accounts claim existence of some content.

    The content key is opaque to the pallet (the raw content or, better, a
    hash of it). An account may hold many claims; a claim has one owner.
    """

    def __init__(self, config: RuntimeConfig = CURRENT_CONFIG):
        self.config = config
        # content -> owner
        self._claims: Dict[str, str] = {}

    def get_claim(self, claim: str) -> Optional[str]:
        return self._claims.get(claim)

    def create_claim(self, caller: str, claim: str):
        if claim in self._claims:
            raise AlreadyClaimed(f"content {claim!r} is already claimed")
        self._claims[claim] = caller

    def revoke_claim(self, caller: str, claim: str):
        owner = self.get_claim(claim)
        if owner is None:
            raise ClaimNotFound(f"claim {claim!r} does not exist")
        if owner != caller:
            raise NotOwner(f"{caller} is not the owner of claim {claim!r}")
        del self._claims[claim]

    def dispatch(self, caller: str, call):
        if isinstance(call, CreateClaim):
            return self.create_claim(caller, call.claim)
        elif isinstance(call, RevokeClaim):
            return self.revoke_claim(caller, call.claim)
        raise TypeError(f"Unknown proof_of_existence call: {call!r}")

    def claims(self) -> Dict[str, str]:
        return dict(self._claims)

    def __repr__(self) -> str:
        return f"ProofOfExistencePallet(claims={self._claims})"
