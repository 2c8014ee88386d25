# MIT License
# Copyright (c) 2025 Hashborn

"""
Runtime tests

Tests:
- Call routing through RuntimeCall
- execute_block: block number check, nonce bookkeeping, error isolation
- End-to-end scenarios (transfers, competing claims)
- Genesis loading and state snapshots
"""

import json
import typing

import pytest

from palletchain.blockchain.core.runtime import Runtime, parse_genesis
from palletchain.blockchain.core.events import EventBus, EXTRINSIC_FAILED, EXTRINSIC_APPLIED, BLOCK_EXECUTED
from palletchain.blockchain.core.receipts import APPLIED, FAILED
from palletchain.protocol.config.params import RuntimeConfig
from palletchain.protocol.types.block import Block, Header, Extrinsic
from palletchain.protocol.types.call import (
    ROUTED_PALLETS,
    RuntimeCall,
    BalancesRuntimeCall,
    ProofOfExistenceRuntimeCall,
    Transfer,
    balances_transfer,
    pallet_of,
    poe_create_claim,
    poe_revoke_claim,
)
from palletchain.protocol.types.common import (
    AlreadyClaimed,
    BlockNumberMismatch,
    CounterOverflow,
    InsufficientBalance,
    Pallet,
    ValidationError,
)

ALICE = "alice"
BOB = "bob"
CHARLIE = "charlie"


# ═══════════════════════════════════════════════════════════════════
# FIXTURES
# ═══════════════════════════════════════════════════════════════════

@pytest.fixture
def runtime():
    rt = Runtime()
    rt.apply_genesis({ALICE: 100, BOB: 0, CHARLIE: 0})
    return rt


@pytest.fixture
def recorded_events(runtime):
    """Collects every runtime event as (event_type, data) tuples."""
    events = []
    for event_type in (EXTRINSIC_APPLIED, EXTRINSIC_FAILED, BLOCK_EXECUTED):
        runtime.event_bus.subscribe(
            event_type,
            lambda event_type=event_type, **data: events.append((event_type, data)),
        )
    return events


def make_block(number, *extrinsics):
    return Block(
        header=Header(block_number=number),
        extrinsics=[Extrinsic(caller=caller, call=call) for caller, call in extrinsics],
    )


# ═══════════════════════════════════════════════════════════════════
# DISPATCH ROUTING
# ═══════════════════════════════════════════════════════════════════

def test_every_runtime_call_is_routed():
    union = typing.get_args(RuntimeCall)[0]
    members = set(typing.get_args(union))
    assert members == set(ROUTED_PALLETS)


def test_dispatch_routes_to_balances(runtime):
    runtime.dispatch(ALICE, balances_transfer(BOB, 10))
    assert runtime.balances.balance(ALICE) == 90
    assert runtime.balances.balance(BOB) == 10


def test_dispatch_routes_to_proof_of_existence(runtime):
    runtime.dispatch(BOB, poe_create_claim("doc"))
    assert runtime.proof_of_existence.get_claim("doc") == BOB

    runtime.dispatch(BOB, poe_revoke_claim("doc"))
    assert runtime.proof_of_existence.get_claim("doc") is None


def test_dispatch_propagates_pallet_errors(runtime):
    with pytest.raises(InsufficientBalance):
        runtime.dispatch(BOB, balances_transfer(ALICE, 1))


def test_dispatch_does_not_touch_nonce(runtime):
    runtime.dispatch(ALICE, balances_transfer(BOB, 1))
    assert runtime.system.get_nonce(ALICE) == 0


def test_dispatch_unknown_call(runtime):
    with pytest.raises(TypeError):
        runtime.dispatch(ALICE, Transfer(to=BOB, amount=1))


def test_pallet_of():
    assert pallet_of(balances_transfer(BOB, 1)) == Pallet.BALANCES
    assert pallet_of(poe_create_claim("x")) == Pallet.PROOF_OF_EXISTENCE
    with pytest.raises(TypeError):
        pallet_of(object())


def test_runtime_call_parses_from_json():
    extrinsic = Extrinsic.model_validate({
        "caller": ALICE,
        "call": {"pallet": "proof_of_existence", "call": {"call": "revoke_claim", "claim": "doc"}},
    })
    assert isinstance(extrinsic.call, ProofOfExistenceRuntimeCall)
    assert extrinsic.call.call.claim == "doc"

    extrinsic = Extrinsic.model_validate({
        "caller": ALICE,
        "call": {"pallet": "balances", "call": {"call": "transfer", "to": BOB, "amount": 5}},
    })
    assert isinstance(extrinsic.call, BalancesRuntimeCall)
    assert extrinsic.call.call.amount == 5


# ═══════════════════════════════════════════════════════════════════
# BLOCK EXECUTION
# ═══════════════════════════════════════════════════════════════════

def test_empty_block_advances_block_number(runtime):
    runtime.execute_block(make_block(1))
    assert runtime.system.block_number() == 1
    runtime.execute_block(make_block(2))
    assert runtime.system.block_number() == 2


def test_block_number_mismatch_aborts_block(runtime, recorded_events):
    block = make_block(
        5,
        (ALICE, balances_transfer(BOB, 10)),
        (BOB, poe_create_claim("doc")),
    )

    with pytest.raises(BlockNumberMismatch) as exc_info:
        runtime.execute_block(block)

    assert exc_info.value.expected == 1
    assert exc_info.value.got == 5
    # No extrinsic ran
    assert runtime.system.nonces() == {}
    assert runtime.balances.balance(ALICE) == 100
    assert runtime.proof_of_existence.claims() == {}
    assert recorded_events == []
    assert runtime.receipts.receipts == {}


def test_mismatch_keeps_advanced_block_number(runtime):
    with pytest.raises(BlockNumberMismatch):
        runtime.execute_block(make_block(0))
    # The bump happens before the check
    assert runtime.system.block_number() == 1
    runtime.execute_block(make_block(2))
    assert runtime.system.block_number() == 2


def test_failing_extrinsic_does_not_abort_block(runtime):
    block = make_block(
        1,
        (BOB, balances_transfer(CHARLIE, 50)),    # bob has nothing
        (ALICE, balances_transfer(CHARLIE, 25)),
    )

    runtime.execute_block(block)

    assert runtime.system.block_number() == 1
    assert runtime.system.get_nonce(BOB) == 1
    assert runtime.system.get_nonce(ALICE) == 1
    assert runtime.balances.balance(BOB) == 0
    assert runtime.balances.balance(ALICE) == 75
    assert runtime.balances.balance(CHARLIE) == 25


def test_failure_keeps_earlier_changes(runtime):
    block = make_block(
        1,
        (ALICE, balances_transfer(BOB, 60)),
        (ALICE, balances_transfer(BOB, 60)),   # only 40 left
        (ALICE, poe_create_claim("doc")),
    )

    runtime.execute_block(block)

    assert runtime.balances.balance(ALICE) == 40
    assert runtime.balances.balance(BOB) == 60
    assert runtime.proof_of_existence.get_claim("doc") == ALICE
    assert runtime.system.get_nonce(ALICE) == 3


def test_extrinsics_run_in_order(runtime):
    # bob can only pay charlie after alice has paid bob
    block = make_block(
        1,
        (ALICE, balances_transfer(BOB, 30)),
        (BOB, balances_transfer(CHARLIE, 30)),
    )
    runtime.execute_block(block)
    assert runtime.balances.balance(CHARLIE) == 30

    reversed_block = make_block(
        2,
        (CHARLIE, balances_transfer(ALICE, 0)),
        (BOB, balances_transfer(CHARLIE, 1)),   # bob is empty again
        (CHARLIE, balances_transfer(BOB, 1)),
    )
    runtime.execute_block(reversed_block)
    assert runtime.balances.balance(BOB) == 1
    assert runtime.balances.balance(CHARLIE) == 29
    assert runtime.receipts.get(2, 1).status == FAILED


def test_receipts_record_outcomes(runtime):
    block = make_block(
        1,
        (ALICE, poe_create_claim("doc")),
        (BOB, poe_create_claim("doc")),
    )
    runtime.execute_block(block)

    receipts = runtime.receipts.for_block(1)
    assert [r.status for r in receipts] == [APPLIED, FAILED]
    assert receipts[1].caller == BOB
    assert receipts[1].pallet == "proof_of_existence"
    assert receipts[1].error.startswith("AlreadyClaimed")


def test_events_emitted(runtime, recorded_events):
    block = make_block(
        1,
        (ALICE, balances_transfer(BOB, 1)),
        (BOB, balances_transfer(ALICE, 500)),
    )
    runtime.execute_block(block)

    kinds = [event_type for event_type, _ in recorded_events]
    assert kinds == [EXTRINSIC_APPLIED, EXTRINSIC_FAILED, BLOCK_EXECUTED]

    _, failed = recorded_events[1]
    assert failed["block_number"] == 1
    assert failed["index"] == 1
    assert failed["caller"] == BOB
    assert isinstance(failed["error"], InsufficientBalance)

    _, summary = recorded_events[2]
    assert summary == {"block_number": 1, "extrinsics": 2, "failed": 1}


def test_extrinsic_failure_is_logged(runtime, caplog):
    block = make_block(1, (BOB, balances_transfer(ALICE, 5)))

    with caplog.at_level("WARNING"):
        runtime.execute_block(block)

    assert "Block #1, extrinsic 0" in caplog.text
    assert "InsufficientBalance" in caplog.text


def test_broken_listener_does_not_break_block(runtime):
    def boom(**data):
        raise RuntimeError("listener failure")

    runtime.event_bus.subscribe(EXTRINSIC_APPLIED, boom)
    runtime.execute_block(make_block(1, (ALICE, balances_transfer(BOB, 5))))
    assert runtime.balances.balance(BOB) == 5


def test_block_number_overflow_propagates():
    runtime = Runtime(RuntimeConfig("tiny", block_number_bits=1))
    runtime.execute_block(make_block(1))

    with pytest.raises(CounterOverflow):
        runtime.execute_block(make_block(2))
    assert runtime.system.block_number() == 1


def test_nonce_overflow_propagates():
    runtime = Runtime(RuntimeConfig("tiny", nonce_bits=1))
    runtime.apply_genesis({ALICE: 10})
    block = make_block(
        1,
        (ALICE, balances_transfer(BOB, 1)),
        (ALICE, balances_transfer(BOB, 1)),
    )

    with pytest.raises(CounterOverflow):
        runtime.execute_block(block)
    # First extrinsic already applied
    assert runtime.balances.balance(BOB) == 1


def test_nonce_is_not_checked_for_replay(runtime):
    block_one = make_block(1, (ALICE, balances_transfer(BOB, 10)))
    block_two = make_block(2, (ALICE, balances_transfer(BOB, 10)))
    runtime.execute_block(block_one)
    runtime.execute_block(block_two)
    assert runtime.balances.balance(BOB) == 20
    assert runtime.system.get_nonce(ALICE) == 2


# ═══════════════════════════════════════════════════════════════════
# SCENARIOS
# ═══════════════════════════════════════════════════════════════════

def test_scenario_transfers(runtime):
    block = make_block(
        1,
        (ALICE, balances_transfer(BOB, 30)),
        (ALICE, balances_transfer(CHARLIE, 20)),
    )
    runtime.execute_block(block)

    assert runtime.balances.balance(ALICE) == 50
    assert runtime.balances.balance(BOB) == 30
    assert runtime.balances.balance(CHARLIE) == 20
    assert runtime.system.get_nonce(ALICE) == 2
    assert runtime.balances.total_issuance() == 100


def test_scenario_competing_claims(runtime):
    runtime.execute_block(make_block(1))
    block = make_block(
        2,
        (ALICE, poe_create_claim("doc")),
        (BOB, poe_create_claim("doc")),
    )
    runtime.execute_block(block)

    assert runtime.proof_of_existence.get_claim("doc") == ALICE
    failed = runtime.receipts.get(2, 1)
    assert failed.status == FAILED
    assert AlreadyClaimed.__name__ in failed.error
    assert runtime.system.block_number() == 2
    assert runtime.system.get_nonce(BOB) == 1


# ═══════════════════════════════════════════════════════════════════
# GENESIS & SNAPSHOT
# ═══════════════════════════════════════════════════════════════════

def test_from_genesis_file(tmp_path):
    path = tmp_path / "genesis.json"
    path.write_text(json.dumps({"alloc": {ALICE: 100, BOB: 5}}))

    runtime = Runtime.from_genesis_file(str(path))
    assert runtime.balances.balance(ALICE) == 100
    assert runtime.balances.balance(BOB) == 5
    assert runtime.system.block_number() == 0


def test_from_genesis_file_bare_mapping(tmp_path):
    path = tmp_path / "genesis.json"
    path.write_text(json.dumps({ALICE: 7}))

    runtime = Runtime.from_genesis_file(str(path), event_bus=EventBus())
    assert runtime.balances.balance(ALICE) == 7


def test_parse_genesis_rejects_garbage():
    with pytest.raises(ValidationError):
        parse_genesis({"alloc": {ALICE: "lots"}})


def test_snapshot(runtime):
    runtime.execute_block(make_block(
        1,
        (ALICE, balances_transfer(BOB, 30)),
        (BOB, poe_create_claim("doc")),
    ))

    state = runtime.snapshot()
    assert state.config_id == "default"
    assert state.block_number == 1
    assert state.nonces == {ALICE: 1, BOB: 1}
    assert state.balances == {ALICE: 70, BOB: 30, CHARLIE: 0}
    assert state.claims == {"doc": BOB}

    # Snapshot is a copy
    state.balances[ALICE] = 0
    assert runtime.balances.balance(ALICE) == 70
