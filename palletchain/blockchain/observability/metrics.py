# MIT License
# Copyright (c) 2025 Hashborn

"""
Prometheus Metrics

Exports runtime metrics in Prometheus format.

Metrics:
- Block number, executed and rejected blocks
- Extrinsics by pallet and outcome
- Total issuance, number of claims
"""

from prometheus_client import Counter, Gauge, CollectorRegistry, generate_latest

# Create registry for metrics
metrics_registry = CollectorRegistry()

# ═══════════════════════════════════════════════════════════════════
# BLOCK METRICS
# ═══════════════════════════════════════════════════════════════════

block_number = Gauge(
    'palletchain_block_number',
    'Current block number',
    registry=metrics_registry
)

blocks_total = Counter(
    'palletchain_blocks_total',
    'Total number of blocks executed',
    registry=metrics_registry
)

block_rejections_total = Counter(
    'palletchain_block_rejections_total',
    'Blocks rejected with a block number mismatch',
    registry=metrics_registry
)

# ═══════════════════════════════════════════════════════════════════
# EXTRINSIC METRICS
# ═══════════════════════════════════════════════════════════════════

extrinsics_total = Counter(
    'palletchain_extrinsics_total',
    'Total number of extrinsics executed',
    ['pallet', 'outcome'],
    registry=metrics_registry
)

# ═══════════════════════════════════════════════════════════════════
# STATE METRICS
# ═══════════════════════════════════════════════════════════════════

total_issuance = Gauge(
    'palletchain_total_issuance',
    'Sum of all account balances',
    registry=metrics_registry
)

claims_total = Gauge(
    'palletchain_claims_total',
    'Number of existing proof-of-existence claims',
    registry=metrics_registry
)


# ═══════════════════════════════════════════════════════════════════
# HELPER FUNCTIONS
# ═══════════════════════════════════════════════════════════════════

def update_block_metrics(runtime):
    """
    Update block and state metrics.
    Should only be called once a block has been fully executed.

    Args:
        runtime: Runtime instance
    """
    blocks_total.inc()
    block_number.set(runtime.system.block_number())
    total_issuance.set(runtime.balances.total_issuance())
    claims_total.set(len(runtime.proof_of_existence.claims()))


def update_extrinsic_metrics(pallet: str, outcome: str):
    """
    Args:
        pallet: Pallet the extrinsic was routed to
        outcome: 'applied' or 'failed'
    """
    extrinsics_total.labels(pallet=pallet, outcome=outcome).inc()


def record_block_rejection(current_block_number: int):
    """The rejected block still consumed its number."""
    block_rejections_total.inc()
    block_number.set(current_block_number)


def render_metrics() -> bytes:
    """Metrics in the Prometheus text exposition format."""
    return generate_latest(metrics_registry)
