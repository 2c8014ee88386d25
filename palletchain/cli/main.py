# MIT License
# Copyright (c) 2025 Hashborn

import argparse
import json
import logging
import sys
from typing import Dict, List

import pydantic
from pydantic import BaseModel, Field

from ..protocol.config.params import CONFIGS
from ..protocol.types.block import Block, Header, Extrinsic
from ..protocol.types.call import balances_transfer, poe_create_claim
from ..protocol.types.common import ProtocolError, ValidationError
from ..blockchain.core.runtime import Runtime

logger = logging.getLogger(__name__)


class BlocksFile(BaseModel):
    """Input of `palletchain run`: optional genesis plus the blocks to execute."""
    genesis: Dict[str, int] = Field(default_factory=dict)
    blocks: List[Block] = Field(default_factory=list)


def load_blocks_file(path: str) -> BlocksFile:
    with open(path, "r") as f:
        raw = f.read()
    try:
        return BlocksFile.model_validate_json(raw)
    except pydantic.ValidationError as e:
        raise ValidationError(f"Invalid blocks file {path}: {e}") from e


def demo_blocks() -> List[Block]:
    """Two blocks: alice pays bob and charlie, then alice and bob race for a claim."""
    return [
        Block(
            header=Header(block_number=1),
            extrinsics=[
                Extrinsic(caller="alice", call=balances_transfer("bob", 30)),
                Extrinsic(caller="alice", call=balances_transfer("charlie", 20)),
            ],
        ),
        Block(
            header=Header(block_number=2),
            extrinsics=[
                Extrinsic(caller="alice", call=poe_create_claim("doc")),
                Extrinsic(caller="bob", call=poe_create_claim("doc")),
            ],
        ),
    ]


def execute_all(runtime: Runtime, blocks: List[Block]) -> int:
    """Executes blocks in order, stopping at the first block-fatal error. Returns an exit code."""
    for block in blocks:
        try:
            runtime.execute_block(block)
        except ProtocolError as e:
            logger.error(f"Block #{block.header.block_number} aborted: {e}")
            print(runtime.snapshot().model_dump_json(indent=2))
            return 1
    print(runtime.snapshot().model_dump_json(indent=2))
    return 0


def cmd_run(args) -> int:
    config = CONFIGS[args.config]
    try:
        blocks_file = load_blocks_file(args.blocks_file)
        if args.genesis:
            runtime = Runtime.from_genesis_file(args.genesis, config)
        else:
            runtime = Runtime(config)
            runtime.apply_genesis(blocks_file.genesis)
    except (OSError, json.JSONDecodeError, ValidationError, ValueError) as e:
        logger.error(f"Failed to load input: {e}")
        return 1

    logger.info(f"Executing {len(blocks_file.blocks)} blocks with {config!r}")
    return execute_all(runtime, blocks_file.blocks)


def cmd_demo(args) -> int:
    runtime = Runtime(CONFIGS[args.config])
    runtime.apply_genesis({"alice": 100, "bob": 0, "charlie": 0})
    return execute_all(runtime, demo_blocks())


def main(argv=None) -> int:
    parser = argparse.ArgumentParser(prog="palletchain", description="Pallet runtime block executor")
    parser.add_argument("--log-level", default="INFO", help="Logging level (default: INFO)")

    subparsers = parser.add_subparsers(dest="command", help="Sub-commands")

    p_run = subparsers.add_parser("run", help="Execute blocks from a JSON file")
    p_run.add_argument("blocks_file", help="JSON file with 'genesis' and 'blocks'")
    p_run.add_argument("--genesis", help="Genesis JSON file (overrides 'genesis' in the blocks file)")
    p_run.add_argument("--config", default="default", choices=sorted(CONFIGS), help="Runtime config preset")

    p_demo = subparsers.add_parser("demo", help="Run the built-in two-block scenario")
    p_demo.add_argument("--config", default="default", choices=sorted(CONFIGS), help="Runtime config preset")

    args = parser.parse_args(argv)

    logging.basicConfig(
        level=getattr(logging, str(args.log_level).upper(), logging.INFO),
        format='%(asctime)s %(levelname)s: %(message)s',
        datefmt='%H:%M:%S'
    )

    if args.command == "run":
        return cmd_run(args)
    elif args.command == "demo":
        return cmd_demo(args)

    parser.print_help()
    return 1


if __name__ == "__main__":
    sys.exit(main())
