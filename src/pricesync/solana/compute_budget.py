"""Compute budget instruction decoding and priority fee computation.

The RPC never parses compute budget instructions, so their data arrives as a
base58 string: a one-byte discriminator followed by little-endian arguments.
"""

import struct
from collections.abc import Iterable

import base58

from pricesync.models import Instruction
from pricesync.solana.addresses import (
    COMPUTE_BUDGET_PROGRAM_ID,
    MICRO_LAMPORTS_PER_LAMPORT,
)

SET_COMPUTE_UNIT_PRICE = 3


def decode_compute_unit_price(data: str) -> int | None:
    """Return the micro-lamport price of a SetComputeUnitPrice instruction.

    Returns None for any other compute budget instruction or undecodable data.
    """
    try:
        raw = base58.b58decode(data)
    except ValueError:
        return None
    if len(raw) < 9 or raw[0] != SET_COMPUTE_UNIT_PRICE:
        return None
    return struct.unpack_from("<Q", raw, 1)[0]


def priority_fee_lamports(
    instructions: Iterable[Instruction],
    compute_units_consumed: int | None,
) -> int:
    """Priority fee in lamports: floor(units consumed * micro-lamport price / 1e6).

    The last SetComputeUnitPrice instruction wins, matching runtime behavior.
    Returns 0 when the transaction declares no compute unit price.
    """
    micro_lamports = 0
    for ins in instructions:
        if ins.program_id != COMPUTE_BUDGET_PROGRAM_ID or not ins.data:
            continue
        price = decode_compute_unit_price(ins.data)
        if price is not None:
            micro_lamports = price

    units = compute_units_consumed or 0
    return (units * micro_lamports) // MICRO_LAMPORTS_PER_LAMPORT
