"""Tests for compute budget instruction decoding and priority fees."""

import struct

import base58
from conftest import compute_unit_price_data

from pricesync.models import Instruction
from pricesync.solana.addresses import COMPUTE_BUDGET_PROGRAM_ID
from pricesync.solana.compute_budget import (
    decode_compute_unit_price,
    priority_fee_lamports,
)

TOKEN_PROGRAM = "TokenkegQfeZyiNwAJbNbGKPFXCWuBvf9Ss623VQ5DA"


class TestDecodeComputeUnitPrice:
    def test_decodes_micro_lamports(self) -> None:
        assert decode_compute_unit_price(compute_unit_price_data(25_000)) == 25_000

    def test_large_u64_price(self) -> None:
        assert decode_compute_unit_price(compute_unit_price_data(2**63)) == 2**63

    def test_set_compute_unit_limit_is_ignored(self) -> None:
        data = base58.b58encode(bytes([2]) + struct.pack("<I", 200_000)).decode()
        assert decode_compute_unit_price(data) is None

    def test_truncated_data(self) -> None:
        data = base58.b58encode(bytes([3, 1, 2])).decode()
        assert decode_compute_unit_price(data) is None

    def test_invalid_base58(self) -> None:
        assert decode_compute_unit_price("0OIl") is None


class TestPriorityFee:
    def test_no_instructions(self) -> None:
        assert priority_fee_lamports([], 200_000) == 0

    def test_floor_of_units_times_price(self) -> None:
        instructions = [
            Instruction(COMPUTE_BUDGET_PROGRAM_ID, compute_unit_price_data(1_500)),
        ]
        # 100_001 * 1_500 / 1e6 = 150.0015
        assert priority_fee_lamports(instructions, 100_001) == 150

    def test_other_programs_are_ignored(self) -> None:
        instructions = [Instruction(TOKEN_PROGRAM, compute_unit_price_data(1_000_000))]
        assert priority_fee_lamports(instructions, 100_000) == 0

    def test_last_price_wins(self) -> None:
        instructions = [
            Instruction(COMPUTE_BUDGET_PROGRAM_ID, compute_unit_price_data(1_000_000)),
            Instruction(COMPUTE_BUDGET_PROGRAM_ID, compute_unit_price_data(2_000_000)),
        ]
        assert priority_fee_lamports(instructions, 10) == 20

    def test_missing_compute_units(self) -> None:
        instructions = [
            Instruction(COMPUTE_BUDGET_PROGRAM_ID, compute_unit_price_data(1_000_000)),
        ]
        assert priority_fee_lamports(instructions, None) == 0
