"""Shared test fixtures for the price history service."""

import struct

import base58
import pytest

from pricesync.config import SyncSettings
from pricesync.models import AccountKey, DecodedTransaction, Instruction, TokenBalance
from pricesync.solana.addresses import COMPUTE_BUDGET_PROGRAM_ID

MINT = "EPjFWdd5AufqSSqeM2qN1xzybapC8G4wEGGkZsaAkJ9"
OTHER_MINT = "Es9vMFrzaCERmJfrF4H2FYD4KCoNkY11McCe8BenwNYB"
TRADER = "TraderAaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa"
POOL_ACCOUNT = "PoolAaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaaa"


def compute_unit_price_data(micro_lamports: int) -> str:
    """Base58 data of a SetComputeUnitPrice instruction."""
    return base58.b58encode(bytes([3]) + struct.pack("<Q", micro_lamports)).decode()


def make_transaction(
    signature: str = "sig1",
    pre_token: int | None = 5_000_000,
    post_token: int | None = 3_000_000,
    pre_lamports: int = 1_000_000_000,
    post_lamports: int = 1_499_995_000,
    fee: int = 5_000,
    block_time: int | None = 1_700_000_000,
    micro_lamports: int | None = None,
    compute_units: int | None = None,
    mint: str = MINT,
) -> DecodedTransaction:
    """Single-signer transaction where TRADER's balance of ``mint`` moves.

    Defaults describe a sell of 2 tokens for 0.5 SOL (after fee add-back).
    Passing None for a token amount omits that snapshot entry.
    """
    instructions: tuple[Instruction, ...] = ()
    if micro_lamports is not None:
        instructions = (
            Instruction(COMPUTE_BUDGET_PROGRAM_ID, compute_unit_price_data(micro_lamports)),
        )

    def _snapshot(amount: int | None) -> tuple[TokenBalance, ...]:
        if amount is None:
            return ()
        return (TokenBalance(account_index=2, mint=mint, owner=TRADER, amount=amount),)

    return DecodedTransaction(
        signature=signature,
        account_keys=(
            AccountKey(TRADER, signer=True),
            AccountKey(POOL_ACCOUNT, signer=False),
        ),
        instructions=instructions,
        fee=fee,
        compute_units_consumed=compute_units,
        pre_balances=(pre_lamports, 2_000_000_000),
        post_balances=(post_lamports, 2_000_000_000),
        pre_token_balances=_snapshot(pre_token),
        post_token_balances=_snapshot(post_token),
        block_time=block_time,
    )


@pytest.fixture
def sync_settings() -> SyncSettings:
    """Sync settings with every delay disabled."""
    return SyncSettings(
        page_delay=0.0,
        batch_delay=0.0,
        retry_delay=0.0,
        scan_interval=1,
    )

