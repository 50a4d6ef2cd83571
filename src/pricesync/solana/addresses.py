"""Well-known Solana addresses and program-derived address helpers."""

from solders.pubkey import Pubkey

NATIVE_MINT = "So11111111111111111111111111111111111111112"
COMPUTE_BUDGET_PROGRAM_ID = "ComputeBudget111111111111111111111111111111"
PUMPFUN_PROGRAM_ID = "6EF8rrecthR5Dkzon8Nwu78hRvfCKubJ14M5uBEwF6P"

LAMPORTS_PER_SOL = 1_000_000_000
MICRO_LAMPORTS_PER_LAMPORT = 1_000_000

BONDING_CURVE_SEED = b"bonding-curve"


def find_bonding_curve_address(mint: str, program_id: str = PUMPFUN_PROGRAM_ID) -> str:
    """Derive the bonding-curve account for a mint under a launchpad program.

    Seeds are the ``bonding-curve`` tag followed by the raw mint bytes; the
    bump search is the standard off-curve derivation, so the result is the
    same for the same inputs on every call.
    """
    address, _bump = Pubkey.find_program_address(
        [BONDING_CURVE_SEED, bytes(Pubkey.from_string(mint))],
        Pubkey.from_string(program_id),
    )
    return str(address)
