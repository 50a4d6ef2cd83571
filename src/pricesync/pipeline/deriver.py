"""Implied trade price derivation from a transaction's balance deltas.

For every signer whose token balance moved, the price is the token delta
divided by the SOL delta, with the base fee and the priority fee added back to
the post SOL balance so the SOL delta reflects only the trade itself.

CRITICAL: amounts stay Decimal end to end. A degenerate division reports a
price of 0, never NaN or Infinity.
"""

from collections.abc import Iterable
from decimal import Decimal, InvalidOperation

from pricesync.models import DecodedTransaction, PricedTrade, TokenBalance, TradeType
from pricesync.solana.addresses import LAMPORTS_PER_SOL
from pricesync.solana.compute_budget import priority_fee_lamports

DEFAULT_TOKEN_DECIMALS = 6

_ZERO = Decimal("0")
_LAMPORTS = Decimal(LAMPORTS_PER_SOL)


def _token_balance(
    balances: Iterable[TokenBalance], owner: str, mint: str, scale: Decimal
) -> Decimal:
    """Scaled balance of ``owner`` for ``mint``; absent entries count as zero."""
    for balance in balances:
        if balance.owner == owner and balance.mint == mint:
            return Decimal(balance.amount) / scale
    return _ZERO


def safe_price(token_delta: Decimal, sol_delta: Decimal) -> Decimal:
    """|token_delta| / |sol_delta|, clamped to 0 when not a finite non-negative number."""
    denominator = abs(sol_delta)
    if denominator == 0:
        return _ZERO
    try:
        price = abs(token_delta) / denominator
    except (InvalidOperation, ZeroDivisionError):
        return _ZERO
    if not price.is_finite() or price < 0:
        return _ZERO
    return price


def derive_prices(
    tx: DecodedTransaction,
    mint: str,
    decimals: int = DEFAULT_TOKEN_DECIMALS,
) -> list[PricedTrade]:
    """Emit one PricedTrade per signer whose ``mint`` balance changed in ``tx``.

    Transactions missing token snapshots, SOL balances or a block time yield
    nothing; that is expected for some transaction shapes and not an error.
    """
    if (
        tx.pre_token_balances is None
        or tx.post_token_balances is None
        or tx.pre_balances is None
        or tx.post_balances is None
        or tx.block_time is None
    ):
        return []

    scale = Decimal(10) ** decimals
    priority_fee: int | None = None
    trades: list[PricedTrade] = []

    for index, owner in tx.signers:
        pre_token = _token_balance(tx.pre_token_balances, owner, mint, scale)
        post_token = _token_balance(tx.post_token_balances, owner, mint, scale)
        if pre_token == post_token:
            continue

        if index >= len(tx.pre_balances) or index >= len(tx.post_balances):
            continue

        # Same for every signer, so decode the instructions once
        if priority_fee is None:
            priority_fee = priority_fee_lamports(tx.instructions, tx.compute_units_consumed)

        pre_sol = Decimal(tx.pre_balances[index]) / _LAMPORTS
        post_sol = Decimal(tx.post_balances[index] + tx.fee + priority_fee) / _LAMPORTS

        trade_type = TradeType.SELL if post_token < pre_token else TradeType.BUY

        trades.append(
            PricedTrade(
                signature=tx.signature,
                mint=mint,
                type=trade_type,
                owner=owner,
                pre_token_balance=pre_token,
                post_token_balance=post_token,
                pre_sol_balance=pre_sol,
                post_sol_balance=post_sol,
                price=safe_price(pre_token - post_token, pre_sol - post_sol),
                date=tx.block_time,
            )
        )

    return trades
