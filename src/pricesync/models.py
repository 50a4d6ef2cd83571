"""Value objects passed between pipeline stages.

CRITICAL: All balances and prices use Decimal. Never use float for token or SOL amounts.

Fields the RPC may omit are modeled as ``X | None`` so every consumer has to
handle the absent case explicitly instead of relying on missing dict keys.
"""

from dataclasses import dataclass
from decimal import Decimal
from enum import Enum
from typing import Any


class TradeType(str, Enum):
    """Direction of a priced trade from the signer's point of view."""

    BUY = "buy"
    SELL = "sell"


@dataclass(frozen=True)
class SignatureRecord:
    """One entry of a venue's transaction history (getSignaturesForAddress)."""

    signature: str
    err: Any  # None if the transaction succeeded
    block_time: int | None
    slot: int | None = None

    @property
    def succeeded(self) -> bool:
        return self.err is None

    @classmethod
    def from_rpc(cls, item: dict[str, Any]) -> "SignatureRecord":
        """Build from a single getSignaturesForAddress result item."""
        return cls(
            signature=item["signature"],
            err=item.get("err"),
            block_time=item.get("blockTime"),
            slot=item.get("slot"),
        )


@dataclass(frozen=True)
class TokenBalance:
    """Token account balance snapshot taken before or after a transaction.

    ``amount`` is the raw integer amount (not scaled by decimals).
    """

    account_index: int
    mint: str
    owner: str | None
    amount: int

    @classmethod
    def from_rpc(cls, item: dict[str, Any]) -> "TokenBalance":
        ui_amount = item.get("uiTokenAmount") or {}
        return cls(
            account_index=int(item.get("accountIndex", -1)),
            mint=item["mint"],
            owner=item.get("owner"),
            amount=int(ui_amount.get("amount") or 0),
        )


@dataclass(frozen=True)
class AccountKey:
    """Account referenced by a transaction message."""

    pubkey: str
    signer: bool


@dataclass(frozen=True)
class Instruction:
    """Top-level instruction of a transaction.

    ``data`` is the base58 instruction data for instructions the RPC could not
    parse (compute budget instructions are always returned this way).
    """

    program_id: str
    data: str | None = None


@dataclass(frozen=True)
class DecodedTransaction:
    """Fetched transaction body with the metadata needed for pricing."""

    signature: str
    account_keys: tuple[AccountKey, ...]
    instructions: tuple[Instruction, ...]
    fee: int
    compute_units_consumed: int | None
    pre_balances: tuple[int, ...] | None
    post_balances: tuple[int, ...] | None
    pre_token_balances: tuple[TokenBalance, ...] | None
    post_token_balances: tuple[TokenBalance, ...] | None
    block_time: int | None

    @property
    def signers(self) -> list[tuple[int, str]]:
        """(account index, pubkey) for every signing account."""
        return [
            (index, key.pubkey)
            for index, key in enumerate(self.account_keys)
            if key.signer
        ]

    @classmethod
    def from_rpc(cls, item: dict[str, Any]) -> "DecodedTransaction":
        """Build from a jsonParsed getTransaction result."""
        transaction = item.get("transaction") or {}
        message = transaction.get("message") or {}
        meta = item.get("meta") or {}

        account_keys = []
        for key in message.get("accountKeys") or []:
            if isinstance(key, str):
                account_keys.append(AccountKey(pubkey=key, signer=False))
            else:
                account_keys.append(
                    AccountKey(pubkey=key["pubkey"], signer=bool(key.get("signer")))
                )

        instructions = tuple(
            Instruction(program_id=ins["programId"], data=ins.get("data"))
            for ins in message.get("instructions") or []
            if "programId" in ins
        )

        def _balances(key: str) -> tuple[int, ...] | None:
            values = meta.get(key)
            return tuple(int(v) for v in values) if values is not None else None

        def _token_balances(key: str) -> tuple[TokenBalance, ...] | None:
            values = meta.get(key)
            if values is None:
                return None
            return tuple(TokenBalance.from_rpc(v) for v in values)

        signatures = transaction.get("signatures") or [""]
        return cls(
            signature=signatures[0],
            account_keys=tuple(account_keys),
            instructions=instructions,
            fee=int(meta.get("fee") or 0),
            compute_units_consumed=meta.get("computeUnitsConsumed"),
            pre_balances=_balances("preBalances"),
            post_balances=_balances("postBalances"),
            pre_token_balances=_token_balances("preTokenBalances"),
            post_token_balances=_token_balances("postTokenBalances"),
            block_time=item.get("blockTime"),
        )


@dataclass(frozen=True)
class PricedTrade:
    """One derived buy/sell event attributed to one signer in one transaction.

    Token balances are scaled by the mint decimals, SOL balances are whole SOL
    with fees added back to the post balance. ``date`` is the block time in
    unix seconds.
    """

    signature: str
    mint: str
    type: TradeType
    owner: str
    pre_token_balance: Decimal
    post_token_balance: Decimal
    pre_sol_balance: Decimal
    post_sol_balance: Decimal
    price: Decimal
    date: int


@dataclass(frozen=True)
class HistoricPrice:
    """One point of a price chart."""

    time: int
    price: Decimal
