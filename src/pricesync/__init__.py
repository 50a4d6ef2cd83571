"""On-chain price history derivation for Solana tokens."""

__version__ = "0.1.0"
