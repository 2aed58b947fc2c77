"""Discover Solana RPC endpoints via gossip and keep the ones that answer."""

__version__ = "1.0.0"
