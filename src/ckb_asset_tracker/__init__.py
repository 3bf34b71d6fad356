"""Classify fungible-token and NFT asset events in Nervos CKB transactions."""

__version__ = "0.1.0"
