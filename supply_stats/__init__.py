"""Circulating supply and staking stats for a Cosmos SDK chain."""

__version__ = "0.1.0"
