"""
Core domain models, mathematical primitives, and invariants.

This module contains the pricing and trade-simulation core of the vAMM
perpetual exchange. Every entry point is a pure function of an immutable
market snapshot; nothing here talks to the network or mutates a ledger.
"""
