"""
Test suite for the vAMM pricing core

Contains:
- tests/unit/          : Unit tests for math, domain models and contracts
"""
