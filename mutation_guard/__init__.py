"""Mutation Guard - Policy-checked, snapshot-backed file mutations for coding agents"""

__version__ = "0.1.0"
