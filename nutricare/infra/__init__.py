"""
Infrastructure - storage implementations of the domain access contracts.
"""
from .memory_store import InMemoryClinicalStore

__all__ = ["InMemoryClinicalStore"]
