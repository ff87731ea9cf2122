"""Store adapters executing compiled queries."""

from filter_engine.store.base import AssociationLookup, StoreAdapter
from filter_engine.store.memory import InMemoryAssociationLookup, InMemoryStore

__all__ = ["AssociationLookup", "InMemoryAssociationLookup", "InMemoryStore", "StoreAdapter"]
