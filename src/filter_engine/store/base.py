"""Store adapter and association lookup interfaces."""

from abc import ABC, abstractmethod
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

from filter_engine.models.predicate import Predicate
from filter_engine.models.query import OrderSpec, PaginationWindow


class StoreAdapter(ABC):
    """Executes a compiled query for a named record type."""

    @abstractmethod
    async def find(
        self,
        record_type: str,
        where: Predicate,
        order_by: OrderSpec,
        window: PaginationWindow,
    ) -> Tuple[List[Dict[str, Any]], int]:
        """Return one page of matching records and the total match count.

        Must support scalar predicates, nested to-one navigation, to-many
        ``Exists`` quantifiers and AND/OR/NOT combinations.
        """
        pass


class AssociationLookup(ABC):
    """Reads the polymorphic group association table."""

    @abstractmethod
    async def find_group_ids(self, names: Optional[Iterable[str]] = None, name_contains: Optional[str] = None) -> Set[Any]:
        """Ids of groups whose name is in ``names`` or contains ``name_contains`` (case-insensitive)."""
        pass

    @abstractmethod
    async def find_item_ids(self, group_ids: Iterable[Any], item_type: str) -> Set[Any]:
        """Ids of items of ``item_type`` belonging to any of ``group_ids``."""
        pass
