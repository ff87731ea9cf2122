"""MongoDB (motor) store adapter.

Records of each resource live in a collection named after the resource, with
to-one relations embedded as sub-documents and to-many relations as arrays of
join documents (``{"tags": [{"tag": {"name": ...}}]}``).
"""

import re
from typing import Any, Dict, Iterable, List, Optional, Set, Tuple

import pymongo
from motor.motor_asyncio import (
    AsyncIOMotorClient,
    AsyncIOMotorCollection,
    AsyncIOMotorDatabase,
)

from filter_engine.exceptions import DatabaseError, UnresolvedMembershipError
from filter_engine.models.predicate import (
    Always,
    And,
    Exists,
    FieldPredicate,
    MembershipMarker,
    Not,
    Or,
    Predicate,
    Related,
)
from filter_engine.models.query import OrderSpec, PaginationWindow
from filter_engine.models.types import TEXT_MATCH_OPERATORS, FilterOperator, SortDirection
from filter_engine.sort import flatten_order
from filter_engine.store.base import AssociationLookup, StoreAdapter
from utils.logging import logger


def build_comparison(predicate: FieldPredicate) -> Any:
    """Build the MongoDB operator expression for one field predicate."""
    operator, value = predicate.operator, predicate.value

    if operator == FilterOperator.IS_NULL or (operator == FilterOperator.EQ and value is None):
        return None
    if operator == FilterOperator.IS_NOT_NULL or (operator == FilterOperator.NE and value is None):
        return {"$ne": None}

    if operator in TEXT_MATCH_OPERATORS:
        pattern = re.escape(str(value))
        if operator == FilterOperator.STARTS_WITH:
            pattern = f"^{pattern}"
        elif operator == FilterOperator.ENDS_WITH:
            pattern = f"{pattern}$"
        expression = {"$regex": pattern}
        if not predicate.case_sensitive:
            expression["$options"] = "i"
        return expression

    # ne and notIn exclude nulls, matching relational semantics
    if operator == FilterOperator.NE:
        return {"$nin": [value, None]}
    if operator == FilterOperator.NOT_IN:
        return {"$nin": list(value) + [None]}
    if operator == FilterOperator.IN:
        return {"$in": list(value)}

    operator_map = {
        FilterOperator.EQ: "$eq",
        FilterOperator.GT: "$gt",
        FilterOperator.GTE: "$gte",
        FilterOperator.LT: "$lt",
        FilterOperator.LTE: "$lte",
    }
    if operator not in operator_map:
        raise ValueError(f"Unsupported operator for MongoDB translation: {operator}")
    return {operator_map[operator]: value}


def build_filter_dict(predicate: Predicate, prefix: str = "") -> Dict:
    """Recursively build a MongoDB filter document from a compiled predicate.

    ``Related`` extends the dotted path prefix; ``Exists`` becomes ``$elemMatch``
    over the relation array with a fresh prefix.
    """
    if isinstance(predicate, Always):
        return {}
    if isinstance(predicate, FieldPredicate):
        return {f"{prefix}{predicate.field}": build_comparison(predicate)}
    if isinstance(predicate, Related):
        return build_filter_dict(predicate.predicate, f"{prefix}{predicate.relation}.")
    if isinstance(predicate, Exists):
        return {f"{prefix}{predicate.relation}": {"$elemMatch": build_filter_dict(predicate.predicate)}}
    if isinstance(predicate, MembershipMarker):
        raise UnresolvedMembershipError(f"Membership filter on '{predicate.relation}.{predicate.field}' was not resolved")

    operator_map = {
        And: "$and",
        Or: "$or",
    }
    if isinstance(predicate, (And, Or)):
        return {operator_map[type(predicate)]: [build_filter_dict(child, prefix) for child in predicate.children]}
    if isinstance(predicate, Not):
        return {"$nor": [build_filter_dict(predicate.child, prefix)]}
    raise TypeError(f"Unknown predicate node: {type(predicate).__name__}")


def build_sort(order_by: OrderSpec) -> List[Tuple[str, int]]:
    """Flatten a nested order spec into a pymongo sort list."""
    return [
        (path, pymongo.DESCENDING if direction == SortDirection.DESC else pymongo.ASCENDING)
        for path, direction in flatten_order(order_by)
    ]


class MongoStore(StoreAdapter):
    """Store adapter executing compiled queries with motor.

    Note: Use MongoStore.setup() to create an instance with indexes in place.
    """

    def __init__(self, mongodb_client: AsyncIOMotorClient, database_name: str) -> None:
        self.client = mongodb_client
        self._db: AsyncIOMotorDatabase = self.client.get_database(database_name)

    def _collection(self, record_type: str) -> AsyncIOMotorCollection:
        return self._db.get_collection(record_type)

    @classmethod
    async def setup(cls, mongodb_client: AsyncIOMotorClient, database_name: str, record_types: Iterable[str] = ()) -> "MongoStore":
        """Factory method to create a store and ensure list indexes exist."""
        try:
            store = cls(mongodb_client, database_name)

            for record_type in record_types:
                await store._collection(record_type).create_indexes(
                    [
                        # Record id lookups and membership intersections
                        pymongo.IndexModel([("id", 1)], unique=True, background=True),
                        # Default sort with soft delete filter
                        pymongo.IndexModel([("deleted", 1), ("createdAt", -1)], background=True),
                    ]
                )

            return store

        except Exception as e:
            raise DatabaseError(f"Failed to setup indexes: {str(e)}") from e

    async def find(
        self,
        record_type: str,
        where: Predicate,
        order_by: OrderSpec,
        window: PaginationWindow,
    ) -> Tuple[List[Dict[str, Any]], int]:
        query = build_filter_dict(where)
        sort = build_sort(order_by)
        try:
            logger.debug(f"Querying '{record_type}' with {query}, sort {sort}, skip {window.offset}, limit {window.limit}")
            collection = self._collection(record_type)
            cursor = collection.find(query, {"_id": 0})
            if sort:
                cursor = cursor.sort(sort)
            cursor = cursor.skip(window.offset).limit(window.limit)
            items = await cursor.to_list(length=window.limit)
            total = await collection.count_documents(query)
            return items, total
        except Exception as e:
            raise DatabaseError(f"Failed to query '{record_type}': {str(e)}") from e


class MongoAssociationLookup(AssociationLookup):
    """Reads group membership from the ``groups`` and ``group_items`` collections."""

    COLLECTION_GROUPS: str = "groups"
    COLLECTION_GROUP_ITEMS: str = "group_items"

    def __init__(self, mongodb_client: AsyncIOMotorClient, database_name: str) -> None:
        self.client = mongodb_client
        self._db: AsyncIOMotorDatabase = self.client.get_database(database_name)
        self._groups: AsyncIOMotorCollection = self._db.get_collection(self.COLLECTION_GROUPS)
        self._group_items: AsyncIOMotorCollection = self._db.get_collection(self.COLLECTION_GROUP_ITEMS)

    @classmethod
    async def setup(cls, mongodb_client: AsyncIOMotorClient, database_name: str) -> "MongoAssociationLookup":
        """Factory method to create a lookup and ensure its indexes exist."""
        try:
            lookup = cls(mongodb_client, database_name)

            await lookup._groups.create_indexes([pymongo.IndexModel([("name", 1)], background=True)])
            await lookup._group_items.create_indexes(
                [
                    # Compound index for membership resolution by item type
                    pymongo.IndexModel([("groupId", 1), ("itemType", 1)], background=True),
                    pymongo.IndexModel([("itemType", 1), ("itemId", 1)], background=True),
                ]
            )

            return lookup

        except Exception as e:
            raise DatabaseError(f"Failed to setup indexes: {str(e)}") from e

    async def find_group_ids(self, names: Optional[Iterable[str]] = None, name_contains: Optional[str] = None) -> Set[Any]:
        clauses = []
        if names:
            clauses.append({"name": {"$in": list(names)}})
        if name_contains:
            clauses.append({"name": {"$regex": re.escape(name_contains), "$options": "i"}})
        if not clauses:
            return set()

        try:
            cursor = self._groups.find({"$or": clauses}, {"id": 1, "_id": 0})
            docs = await cursor.to_list(length=None)
            return {doc["id"] for doc in docs}
        except Exception as e:
            raise DatabaseError(f"Failed to look up groups: {str(e)}") from e

    async def find_item_ids(self, group_ids: Iterable[Any], item_type: str) -> Set[Any]:
        try:
            cursor = self._group_items.find({"groupId": {"$in": list(group_ids)}, "itemType": item_type}, {"itemId": 1, "_id": 0})
            docs = await cursor.to_list(length=None)
            return {doc["itemId"] for doc in docs}
        except Exception as e:
            raise DatabaseError(f"Failed to look up group items: {str(e)}") from e
