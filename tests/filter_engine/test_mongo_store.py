"""Tests for the MongoDB store adapter."""

from datetime import datetime
from unittest.mock import AsyncMock, MagicMock

import pymongo
import pytest
import pytz

from filter_engine.exceptions import DatabaseError, UnresolvedMembershipError
from filter_engine.models.predicate import ALWAYS, And, Exists, FieldPredicate, MembershipMarker, Not, Or, Related
from filter_engine.models.query import PaginationWindow
from filter_engine.models.types import FilterOperator
from filter_engine.store.mongo import (
    MongoAssociationLookup,
    MongoStore,
    build_comparison,
    build_filter_dict,
    build_sort,
)

OP = FilterOperator


class TestBuildComparison:
    @pytest.mark.parametrize(
        "predicate, expected",
        [
            (FieldPredicate("port", OP.EQ, 80), {"$eq": 80}),
            (FieldPredicate("port", OP.GT, 80), {"$gt": 80}),
            (FieldPredicate("port", OP.GTE, 80), {"$gte": 80}),
            (FieldPredicate("port", OP.LT, 80), {"$lt": 80}),
            (FieldPredicate("port", OP.LTE, 80), {"$lte": 80}),
            (FieldPredicate("port", OP.IN, (80, 443)), {"$in": [80, 443]}),
            (FieldPredicate("port", OP.IN, ()), {"$in": []}),
        ],
    )
    def test_comparisons(self, predicate, expected):
        assert build_comparison(predicate) == expected

    def test_negations_exclude_nulls(self):
        assert build_comparison(FieldPredicate("status", OP.NE, "done")) == {"$nin": ["done", None]}
        assert build_comparison(FieldPredicate("status", OP.NOT_IN, ("done", "paused"))) == {"$nin": ["done", "paused", None]}

    def test_null_checks(self):
        assert build_comparison(FieldPredicate("dueDate", OP.IS_NULL)) is None
        assert build_comparison(FieldPredicate("dueDate", OP.EQ, None)) is None
        assert build_comparison(FieldPredicate("dueDate", OP.IS_NOT_NULL)) == {"$ne": None}
        assert build_comparison(FieldPredicate("dueDate", OP.NE, None)) == {"$ne": None}

    def test_text_match_escapes_and_anchors(self):
        contains = FieldPredicate("name", OP.CONTAINS, "a.b", case_sensitive=False)
        starts = FieldPredicate("name", OP.STARTS_WITH, "web", case_sensitive=True)
        ends = FieldPredicate("name", OP.ENDS_WITH, "-api", case_sensitive=False)

        assert build_comparison(contains) == {"$regex": r"a\.b", "$options": "i"}
        assert build_comparison(starts) == {"$regex": "^web"}
        assert build_comparison(ends) == {"$regex": r"\-api$", "$options": "i"}

    def test_between_is_not_a_field_operator(self):
        with pytest.raises(ValueError):
            build_comparison(FieldPredicate("port", OP.BETWEEN, (1, 2)))


class TestBuildFilterDict:
    def test_no_constraint(self):
        assert build_filter_dict(ALWAYS) == {}

    def test_related_extends_the_path(self):
        predicate = Related("assignedToUser", FieldPredicate("email", OP.EQ, "a@example.com"))

        assert build_filter_dict(predicate) == {"assignedToUser.email": {"$eq": "a@example.com"}}

    def test_exists_becomes_elem_match(self):
        predicate = Exists("tags", Related("tag", FieldPredicate("name", OP.EQ, "prod")))

        assert build_filter_dict(predicate) == {"tags": {"$elemMatch": {"tag.name": {"$eq": "prod"}}}}

    def test_exists_below_related(self):
        predicate = Related("service", Exists("servers", Related("server", FieldPredicate("name", OP.EQ, "web-1"))))

        assert build_filter_dict(predicate) == {"service.servers": {"$elemMatch": {"server.name": {"$eq": "web-1"}}}}

    def test_boolean_combinators(self):
        status = FieldPredicate("status", OP.EQ, "pending")
        due = FieldPredicate("dueDate", OP.LT, datetime(2025, 3, 12, tzinfo=pytz.UTC))

        assert build_filter_dict(And((status, due))) == {
            "$and": [{"status": {"$eq": "pending"}}, {"dueDate": {"$lt": datetime(2025, 3, 12, tzinfo=pytz.UTC)}}]
        }
        assert build_filter_dict(Or((status, due)))["$or"][0] == {"status": {"$eq": "pending"}}
        assert build_filter_dict(Not(status)) == {"$nor": [{"status": {"$eq": "pending"}}]}

    def test_unresolved_marker_raises(self):
        marker = MembershipMarker(relation="groups", field="name", operator=OP.EQ, value="G1")

        with pytest.raises(UnresolvedMembershipError):
            build_filter_dict(And((FieldPredicate("id", OP.EQ, 1), marker)))


def test_build_sort():
    assert build_sort([{"assignedToUser": {"name": "desc"}}, {"dueDate": "asc"}]) == [
        ("assignedToUser.name", pymongo.DESCENDING),
        ("dueDate", pymongo.ASCENDING),
    ]


def create_mock_cursor(docs: list) -> MagicMock:
    """Create a chainable cursor mock."""
    cursor = MagicMock()
    cursor.sort.return_value = cursor
    cursor.skip.return_value = cursor
    cursor.limit.return_value = cursor
    cursor.to_list = AsyncMock(return_value=docs)
    return cursor


@pytest.fixture
def mock_collection() -> MagicMock:
    collection = MagicMock()
    collection.create_indexes = AsyncMock(return_value=[])
    collection.count_documents = AsyncMock(return_value=7)
    collection.find.return_value = create_mock_cursor([{"id": 3, "name": "search-api"}])
    return collection


@pytest.fixture
def mock_client(mock_collection: MagicMock) -> MagicMock:
    db = MagicMock()
    db.get_collection.return_value = mock_collection
    client = MagicMock()
    client.get_database.return_value = db
    return client


class TestMongoStore:
    @pytest.mark.asyncio
    async def test_setup_creates_indexes(self, mock_client, mock_collection):
        await MongoStore.setup(mock_client, "inventory", record_types=["tasks", "services"])

        assert mock_collection.create_indexes.await_count == 2
        indexes = mock_collection.create_indexes.call_args[0][0]
        assert [index.document["key"] for index in indexes] == [{"id": 1}, {"deleted": 1, "createdAt": -1}]

    @pytest.mark.asyncio
    async def test_setup_failure(self, mock_client, mock_collection):
        mock_collection.create_indexes.side_effect = Exception("no connection")

        with pytest.raises(DatabaseError):
            await MongoStore.setup(mock_client, "inventory", record_types=["tasks"])

    @pytest.mark.asyncio
    async def test_find(self, mock_client, mock_collection):
        store = MongoStore(mock_client, "inventory")
        where = Exists("tags", Related("tag", FieldPredicate("name", OP.EQ, "prod")))

        items, total = await store.find("services", where, {"createdAt": "desc"}, PaginationWindow(page=3, limit=10))

        assert items == [{"id": 3, "name": "search-api"}]
        assert total == 7
        expected_query = {"tags": {"$elemMatch": {"tag.name": {"$eq": "prod"}}}}
        mock_collection.find.assert_called_once_with(expected_query, {"_id": 0})
        cursor = mock_collection.find.return_value
        cursor.sort.assert_called_once_with([("createdAt", pymongo.DESCENDING)])
        cursor.skip.assert_called_once_with(20)
        cursor.limit.assert_called_once_with(10)
        mock_collection.count_documents.assert_awaited_once_with(expected_query)

    @pytest.mark.asyncio
    async def test_find_failure(self, mock_client, mock_collection):
        mock_collection.count_documents.side_effect = Exception("timeout")
        store = MongoStore(mock_client, "inventory")

        with pytest.raises(DatabaseError):
            await store.find("services", ALWAYS, {"createdAt": "desc"}, PaginationWindow())


class TestMongoAssociationLookup:
    @pytest.mark.asyncio
    async def test_find_group_ids(self, mock_client, mock_collection):
        mock_collection.find.return_value = create_mock_cursor([{"id": 1}, {"id": 2}])
        lookup = MongoAssociationLookup(mock_client, "inventory")

        assert await lookup.find_group_ids(names=["G1"], name_contains="pay") == {1, 2}
        query = mock_collection.find.call_args[0][0]
        assert query == {"$or": [{"name": {"$in": ["G1"]}}, {"name": {"$regex": "pay", "$options": "i"}}]}

    @pytest.mark.asyncio
    async def test_find_group_ids_without_criteria(self, mock_client, mock_collection):
        lookup = MongoAssociationLookup(mock_client, "inventory")

        assert await lookup.find_group_ids() == set()
        mock_collection.find.assert_not_called()

    @pytest.mark.asyncio
    async def test_find_item_ids(self, mock_client, mock_collection):
        mock_collection.find.return_value = create_mock_cursor([{"itemId": "1"}, {"itemId": "2"}, {"itemId": "1"}])
        lookup = MongoAssociationLookup(mock_client, "inventory")

        assert await lookup.find_item_ids({1, 2}, "service") == {"1", "2"}
        query = mock_collection.find.call_args[0][0]
        assert query["itemType"] == "service"
        assert sorted(query["groupId"]["$in"]) == [1, 2]

    @pytest.mark.asyncio
    async def test_lookup_failure(self, mock_client, mock_collection):
        mock_collection.find.side_effect = Exception("timeout")
        lookup = MongoAssociationLookup(mock_client, "inventory")

        with pytest.raises(DatabaseError):
            await lookup.find_item_ids({1}, "service")
