"""Field type and operator catalog."""

from filter_engine.models.types.base import BaseType
from filter_engine.models.types.constants import (
    BASE_OPERATORS,
    DATE_OPERATORS,
    NULL_OPERATORS,
    NUMERIC_OPERATORS,
    STRING_OPERATORS,
    TEXT_MATCH_OPERATORS,
    ConditionType,
    FieldType,
    FilterOperator,
    SortDirection,
)
from filter_engine.models.types.implementations import (
    ArrayType,
    BooleanType,
    DateTimeType,
    DateType,
    FloatType,
    IntType,
    JsonType,
    StringType,
)
from filter_engine.models.types.registry import TypeRegistry

__all__ = [
    "ArrayType",
    "BASE_OPERATORS",
    "BaseType",
    "BooleanType",
    "ConditionType",
    "DATE_OPERATORS",
    "DateTimeType",
    "DateType",
    "FieldType",
    "FilterOperator",
    "FloatType",
    "IntType",
    "JsonType",
    "NULL_OPERATORS",
    "NUMERIC_OPERATORS",
    "STRING_OPERATORS",
    "SortDirection",
    "StringType",
    "TEXT_MATCH_OPERATORS",
    "TypeRegistry",
]
