"""Constants and enums for the filter type system."""

from enum import Enum
from typing import Dict, List


class FieldType(str, Enum):
    """Field types a filter condition can declare."""

    INT = "INT"
    FLOAT = "FLOAT"
    STRING = "STRING"
    BOOLEAN = "BOOLEAN"
    DATE = "DATE"
    DATETIME = "DATETIME"
    ARRAY = "ARRAY"
    JSON = "JSON"


class FilterOperator(str, Enum):
    """Operators a filter condition can use."""

    EQ = "eq"
    NE = "ne"
    GT = "gt"
    GTE = "gte"
    LT = "lt"
    LTE = "lte"
    IN = "in"
    NOT_IN = "notIn"
    CONTAINS = "contains"  # case-insensitive unless caseSensitive is set
    STARTS_WITH = "startsWith"
    ENDS_WITH = "endsWith"
    BETWEEN = "between"  # [start, end]
    IS_NULL = "isNull"
    IS_NOT_NULL = "isNotNull"


class ConditionType(str, Enum):
    """Boolean combinators for filter groups."""

    AND = "and"
    OR = "or"
    NOT = "not"


class SortDirection(str, Enum):
    """Sort order options."""

    ASC = "asc"
    DESC = "desc"


BASE_OPERATORS: List[FilterOperator] = [FilterOperator.EQ, FilterOperator.NE]

NULL_OPERATORS: List[FilterOperator] = [FilterOperator.IS_NULL, FilterOperator.IS_NOT_NULL]

NUMERIC_OPERATORS: List[FilterOperator] = [
    FilterOperator.GT,
    FilterOperator.GTE,
    FilterOperator.LT,
    FilterOperator.LTE,
    FilterOperator.IN,
    FilterOperator.NOT_IN,
]

STRING_OPERATORS: List[FilterOperator] = [
    FilterOperator.CONTAINS,
    FilterOperator.STARTS_WITH,
    FilterOperator.ENDS_WITH,
    FilterOperator.IN,
    FilterOperator.NOT_IN,
]

DATE_OPERATORS: List[FilterOperator] = [
    FilterOperator.GT,
    FilterOperator.GTE,
    FilterOperator.LT,
    FilterOperator.LTE,
    FilterOperator.BETWEEN,
]

ARRAY_OPERATORS: List[FilterOperator] = [FilterOperator.IN, FilterOperator.NOT_IN]

# Operators added on top of BASE_OPERATORS for each field type
TYPE_OPERATORS: Dict[FieldType, List[FilterOperator]] = {
    FieldType.INT: NUMERIC_OPERATORS,
    FieldType.FLOAT: NUMERIC_OPERATORS,
    FieldType.STRING: STRING_OPERATORS,
    FieldType.BOOLEAN: [],
    FieldType.DATE: DATE_OPERATORS,
    FieldType.DATETIME: DATE_OPERATORS,
    FieldType.ARRAY: ARRAY_OPERATORS,
    FieldType.JSON: [],
}

# Operators whose value is a text fragment
TEXT_MATCH_OPERATORS = frozenset({FilterOperator.CONTAINS, FilterOperator.STARTS_WITH, FilterOperator.ENDS_WITH})
