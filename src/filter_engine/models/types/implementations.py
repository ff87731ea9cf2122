"""Field type implementations."""

from datetime import date, datetime
from typing import Any

from filter_engine.models.types.base import BaseType
from filter_engine.models.types.constants import FieldType


class IntType(BaseType):
    field_type = FieldType.INT

    def coerce(self, value: Any) -> int:
        if isinstance(value, bool):
            raise ValueError(f"Cannot convert boolean {value} to integer")
        if isinstance(value, int):
            return value
        if isinstance(value, float):
            if not value.is_integer():
                raise ValueError(f"Cannot convert {value} to integer without losing precision")
            return int(value)
        if isinstance(value, str):
            try:
                return int(value.strip())
            except ValueError:
                raise ValueError(f"Cannot convert '{value}' to integer")
        raise ValueError(f"Cannot convert {type(value).__name__} to integer")


class FloatType(BaseType):
    field_type = FieldType.FLOAT

    def coerce(self, value: Any) -> float:
        if isinstance(value, bool):
            raise ValueError(f"Cannot convert boolean {value} to float")
        if isinstance(value, (int, float)):
            return float(value)
        if isinstance(value, str):
            try:
                return float(value.strip())
            except ValueError:
                raise ValueError(f"Cannot convert '{value}' to float")
        raise ValueError(f"Cannot convert {type(value).__name__} to float")


class StringType(BaseType):
    field_type = FieldType.STRING

    def coerce(self, value: Any) -> str:
        if isinstance(value, str):
            return value
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        raise ValueError(f"Cannot convert {type(value).__name__} to string")


class BooleanType(BaseType):
    field_type = FieldType.BOOLEAN

    TRUE_VALUES = {"true", "1", "yes", "y", "t"}
    FALSE_VALUES = {"false", "0", "no", "n", "f"}

    def coerce(self, value: Any) -> bool:
        if isinstance(value, bool):
            return value
        if isinstance(value, int) and value in (0, 1):
            return bool(value)
        if isinstance(value, str):
            lowered = value.strip().lower()
            if lowered in self.TRUE_VALUES:
                return True
            if lowered in self.FALSE_VALUES:
                return False
        raise ValueError(f"Cannot convert {value!r} to boolean")


class DateType(BaseType):
    """Date values are resolved by the date resolver; coercion only checks the shape."""

    field_type = FieldType.DATE

    def coerce(self, value: Any) -> Any:
        if isinstance(value, (str, date, datetime)):
            return value
        raise ValueError(f"Cannot use {type(value).__name__} as a date")


class DateTimeType(DateType):
    field_type = FieldType.DATETIME


class ArrayType(BaseType):
    field_type = FieldType.ARRAY

    def coerce(self, value: Any) -> Any:
        # Elements of an array field keep their own types
        return value


class JsonType(BaseType):
    field_type = FieldType.JSON

    def coerce(self, value: Any) -> Any:
        return value
