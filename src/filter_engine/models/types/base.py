"""Base type class for field type implementations."""

from abc import ABC, abstractmethod
from typing import Any, List

from filter_engine.models.types.constants import (
    BASE_OPERATORS,
    NULL_OPERATORS,
    TYPE_OPERATORS,
    FieldType,
    FilterOperator,
)


class BaseType(ABC):
    """Base class for all field types."""

    field_type: FieldType

    @abstractmethod
    def coerce(self, value: Any) -> Any:
        """Convert a raw filter value to the correct type.

        Args:
            value: Raw value as received on the wire

        Returns:
            Converted value

        Raises:
            ValueError: If value cannot be converted to the correct type
        """
        pass

    def coerce_many(self, values: List[Any]) -> List[Any]:
        """Convert every element of a list value."""
        return [self.coerce(value) for value in values]

    def get_operators(self, is_optional: bool = False) -> List[FilterOperator]:
        """Get the operators legal for this type.

        Args:
            is_optional: Whether the field is nullable

        Returns:
            Operators in catalog order, null checks last
        """
        operators = list(BASE_OPERATORS)
        operators.extend(TYPE_OPERATORS.get(self.field_type, []))
        if is_optional:
            operators.extend(NULL_OPERATORS)
        return operators

    def supports(self, operator: FilterOperator, is_optional: bool = False) -> bool:
        """Check if this type accepts a given operator."""
        return operator in self.get_operators(is_optional)

    @classmethod
    def get_field_type(cls) -> FieldType:
        """Get the field type this implementation handles."""
        return cls.field_type
