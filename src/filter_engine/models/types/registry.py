"""Registry for type implementations."""

from typing import Dict, List, Type

from filter_engine.models.types.base import BaseType
from filter_engine.models.types.constants import FieldType, FilterOperator
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


class TypeRegistry:
    """Registry for type implementations.

    The registry is the authoritative operator catalog the API surface uses to
    restrict what clients may submit. The compiler itself accepts any operator.
    """

    _types: Dict[str, Type[BaseType]] = {
        FieldType.INT.value: IntType,
        FieldType.FLOAT.value: FloatType,
        FieldType.STRING.value: StringType,
        FieldType.BOOLEAN.value: BooleanType,
        FieldType.DATE.value: DateType,
        FieldType.DATETIME.value: DateTimeType,
        FieldType.ARRAY.value: ArrayType,
        FieldType.JSON.value: JsonType,
    }

    @classmethod
    def register_type(cls, type_class: Type[BaseType]) -> None:
        """Register a new type implementation.

        Args:
            type_class: Type class to register
        """
        cls._types[type_class.get_field_type().value] = type_class

    @classmethod
    def get_type(cls, field_type: FieldType) -> BaseType:
        """Get a type instance for a field type.

        Args:
            field_type: Field type to get instance for

        Returns:
            Type instance

        Raises:
            ValueError: If no type exists for the field type
        """
        type_class = cls._types.get(getattr(field_type, "value", field_type))
        if not type_class:
            raise ValueError(f"No type registered for field type: {field_type}")
        return type_class()

    @classmethod
    def get_operators(cls, field_type: FieldType, is_optional: bool = False) -> List[FilterOperator]:
        """Get supported operators for a field type.

        Args:
            field_type: The type of the field
            is_optional: Whether the field is optional/nullable

        Returns:
            List of supported operators
        """
        return cls.get_type(field_type).get_operators(is_optional)

    @classmethod
    def get_all_supported_operators(cls) -> Dict[FieldType, List[FilterOperator]]:
        """Get all supported operators grouped by field type, nullable variant."""
        return {field_type: cls.get_operators(field_type, is_optional=True) for field_type in FieldType}
