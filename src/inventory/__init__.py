"""Inventory resources served by the filter engine."""

from inventory.resources import RESOURCES, get_resource

__all__ = ["RESOURCES", "get_resource"]
