"""Base schema classes."""

from collections.abc import Mapping
from types import MappingProxyType
from typing import Any

from pydantic import BaseModel, ConfigDict, SerializerFunctionWrapHandler


class FrozenModel(BaseModel):
    """Base for report value objects: immutable once built, readable from ORM rows."""

    model_config = ConfigDict(frozen=True, from_attributes=True)


def read_only_mapping(value: dict[str, Any]) -> Mapping[str, Any]:
    """After-validator for dict fields of frozen models.

    ``frozen=True`` only blocks attribute assignment, so mapping fields are
    wrapped in a read-only view as well.
    """
    return MappingProxyType(value)


def serialize_mapping(value: Mapping[str, Any], handler: SerializerFunctionWrapHandler) -> Any:
    return handler(dict(value))
