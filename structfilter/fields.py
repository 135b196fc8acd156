"""Field discovery for filter sources.

A filter source is a pydantic model instance or a dataclass instance. Each of
its fields is described by a serialization name, the raw filter annotation and
the field's current value, in declaration order.
"""

import dataclasses
import logging
from typing import Any, Iterator, NamedTuple, Optional

from pydantic import BaseModel

from structfilter.config import get_settings

logger = logging.getLogger(__name__)

# Suffix modifiers that may follow the name in a "json" metadata entry
_NAME_MODIFIERS = (",omitempty", ",optional")


class FieldDescriptor(NamedTuple):
    """Filter-relevant view of a single field."""

    serialization_name: str
    annotation: str
    value: Any


def strip_name_modifiers(name: str) -> str:
    """Strip omit-if-empty style modifiers from a serialization name.

    Examples:
        >>> strip_name_modifiers("name,omitempty")
        'name'
        >>> strip_name_modifiers("age,optional")
        'age'
    """
    for modifier in _NAME_MODIFIERS:
        idx = name.find(modifier)
        if idx != -1:
            return name[:idx].strip()
    return name.strip()


def _schema_extra_annotation(extra: Any, tag_key: str) -> str:
    """Read the filter annotation from a pydantic json_schema_extra value."""
    if isinstance(extra, dict):
        annotation = extra.get(tag_key, "")
        return annotation if isinstance(annotation, str) else ""
    return ""


def _describe_model(dest: BaseModel, tag_key: str) -> Iterator[FieldDescriptor]:
    """Describe the fields of a pydantic model instance."""
    for attr_name, info in type(dest).model_fields.items():
        name = info.serialization_alias or info.alias or attr_name
        yield FieldDescriptor(
            serialization_name=strip_name_modifiers(name),
            annotation=_schema_extra_annotation(info.json_schema_extra, tag_key),
            value=getattr(dest, attr_name),
        )


def _describe_dataclass(dest: Any, tag_key: str) -> Iterator[FieldDescriptor]:
    """Describe the fields of a dataclass instance."""
    for f in dataclasses.fields(dest):
        name = f.metadata.get("json") or f.name
        annotation = f.metadata.get(tag_key, "")
        yield FieldDescriptor(
            serialization_name=strip_name_modifiers(name),
            annotation=annotation if isinstance(annotation, str) else "",
            value=getattr(dest, f.name),
        )


def is_filter_source(dest: Any) -> bool:
    """Check if an object is a model or dataclass instance."""
    if isinstance(dest, BaseModel):
        return True
    return dataclasses.is_dataclass(dest) and not isinstance(dest, type)


def describe_fields(dest: Any, tag_key: Optional[str] = None) -> list[FieldDescriptor]:
    """Describe the fields of a filter source.

    Args:
        dest: A pydantic model instance or a dataclass instance
        tag_key: Metadata key holding the filter annotation (default from settings)

    Returns:
        One descriptor per field in declaration order, or an empty list if dest
        is not a filter source
    """
    if tag_key is None:
        tag_key = get_settings().tag_key

    if isinstance(dest, BaseModel):
        return list(_describe_model(dest, tag_key))
    if is_filter_source(dest):
        return list(_describe_dataclass(dest, tag_key))

    logger.debug("Not a filter source: %s", type(dest).__name__)
    return []


def field_values(dest: Any) -> dict[str, Any]:
    """Map serialization names to current values for every named field."""
    return {
        descriptor.serialization_name: descriptor.value
        for descriptor in describe_fields(dest)
        if descriptor.serialization_name
    }
