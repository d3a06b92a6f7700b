"""
Vocabulary Validators

Pure functions that check raw strings against the closed annotation
vocabularies. Each returns `Success(<enum member>)` or a `Failure` carrying
the tagged error, including the offending value and the full valid set.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, List, Optional, Type, TypeVar

from ..annotation.vocabulary import (
    Category,
    Label,
    RelationType,
    options,
    subtype_enum_for,
)
from ..core.errors import (
    InvalidCategoryError,
    InvalidRelationTypeError,
    InvalidSubtypeError,
)
from ..core.result import Result, failure, success

EnumT = TypeVar("EnumT", bound=Enum)


def _raw(value: Any) -> str:
    """Return the plain string form of a value that may already be an enum member."""
    if isinstance(value, Enum):
        return str(value.value)
    return str(value)


def _parse(enum_cls: Type[EnumT], value: Any) -> Optional[EnumT]:
    try:
        return enum_cls(_raw(value))
    except ValueError:
        return None


def validate_category(category: str) -> Result[Category, InvalidCategoryError]:
    """Validate that a string names a known category."""
    parsed = _parse(Category, category)
    if parsed is None:
        valid = options(Category)
        return failure(
            InvalidCategoryError(
                category=_raw(category),
                valid_options=valid,
                message=f"Invalid category '{_raw(category)}'. Valid options: {', '.join(valid)}",
            )
        )
    return success(parsed)


def validate_label(label: str) -> Result[Label, InvalidCategoryError]:
    """
    Validate that a string is a known label.

    Label errors share the InvalidCategory wire shape.
    """
    parsed = _parse(Label, label)
    if parsed is None:
        valid = options(Label)
        return failure(
            InvalidCategoryError(
                category=_raw(label),
                valid_options=valid,
                message=f"Invalid label '{_raw(label)}'. Valid options: {', '.join(valid)}",
            )
        )
    return success(parsed)


def get_valid_subtypes_for_category(category: Category) -> List[str]:
    return options(subtype_enum_for(category))


def validate_subtype_for_category(
    category: Category,
    subtype: str,
) -> Result[str, InvalidSubtypeError]:
    """Validate that `subtype` belongs to the vocabulary of `category`."""
    parsed = _parse(subtype_enum_for(category), subtype)
    if parsed is None:
        valid = get_valid_subtypes_for_category(category)
        return failure(
            InvalidSubtypeError(
                subtype=_raw(subtype),
                category=category.value,
                valid_options=valid,
                message=(
                    f"Invalid subtype '{_raw(subtype)}' for category '{category.value}'. "
                    f"Valid options: {', '.join(valid)}"
                ),
            )
        )
    return success(parsed.value)


def validate_relation_type(relation_type: str) -> Result[RelationType, InvalidRelationTypeError]:
    """Validate that a string names a known relation kind."""
    parsed = _parse(RelationType, relation_type)
    if parsed is None:
        valid = options(RelationType)
        return failure(
            InvalidRelationTypeError(
                relation_type=_raw(relation_type),
                valid_options=valid,
                message=(
                    f"Invalid relation type '{_raw(relation_type)}'. "
                    f"Valid options: {', '.join(valid)}"
                ),
            )
        )
    return success(parsed)
