"""
Annotation Vocabularies

Closed vocabularies for chunk annotations. Every value accepted by the
annotation core must belong to one of these enumerations.
"""

from __future__ import annotations

from enum import Enum
from typing import Dict, List, Type


class Category(str, Enum):
    FEE_SCHEDULE = "fee_schedule"
    FOOTNOTES = "footnotes"


class Label(str, Enum):
    FEE_SCHEDULE = "Fee Schedule"
    FOOTNOTES = "Footnotes"


class FeeScheduleSubtype(str, Enum):
    PARTICIPANT_FEE = "participant_fee"
    LEGAL_REGULATORY_FEE = "legal_regulatory_fee"
    PORT_FEES_AND_OTHER_SERVICES = "port_fees_and_other_services"
    MARKET_DATA_FEES = "market_data_fees"
    FEES_AND_REBATES = "fees_and_rebates"


class FootnotesSubtype(str, Enum):
    REFERENCE = "reference"


class RelationType(str, Enum):
    DEPENDENCIES = "dependencies"
    FOOTNOTES = "footnotes"
    REFERENCES = "references"


def options(enum_cls: Type[Enum]) -> List[str]:
    """Return the string values of an enumeration in declaration order."""
    return [member.value for member in enum_cls]


def subtype_enum_for(category: Category) -> Type[Enum]:
    """
    Return the subtype enumeration that belongs to a category.

    The final arm is unreachable while every Category member has a case above.
    """
    if category is Category.FEE_SCHEDULE:
        return FeeScheduleSubtype
    if category is Category.FOOTNOTES:
        return FootnotesSubtype

    raise AssertionError(f"Unhandled category: {category!r}")


SUBTYPES_BY_CATEGORY: Dict[Category, List[str]] = {
    category: options(subtype_enum_for(category)) for category in Category
}
