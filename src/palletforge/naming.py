"""
palletforge.naming - Identifier Case Transforms
===============================================

Pure string functions applied at substitution sites. They are registered as
the only filters of the template environment, so every file-role derives a
spelling of the pallet name through exactly the same code.

>>> capitalize("pricefeed")
'Pricefeed'
>>> lower("PriceFeed")
'pricefeed'
"""

from __future__ import annotations

from dataclasses import dataclass
from enum import Enum


class FilterKind(str, Enum):
    """Name transforms available at a substitution site."""

    NONE = "none"
    LOWER = "lower"
    CAPITALIZE = "capitalize"


def lower(text: str) -> str:
    """Lower-case the whole string."""
    return text.lower()


def capitalize(text: str) -> str:
    """
    Upper-case the first character and leave the rest untouched.

    Unlike :meth:`str.capitalize` (and Jinja2's builtin filter) the remainder
    is not lower-cased, so ``capitalize("priceFeed")`` is ``"PriceFeed"``.
    """
    return text[:1].upper() + text[1:]


def transform(text: str, kind: FilterKind = FilterKind.NONE) -> str:
    """Apply the transform named by ``kind``; ``NONE`` returns ``text`` as is."""
    if kind is FilterKind.LOWER:
        return lower(text)
    if kind is FilterKind.CAPITALIZE:
        return capitalize(text)
    return text


# Filters exposed to templates. "none" is the absence of a filter.
TEMPLATE_FILTERS = {
    FilterKind.LOWER.value: lower,
    FilterKind.CAPITALIZE.value: capitalize,
}


@dataclass(frozen=True)
class NameForms:
    """Every spelling of the pallet name used across a generated module."""

    raw: str
    lower: str
    capitalized: str

    @classmethod
    def derive(cls, name: str) -> NameForms:
        return cls(
            raw=name,
            lower=transform(name, FilterKind.LOWER),
            capitalized=transform(name, FilterKind.CAPITALIZE),
        )

    @property
    def crate_name(self) -> str:
        """Package name written to the manifest, e.g. ``pallet-pricefeed``."""
        return f"pallet-{self.lower}"
