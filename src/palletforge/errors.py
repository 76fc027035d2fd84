"""
palletforge.errors - Error Taxonomy
===================================

Every failure raised by the generation engine derives from
:class:`PalletForgeError`. All of them are fatal to the current generation
request: nothing is retried and no partial module is ever returned.

Hierarchy
---------
::

    PalletForgeError
    ├── InvalidConfiguration      malformed input at the boundary
    ├── TemplateError             template / engine mismatch
    │   ├── UnboundIdentifier
    │   ├── UnknownCollection
    │   ├── UnknownFilter
    │   └── TemplateDialectError
    └── InconsistentConfiguration cross-file rule violated
"""

from __future__ import annotations

from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from collections.abc import Iterable

    from palletforge.models import FileRole


class PalletForgeError(Exception):
    """Base class for all palletforge errors."""


class InvalidConfiguration(PalletForgeError):
    """The configuration handed to the engine violates a precondition."""


class TemplateError(PalletForgeError):
    """A template references something the engine does not provide."""


class UnboundIdentifier(TemplateError):
    """An expression referenced a name that has no binding."""


class UnknownCollection(TemplateError):
    """``contains`` was asked about a collection the configuration lacks."""

    def __init__(self, collection: str) -> None:
        self.collection = collection
        super().__init__(f"Unknown configuration collection '{collection}'")


class UnknownFilter(TemplateError):
    """A substitution marker used a filter that is not registered."""

    def __init__(self, name: str) -> None:
        self.filter_name = name
        super().__init__(f"Unknown filter '{name}'")


class TemplateDialectError(TemplateError):
    """A template uses a construct outside the supported dialect."""


class InconsistentConfiguration(PalletForgeError):
    """
    A valid configuration breaks a cross-file rule.

    Attributes
    ----------
    rule : str
        Name of the violated rule (e.g. ``"currency"``).
    expected : bool
        Whether the rule's feature is enabled for the configuration.
    conflicting : tuple[FileRole, ...]
        Roles whose obligation disagrees with ``expected``.
    agreeing : tuple[FileRole, ...]
        Roles whose obligation matches ``expected``.
    """

    def __init__(
        self,
        rule: str,
        *,
        expected: bool,
        conflicting: Iterable[FileRole],
        agreeing: Iterable[FileRole] = (),
    ) -> None:
        self.rule = rule
        self.expected = expected
        self.conflicting = tuple(conflicting)
        self.agreeing = tuple(agreeing)

        state = "enabled" if expected else "disabled"
        missing = ", ".join(role.value for role in self.conflicting)
        message = f"Rule '{rule}' ({state}) is not honoured by: {missing}"
        if self.agreeing:
            others = ", ".join(role.value for role in self.agreeing)
            message += f" (honoured by: {others})"
        super().__init__(message)
