"""
palletforge.models - Pydantic Models for Pallet Configuration
=============================================================

This module defines the data the generation engine consumes. The main model,
:class:`PalletConfig`, is immutable: it is built once per scaffolding request
and read concurrently by every file-role render.

Architecture Notes
------------------
The models are organized as follows:

    PalletConfig (main, frozen)
    ├── name: str
    ├── common_types: frozenset[CommonType]
    ├── storage_shapes: frozenset[StorageShape]
    ├── custom_origin / default_config / genesis_config / in_workspace: bool
    └── authors / description: str (opaque)

    FileRole (enum) names each slot of the generated module.

Usage Example
-------------
>>> from palletforge.models import CommonType, PalletConfig
>>> config = PalletConfig(name="pricefeed", common_types={CommonType.CURRENCY})
>>> config.names.capitalized
'Pricefeed'
>>> config.contains("common_types", "Currency")
True
"""

from __future__ import annotations

import re
import tomllib
from enum import Enum
from typing import TYPE_CHECKING, Any

import tomlkit
from pydantic import BaseModel, ConfigDict, Field, PrivateAttr, ValidationError, field_validator

from palletforge.errors import InvalidConfiguration, UnknownCollection
from palletforge.naming import NameForms


if TYPE_CHECKING:
    from collections.abc import Mapping
    from pathlib import Path


IDENTIFIER_PATTERN = re.compile(r"^[A-Za-z][A-Za-z0-9_]*$")


# =============================================================================
# Enumerations
# =============================================================================

class CommonType(str, Enum):
    """
    Runtime types a pallet can declare in its ``Config`` trait.

    Attributes
    ----------
    RUNTIME_EVENT : str
        The overarching event type, needed to deposit events.

    RUNTIME_ORIGIN : str
        The overarching origin type, needed to dispatch with custom origins.

    CURRENCY : str
        A fungible currency with holds and freezes, backed by the balances
        pallet in the mock runtime.
    """

    RUNTIME_EVENT = "RuntimeEvent"
    RUNTIME_ORIGIN = "RuntimeOrigin"
    CURRENCY = "Currency"

    @property
    def description(self) -> str:
        descriptions = {
            CommonType.RUNTIME_EVENT: "This type will enable your pallet to emit events.",
            CommonType.RUNTIME_ORIGIN: "This type will be helpful if your pallet needs to deal with the outer RuntimeOrigin enum, or if your pallet needs to use custom origins.",
            CommonType.CURRENCY: "This type will allow your pallet to manage fungible assets with holds and freezes.",
        }
        return descriptions[self]


class StorageShape(str, Enum):
    """
    Storage patterns a pallet can scaffold.

    The value is the FRAME storage type the generated code declares.
    """

    STORAGE_VALUE = "StorageValue"
    STORAGE_MAP = "StorageMap"
    COUNTED_STORAGE_MAP = "CountedStorageMap"
    STORAGE_DOUBLE_MAP = "StorageDoubleMap"
    STORAGE_N_MAP = "StorageNMap"
    COUNTED_STORAGE_N_MAP = "CountedStorageNMap"

    @property
    def description(self) -> str:
        descriptions = {
            StorageShape.STORAGE_VALUE: "A single value stored in the runtime.",
            StorageShape.STORAGE_MAP: "A key-value map.",
            StorageShape.COUNTED_STORAGE_MAP: "A key-value map that tracks its number of entries.",
            StorageShape.STORAGE_DOUBLE_MAP: "A map with two keys.",
            StorageShape.STORAGE_N_MAP: "A map with an arbitrary number of keys.",
            StorageShape.COUNTED_STORAGE_N_MAP: "An N-key map that tracks its number of entries.",
        }
        return descriptions[self]

    @property
    def item_name(self) -> str:
        """Name of the storage item the templates declare for this shape."""
        return f"My{self.value}"

    @property
    def rule_name(self) -> str:
        """
        Snake-case key used for this shape's cross-file rule and bindings.

        >>> StorageShape.COUNTED_STORAGE_N_MAP.rule_name
        'counted_storage_n_map'
        """
        return re.sub(r"(?<!^)(?=[A-Z])", "_", self.value).lower()


class FileRole(str, Enum):
    """
    Named slots of a generated pallet.

    Each role is rendered from its own template against the same
    configuration; the coordinator checks them against each other.
    """

    MANIFEST = "manifest"
    LIB = "lib"
    CONFIG_DEFAULTS = "config_defaults"
    TYPE_ALIASES = "type_aliases"
    BUSINESS_LOGIC = "business_logic"
    MOCK_ENVIRONMENT = "mock_environment"
    TESTS = "tests"

    @property
    def template_name(self) -> str:
        """Name of the packaged template asset for this role."""
        return f"{self.value}.j2"


# =============================================================================
# Main Configuration Model
# =============================================================================

class PalletConfig(BaseModel):
    """
    Complete, read-only description of a pallet to scaffold.

    Attributes
    ----------
    name : str
        Base identifier of the pallet. Must start with a letter and contain
        only ASCII letters, digits and underscores. Its case is preserved.

    common_types : frozenset[CommonType]
        Runtime types declared in the pallet's ``Config`` trait.

    storage_shapes : frozenset[StorageShape]
        Storage items to scaffold, one per shape.

    custom_origin : bool
        Scaffold a pallet-specific origin. Origin code is gated on this flag
        OR ``RuntimeOrigin`` being in ``common_types``.

    default_config : bool
        Derive the ``Config`` implementation from a shared default prelude.

    genesis_config : bool
        Scaffold a genesis configuration for the pallet's storage.

    in_workspace : bool
        Inherit package settings from an enclosing workspace manifest.

    authors, description : str
        Copied verbatim into the manifest.

    Examples
    --------
    >>> config = PalletConfig(name="pricefeed", custom_origin=True)
    >>> config.origin_enabled
    True
    """

    model_config = ConfigDict(frozen=True, extra="forbid")

    name: str = Field(
        description="Pallet identifier",
        min_length=1,
        max_length=100,
    )
    authors: str = Field(
        default="Anonymous",
        description="Authors written to the manifest",
    )
    description: str = Field(
        default="Frame Pallet",
        description="Short pallet description",
    )
    common_types: frozenset[CommonType] = Field(
        default_factory=frozenset,
        description="Runtime types used by the pallet",
    )
    storage_shapes: frozenset[StorageShape] = Field(
        default_factory=frozenset,
        description="Storage items to scaffold",
    )
    custom_origin: bool = Field(
        default=False,
        description="Scaffold a custom origin",
    )
    default_config: bool = Field(
        default=False,
        description="Derive the config from a default prelude",
    )
    genesis_config: bool = Field(
        default=False,
        description="Scaffold a genesis configuration",
    )
    in_workspace: bool = Field(
        default=False,
        description="Inherit workspace package settings",
    )

    _names: NameForms = PrivateAttr()

    # -------------------------------------------------------------------------
    # Validators
    # -------------------------------------------------------------------------

    @field_validator("name")
    @classmethod
    def validate_identifier(cls, v: str) -> str:
        """
        Reject names that are not bare identifiers.

        Raises
        ------
        ValueError
            If the name is empty, does not start with a letter, or contains
            anything other than ASCII letters, digits and underscores.
        """
        if not IDENTIFIER_PATTERN.fullmatch(v):
            msg = (
                f"Invalid pallet name '{v}'. Names must start with a letter "
                "and contain only letters, numbers and underscores."
            )
            raise ValueError(msg)
        return v

    def model_post_init(self, __context: Any) -> None:
        self._names = NameForms.derive(self.name)

    # -------------------------------------------------------------------------
    # Computed Properties
    # -------------------------------------------------------------------------

    @property
    def names(self) -> NameForms:
        """Spellings of ``name`` computed once for the whole request."""
        return self._names

    @property
    def origin_enabled(self) -> bool:
        """Whether any origin-related code is scaffolded."""
        return self.custom_origin or CommonType.RUNTIME_ORIGIN in self.common_types

    @property
    def collections(self) -> dict[str, frozenset[str]]:
        """Named collections visible to ``contains`` in templates."""
        return {
            "common_types": frozenset(t.value for t in self.common_types),
            "storage_shapes": frozenset(s.value for s in self.storage_shapes),
        }

    def contains(self, collection: str, member: str | Enum) -> bool:
        """
        Membership test used by template expressions.

        ``member`` may be a plain value or an enum member; an unknown value
        is simply not contained.

        Raises
        ------
        UnknownCollection
            If ``collection`` is not a collection of this model.
        """
        collections = self.collections
        if collection not in collections:
            raise UnknownCollection(collection)
        if isinstance(member, Enum):
            member = member.value
        return member in collections[collection]

    def template_context(self) -> dict[str, Any]:
        """Scalar values a template may substitute or test."""
        return {
            "name": self.name,
            "authors": self.authors,
            "description": self.description,
            "custom_origin": self.custom_origin,
            "default_config": self.default_config,
            "genesis_config": self.genesis_config,
            "in_workspace": self.in_workspace,
        }

    # -------------------------------------------------------------------------
    # Construction at the input boundary
    # -------------------------------------------------------------------------

    @classmethod
    def from_mapping(cls, data: Mapping[str, Any]) -> PalletConfig:
        """
        Build a configuration from plain data.

        Raises
        ------
        InvalidConfiguration
            If any field fails validation.
        """
        try:
            return cls.model_validate(dict(data))
        except ValidationError as e:
            raise InvalidConfiguration(str(e)) from e

    @classmethod
    def from_toml(cls, path: Path) -> PalletConfig:
        """
        Load a configuration from a TOML file.

        Keys may sit at the top level or under a ``[pallet]`` table.

        Raises
        ------
        FileNotFoundError
            If the file doesn't exist.
        InvalidConfiguration
            If the file is not valid TOML or has invalid values.
        """
        with open(path, "rb") as f:
            try:
                data = tomllib.load(f)
            except tomllib.TOMLDecodeError as e:
                raise InvalidConfiguration(f"Invalid TOML in {path}: {e}") from e

        return cls.from_mapping(data.get("pallet", data))

    def to_toml(self) -> str:
        """Serialize the configuration under a ``[pallet]`` table."""
        data = self.model_dump(mode="json")
        data["common_types"] = sorted(data["common_types"])
        data["storage_shapes"] = sorted(data["storage_shapes"])

        document = tomlkit.document()
        document.add("pallet", data)
        return tomlkit.dumps(document)
