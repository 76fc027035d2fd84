"""
palletforge - FRAME Pallet Scaffolder
=====================================

Generates a complete pallet crate (manifest, pallet entry point, default
config preludes, type aliases, business logic, mock runtime and tests) from
a small declarative configuration, and guarantees the generated files agree
with each other.

Quick Start
-----------
```bash
palletforge new pricefeed --common-type Currency --storage StorageMap
```

Example
-------
>>> from palletforge import CommonType, FileRole, PalletConfig, generate_module
>>> module = generate_module(PalletConfig(name="pricefeed", common_types={CommonType.CURRENCY}))
>>> "pallet-balances" in module[FileRole.MANIFEST]
True

Architecture
------------
- ``models``: Pydantic configuration model and enums
- ``naming``: Case transforms used at substitution sites
- ``expressions``: Template dialect and expression evaluation
- ``renderer``: Template compilation and rendering
- ``coordinator``: Rendering the file set and cross-file rules
- ``generator``: Writing a crate to disk
- ``cli``: Typer command line interface
"""

# =============================================================================
# Package Metadata
# =============================================================================
__version__ = "0.1.0"
__license__ = "MIT"

# =============================================================================
# Public API Exports
# =============================================================================

from palletforge.coordinator import RULES, Rule, generate_module
from palletforge.errors import (
    InconsistentConfiguration,
    InvalidConfiguration,
    PalletForgeError,
    TemplateDialectError,
    UnboundIdentifier,
    UnknownCollection,
    UnknownFilter,
)
from palletforge.generator import create_pallet
from palletforge.models import CommonType, FileRole, PalletConfig, StorageShape


__all__ = [
    "RULES",
    # Configuration models
    "CommonType",
    "FileRole",
    # Errors
    "InconsistentConfiguration",
    "InvalidConfiguration",
    "PalletConfig",
    "PalletForgeError",
    "Rule",
    "StorageShape",
    "TemplateDialectError",
    "UnboundIdentifier",
    "UnknownCollection",
    "UnknownFilter",
    # Version info
    "__version__",
    # Core functions
    "create_pallet",
    "generate_module",
]
