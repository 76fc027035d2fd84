"""
pytest configuration and shared fixtures for palletforge tests.

Fixtures defined here are automatically available to all tests.

Fixtures
--------
template_set : TemplateSet
    The packaged template catalog, compiled once per session.

sources : dict[FileRole, str]
    Raw packaged template sources, fresh for each test so they can be edited.

base_config : PalletConfig
    A pallet with no optional features.

currency_config : PalletConfig
    A pallet using the Currency common type without default derivation.
"""

import pytest

from palletforge.models import CommonType, FileRole, PalletConfig
from palletforge.renderer import TemplateSet, load_template_set, template_sources


@pytest.fixture(scope="session")
def template_set() -> TemplateSet:
    """Compile the packaged templates once for the whole session."""
    return load_template_set()


@pytest.fixture
def sources() -> dict[FileRole, str]:
    """Provide editable copies of the packaged template sources."""
    return template_sources()


@pytest.fixture
def base_config() -> PalletConfig:
    """Create a pallet configuration with every option off."""
    return PalletConfig(name="pricefeed")


@pytest.fixture
def currency_config() -> PalletConfig:
    """Create a pallet that manages a currency, fully specified config."""
    return PalletConfig(
        name="pricefeed",
        common_types={CommonType.CURRENCY},
        default_config=False,
    )


# =============================================================================
# pytest Configuration
# =============================================================================

def pytest_configure(config: pytest.Config) -> None:
    """Register custom markers used in the test suite."""
    config.addinivalue_line(
        "markers", "slow: marks tests as slow (deselect with '-m \"not slow\"')"
    )
