"""
palletforge.renderer - Template Rendering
=========================================

Renders one template against a :class:`PalletConfig`. Templates are
compiled in the environment from :mod:`palletforge.expressions`, after the
dialect check, so a template that reaches rendering can only fail on an
unbound name or an unknown collection.

A template's top-level ``{% set %}`` bindings are part of its output: they
name the obligations the file honours for the configuration it was rendered
with (e.g. ``balances_dependency``). :func:`render_module` returns the text
and those bindings from a single render.

Template Set
------------
:class:`TemplateSet` holds one compiled template per :class:`FileRole`.
The packaged catalog is loaded by :func:`load_template_set`; tests and
callers can build sets from raw sources with :meth:`TemplateSet.from_sources`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING, Any

from jinja2 import Environment, PackageLoader, Template

from palletforge.errors import TemplateError
from palletforge.expressions import check_dialect, create_jinja_env, ensure_bound, expression_context
from palletforge.models import FileRole


if TYPE_CHECKING:
    from collections.abc import Mapping

    from palletforge.models import PalletConfig


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class RenderResult:
    """Text of one rendered template and the bindings it exported."""

    text: str
    bindings: Mapping[str, Any]


# =============================================================================
# Compilation
# =============================================================================


def compile_template(env: Environment, source: str, name: str | None = None) -> Template:
    """
    Check ``source`` against the dialect and compile it.

    Raises
    ------
    TemplateDialectError
        If the source uses an unsupported construct.
    UnknownFilter
        If the source uses an unregistered filter.
    """
    check_dialect(env, source, name)
    return env.from_string(source)


# =============================================================================
# Rendering
# =============================================================================


def render(template: Template | str, config: PalletConfig) -> str:
    """
    Render a single template with the pallet configuration.

    Parameters
    ----------
    template : Template | str
        A compiled template, or a source string compiled in a fresh
        environment.
    config : PalletConfig
        Configuration to render against.

    Returns
    -------
    str
        The rendered text. Identical inputs always give identical output.
    """
    if isinstance(template, str):
        template = compile_template(create_jinja_env(), template)
    return render_module(template, config).text


def render_module(template: Template, config: PalletConfig) -> RenderResult:
    """
    Render a template and collect its top-level bindings.

    Bindings whose name starts with an underscore are private to the
    template and are not exported, but like every other binding they must
    not refer to an unbound name.

    Raises
    ------
    UnboundIdentifier
        If the template reads, or binds, a name with no binding.
    UnknownCollection
        If ``contains`` is asked about an unknown collection.
    """
    context = template.new_context(expression_context(config))
    try:
        text = template.environment.concat(template.root_render_func(context))
    except Exception:
        template.environment.handle_exception()

    for key, value in context.vars.items():
        ensure_bound(key, value)

    return RenderResult(text=text, bindings=MappingProxyType(context.get_exported()))


# =============================================================================
# Template sets
# =============================================================================


@dataclass(frozen=True)
class TemplateSet:
    """
    One compiled template per file-role.

    Attributes
    ----------
    env : Environment
        The environment the templates were compiled in.
    templates : Mapping[FileRole, Template]
        Compiled template for each role.
    """

    env: Environment
    templates: Mapping[FileRole, Template]

    @classmethod
    def from_sources(
        cls,
        sources: Mapping[FileRole, str],
        env: Environment | None = None,
    ) -> TemplateSet:
        """Compile a template set from raw sources."""
        env = env or create_jinja_env()
        templates = {
            role: compile_template(env, source, role.template_name)
            for role, source in sources.items()
        }
        return cls(env=env, templates=MappingProxyType(templates))

    def missing_roles(self) -> list[FileRole]:
        """Roles that have no template in this set."""
        return [role for role in FileRole if role not in self.templates]

    def __getitem__(self, role: FileRole) -> Template:
        return self.templates[role]


def template_sources(package: str = "palletforge", path: str = "templates") -> dict[FileRole, str]:
    """
    Read the packaged template source for every file-role.

    Raises
    ------
    TemplateError
        If a role has no packaged template.
    """
    loader = PackageLoader(package, path)
    env = create_jinja_env(loader)

    available = set(loader.list_templates())
    sources: dict[FileRole, str] = {}
    for role in FileRole:
        if role.template_name not in available:
            raise TemplateError(f"No template '{role.template_name}' for role '{role.value}'")
        source, _, _ = loader.get_source(env, role.template_name)
        sources[role] = source
    return sources


def load_template_set(package: str = "palletforge", path: str = "templates") -> TemplateSet:
    """Load and compile the packaged template catalog."""
    sources = template_sources(package, path)
    logger.debug("Loaded %d templates from %s/%s", len(sources), package, path)
    return TemplateSet.from_sources(sources, create_jinja_env(PackageLoader(package, path)))
