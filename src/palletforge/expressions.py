"""
palletforge.expressions - Conditional Expression Dialect
========================================================

Templates are Jinja2 sources restricted to a small dialect. This module owns
that dialect: the configured environment, the static check that rejects
anything outside it, and :func:`evaluate`, which evaluates one expression
against a configuration.

Dialect
-------
Expressions may use:

- boolean literals ``true`` / ``false`` and string literals
- ``not``, ``and``, ``or`` (short-circuit)
- ``==`` and ``!=``
- ``contains("<collection>", "<member>")``
- names: configuration fields (``name``, ``custom_origin``, ...) and
  ``{% set %}`` bindings made earlier in the same template

Statements are limited to ``if``/``elif``/``else``/``endif`` and
``set``. Substitutions may apply the filters registered in
:mod:`palletforge.naming`. Loops, macros, includes, attribute access,
arithmetic and any other call are rejected before rendering.

Errors
------
- a name with no binding raises :class:`UnboundIdentifier` when it is used;
- ``contains`` on an unknown collection raises :class:`UnknownCollection`;
- an unregistered filter raises :class:`UnknownFilter` at parse time.

>>> from palletforge.models import PalletConfig
>>> evaluate('custom_origin or contains("common_types", "RuntimeOrigin")',
...          PalletConfig(name="pricefeed", custom_origin=True))
True
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Any

from jinja2 import (
    BaseLoader,
    Environment,
    StrictUndefined,
    TemplateSyntaxError,
    Undefined,
    nodes,
)
from jinja2.utils import missing

from palletforge.errors import TemplateDialectError, UnboundIdentifier, UnknownFilter
from palletforge.naming import TEMPLATE_FILTERS


if TYPE_CHECKING:
    from collections.abc import Mapping

    from palletforge.models import PalletConfig


logger = logging.getLogger(__name__)


# Node types a template may contain. Everything else is rejected.
ALLOWED_NODES: tuple[type[nodes.Node], ...] = (
    nodes.Template,
    nodes.Output,
    nodes.TemplateData,
    nodes.If,
    nodes.Assign,
    nodes.Name,
    nodes.Const,
    nodes.And,
    nodes.Or,
    nodes.Not,
    nodes.Compare,
    nodes.Operand,
    nodes.Call,
    nodes.Filter,
)

ALLOWED_COMPARISONS = frozenset({"eq", "ne"})

CONTAINS = "contains"


# =============================================================================
# Environment
# =============================================================================


class UnboundUndefined(StrictUndefined):
    """Undefined value that fails with :class:`UnboundIdentifier` on use."""

    __slots__ = ()

    def __init__(
        self,
        hint: str | None = None,
        obj: Any = missing,
        name: str | None = None,
        exc: type[Exception] = UnboundIdentifier,
    ) -> None:
        super().__init__(hint, obj, name, exc)

    def fail(self) -> None:
        """Raise the error this value stands for."""
        self._fail_with_undefined_error()


def create_jinja_env(loader: BaseLoader | None = None) -> Environment:
    """
    Create the Jinja2 environment every template is compiled in.

    The environment is configured with:
    - Autoescaping disabled (we're generating code, not HTML)
    - Trim blocks and lstrip blocks so block tags on their own line vanish
    - Only the case filters from :mod:`palletforge.naming`
    - No globals or tests, so nothing outside the dialect resolves

    Parameters
    ----------
    loader : BaseLoader | None
        Loader for named templates; ``None`` for string-only use.

    Returns
    -------
    Environment
        Configured environment.
    """
    env = Environment(
        loader=loader,
        autoescape=False,
        trim_blocks=True,
        lstrip_blocks=True,
        keep_trailing_newline=True,
        undefined=UnboundUndefined,
    )
    env.filters = dict(TEMPLATE_FILTERS)
    env.tests = {}
    env.globals.clear()
    return env


# =============================================================================
# Dialect check
# =============================================================================


def _check_node(env: Environment, node: nodes.Node) -> None:
    if not isinstance(node, ALLOWED_NODES):
        msg = f"'{type(node).__name__}' is not supported in pallet templates"
        raise TemplateDialectError(f"line {node.lineno}: {msg}")

    if isinstance(node, nodes.Assign) and not isinstance(node.target, nodes.Name):
        raise TemplateDialectError(f"line {node.lineno}: 'set' must bind a single name")

    if isinstance(node, nodes.Operand) and node.op not in ALLOWED_COMPARISONS:
        raise TemplateDialectError(
            f"line {node.lineno}: comparison '{node.op}' is not supported"
        )

    if isinstance(node, nodes.Filter):
        if node.name not in env.filters:
            raise UnknownFilter(node.name)
        if node.args or node.kwargs or node.dyn_args or node.dyn_kwargs:
            raise TemplateDialectError(
                f"line {node.lineno}: filter '{node.name}' takes no arguments"
            )

    if isinstance(node, nodes.Call):
        if not (isinstance(node.node, nodes.Name) and node.node.name == CONTAINS):
            raise TemplateDialectError(
                f"line {node.lineno}: only '{CONTAINS}(...)' may be called"
            )
        if node.kwargs or node.dyn_args or node.dyn_kwargs or len(node.args) != 2:
            raise TemplateDialectError(
                f"line {node.lineno}: '{CONTAINS}' takes a collection and a member"
            )


def check_dialect(env: Environment, source: str, name: str | None = None) -> nodes.Template:
    """
    Parse ``source`` and reject any construct outside the dialect.

    Returns
    -------
    nodes.Template
        The parsed tree.

    Raises
    ------
    TemplateDialectError
        If the source does not parse or uses an unsupported construct.
    UnknownFilter
        If a substitution uses a filter that is not registered.
    """
    try:
        tree = env.parse(source, name=name)
    except TemplateSyntaxError as e:
        raise TemplateDialectError(str(e)) from e

    _check_node(env, tree)
    for node in tree.find_all(nodes.Node):
        _check_node(env, node)
    return tree


# =============================================================================
# Evaluation
# =============================================================================


def expression_context(
    config: PalletConfig,
    bindings: Mapping[str, Any] | None = None,
) -> dict[str, Any]:
    """
    Names visible to an expression or template render.

    Bindings shadow configuration fields of the same name.
    """
    context = config.template_context()
    context[CONTAINS] = config.contains
    if bindings:
        context.update(bindings)
    return context


def evaluate(
    expr: str,
    config: PalletConfig,
    bindings: Mapping[str, Any] | None = None,
    *,
    env: Environment | None = None,
) -> Any:
    """
    Evaluate one dialect expression.

    Parameters
    ----------
    expr : str
        The expression, e.g. ``'contains("common_types", "Currency")'``.
    config : PalletConfig
        Configuration the expression is evaluated against.
    bindings : Mapping[str, Any] | None
        Values bound by earlier ``set`` statements.
    env : Environment | None
        Environment to compile in; a fresh one by default.

    Returns
    -------
    Any
        The value of the expression; a ``bool`` for every condition.

    Raises
    ------
    UnboundIdentifier
        If the expression uses a name with no binding.
    UnknownCollection
        If ``contains`` is asked about an unknown collection.
    """
    env = env or create_jinja_env()
    check_dialect(env, f"{{{{ {expr} }}}}")

    compiled = env.compile_expression(expr, undefined_to_none=False)
    result = ensure_bound(expr, compiled(**expression_context(config, bindings)))

    logger.debug("Evaluated %r -> %r", expr, result)
    return result


def ensure_bound(label: str, value: Any) -> Any:
    """
    Return ``value`` unless it stands for an unbound name.

    Raises
    ------
    UnboundIdentifier
        If ``value`` is undefined. ``label`` names the expression or binding
        in the message when the value carries no hint of its own.
    """
    if isinstance(value, UnboundUndefined):
        value.fail()
    if isinstance(value, Undefined):
        raise UnboundIdentifier(f"'{label}' is undefined")
    return value
