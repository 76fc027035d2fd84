"""
palletforge.coordinator - Cross-File Consistency
================================================

Renders every file-role of a pallet from one configuration and refuses to
return a module whose files contradict each other.

Rules
-----
Cross-file requirements are data, not code: :data:`RULES` is a table of
:class:`Rule` rows. Each row has a condition (a dialect expression evaluated
against the configuration) and, per file-role, the name of the binding that
role's template exports when it honours the rule. Adding a feature flag means
adding one row and the matching ``{% set %}`` lines in the templates.

Rules are bidirectional. For every row, each listed binding must equal the
row's condition: a missing counterpart and an orphaned one are both
:class:`InconsistentConfiguration`.

Concurrency
-----------
Role renders are independent and run on a thread pool. Validation starts only
after every render has finished, and the result is returned all at once.
"""

from __future__ import annotations

import logging
from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass
from types import MappingProxyType
from typing import TYPE_CHECKING

from palletforge.errors import InconsistentConfiguration, InvalidConfiguration, TemplateError
from palletforge.expressions import evaluate
from palletforge.models import FileRole, PalletConfig, StorageShape
from palletforge.renderer import RenderResult, load_template_set, render_module


if TYPE_CHECKING:
    from collections.abc import Iterable, Mapping

    from jinja2 import Environment

    from palletforge.renderer import TemplateSet


logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class Rule:
    """
    One cross-file requirement.

    Attributes
    ----------
    name : str
        Identifier reported when the rule is violated.
    condition : str
        Dialect expression; true when the feature is enabled.
    obligations : Mapping[FileRole, str]
        Binding each role's template exports for this feature.
    """

    name: str
    condition: str
    obligations: Mapping[FileRole, str]


def _storage_rule(shape: StorageShape) -> Rule:
    key = shape.rule_name
    return Rule(
        name=f"storage_{key}",
        condition=f'contains("storage_shapes", "{shape.value}")',
        obligations={
            FileRole.LIB: f"{key}_item",
            FileRole.BUSINESS_LOGIC: f"{key}_write",
            FileRole.TESTS: f"{key}_test",
        },
    )


RULES: tuple[Rule, ...] = (
    Rule(
        name="currency",
        condition='contains("common_types", "Currency")',
        obligations={
            FileRole.MANIFEST: "balances_dependency",
            FileRole.LIB: "currency_item",
            FileRole.CONFIG_DEFAULTS: "hold_freeze_reasons",
            FileRole.TYPE_ALIASES: "balance_alias",
            FileRole.BUSINESS_LOGIC: "currency_logic",
            FileRole.MOCK_ENVIRONMENT: "balances_wiring",
            FileRole.TESTS: "currency_test",
        },
    ),
    Rule(
        name="runtime_event",
        condition='contains("common_types", "RuntimeEvent")',
        obligations={
            FileRole.LIB: "event_item",
            FileRole.CONFIG_DEFAULTS: "event_injection",
            FileRole.BUSINESS_LOGIC: "event_deposit",
            FileRole.MOCK_ENVIRONMENT: "event_wiring",
            FileRole.TESTS: "event_assertion",
        },
    ),
    Rule(
        name="origin",
        condition='custom_origin or contains("common_types", "RuntimeOrigin")',
        obligations={
            FileRole.LIB: "origin_item",
            FileRole.CONFIG_DEFAULTS: "origin_defaults",
            FileRole.TYPE_ALIASES: "origin_alias",
            FileRole.MOCK_ENVIRONMENT: "origin_wiring",
        },
    ),
    Rule(
        name="custom_origin",
        condition="custom_origin",
        obligations={
            FileRole.LIB: "origin_enum",
            FileRole.BUSINESS_LOGIC: "admin_check",
        },
    ),
    Rule(
        name="default_config",
        condition="default_config",
        obligations={
            FileRole.CONFIG_DEFAULTS: "test_prelude",
            FileRole.MOCK_ENVIRONMENT: "test_default_derivation",
        },
    ),
    Rule(
        name="genesis_config",
        condition="genesis_config",
        obligations={
            FileRole.LIB: "genesis_declaration",
            FileRole.MOCK_ENVIRONMENT: "genesis_build",
        },
    ),
    *(_storage_rule(shape) for shape in StorageShape),
)


# =============================================================================
# Obligations
# =============================================================================


def derive_obligations(
    config: PalletConfig,
    rules: Iterable[Rule] = RULES,
    *,
    env: Environment | None = None,
) -> dict[str, bool]:
    """
    Decide, from the configuration alone, which rules are enabled.

    Returns
    -------
    dict[str, bool]
        Rule name to whether its feature is enabled.
    """
    return {rule.name: bool(evaluate(rule.condition, config, env=env)) for rule in rules}


def check_consistency(
    config: PalletConfig,
    bindings: Mapping[FileRole, Mapping[str, object]],
    rules: Iterable[Rule] = RULES,
    *,
    env: Environment | None = None,
) -> None:
    """
    Compare every rule with the obligations each role exported.

    A role whose template does not export a rule's binding is treated as not
    honouring it.

    Raises
    ------
    InconsistentConfiguration
        On the first rule some role disagrees with.
    """
    rules = tuple(rules)
    enabled = derive_obligations(config, rules, env=env)

    for rule in rules:
        expected = enabled[rule.name]
        agreeing: list[FileRole] = []
        conflicting: list[FileRole] = []

        for role, binding in rule.obligations.items():
            honoured = bool(bindings.get(role, {}).get(binding, False))
            (agreeing if honoured == expected else conflicting).append(role)

        if conflicting:
            raise InconsistentConfiguration(
                rule.name,
                expected=expected,
                conflicting=conflicting,
                agreeing=agreeing,
            )


# =============================================================================
# Generation
# =============================================================================


def generate_module(
    config: PalletConfig,
    template_set: TemplateSet | None = None,
    *,
    rules: Iterable[Rule] = RULES,
    max_workers: int | None = None,
) -> Mapping[FileRole, str]:
    """
    Render every file-role of a pallet and validate them as a whole.

    Parameters
    ----------
    config : PalletConfig
        The scaffolding request.
    template_set : TemplateSet | None
        Templates to render; the packaged catalog by default.
    rules : Iterable[Rule]
        Cross-file rules to enforce.
    max_workers : int | None
        Size of the render thread pool; one thread per role by default.

    Returns
    -------
    Mapping[FileRole, str]
        Read-only mapping with the rendered text of every role, in
        :class:`FileRole` order.

    Raises
    ------
    InvalidConfiguration
        If ``config`` is not a :class:`PalletConfig`.
    TemplateError
        If the template set lacks a role, or a template references a
        binding, collection or filter the engine does not provide.
    InconsistentConfiguration
        If any rule is not honoured by every role it names.
    """
    if not isinstance(config, PalletConfig):
        msg = f"Expected a PalletConfig, got {type(config).__name__}"
        raise InvalidConfiguration(msg)

    template_set = template_set or load_template_set()
    missing = template_set.missing_roles()
    if missing:
        raise TemplateError(
            "Template set has no template for: " + ", ".join(role.value for role in missing)
        )

    rules = tuple(rules)
    roles = list(FileRole)
    logger.debug("Rendering %d file-roles for pallet '%s'", len(roles), config.name)

    with ThreadPoolExecutor(max_workers=max_workers or len(roles)) as pool:
        futures = {
            role: pool.submit(render_module, template_set[role], config)
            for role in roles
        }
    # Leaving the pool waits for every render; errors surface in role order.
    results: dict[FileRole, RenderResult] = {role: futures[role].result() for role in roles}

    check_consistency(
        config,
        {role: result.bindings for role, result in results.items()},
        rules,
        env=template_set.env,
    )

    logger.debug("Pallet '%s' passed %d consistency rules", config.name, len(rules))
    return MappingProxyType({role: results[role].text for role in roles})
