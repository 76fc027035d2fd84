"""
palletforge.templates - Jinja2 Template Files
=============================================

This package contains one Jinja2 template per file-role of a generated
pallet. Templates use the ``.j2`` extension and are loaded by
``palletforge.renderer.load_template_set``.

Template Naming Convention
--------------------------
- Template name = ``<FileRole value>.j2``
- The output path is decided by ``palletforge.generator.OUTPUT_PATHS``

Available Templates
-------------------
- manifest.j2: Cargo.toml of the pallet crate
- lib.j2: Pallet entry point, Config trait, storage, events, calls
- config_defaults.j2: Default-config preludes (solochain, relay chain,
  parachain and, with default derivation, the mock runtime)
- type_aliases.j2: Balance, account and origin type aliases
- business_logic.j2: Helper functions behind the dispatchable calls
- mock_environment.j2: Mock runtime and test externalities
- tests.j2: Unit tests against the mock runtime

Template Dialect
----------------
Templates may only use ``if``/``elif``/``else``, ``set``, substitutions with
the ``lower`` and ``capitalize`` filters, ``and``/``or``/``not``, ``==``/``!=``
and ``contains("<collection>", "<member>")``. See
``palletforge.expressions`` for the full rules.

Obligations
-----------
Each template starts with ``{% set %}`` lines naming what it provides for the
configuration, e.g. ``balances_dependency`` in the manifest. The blocks of
the template are gated on those names and the consistency coordinator checks
them against its rule table, so the text and the declared obligations cannot
drift apart.

Template Context
----------------
All templates receive:

    name, authors, description : str
    custom_origin, default_config, genesis_config, in_workspace : bool
    contains : callable(collection, member) -> bool
"""

# This file intentionally left mostly empty.
# Templates are loaded dynamically by Jinja2's PackageLoader.
