"""Built-in template catalog.

Each module contributes ``(TemplateDefinition, TemplateMetadata)`` pairs keyed
``<artifact>/<file>``.  The registry loads :data:`CATALOG` once, in this order.
"""

from __future__ import annotations

from libgen.catalog import contract, data_access, feature, infra, provider
from libgen.catalog.common import BASE_CONTEXT, CatalogEntry

CATALOG: list[CatalogEntry] = [
    *contract.CATALOG,
    *data_access.CATALOG,
    *feature.CATALOG,
    *infra.CATALOG,
    *provider.CATALOG,
]

__all__ = ["BASE_CONTEXT", "CATALOG", "CatalogEntry"]
