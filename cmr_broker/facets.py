"""
Adds the synthetic "Features" group to the catalog facet tree.
"""

from typing import Any

from cmr_broker.data_models.enums import Feature
from cmr_broker.data_models.facets import FacetNode

FEATURE_FACET_ORDER = (
    Feature.MAP_IMAGERY,
    Feature.NEAR_REAL_TIME,
    Feature.SUBSETTING_SERVICES,
)


def features_facet() -> dict[str, Any]:
    group = FacetNode(
        title="Features",
        type="group",
        has_children=True,
        children=[
            FacetNode(title=feature.value, type="filter")
            for feature in FEATURE_FACET_ORDER
        ],
    )
    return group.model_dump()


def decorate_facets(facets: dict[str, Any] | None) -> dict[str, Any]:
    """
    Returns a copy of `facets` with the Features group as its first child.

    A missing tree, or one without children, gets a tree holding only the
    Features group. Catalog-provided children keep their order.
    """
    decorated = dict(facets or {})
    children = decorated.get("children") or []
    decorated["children"] = [features_facet(), *children]
    return decorated
