# Copyright 2025 Google LLC.
#
# Licensed under the Apache License, Version 2.0 (the "License");
# you may not use this file except in compliance with the License.
# You may obtain a copy of the License at
#
#     http://www.apache.org/licenses/LICENSE-2.0
#
# Unless required by applicable law or agreed to in writing, software
# distributed under the License is distributed on an "AS IS" BASIS,
# WITHOUT WARRANTIES OR CONDITIONS OF ANY KIND, either express or implied.
# See the License for the specific language governing permissions and
# limitations under the License.
"""
Translates browser search parameters into a catalog collection query.
"""

from collections.abc import Mapping
from typing import Any

from cmr_broker.constants import (
    CWIC_GRANULES_TAG,
    FEATURES_PARAM,
    NEAR_REAL_TIME_DATA_TYPE,
    PORTAL_PARAM,
    PRIMARY_SORT_KEY,
    RELEVANCY_FIELDS,
    RELEVANCY_SORT_KEY,
    TEST_FACETS_PARAM,
    TITLE_SORT_KEY,
)
from cmr_broker.data_models.config import EnvFlags, PortalConfig
from cmr_broker.data_models.enums import Feature
from cmr_broker.data_models.search import SearchRequest


def _wrap(value: Any) -> list[Any]:
    if value is None:
        return []
    if isinstance(value, (list, tuple)):
        return list(value)
    return [value]


def deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> dict[str, Any]:
    """
    Merges `override` into a copy of `base`.

    Nested mappings are merged recursively. When both sides hold a list the
    lists are concatenated, `base` first. Any other conflict is won by
    `override`.
    """
    merged = dict(base)
    for key, value in override.items():
        current = merged.get(key)
        if isinstance(current, Mapping) and isinstance(value, Mapping):
            merged[key] = deep_merge(current, value)
        elif isinstance(current, list) and isinstance(value, list):
            merged[key] = current + value
        else:
            merged[key] = value
    return merged


def parse_features(value: Any) -> frozenset[Feature]:
    """Reads the `features` parameter, ignoring names we don't know."""
    known = {feature.value: feature for feature in Feature}
    return frozenset(
        known[name] for name in _wrap(value) if isinstance(name, str) and name in known
    )


def apply_features(
    params: dict[str, Any], features: frozenset[Feature], tag_namespace: str
) -> dict[str, Any]:
    params = dict(params)
    if Feature.SUBSETTING_SERVICES in features:
        params["tag_key"] = _wrap(params.get("tag_key")) + [
            f"{tag_namespace}.extra.subset_service*"
        ]
    if Feature.MAP_IMAGERY in features:
        params["tag_key"] = _wrap(params.get("tag_key")) + [
            f"{tag_namespace}.extra.gibs"
        ]
    if Feature.NEAR_REAL_TIME in features:
        params["collection_data_type"] = NEAR_REAL_TIME_DATA_TYPE
    return params


def include_tags(tag_namespace: str) -> str:
    return ",".join([f"{tag_namespace}.*", CWIC_GRANULES_TAG])


def relevancy_sort_key(param_names: set[str]) -> list[str]:
    """
    Collections with granules always come first. Within that, a query that
    carries any relevancy-capable criterion is ordered by score, anything
    else alphabetically by title.
    """
    base_names = {name.partition("[")[0] for name in param_names}
    if base_names & RELEVANCY_FIELDS:
        return [PRIMARY_SORT_KEY, RELEVANCY_SORT_KEY]
    return [PRIMARY_SORT_KEY, TITLE_SORT_KEY]


def normalize_search_params(
    raw_params: Mapping[str, Any],
    portal: PortalConfig | None = None,
    env: EnvFlags | None = None,
) -> SearchRequest:
    """
    Builds the catalog query for a browser collection search.

    Never rejects input: values the catalog won't understand are passed on
    for the catalog to refuse.

    Args:
        raw_params: Query parameters as received from the browser. Repeated
            parameters are lists.
        portal: The active portal, if any.
        env: Deployment switches. Defaults to production behaviour.

    Returns:
        A new, immutable SearchRequest. `raw_params` is left untouched.
    """
    env = env or EnvFlags()
    params = dict(raw_params)

    params.pop(PORTAL_PARAM, None)
    if portal is not None and portal.params:
        params = deep_merge(params, portal.params)

    test_facets = params.pop(TEST_FACETS_PARAM, None)
    if not env.retain_facets and not test_facets:
        params.pop("include_facets", None)

    features = parse_features(params.pop(FEATURES_PARAM, None))
    params = apply_features(params, features, env.tag_namespace)

    params["include_tags"] = include_tags(env.tag_namespace)
    params["sort_key"] = relevancy_sort_key(set(params))

    return SearchRequest.model_validate(params)
