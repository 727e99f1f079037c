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

import logging
import re
from collections.abc import Iterable, Mapping
from typing import Any

import requests

from cmr_broker.clients import COLLECTIONS_PATH
from cmr_broker.constants import PASSTHROUGH_HEADER_PREFIX
from cmr_broker.exceptions import CatalogCheckError


def check_catalog(catalog_url: str, timeout: float = 10.0) -> bool:
    """
    Checks that the catalog answers a minimal collection search.

    Args:
        catalog_url: Root URL of the catalog.
        timeout: Seconds to wait for the answer.

    Returns:
        True if the catalog is reachable.

    Raises:
        CatalogCheckError: If the catalog can't be reached or answers with an error.
    """
    url = f"{catalog_url.rstrip('/')}{COLLECTIONS_PATH}"
    try:
        response = requests.get(url, params={"page_size": 0}, timeout=timeout)
        response.raise_for_status()
    except requests.HTTPError as e:
        raise CatalogCheckError(
            f"Catalog at {catalog_url} answered with an error: {e}"
        ) from e
    except requests.RequestException as e:
        raise CatalogCheckError(
            f"Catalog at {catalog_url} is unreachable: {e}"
        ) from e
    logging.info("Catalog reachability check successful.")
    return True


def filter_passthrough_headers(headers: Mapping[str, str]) -> dict[str, str]:
    """Keeps only the catalog headers forwarded to the browser (cmr-*)."""
    return {
        key: value
        for key, value in headers.items()
        if key.lower().startswith(PASSTHROUGH_HEADER_PREFIX)
    }


_BRACKETS = re.compile(r"(\[[^\[\]]*\])+")
_BRACKET = re.compile(r"\[([^\[\]]*)\]")


def _split_key(key: str) -> tuple[str, list[str]]:
    """Splits `a[b][]` into ("a", ["b", ""]); keys without brackets have no segments."""
    name, sep, rest = key.partition("[")
    if not sep or not name or not _BRACKETS.fullmatch(sep + rest):
        return key, []
    return name, _BRACKET.findall(sep + rest)


def _assign(params: dict[str, Any], name: str, segments: list[str], value: str) -> None:
    if not segments:
        if name in params:
            existing = params[name]
            params[name] = (existing if isinstance(existing, list) else [existing]) + [value]
        else:
            params[name] = value
        return

    head, tail = segments[0], segments[1:]
    if head == "":
        container = params.get(name)
        if not isinstance(container, list):
            container = params[name] = [] if container is None else [container]
        if not tail:
            container.append(value)
            return
        # a[][b]=1&a[][c]=2 fills one dict; a repeated key starts the next one.
        if not container or not isinstance(container[-1], dict) or tail[0] in container[-1]:
            container.append({})
        _assign(container[-1], tail[0], tail[1:], value)
        return

    child = params.get(name)
    if not isinstance(child, dict):
        child = params[name] = {}
    _assign(child, head, tail, value)


def multi_items_to_params(items: Iterable[tuple[str, str]]) -> dict[str, Any]:
    """
    Folds query string pairs into a parameter mapping.

    Bracketed names nest under their base name: `name[]` becomes a list and
    `science_keywords[0][category]` becomes
    {"science_keywords": {"0": {"category": ...}}}. A plain parameter given
    more than once becomes a list, in arrival order.
    """
    params: dict[str, Any] = {}
    for key, value in items:
        name, segments = _split_key(key)
        _assign(params, name, segments, value)
    return params


def parse_csv(value: str | None) -> list[str]:
    """
    Parse a comma-separated value into a list of strings.

    Args:
        value: The comma-separated value to parse

    Returns:
        List of non-empty, stripped items (empty if value is blank)
    """
    if not value or not value.strip():
        return []
    items = [item.strip() for item in value.split(",")]
    return [item for item in items if item]
