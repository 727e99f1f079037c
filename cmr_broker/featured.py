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
Featured collection promotion.

The first page of an unconstrained search is topped with the curated
collections and the caller's recently used ones. Those are fetched with a
second catalog query that mirrors the user's search but is restricted to
the featured ids, so a featured collection only shows up when it matches
what the user asked for.
"""

import asyncio
import logging
from collections.abc import Sequence
from typing import Any

from cmr_broker.clients import CatalogClient
from cmr_broker.constants import FEATURED_FIELD, ITEM_ID_FIELD
from cmr_broker.data_models.search import (
    FeaturedFetchResult,
    RequestContext,
    SearchRequest,
)
from cmr_broker.stores import RecentItemStore

logger = logging.getLogger(__name__)


def resolve_featured_ids(
    context: RequestContext,
    curated_ids: Sequence[str],
    store: RecentItemStore,
    recent_limit: int,
) -> list[str]:
    """
    Returns the curated ids followed by the caller's recent ones.

    Signed-in users get up to `recent_limit` recent ids that are not already
    curated. Anonymous sessions get the de-duplicated union truncated to
    `len(curated_ids) + recent_limit`; the truncation covers the whole union,
    not just the recent part.
    """
    featured_ids = list(curated_ids)
    recent = store.recent_items(context)

    if context.is_authenticated:
        curated = set(featured_ids)
        extra = [item_id for item_id in recent if item_id not in curated]
        return featured_ids + extra[:recent_limit]

    combined = list(dict.fromkeys(featured_ids + recent))
    return combined[: len(featured_ids) + recent_limit]


def should_fetch_featured(base_query: SearchRequest) -> bool:
    """Only the first page of a search not already restricted to ids."""
    return base_query.page_num == "1" and base_query.echo_collection_id is None


def featured_query(base_query: SearchRequest, featured_ids: Sequence[str]) -> SearchRequest:
    return base_query.model_copy(update={"echo_collection_id": list(featured_ids)})


async def fetch_featured(
    client: CatalogClient,
    base_query: SearchRequest,
    featured_ids: Sequence[str],
    token: str | None,
    timeout: float | None = None,
) -> FeaturedFetchResult:
    """
    Runs the featured query. Never raises for catalog or network trouble:
    any failure comes back as a `failed` result and is only logged.
    """
    if not should_fetch_featured(base_query) or not featured_ids:
        return FeaturedFetchResult.skipped()

    query = featured_query(base_query, featured_ids)
    try:
        response = await asyncio.wait_for(client.search(query, token), timeout)
    except asyncio.TimeoutError:
        logger.error("Featured collection query timed out after %ss", timeout)
        return FeaturedFetchResult.failed(f"timed out after {timeout}s")
    except Exception as e:  # noqa: BLE001
        # Featured collections must never fail the search they decorate.
        logger.error("Error getting featured collections: %s", e, exc_info=True)
        return FeaturedFetchResult.failed(str(e))

    if not response.success:
        logger.error(
            "Featured collection query failed with status %s: %s",
            response.status,
            response.body,
        )
        return FeaturedFetchResult.failed(f"catalog returned {response.status}")

    return FeaturedFetchResult.from_entries(response.entries)


def apply_featured(
    base_query: SearchRequest,
    base_entries: Sequence[dict[str, Any]],
    featured_ids: Sequence[str],
    fetched: FeaturedFetchResult,
) -> list[dict[str, Any]]:
    """
    Builds the entry list shown to the user. Inputs are not modified.

    - Searches restricted to ids flag each entry with its featured membership.
    - Otherwise, when the featured query found something, those entries are
      flagged and put in front, and their duplicates dropped from the page.
    - In every other case the page is returned as is.
    """
    featured_set = set(featured_ids)

    if base_query.echo_collection_id:
        return [
            {**entry, FEATURED_FIELD: entry.get(ITEM_ID_FIELD) in featured_set}
            for entry in base_entries
        ]

    if fetched.promoted:
        featured = [{**entry, FEATURED_FIELD: True} for entry in fetched.entries]
        rest = [
            dict(entry)
            for entry in base_entries
            if entry.get(ITEM_ID_FIELD) not in featured_set
        ]
        return featured + rest

    return [dict(entry) for entry in base_entries]


async def merge_featured(
    client: CatalogClient,
    base_query: SearchRequest,
    base_entries: Sequence[dict[str, Any]],
    featured_ids: Sequence[str],
    token: str | None,
    timeout: float | None = None,
) -> list[dict[str, Any]]:
    """Fetches the featured collections and merges them into `base_entries`."""
    fetched = await fetch_featured(client, base_query, featured_ids, token, timeout)
    return apply_featured(base_query, base_entries, featured_ids, fetched)
