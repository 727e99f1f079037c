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

import asyncio
import logging
from collections.abc import Mapping
from typing import Any

from cmr_broker.clients import CatalogClient
from cmr_broker.constants import UNLOGGED_PARAMS
from cmr_broker.data_models.config import BrokerConfig
from cmr_broker.data_models.search import (
    CatalogResponse,
    FeaturedFetchResult,
    RequestContext,
    SearchOutcome,
    SearchRequest,
)
from cmr_broker.facets import decorate_facets
from cmr_broker.featured import apply_featured, fetch_featured, resolve_featured_ids
from cmr_broker.normalizer import normalize_search_params
from cmr_broker.stores import RecentItemStore
from cmr_broker.utils import filter_passthrough_headers

logger = logging.getLogger(__name__)


def _build_search_body(
    request: SearchRequest,
    response: CatalogResponse,
    featured_ids: list[str],
    fetched: FeaturedFetchResult,
) -> dict[str, Any]:
    """Builds a new response body; the catalog response is left as it was."""
    feed = dict(response.feed)
    feed["entry"] = apply_featured(request, response.entries, featured_ids, fetched)
    feed["facets"] = decorate_facets(response.facets)
    return {**response.body, "feed": feed}


class CollectionSearchService:
    """Collection search, detail and usage tracking for the browser."""

    def __init__(
        self,
        client: CatalogClient,
        store: RecentItemStore,
        config: BrokerConfig,
    ) -> None:
        self.client = client
        self.store = store
        self.config = config

    def featured_ids(self, context: RequestContext) -> list[str]:
        return resolve_featured_ids(
            context, self.config.featured_ids, self.store, self.config.recent_limit
        )

    async def search_collections(
        self, raw_params: Mapping[str, Any], context: RequestContext
    ) -> SearchOutcome:
        """
        Runs a browser collection search.

        The featured query runs alongside the primary one and both are awaited
        before anything is returned. Only the primary query decides the status:
        a non-success answer is passed through untouched, a connection failure
        raises CatalogConnectionError.
        """
        request = normalize_search_params(
            raw_params, context.portal, self.config.env_flags()
        )
        if request.echo_collection_id is None:
            logger.info("Collection search: %s", request.loggable(UNLOGGED_PARAMS))

        featured_ids = self.featured_ids(context)
        featured_task = asyncio.ensure_future(
            fetch_featured(
                self.client,
                request,
                featured_ids,
                context.token,
                self.config.featured_timeout,
            )
        )
        try:
            response = await self.client.search(request, context.token)
        except BaseException:
            featured_task.cancel()
            raise
        fetched = await featured_task

        if not response.success or not isinstance(response.body, dict):
            return SearchOutcome(status=response.status, body=response.body)

        return SearchOutcome(
            status=response.status,
            body=_build_search_body(request, response, featured_ids, fetched),
            headers=filter_passthrough_headers(response.headers),
        )

    async def get_collection(
        self, collection_id: str, context: RequestContext
    ) -> SearchOutcome:
        response = await self.client.get_one(collection_id, context.token)
        self.store.record_view(context, collection_id)

        if not response.success:
            return SearchOutcome(status=response.status, body=response.body)

        entries = response.entries
        if not entries:
            return SearchOutcome(
                status=404,
                body={"errors": [f"Collection {collection_id} not found"]},
            )
        return SearchOutcome(
            status=response.status,
            body=entries[0],
            headers=filter_passthrough_headers(response.headers),
        )

    def use_collection(self, collection_id: str, context: RequestContext) -> list[str]:
        """Records that the caller used a collection; returns their recent list."""
        self.store.record_view(context, collection_id)
        return self.store.recent_items(context)
