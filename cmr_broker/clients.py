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
Clients module for interacting with the catalog search API.
"""

import logging

import httpx

from cmr_broker.data_models.config import BrokerConfig
from cmr_broker.data_models.search import CatalogResponse, SearchRequest
from cmr_broker.exceptions import CatalogConnectionError

logger = logging.getLogger(__name__)

COLLECTIONS_PATH = "/search/collections.json"
TOKEN_HEADER = "Echo-Token"
CLIENT_ID = "cmr-search-broker"


class CatalogClient:
    def __init__(
        self,
        base_url: str,
        timeout: float = 30.0,
        http_client: httpx.AsyncClient | None = None,
    ) -> None:
        """
        Initialize the CatalogClient.

        Args:
            base_url: Root URL of the catalog, e.g. https://cmr.earthdata.nasa.gov
            timeout: Seconds to wait for a catalog answer
            http_client: Preconfigured httpx client, mostly for tests
        """
        self.base_url = base_url.rstrip("/")
        self._http = http_client or httpx.AsyncClient(timeout=timeout)

    async def search(self, params: SearchRequest, token: str | None) -> CatalogResponse:
        """Runs a collection search with an already normalized request."""
        return await self._get(COLLECTIONS_PATH, params.to_query_params(), token)

    async def get_one(self, collection_id: str, token: str | None) -> CatalogResponse:
        return await self._get(COLLECTIONS_PATH, [("concept_id", collection_id)], token)

    async def aclose(self) -> None:
        await self._http.aclose()

    async def _get(
        self, path: str, params: list[tuple[str, str]], token: str | None
    ) -> CatalogResponse:
        url = f"{self.base_url}{path}"
        headers = {"Client-Id": CLIENT_ID}
        if token:
            headers[TOKEN_HEADER] = token

        try:
            response = await self._http.get(url, params=params, headers=headers)
        except httpx.TimeoutException as e:
            raise CatalogConnectionError(f"Catalog request to {url} timed out") from e
        except httpx.RequestError as e:
            raise CatalogConnectionError(f"Catalog request to {url} failed: {e}") from e

        if not response.is_success:
            logger.warning(
                "Catalog returned %s for %s", response.status_code, response.url
            )
        return self._to_catalog_response(response)

    @staticmethod
    def _to_catalog_response(response: httpx.Response) -> CatalogResponse:
        try:
            body = response.json()
        except ValueError:
            body = response.text
        return CatalogResponse(
            success=response.is_success,
            status=response.status_code,
            headers=dict(response.headers.items()),
            body=body,
        )


def create_catalog_client(config: BrokerConfig) -> CatalogClient:
    """Factory function to create a CatalogClient from configuration."""
    return CatalogClient(
        base_url=config.catalog_url,
        timeout=config.request_timeout,
    )
