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
HTTP routes for the browser's collection search.
"""

import logging
from contextlib import asynccontextmanager

from starlette.applications import Starlette
from starlette.middleware import Middleware
from starlette.requests import Request
from starlette.responses import JSONResponse
from starlette.routing import Route

from cmr_broker.clients import CatalogClient, create_catalog_client
from cmr_broker.constants import PORTAL_PARAM
from cmr_broker.data_models.config import BrokerConfig
from cmr_broker.data_models.search import RequestContext, SearchOutcome
from cmr_broker.exceptions import CatalogConnectionError
from cmr_broker.middleware import RequestContextMiddleware
from cmr_broker.services import CollectionSearchService
from cmr_broker.stores import InMemoryRecentStore, RecentItemStore
from cmr_broker.utils import multi_items_to_params
from cmr_broker.version import __version__

logger = logging.getLogger(__name__)


def _context(request: Request, config: BrokerConfig, portal_id: str | None = None) -> RequestContext:
    return RequestContext(
        token=getattr(request.state, "token", None),
        user_id=getattr(request.state, "user_id", None),
        session_id=getattr(request.state, "session_id", None),
        portal=config.get_portal(portal_id),
    )


def _respond(outcome: SearchOutcome) -> JSONResponse:
    return JSONResponse(outcome.body, status_code=outcome.status, headers=outcome.headers)


async def _catalog_unavailable(request: Request, exc: CatalogConnectionError) -> JSONResponse:
    logger.error("Catalog unavailable for %s: %s", request.url.path, exc)
    return JSONResponse({"errors": [str(exc)]}, status_code=502)


def create_app(
    config: BrokerConfig,
    client: CatalogClient | None = None,
    store: RecentItemStore | None = None,
) -> Starlette:
    """Builds the Starlette application serving collection search."""
    if client is None:
        client = create_catalog_client(config)
    if store is None:
        store = InMemoryRecentStore()
    service = CollectionSearchService(client, store, config)

    async def search(request: Request) -> JSONResponse:
        params = multi_items_to_params(request.query_params.multi_items())
        portal_id = params.get(PORTAL_PARAM)
        context = _context(
            request, config, portal_id if isinstance(portal_id, str) else None
        )
        return _respond(await service.search_collections(params, context))

    async def show(request: Request) -> JSONResponse:
        context = _context(request, config)
        return _respond(
            await service.get_collection(request.path_params["collection_id"], context)
        )

    async def use(request: Request) -> JSONResponse:
        context = _context(request, config)
        recent = service.use_collection(request.path_params["collection_id"], context)
        return JSONResponse({"recent": recent})

    async def health(request: Request) -> JSONResponse:
        return JSONResponse({"status": "ok", "version": __version__})

    @asynccontextmanager
    async def lifespan(app: Starlette):
        yield
        await client.aclose()

    return Starlette(
        routes=[
            Route("/collections", search, methods=["GET"]),
            Route("/collections/{collection_id}", show, methods=["GET"]),
            Route("/collections/{collection_id}/use", use, methods=["POST"]),
            Route("/health", health, methods=["GET"]),
        ],
        middleware=[Middleware(RequestContextMiddleware)],
        exception_handlers={CatalogConnectionError: _catalog_unavailable},
        lifespan=lifespan,
    )
