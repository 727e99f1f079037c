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
import copy
import logging

import pytest
from cmr_broker.data_models.config import BrokerConfig, PortalConfig
from cmr_broker.data_models.search import RequestContext, SearchRequest
from cmr_broker.exceptions import CatalogConnectionError
from cmr_broker.services import CollectionSearchService
from cmr_broker.stores import InMemoryRecentStore


def _entries(*ids):
    return [{"id": item_id} for item_id in ids]


@pytest.fixture
def store():
    return InMemoryRecentStore()


@pytest.fixture
def service(mock_client, store):
    config = BrokerConfig(featured_ids=["B", "D"], recent_limit=2)
    return CollectionSearchService(mock_client, store, config)


@pytest.fixture
def catalog(mock_client, make_response):
    """Routes primary and featured queries to separate canned responses."""
    responses = {
        "primary": make_response(
            _entries("A", "B", "C"),
            facets={"title": "Browse Collections", "children": [{"title": "Platforms"}]},
            headers={"cmr-hits": "3", "cmr-took": "12", "content-type": "application/json"},
        ),
        "featured": make_response(_entries("B", "D")),
    }

    def search(query: SearchRequest, token):
        key = "featured" if query.echo_collection_id is not None else "primary"
        response = responses[key]
        if isinstance(response, Exception):
            raise response
        return response

    mock_client.search.side_effect = search
    return responses


class TestSearchCollections:
    @pytest.mark.asyncio
    async def test_first_page_promotes_featured(self, service, catalog):
        primary_body = copy.deepcopy(catalog["primary"].body)

        outcome = await service.search_collections(
            {"keyword": "ocean", "page_num": "1"}, RequestContext(session_id="s1")
        )

        assert outcome.status == 200
        assert outcome.entry_ids == ["B", "D", "A", "C"]
        entries = outcome.body["feed"]["entry"]
        assert [e.get("featured") for e in entries] == [True, True, None, None]
        assert outcome.headers == {"cmr-hits": "3", "cmr-took": "12"}
        # The catalog response is left as it came in.
        assert catalog["primary"].body == primary_body

    @pytest.mark.asyncio
    async def test_featured_query_runs_alongside_primary(
        self, service, mock_client, make_response
    ):
        featured_started = asyncio.Event()

        async def search(query: SearchRequest, token):
            if query.echo_collection_id is not None:
                featured_started.set()
                # Still running after the primary query has answered.
                await asyncio.sleep(0.05)
                return make_response(_entries("B", "D"))
            # Only completes if the featured query was already in flight.
            await asyncio.wait_for(featured_started.wait(), 1)
            return make_response(_entries("A", "B", "C"))

        mock_client.search.side_effect = search

        outcome = await service.search_collections(
            {"page_num": "1"}, RequestContext(session_id="s1")
        )

        assert mock_client.search.await_count == 2
        assert outcome.entry_ids == ["B", "D", "A", "C"]

    @pytest.mark.asyncio
    async def test_facets_are_decorated(self, service, catalog):
        outcome = await service.search_collections({"page_num": "1"}, RequestContext())

        facets = outcome.body["feed"]["facets"]
        assert facets["title"] == "Browse Collections"
        assert [child["title"] for child in facets["children"]] == [
            "Features",
            "Platforms",
        ]

    @pytest.mark.asyncio
    async def test_primary_query_is_normalized(self, service, catalog, mock_client):
        await service.search_collections(
            {"keyword": "ice", "page_num": "2", "features": ["Map Imagery"]},
            RequestContext(token="tok"),
        )

        query, token = mock_client.search.await_args_list[0].args
        assert token == "tok"
        assert query.tag_key == ["edsc.extra.gibs"]
        assert query.sort_key == ["has_granules", "score"]
        assert query.include_tags == "edsc.*,org.ceos.wgiss.cwic.granules.prod"

    @pytest.mark.asyncio
    async def test_later_pages_skip_featured_query(self, service, catalog, mock_client):
        outcome = await service.search_collections({"page_num": "2"}, RequestContext())

        assert mock_client.search.await_count == 1
        assert outcome.entry_ids == ["A", "B", "C"]
        assert all("featured" not in e for e in outcome.body["feed"]["entry"])

    @pytest.mark.asyncio
    async def test_identifier_search_marks_membership(
        self, service, catalog, mock_client, make_response
    ):
        catalog["featured"] = make_response(_entries("A", "D"))
        catalog["primary"] = make_response(_entries("A", "D"))

        outcome = await service.search_collections(
            {"page_num": "1", "echo_collection_id": ["A", "D"]}, RequestContext()
        )

        assert mock_client.search.await_count == 1
        entries = outcome.body["feed"]["entry"]
        assert [(e["id"], e["featured"]) for e in entries] == [("A", False), ("D", True)]

    @pytest.mark.asyncio
    async def test_recent_collections_are_featured(
        self, service, store, catalog, mock_client
    ):
        context = RequestContext(session_id="s1")
        store.record_view(context, "R1")

        await service.search_collections({"page_num": "1"}, context)

        featured_query = next(
            call.args[0]
            for call in mock_client.search.await_args_list
            if call.args[0].echo_collection_id is not None
        )
        assert featured_query.echo_collection_id == ["B", "D", "R1"]

    @pytest.mark.asyncio
    async def test_featured_failure_does_not_fail_search(self, service, catalog):
        catalog["featured"] = RuntimeError("featured exploded")

        outcome = await service.search_collections({"page_num": "1"}, RequestContext())

        assert outcome.status == 200
        assert outcome.entry_ids == ["A", "B", "C"]
        assert all("featured" not in e for e in outcome.body["feed"]["entry"])

    @pytest.mark.asyncio
    async def test_featured_error_status_does_not_fail_search(
        self, service, catalog, make_response
    ):
        catalog["featured"] = make_response(body={"errors": ["nope"]}, status=500)

        outcome = await service.search_collections({"page_num": "1"}, RequestContext())

        assert outcome.status == 200
        assert outcome.entry_ids == ["A", "B", "C"]

    @pytest.mark.asyncio
    async def test_primary_failure_passes_through(self, service, catalog, make_response):
        catalog["primary"] = make_response(
            body={"errors": ["Invalid temporal"]},
            status=400,
            headers={"cmr-request-id": "x"},
        )

        outcome = await service.search_collections({"page_num": "1"}, RequestContext())

        assert outcome.status == 400
        assert outcome.body == {"errors": ["Invalid temporal"]}
        assert outcome.headers == {}

    @pytest.mark.asyncio
    async def test_primary_connection_error_propagates(self, service, catalog):
        catalog["primary"] = CatalogConnectionError("catalog down")

        with pytest.raises(CatalogConnectionError):
            await service.search_collections({"page_num": "1"}, RequestContext())

    @pytest.mark.asyncio
    async def test_portal_params_are_applied(self, service, catalog, mock_client):
        portal = PortalConfig(id="simple", params={"tag_key": ["simple.*"]})

        await service.search_collections(
            {"portal": "simple", "page_num": "2"}, RequestContext(portal=portal)
        )

        query = mock_client.search.await_args.args[0]
        assert query.tag_key == ["simple.*"]

    @pytest.mark.asyncio
    async def test_search_is_logged_without_noise(self, service, catalog, caplog):
        caplog.set_level(logging.INFO, logger="cmr_broker.services")

        await service.search_collections(
            {"keyword": "glacier", "include_facets": "v2"}, RequestContext()
        )

        messages = [r.getMessage() for r in caplog.records if r.name == "cmr_broker.services"]
        assert len(messages) == 1
        assert "glacier" in messages[0]
        assert "include_tags" not in messages[0]
        assert "include_facets" not in messages[0]

    @pytest.mark.asyncio
    async def test_identifier_search_is_not_logged(self, service, catalog, caplog):
        caplog.set_level(logging.INFO, logger="cmr_broker.services")

        await service.search_collections({"echo_collection_id": ["A"]}, RequestContext())

        assert not [r for r in caplog.records if r.name == "cmr_broker.services"]


class TestGetCollection:
    @pytest.mark.asyncio
    async def test_returns_first_entry_and_records_view(
        self, service, store, mock_client, make_response
    ):
        mock_client.get_one.return_value = make_response(
            [{"id": "C1", "title": "MODIS"}], headers={"cmr-hits": "1"}
        )
        context = RequestContext(session_id="s1", token="tok")

        outcome = await service.get_collection("C1", context)

        mock_client.get_one.assert_awaited_once_with("C1", "tok")
        assert outcome.status == 200
        assert outcome.body == {"id": "C1", "title": "MODIS"}
        assert outcome.headers == {"cmr-hits": "1"}
        assert store.recent_items(context) == ["C1"]

    @pytest.mark.asyncio
    async def test_not_found(self, service, mock_client, make_response):
        mock_client.get_one.return_value = make_response([])

        outcome = await service.get_collection("C404", RequestContext())

        assert outcome.status == 404
        assert "C404" in outcome.body["errors"][0]

    @pytest.mark.asyncio
    async def test_failure_passes_through(self, service, mock_client, make_response):
        mock_client.get_one.return_value = make_response(
            body={"errors": ["Token expired"]}, status=401
        )

        outcome = await service.get_collection("C1", RequestContext())

        assert outcome.status == 401
        assert outcome.body == {"errors": ["Token expired"]}


def test_use_collection(service):
    context = RequestContext(user_id="jdoe")
    service.use_collection("C1", context)
    assert service.use_collection("C2", context) == ["C2", "C1"]
