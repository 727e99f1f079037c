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
Global pytest configuration and fixtures.

Pytest automatically discovers and loads this file. Fixtures defined here are
available to all tests in this directory and its subdirectories without
needing to import them explicitly.
"""

import os
from unittest.mock import AsyncMock, Mock, patch

import pytest
from cmr_broker.clients import CatalogClient
from cmr_broker.data_models.search import CatalogResponse


@pytest.fixture(autouse=True)
def clean_env():
    """
    Automatically clear environment variables for all tests to ensure
    tests are hermetic and don't depend on the host environment.
    """
    with patch.dict(os.environ, {}, clear=True):
        yield


@pytest.fixture(autouse=True)
def mock_load_dotenv():
    """
    Automatically mock load_dotenv for all tests to prevent
    loading environment variables from local .env files.
    """
    with patch("cmr_broker.config.load_dotenv"):
        yield


@pytest.fixture
def make_response():
    """Builds a successful (or not) catalog response around a list of entries."""

    def _make(entries=None, status=200, facets=None, headers=None, body=None):
        if body is None:
            feed = {"entry": entries or []}
            if facets is not None:
                feed["facets"] = facets
            body = {"feed": feed}
        return CatalogResponse(
            success=200 <= status < 300,
            status=status,
            headers=headers or {},
            body=body,
        )

    return _make


@pytest.fixture
def mock_client():
    """A CatalogClient whose network calls are AsyncMocks."""
    client = Mock(spec=CatalogClient)
    client.search = AsyncMock()
    client.get_one = AsyncMock()
    client.aclose = AsyncMock()
    return client
