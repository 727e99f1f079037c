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
Configuration module for the search broker.
"""

import json
import os
from pathlib import Path

from dotenv import load_dotenv

from .data_models.config import BrokerConfig, PortalConfig
from .data_models.enums import BrokerEnv
from .utils import parse_csv

# Environment variable names
CATALOG_URL_ENV = "CMR_BROKER_CATALOG_URL"
ENV_ENV = "CMR_BROKER_ENV"
TAG_NAMESPACE_ENV = "CMR_BROKER_TAG_NAMESPACE"
FEATURED_IDS_ENV = "CMR_BROKER_FEATURED_IDS"
RECENT_LIMIT_ENV = "CMR_BROKER_RECENT_LIMIT"
FEATURED_TIMEOUT_ENV = "CMR_BROKER_FEATURED_TIMEOUT"
REQUEST_TIMEOUT_ENV = "CMR_BROKER_REQUEST_TIMEOUT"
PORTALS_FILE_ENV = "CMR_BROKER_PORTALS_FILE"


def _load_env_file() -> None:
    """Load .env file if present in the current directory."""
    load_dotenv()


def load_portals(path: str) -> dict[str, PortalConfig]:
    """
    Reads portal definitions from a JSON file.

    The file maps portal ids to their definition, e.g.
    {"simple": {"title": "Simple", "params": {"tag_key": ["simple.*"]}}}

    Raises:
        ValueError: If the file is missing or not a JSON object.
    """
    portals_path = Path(path)
    if not portals_path.is_file():
        raise ValueError(f"{PORTALS_FILE_ENV} points to a missing file: {path}")
    try:
        raw = json.loads(portals_path.read_text())
    except json.JSONDecodeError as e:
        raise ValueError(f"{PORTALS_FILE_ENV} is not valid JSON: {e}") from e
    if not isinstance(raw, dict):
        raise ValueError(f"{PORTALS_FILE_ENV} must contain a JSON object")

    return {
        portal_id: PortalConfig.model_validate({"id": portal_id, **definition})
        for portal_id, definition in raw.items()
    }


def get_broker_config() -> BrokerConfig:
    """
    Get broker configuration from environment variables.

    Returns:
        BrokerConfig object containing the configuration

    Raises:
        ValueError: If configuration is invalid
    """
    _load_env_file()

    config_data = {}

    catalog_url = os.getenv(CATALOG_URL_ENV)
    if catalog_url:
        config_data["catalog_url"] = catalog_url

    env = os.getenv(ENV_ENV)
    if env:
        try:
            config_data["env"] = BrokerEnv(env.lower())
        except ValueError:
            valid = ", ".join(member.value for member in BrokerEnv)
            raise ValueError(f"{ENV_ENV} must be one of: {valid}") from None

    tag_namespace = os.getenv(TAG_NAMESPACE_ENV)
    if tag_namespace:
        config_data["tag_namespace"] = tag_namespace

    config_data["featured_ids"] = parse_csv(os.getenv(FEATURED_IDS_ENV))

    for env_name, field, cast in (
        (RECENT_LIMIT_ENV, "recent_limit", int),
        (FEATURED_TIMEOUT_ENV, "featured_timeout", float),
        (REQUEST_TIMEOUT_ENV, "request_timeout", float),
    ):
        value = os.getenv(env_name)
        if value:
            try:
                config_data[field] = cast(value)
            except ValueError:
                raise ValueError(
                    f"{env_name} must be a number, got '{value}'"
                ) from None

    portals_file = os.getenv(PORTALS_FILE_ENV)
    if portals_file:
        config_data["portals"] = load_portals(portals_file)

    return BrokerConfig.model_validate(config_data)
