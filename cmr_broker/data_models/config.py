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
Pydantic models for configuring the search broker.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cmr_broker.constants import DEFAULT_RECENT_LIMIT, DEFAULT_TAG_NAMESPACE

from .enums import BrokerEnv


class PortalConfig(BaseModel):
    """Scoping parameters applied to every search made through a portal."""

    model_config = ConfigDict(frozen=True)

    id: str = Field(description="Portal selector value, e.g. 'simple'")
    title: str | None = Field(default=None, description="Display name")
    params: dict[str, Any] = Field(
        default_factory=dict,
        description="Catalog parameters merged into every request for the portal",
    )


class EnvFlags(BaseModel):
    """Deployment-level switches consumed by the parameter normalizer."""

    model_config = ConfigDict(frozen=True)

    tag_namespace: str = Field(default=DEFAULT_TAG_NAMESPACE)
    retain_facets: bool = Field(
        default=True,
        description="Keep include_facets even without a test_facets override",
    )


class BrokerConfig(BaseModel):
    """Configuration for a broker deployment."""

    catalog_url: str = Field(
        default="https://cmr.earthdata.nasa.gov",
        description="Root URL of the catalog search service",
    )
    env: BrokerEnv = Field(default=BrokerEnv.PRODUCTION)
    tag_namespace: str = Field(default=DEFAULT_TAG_NAMESPACE)
    featured_ids: list[str] = Field(
        default_factory=list, description="Curated featured collection ids"
    )
    recent_limit: int = Field(
        default=DEFAULT_RECENT_LIMIT,
        ge=0,
        description="Number of recently used collections promoted next to the curated ones",
    )
    featured_timeout: float = Field(
        default=5.0, gt=0, description="Seconds to wait for the featured query"
    )
    request_timeout: float = Field(
        default=30.0, gt=0, description="Seconds to wait for any catalog query"
    )
    portals: dict[str, PortalConfig] = Field(default_factory=dict)

    @field_validator("catalog_url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

    def env_flags(self) -> EnvFlags:
        return EnvFlags(
            tag_namespace=self.tag_namespace,
            retain_facets=self.env != BrokerEnv.TEST,
        )

    def get_portal(self, portal_id: str | None) -> PortalConfig | None:
        if not portal_id:
            return None
        return self.portals.get(portal_id)
