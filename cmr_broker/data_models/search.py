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
Data models for collection search requests and catalog responses.

The catalog query dialect is loosely typed on the wire: any parameter may be
repeated, and the browser sends whatever the current UI state holds. The
`SearchRequest` model names the fields the broker reads or writes and keeps
everything else as extra fields, so unknown parameters still reach the
catalog untouched.
"""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator

from cmr_broker.constants import ITEM_ID_FIELD

from .config import PortalConfig
from .enums import FeaturedFetchStatus

_REPEATED_FIELDS = ("echo_collection_id", "tag_key", "sort_key")
_SCALAR_FIELDS = (
    "keyword",
    "free_text",
    "page_num",
    "page_size",
    "collection_data_type",
    "include_tags",
    "include_facets",
)


def _to_param_str(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    return str(value)


def _encode_param(name: str, value: Any) -> list[tuple[str, str]]:
    """Encodes one parameter using the catalog's bracket conventions."""
    if value is None:
        return []
    if isinstance(value, dict):
        pairs = []
        for key, nested in value.items():
            pairs.extend(_encode_param(f"{name}[{key}]", nested))
        return pairs
    if isinstance(value, (list, tuple)):
        pairs = []
        for item in value:
            pairs.extend(_encode_param(f"{name}[]", item))
        return pairs
    return [(name, _to_param_str(value))]


class SearchRequest(BaseModel):
    """A normalized collection search, ready to be sent to the catalog."""

    model_config = ConfigDict(extra="allow", frozen=True)

    keyword: str | None = None
    free_text: str | None = None
    page_num: str | None = None
    page_size: str | None = None
    collection_data_type: str | None = None
    include_tags: str | None = None
    include_facets: str | None = None
    echo_collection_id: list[str] | None = None
    tag_key: list[str] | None = None
    sort_key: list[str] | None = None

    @field_validator(*_REPEATED_FIELDS, mode="before")
    @classmethod
    def wrap_repeated(cls, v: Any) -> list[str] | None:
        if v is None:
            return None
        if isinstance(v, (list, tuple)):
            return [_to_param_str(item) for item in v]
        return [_to_param_str(v)]

    @field_validator(*_SCALAR_FIELDS, mode="before")
    @classmethod
    def unwrap_scalar(cls, v: Any) -> str | None:
        # A repeated scalar parameter keeps its last value, as query strings do.
        if isinstance(v, (list, tuple)):
            v = v[-1] if v else None
        if v is None:
            return None
        return _to_param_str(v)

    def present_keys(self) -> set[str]:
        """Names of the parameters explicitly present on the request."""
        return set(self.model_fields_set) | set(self.model_extra or {})

    def to_query_params(self) -> list[tuple[str, str]]:
        params = []
        for name in self.model_fields:
            params.extend(_encode_param(name, getattr(self, name)))
        for name, value in (self.model_extra or {}).items():
            params.extend(_encode_param(name, value))
        return params

    def loggable(self, exclude: frozenset[str] = frozenset()) -> dict[str, Any]:
        return {
            key: value
            for key, value in self.model_dump(exclude_none=True).items()
            if key not in exclude
        }


class CatalogResponse(BaseModel):
    """A catalog answer as seen by the broker."""

    success: bool
    status: int
    headers: dict[str, str] = Field(default_factory=dict)
    body: Any = None

    @property
    def feed(self) -> dict[str, Any]:
        if isinstance(self.body, dict) and isinstance(self.body.get("feed"), dict):
            return self.body["feed"]
        return {}

    @property
    def entries(self) -> list[dict[str, Any]]:
        return list(self.feed.get("entry") or [])

    @property
    def facets(self) -> dict[str, Any] | None:
        return self.feed.get("facets")


class RequestContext(BaseModel):
    """Everything a request knows about its caller, passed explicitly."""

    model_config = ConfigDict(frozen=True)

    token: str | None = None
    user_id: str | None = None
    session_id: str | None = None
    portal: PortalConfig | None = None

    @property
    def is_authenticated(self) -> bool:
        return bool(self.user_id)


class FeaturedFetchResult(BaseModel):
    """Outcome of the secondary featured query.

    Failures are values here rather than exceptions: a failed or skipped
    fetch simply carries no entries and the merge leaves the page alone.
    """

    model_config = ConfigDict(frozen=True)

    status: FeaturedFetchStatus
    entries: list[dict[str, Any]] = Field(default_factory=list)
    error: str | None = None

    @property
    def promoted(self) -> bool:
        return self.status == FeaturedFetchStatus.SUCCESS and bool(self.entries)

    @classmethod
    def skipped(cls) -> "FeaturedFetchResult":
        return cls(status=FeaturedFetchStatus.SKIPPED)

    @classmethod
    def failed(cls, error: str) -> "FeaturedFetchResult":
        return cls(status=FeaturedFetchStatus.FAILED, error=error)

    @classmethod
    def from_entries(cls, entries: list[dict[str, Any]]) -> "FeaturedFetchResult":
        if not entries:
            return cls(status=FeaturedFetchStatus.EMPTY)
        return cls(status=FeaturedFetchStatus.SUCCESS, entries=entries)


class SearchOutcome(BaseModel):
    """What the HTTP layer sends back to the browser."""

    status: int
    body: Any = None
    headers: dict[str, str] = Field(default_factory=dict)

    @property
    def entry_ids(self) -> list[str]:
        if not isinstance(self.body, dict):
            return []
        entries = (self.body.get("feed") or {}).get("entry") or []
        return [entry.get(ITEM_ID_FIELD) for entry in entries]
