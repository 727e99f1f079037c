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
Pydantic models for the facet tree returned alongside collection results.
"""

from typing import Any

from pydantic import BaseModel


class FacetNode(BaseModel):
    """A facet group or filter as rendered by the browser facet panel."""

    title: str
    type: str
    applied: bool = False
    has_children: bool = False
    children: list["FacetNode"] | None = None

    def model_dump(self, **kwargs: Any) -> dict[str, Any]:
        """Override model_dump to exclude None by default."""
        return super().model_dump(exclude_none=True, **kwargs)
