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
Enumerations used by the broker data models.
"""

from enum import Enum


class Feature(str, Enum):
    """User-facing feature toggles shown in the "Features" facet group."""

    MAP_IMAGERY = "Map Imagery"
    NEAR_REAL_TIME = "Near Real Time"
    SUBSETTING_SERVICES = "Subsetting Services"


class FeaturedFetchStatus(str, Enum):
    """Outcome of the best-effort featured collection query."""

    SUCCESS = "success"
    EMPTY = "empty"
    SKIPPED = "skipped"
    FAILED = "failed"


class BrokerEnv(str, Enum):
    PRODUCTION = "production"
    DEVELOPMENT = "development"
    TEST = "test"
