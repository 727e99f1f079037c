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
Constants shared across the broker.
"""

# Fields whose presence switches collection ordering from title to score.
# sensor, archive_center and two_d_coordinate_system_name are no longer
# offered as facets but the catalog still ranks on them.
RELEVANCY_FIELDS = frozenset(
    {
        "keyword",
        "free_text",
        "platform",
        "instrument",
        "sensor",
        "two_d_coordinate_system_name",
        "science_keywords",
        "project",
        "processing_level_id",
        "data_center",
        "archive_center",
    }
)

PRIMARY_SORT_KEY = "has_granules"
RELEVANCY_SORT_KEY = "score"
TITLE_SORT_KEY = "entry_title"

PORTAL_PARAM = "portal"
FEATURES_PARAM = "features"
TEST_FACETS_PARAM = "test_facets"

CWIC_GRANULES_TAG = "org.ceos.wgiss.cwic.granules.prod"
NEAR_REAL_TIME_DATA_TYPE = "NEAR_REAL_TIME"

DEFAULT_TAG_NAMESPACE = "edsc"
DEFAULT_RECENT_LIMIT = 2

# Catalog response headers forwarded to the browser.
PASSTHROUGH_HEADER_PREFIX = "cmr-"

# Parameters left out of the search audit log.
UNLOGGED_PARAMS = frozenset(
    {"include_facets", "hierarchical_facets", "include_tags", "include_granule_counts"}
)

ITEM_ID_FIELD = "id"
FEATURED_FIELD = "featured"
