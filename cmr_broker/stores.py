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
Recently used collection stores.

Authenticated users keep their history across sessions; anonymous visitors
only for the lifetime of their browser session. Both live behind the same
`RecentItemStore` interface so the featured resolver never has to know where
the list came from.
"""

import logging
from collections import OrderedDict
from typing import Protocol

from cmr_broker.data_models.search import RequestContext

logger = logging.getLogger(__name__)


class RecentItemStore(Protocol):
    def recent_items(self, context: RequestContext) -> list[str]: ...

    def record_view(self, context: RequestContext, item_id: str) -> None: ...


class InMemoryRecentStore:
    """
    Process-local store, most recent first.

    Holds at most `max_keys` users and sessions; the least recently used one
    is evicted when a new one arrives.
    """

    def __init__(self, max_items: int = 20, max_keys: int = 10000) -> None:
        if max_items < 1:
            raise ValueError("max_items must be at least 1")
        if max_keys < 1:
            raise ValueError("max_keys must be at least 1")
        self.max_items = max_items
        self.max_keys = max_keys
        self._recent: OrderedDict[str, list[str]] = OrderedDict()

    @staticmethod
    def _key(context: RequestContext) -> str | None:
        if context.user_id:
            return f"user:{context.user_id}"
        if context.session_id:
            return f"session:{context.session_id}"
        return None

    def recent_items(self, context: RequestContext) -> list[str]:
        key = self._key(context)
        if key is None or key not in self._recent:
            return []
        self._recent.move_to_end(key)
        return list(self._recent[key])

    def record_view(self, context: RequestContext, item_id: str) -> None:
        key = self._key(context)
        if key is None:
            logger.debug("No user or session, not recording view of %s", item_id)
            return
        items = [item_id] + [i for i in self._recent.get(key, []) if i != item_id]
        self._recent[key] = items[: self.max_items]
        self._recent.move_to_end(key)
        while len(self._recent) > self.max_keys:
            evicted, _ = self._recent.popitem(last=False)
            logger.debug("Evicted recent collections for %s", evicted)

    def __len__(self) -> int:
        return len(self._recent)
