from __future__ import annotations

from datetime import datetime
from typing import Any, Protocol

from promadapter.client.models import Selector, Series


class SeriesClient(Protocol):
    """Minimal backend interface the discovery pass depends on.

    Implementations own transport, timeouts and cancellation.
    """

    def series(self, *selectors: Selector) -> list[Series]:
        ...

    def query(self, query: Selector, time: datetime | None = None) -> dict[str, Any]:
        ...
