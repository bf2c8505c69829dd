"""
Backend-facing types: series values, selectors and the client protocol.

The client that actually talks to Prometheus lives outside promadapter.
"""

from promadapter.client.base import SeriesClient
from promadapter.client.models import Selector, Series
from promadapter.client.selectors import (
    label_eq,
    label_matches,
    label_neq,
    label_not_matches,
    match_series,
    name_matches,
    name_not_matches,
    quote,
)

__all__ = [
    "Series",
    "Selector",
    "SeriesClient",
    "match_series",
    "label_eq",
    "label_neq",
    "label_matches",
    "label_not_matches",
    "name_matches",
    "name_not_matches",
    "quote",
]
