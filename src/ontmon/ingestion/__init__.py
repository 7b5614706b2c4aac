"""Ingestion layer.

This package contains the GenieACS data source and the normalization that
turns raw device documents into :class:`ontmon.models.ParsedDevice` values.
"""

__all__: list[str] = []
