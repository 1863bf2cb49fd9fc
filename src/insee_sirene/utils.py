"""insee_sirene.utils

Formatting helpers shared across the insee_sirene package.
"""
from __future__ import annotations

import re
from typing import Mapping, Optional
from urllib.parse import urlencode

__all__ = [
    "normalize_identifier",
    "version_segment",
    "build_query_string",
]


_ws_re = re.compile(r"\s+")
_v_re = re.compile(r"v", re.IGNORECASE)


def normalize_identifier(identifier: str) -> str:
    """Return *identifier* with every whitespace character removed."""
    return _ws_re.sub("", identifier)


def version_segment(version: Optional[str]) -> str:
    """Turn a configured API version ("v3", "V3", "3") into a path segment ("/V3")."""
    if not version:
        return ""
    return "/V" + _v_re.sub("", version)


def build_query_string(
    params: Optional[Mapping[str, object]] = None,
    defaults: Optional[Mapping[str, object]] = None,
) -> str:
    """Merge *params* with *defaults* and return "?a=b" (or "" when both are empty).

    Keys present in both take the value from *defaults*, which are written last.
    """
    merged = {**(params or {}), **(defaults or {})}
    if not merged:
        return ""
    return "?" + urlencode(merged, doseq=True)
