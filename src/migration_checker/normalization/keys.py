"""Settings key helpers."""

from __future__ import annotations

import re

_TRAILING_INDEX = re.compile(r"\.\d+$")


def strip_dot_num(key: str) -> str:
    """Drop a trailing ``.<digits>`` segment left behind by array flattening.

    ``node.attr.3`` becomes ``node.attr``; keys without such a suffix are
    returned unchanged.
    """

    return _TRAILING_INDEX.sub("", key, count=1)
