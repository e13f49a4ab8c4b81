"""Generic settings walker shared by the key-pattern rules."""

from __future__ import annotations

import logging
from typing import Any, Callable, List, MutableMapping, Optional

from ..models import Finding, Severity

logger = logging.getLogger(__name__)

Matcher = Callable[[Any, str], Optional[str]]


def collect_messages(mapping: MutableMapping[str, Any], matcher: Matcher) -> List[str]:
    """Run ``matcher`` over every entry of ``mapping`` and return its messages.

    The walk covers a snapshot of the entries, so a matcher may delete the key
    it is looking at (or any other key) without disturbing the iteration.
    """

    messages: List[str] = []
    for key, value in list(mapping.items()):
        try:
            message = matcher(value, key)
        except (TypeError, AttributeError, ValueError) as exc:
            logger.warning("Skipping `%s`: unable to test value %r (%s)", key, value, exc)
            continue

        if message:
            messages.append(message)
    return messages


def check_mapping(
    severity_if_any: Severity,
    title: str,
    mapping: MutableMapping[str, Any],
    matcher: Matcher,
    doc_url: str,
) -> Finding:
    """Evaluate ``matcher`` against ``mapping`` and fold the result into one finding."""

    return Finding.build(severity_if_any, title, collect_messages(mapping, matcher), doc_url)


__all__ = ["Matcher", "check_mapping", "collect_messages"]
