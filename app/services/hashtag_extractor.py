"""
app/services/hashtag_extractor.py

Hashtag tokenisation for video descriptions.
"""

from __future__ import annotations

import re

# str patterns make \w Unicode-aware: letters, digits and underscore.
HASHTAG_RE = re.compile(r"#\w+")


def extract_hashtags(text: str | None) -> list[str]:
    """
    Return the lower-cased hashtags in *text*, de-duplicated in first-seen order.

    ``extract_hashtags("#Cat #cat #dog")`` gives ``["#cat", "#dog"]``.
    """

    if not text:
        return []
    seen: dict[str, None] = {}
    for match in HASHTAG_RE.finditer(text):
        seen.setdefault(match.group(0).lower(), None)
    return list(seen)
