"""@mention extraction from free-form comment text."""

from __future__ import annotations

import re
from typing import List, Optional

# An "@" at the start of the text or after a non-word character, so the
# domain part of an email address is never read as a handle.
MENTION_RE = re.compile(r"(?<!\w)@([\w-]+)", re.ASCII)


def extract_mentions(text: Optional[str]) -> Optional[List[str]]:
    """Return mentioned handles in order of appearance, or None if there are none.

    Duplicates are kept: a handle mentioned twice is notified twice.
    """

    if not text:
        return None
    handles = MENTION_RE.findall(text)
    return handles or None
