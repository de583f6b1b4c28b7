"""Link detection for clipboard text."""

import re
from typing import Optional, Tuple
from urllib.parse import urlparse

__all__ = ["LinkDetector"]

_LINK_RE = re.compile(
    r"(?:(?:https?|ftp)://|mailto:|www\.)[^\s<>\"'`]+",
    re.IGNORECASE,
)
_TRAILING_PUNCTUATION = ".,;:!?'\""
_CLOSING_BRACKETS = {")": "(", "]": "[", "}": "{"}


def _trim_candidate(candidate: str) -> str:
    """Drop trailing punctuation and closing brackets left unbalanced in the URL."""
    while candidate:
        last = candidate[-1]
        if last in _TRAILING_PUNCTUATION:
            candidate = candidate[:-1]
        elif last in _CLOSING_BRACKETS and candidate.count(last) > candidate.count(_CLOSING_BRACKETS[last]):
            candidate = candidate[:-1]
        else:
            break
    return candidate


class LinkDetector:
    """Detects URLs with a scheme or a ``www.`` prefix inside text."""

    @staticmethod
    def find_first(text: str) -> Optional[Tuple[int, int, str]]:
        """Return ``(start, end, url)`` of the first link in ``text``.

        Trailing punctuation and unbalanced closing brackets are excluded
        from the span, and a ``www.`` link gets an ``http://`` scheme.
        """
        for match in _LINK_RE.finditer(text):
            candidate = _trim_candidate(match.group(0))
            url = candidate if "://" in candidate or candidate.lower().startswith("mailto:") else f"http://{candidate}"
            parsed = urlparse(url)
            if parsed.scheme.lower() == "mailto":
                if "@" not in parsed.path:
                    continue
            elif not parsed.netloc or ("." not in parsed.netloc and parsed.hostname != "localhost"):
                continue
            return match.start(), match.start() + len(candidate), url
        return None

    @staticmethod
    def full_link(text: str) -> Optional[str]:
        """Return the link when it spans the whole trimmed ``text``.

        Links embedded in longer text are rejected.
        """
        trimmed = text.strip()
        if not trimmed:
            return None
        found = LinkDetector.find_first(trimmed)
        if found is None:
            return None
        start, end, url = found
        if start == 0 and end == len(trimmed):
            return url
        return None
