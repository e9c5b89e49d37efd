"""Lexical relevance scoring and highlight extraction.

The scorer ranks a text against a query in three tiers:

1. the text starts with the query                   -> 1.0
2. the query occurs elsewhere as a substring        -> 0.8 - 0.95, earlier is higher
3. some query tokens occur individually in the text -> 0.3 - 0.7, by fraction matched

Anything else scores 0 and is excluded from results. Matching is
case-insensitive and ignores surrounding whitespace.
"""

from typing import Callable, Optional

# Any (query, text) -> float callable can replace ``score``.
RelevanceScorer = Callable[[str, str], float]

PREFIX_SCORE = 1.0
SUBSTRING_MAX_SCORE = 0.95
SUBSTRING_MIN_SCORE = 0.8
TOKEN_MIN_SCORE = 0.3
TOKEN_MAX_SCORE = 0.7

ELLIPSIS = "..."


def _normalize(value: Optional[str]) -> str:
    return value.strip().lower() if value else ""


def score(query: str, text: str) -> float:
    """Compute the lexical relevance of ``text`` for ``query``.

    Args:
        query: Free-text search query.
        text: Candidate text (title, content or tag).

    Returns:
        Score in [0, 1].
    """
    normalized_query = _normalize(query)
    normalized_text = _normalize(text)
    if not normalized_query or not normalized_text:
        return 0.0

    if normalized_text.startswith(normalized_query):
        return PREFIX_SCORE

    index = normalized_text.find(normalized_query)
    if index != -1:
        position = index / len(normalized_text)
        return SUBSTRING_MAX_SCORE - (SUBSTRING_MAX_SCORE - SUBSTRING_MIN_SCORE) * position

    tokens = list(dict.fromkeys(normalized_query.split()))
    matched = sum(1 for token in tokens if token in normalized_text)
    if matched == 0:
        return 0.0

    fraction = matched / len(tokens)
    return TOKEN_MIN_SCORE + (TOKEN_MAX_SCORE - TOKEN_MIN_SCORE) * fraction


def find_match(text: str, query: str) -> Optional[tuple[int, int]]:
    """Locate the first match of ``query`` in ``text``.

    Falls back to the earliest individually matching query token.

    Returns:
        (start, length) of the match, or None.
    """
    normalized_query = _normalize(query)
    if not text or not normalized_query:
        return None

    # Some characters lowercase to several ("İ" -> "i̇"), so keep the source
    # position of every lowered character to slice the original text.
    lowered_chars: list[str] = []
    origins: list[int] = []
    for position, char in enumerate(text):
        for lowered_char in char.lower():
            lowered_chars.append(lowered_char)
            origins.append(position)
    lowered = "".join(lowered_chars)

    def _to_original(index: int, length: int) -> tuple[int, int]:
        start = origins[index]
        end = origins[index + length - 1] + 1
        return start, end - start

    index = lowered.find(normalized_query)
    if index != -1:
        return _to_original(index, len(normalized_query))

    token_matches = [
        (lowered.find(token), len(token))
        for token in normalized_query.split()
        if token in lowered
    ]
    if not token_matches:
        return None
    return _to_original(*min(token_matches))


def build_highlight(text: str, query: str, width: int = 200) -> Optional[str]:
    """Build a fixed-width excerpt of ``text`` centered on the first match.

    The window always contains the whole matched term and is marked with
    ellipses on each truncated side. When nothing matches, the leading
    ``width`` characters are returned instead.

    Args:
        text: Source text.
        query: Search query.
        width: Window width in characters.

    Returns:
        The excerpt, or None for empty text or query.
    """
    if not text or not text.strip() or not query or not query.strip():
        return None

    width = max(width, 1)
    match = find_match(text, query)

    if match is None:
        return text[:width] + ELLIPSIS if len(text) > width else text

    index, length = match
    width = max(width, length)
    start = max(0, index - (width - length) // 2)
    end = min(len(text), start + width)
    start = max(0, end - width)

    excerpt = text[start:end]
    if start > 0:
        excerpt = ELLIPSIS + excerpt
    if end < len(text):
        excerpt = excerpt + ELLIPSIS
    return excerpt
