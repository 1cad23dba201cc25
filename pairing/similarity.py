# =============================================================================
# AGIP XP TRACKER - SIMILARITY SCORER
# =============================================================================
#
# Normalized Levenshtein similarity between two texts, in [0, 1].
#
# NORMALIZATION:
# - lowercase, trim, truncate to MAX_TEXT_LENGTH
# - the bracketed proposal tag ("[AGIP]") is stripped from the FIRST
#   argument only. similarity(a, b) and similarity(b, a) can therefore
#   differ when b carries the tag. Callers pass the sigprop first.
#
# =============================================================================

import re

MAX_TEXT_LENGTH = 500


def _tag_pattern(tag: str) -> "re.Pattern[str]":
    return re.compile(re.escape(f"[{tag}]"), re.IGNORECASE)


def normalize(text: str, strip_tag: bool = False, tag: str = "AGIP") -> str:
    """Lowercase, optionally drop the bracketed tag, trim and truncate."""
    normalized = (text or "").lower()
    if strip_tag:
        normalized = _tag_pattern(tag).sub("", normalized)
    return normalized.strip()[:MAX_TEXT_LENGTH]


def levenshtein_distance(first: str, second: str) -> int:
    """
    Classic edit distance (insert / delete / substitute, each cost 1).

    Two-row dynamic programming, O(len(first) * len(second)) time.
    """
    if first == second:
        return 0
    if not first:
        return len(second)
    if not second:
        return len(first)

    previous = list(range(len(first) + 1))
    for j, char_b in enumerate(second, start=1):
        current = [j] + [0] * len(first)
        for i, char_a in enumerate(first, start=1):
            cost = 0 if char_a == char_b else 1
            current[i] = min(
                current[i - 1] + 1,       # deletion
                previous[i] + 1,          # insertion
                previous[i - 1] + cost,   # substitution
            )
        previous = current

    return previous[-1]


def similarity(first: str, second: str, tag: str = "AGIP") -> float:
    """
    Similarity = 1 - distance / longest normalized length.

    Two empty texts are identical (1.0).
    """
    normalized_first = normalize(first, strip_tag=True, tag=tag)
    normalized_second = normalize(second)

    max_length = max(len(normalized_first), len(normalized_second))
    if max_length == 0:
        return 1.0

    distance = levenshtein_distance(normalized_first, normalized_second)
    return 1.0 - distance / max_length
