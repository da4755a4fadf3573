"""String distance and similarity primitives."""
from typing import Optional


def levenshtein_distance(str1: Optional[str], str2: Optional[str]) -> int:
    """Calculate the Levenshtein distance between two strings.

    Uses a single rolling row sized to the shorter string, so memory stays
    O(min(len(str1), len(str2))).

    Args:
        str1: First string (None is treated as empty)
        str2: Second string (None is treated as empty)

    Returns:
        Minimum number of single-character insertions, deletions or
        substitutions turning str1 into str2
    """
    str1 = str1 or ""
    str2 = str2 or ""

    # Keep the row on the shorter string
    if len(str2) > len(str1):
        str1, str2 = str2, str1

    row = list(range(len(str2) + 1))

    for i in range(1, len(str1) + 1):
        prev = row[0]
        row[0] = i

        for j in range(1, len(str2) + 1):
            temp = row[j]
            if str1[i - 1] == str2[j - 1]:
                row[j] = prev
            else:
                row[j] = 1 + min(prev, row[j], row[j - 1])
            prev = temp

    return row[-1]


def similarity_score(str1: Optional[str], str2: Optional[str]) -> float:
    """Calculate a similarity score between 0 and 1.

    Exact matches score 1, substring containment scores 0.9, anything else
    falls back to a normalized edit distance.

    Args:
        str1: First string
        str2: Second string

    Returns:
        Similarity in [0, 1]; 0 if either string is empty
    """
    if not str1 or not str2:
        return 0.0

    s1 = str1.lower().strip()
    s2 = str2.lower().strip()

    if s1 == s2:
        return 1.0
    if s1 in s2 or s2 in s1:
        return 0.9

    max_len = max(len(s1), len(s2))
    if max_len == 0:
        return 1.0

    distance = levenshtein_distance(s1, s2)
    return max(0.0, 1 - distance / max_len)
