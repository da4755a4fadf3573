"""Tokenization and typo-variation helpers for listing search."""
import re
from typing import Dict, List, Optional


_NON_WORD = re.compile(r"[^\w\s]")

# Common human typos: vowel confusions, s/z, c/k/s and f/ph.
# Each variant applies exactly one substitution.
SUBSTITUTIONS: Dict[str, List[str]] = {
    "a": ["e", "o"],
    "e": ["a", "i"],
    "i": ["e", "y"],
    "o": ["a", "u"],
    "u": ["o"],
    "s": ["z"],
    "z": ["s"],
    "c": ["k", "s"],
    "k": ["c"],
    "ph": ["f"],
    "f": ["ph"],
}


def tokenize(text: Optional[str]) -> List[str]:
    """Tokenize text into lowercase search words.

    Punctuation is replaced by whitespace and words of a single character
    are dropped. Duplicates are kept in source order.

    Args:
        text: Text to tokenize

    Returns:
        List of lowercase tokens longer than one character
    """
    if not text:
        return []

    cleaned = _NON_WORD.sub(" ", text.lower())
    return [token.strip() for token in cleaned.split() if len(token) > 1]


def generate_ngrams(text: Optional[str], n: int = 3) -> List[str]:
    """Generate the contiguous character n-grams of a string.

    Args:
        text: Source text
        n: Window size

    Returns:
        List of n-grams. Text shorter than n yields a single item holding
        the whole lowercased text. Length is checked before trimming, so
        padded text that is short once trimmed yields no n-grams.
    """
    if not text or len(text) < n:
        return [text.lower() if text else ""]

    normalized = text.lower().strip()
    return [normalized[i:i + n] for i in range(len(normalized) - n + 1)]


def generate_search_variations(term: Optional[str]) -> List[str]:
    """Generate plausible misspellings of a search term.

    This is a curated typo set rather than the full edit-distance-1
    neighbourhood, which keeps the number of extra query clauses small.

    Args:
        term: Search term

    Returns:
        Deduplicated variations, starting with the normalized term itself
    """
    if not term:
        return []

    normalized = term.lower().strip()
    variations = [normalized]

    for i, char in enumerate(normalized):
        for sub in SUBSTITUTIONS.get(char, []):
            variations.append(normalized[:i] + sub + normalized[i + 1:])

        if normalized[i:i + 2] == "ph":
            for sub in SUBSTITUTIONS["ph"]:
                variations.append(normalized[:i] + sub + normalized[i + 2:])

    if len(normalized) > 3:
        variations.append(normalized[:-1])

    return list(dict.fromkeys(variations))
