"""Content fingerprints and keyword extraction shared by indexing and search."""

import hashlib
import re

# Tokens shorter or longer than this are noise (operators, minified blobs)
MIN_KEYWORD_LENGTH = 3
MAX_KEYWORD_LENGTH = 49

_NON_WORD_PATTERN = re.compile(r"[^\w\s]", re.ASCII)


def compute_hash(content: str) -> str:
    """Compute a 128-bit BLAKE2b fingerprint of content."""
    return hashlib.blake2b(content.encode("utf-8"), digest_size=16).hexdigest()


def extract_keywords(text: str) -> frozenset[str]:
    """
    Extract the normalized keyword set of a piece of text.

    Punctuation becomes whitespace, tokens outside the length bounds are
    dropped and the rest are lowercased. Queries must go through this exact
    function, otherwise nothing will match.
    """
    words = _NON_WORD_PATTERN.sub(" ", text).split()
    return frozenset(
        word.lower()
        for word in words
        if MIN_KEYWORD_LENGTH <= len(word) <= MAX_KEYWORD_LENGTH
    )
