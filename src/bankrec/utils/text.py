"""Description normalisation and similarity helpers."""

import re

_PUNCTUATION = re.compile(r"[^\w\s]")
_WHITESPACE = re.compile(r"\s+")


def collapse_description(description: str) -> str:
    """Lowercase, trim and collapse internal whitespace."""
    return _WHITESPACE.sub(" ", (description or "").lower().strip())


def strip_punctuation(description: str) -> str:
    """Collapse a description and drop punctuation."""
    return collapse_description(_PUNCTUATION.sub("", description or ""))


def word_set(text: str) -> set[str]:
    return {word for word in text.split(" ") if word}


def jaccard_similarity(first: str, second: str) -> float:
    """Jaccard index of the punctuation-stripped word sets.

    Returns 0.0 when both descriptions have no words.
    """
    words_first = word_set(strip_punctuation(first))
    words_second = word_set(strip_punctuation(second))
    union = words_first | words_second
    if not union:
        return 0.0
    return len(words_first & words_second) / len(union)


def is_significant_substring(first: str, second: str) -> bool:
    """True if one string contains the other and the shorter is >= 80% of the longer."""
    shorter, longer = sorted((first, second), key=len)
    if len(shorter) < len(longer) * 0.8:
        return False
    return shorter in longer


def word_overlap(candidate: str, reference: str) -> float:
    """Fraction of the candidate's words (longer than 2 chars) found in the reference."""
    candidate_words = [word for word in candidate.split() if len(word) > 2]
    if not candidate_words:
        return 0.0
    reference_words = {word for word in reference.split() if len(word) > 2}
    common = [word for word in candidate_words if word in reference_words]
    return len(common) / len(candidate_words)
