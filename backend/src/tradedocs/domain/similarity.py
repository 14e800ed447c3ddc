"""
String similarity and identity matching for party names.

Party names arrive from different documents typed by different people:
"ACME IMPORT CORP." on the bill of lading, "Acme Import Corp" on the
invoice. These helpers decide when two such strings name the same party.

Design Decisions:
- Identity is lenient: trimmed, case-insensitive equality or containment
- Fuzzy similarity is Sorensen-Dice over character bigram sets
- Strings shorter than 2 characters have no bigrams and always score 0
"""


def _bigrams(value: str) -> set[str]:
    return {value[i:i + 2] for i in range(len(value) - 1)}


def dice_similarity(a: str, b: str) -> float:
    """
    Sorensen-Dice coefficient over sets of character bigrams.

    Symmetric, in [0, 1]. Comparison is case-insensitive; whitespace is
    significant, so callers normalise names first. Returns 0.0 if either
    string has fewer than 2 characters, even when both are identical.

    Example:
        >>> dice_similarity("night", "nacht")
        0.25
    """
    left = a.lower()
    right = b.lower()

    if len(left) < 2 or len(right) < 2:
        return 0.0
    if left == right:
        return 1.0

    left_bigrams = _bigrams(left)
    right_bigrams = _bigrams(right)
    shared = len(left_bigrams & right_bigrams)
    return (2.0 * shared) / (len(left_bigrams) + len(right_bigrams))


def normalize_identity(value: str) -> str:
    return value.strip().lower()


def identity_matches(a: str, b: str) -> bool:
    """
    Lenient party-name identity check.

    True when the trimmed, lower-cased strings are equal or one contains
    the other. Empty strings never match.
    """
    left = normalize_identity(a)
    right = normalize_identity(b)
    if not left or not right:
        return False
    return left == right or left in right or right in left
