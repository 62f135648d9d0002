"""Food name normalization shared by the cache and the curated knowledge base."""


def normalize(name: str) -> str:
    """
    Map a free-text food name to its lookup key.

    Lower-cases and trims surrounding whitespace. No stemming and no
    punctuation stripping: "Poulet DG!" and "poulet dg" are different keys.

    Example:
        >>> normalize("  Jollof Rice ")
        'jollof rice'
    """
    return name.strip().lower()
