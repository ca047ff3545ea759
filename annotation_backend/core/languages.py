# /annotation_backend/core/languages.py

"""
The single place where language names are canonicalized.

User-entered names ("english", " ENGLISH ") and stored names ("English") must
compare equal. Every ORM model and every incoming Pydantic contract routes
language fields through `normalize_language`, so queries can use plain
equality.
"""

from typing import Iterable, List, Optional


def normalize_language(name: Optional[str]) -> Optional[str]:
    """Returns the canonical form of a language name, e.g. ' haitian  creole' -> 'Haitian Creole'."""
    if name is None:
        return None
    collapsed = " ".join(name.split())
    if not collapsed:
        return ""
    return " ".join(part[:1].upper() + part[1:] for part in collapsed.casefold().split(" "))


def normalize_languages(names: Optional[Iterable[str]]) -> List[str]:
    """Normalizes a collection of names, dropping blanks and duplicates while keeping order."""
    seen = []
    for name in names or []:
        canonical = normalize_language(name)
        if canonical and canonical not in seen:
            seen.append(canonical)
    return seen


def parse_language_list(raw: Optional[str]) -> List[str]:
    """Parses a comma-separated query parameter such as 'english,French'."""
    if not raw:
        return []
    return normalize_languages(raw.split(","))
