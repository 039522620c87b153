import shlex

from datetime import datetime
from typing import Iterable, List

def contains_marker(name, marker):
    if not isinstance(name, str):
        raise ValueError(f"Test name must be a string: {name}")

    if not isinstance(marker, str) or marker == "":
        raise ValueError(f"Marker must be a non-empty string: {marker}")

    return marker.upper() in name.upper()

def matches_any(name, patterns: Iterable[str]) -> bool:
    return any(contains_marker(name, pattern) for pattern in patterns)

def fuzzy_match(query: str, item: str) -> bool:
    """
    Case-insensitive subsequence match: every character of the query must
    appear in the item in the same order, gaps allowed.
    Whitespace in the query is ignored.
    """
    query = "".join(query.lower().split())
    if query == "":
        return True

    remaining = iter(item.lower())
    return all(char in remaining for char in query)

def generate_run_id(now=None):
    if now is None:
        now = datetime.now()

    return now.strftime("%Y-%m-%d_%H-%M-%S")

def quote_command(tokens: List[str]) -> str:
    return shlex.join(tokens)
