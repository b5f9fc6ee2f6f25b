"""
Helpers for turning user input into FTS5 MATCH expressions.
"""

from typing import Optional


def quote_term(term: str) -> str:
    """Quote one term as an FTS5 string so punctuation is not parsed as syntax."""
    return '"' + term.replace('"', '""') + '"'


def build_match_query(query: str) -> Optional[str]:
    """
    Build an FTS5 query with prefix matching on the last term.

    Every whitespace-separated term is quoted, so input such as ``my-app`` or
    ``foo.py`` is matched as the token sequence the tokenizer produces rather
    than rejected as a syntax error. The last term becomes a prefix query,
    which enables search-as-you-type behavior: ``hello wor`` becomes
    ``"hello" "wor"*``.

    Parameters
    ----------
    query : str
        Raw search text

    Returns
    -------
    Optional[str]
        MATCH expression, or None if the query has no terms
    """
    terms = [term.rstrip("*") for term in query.strip().split()]
    terms = [term for term in terms if term]
    if not terms:
        return None
    return " ".join(quote_term(term) for term in terms) + "*"
