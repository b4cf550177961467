"""Case-insensitive substring search helpers."""

LIKE_ESCAPE = "\\"


def contains_pattern(term: str) -> str:
    """Return an ``ILIKE`` pattern matching *term* literally anywhere in a value.

    ``%`` and ``_`` in the user's input are escaped, so they match themselves
    rather than acting as wildcards. Use with ``escape=LIKE_ESCAPE``.
    """
    escaped = (
        term.strip()
        .replace(LIKE_ESCAPE, LIKE_ESCAPE * 2)
        .replace("%", LIKE_ESCAPE + "%")
        .replace("_", LIKE_ESCAPE + "_")
    )
    return f"%{escaped}%"
