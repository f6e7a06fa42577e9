"""Page meta block parsing.

A page file may open with a comment block of ``Key: value`` lines::

    <!--
    Title: Welcome
    Description: The front page
    Template: home
    -->
    # Hello

``/* ... */`` works the same way. Keys are lower-cased and spaces become
underscores (``Last Modified`` -> ``last_modified``).
"""

import re

_META_BLOCK = re.compile(
    r"\A\s*(?:<!--(?P<html>.*?)-->|/\*(?P<c>.*?)\*/)\s*",
    re.DOTALL,
)


def parse_meta(raw: str) -> tuple[dict[str, str], str]:
    """Split *raw* page source into ``(meta, body)``.

    Sources without a leading meta block return an empty dict and the
    source unchanged.
    """
    match = _META_BLOCK.match(raw)
    if match is None:
        return {}, raw

    block = match.group("html") if match.group("html") is not None else match.group("c")
    meta: dict[str, str] = {}
    for line in block.splitlines():
        key, sep, value = line.partition(":")
        if not sep or not key.strip():
            continue
        meta[meta_key(key)] = value.strip()
    return meta, raw[match.end() :]


def meta_key(key: str) -> str:
    """Normalize a meta key: ``"Last Modified"`` -> ``"last_modified"``."""
    return "_".join(key.strip().lower().split())
