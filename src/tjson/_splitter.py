"""
Top-level segment scanning for JSON array and object bodies.

The scanner does not tokenize. It walks the body once, tracking bracket
depth and whether it is inside a string literal, and cuts the text at
separators that sit at depth zero outside any string.
"""

from ._profile import ProfileContext

_OPENERS = "{["
_CLOSERS = "}]"


def split_top_level(
    body: str, separator: str = ",", maxsplit: int = -1
) -> list[str]:
    """
    Partitions an array or object body into raw top-level segments.

    Segments are returned exactly as they appear between separators,
    neither trimmed nor unescaped. An empty body yields a single empty
    segment; callers skip blank segments.

    A quote toggles the in-string state only when it is preceded by an
    even run of backslashes, so a literal ending in an escaped backslash
    (for example "C:\\\\") still closes correctly.
    """
    with ProfileContext("split_top_level", len(body)):
        segments: list[str] = []
        depth = 0
        in_string = False
        escaped = False
        last_index = 0

        for i, char in enumerate(body):
            if in_string:
                if escaped:
                    escaped = False
                elif char == "\\":
                    escaped = True
                elif char == '"':
                    in_string = False
                continue

            if char == '"':
                in_string = True
            elif char in _OPENERS:
                depth += 1
            elif char in _CLOSERS:
                depth -= 1
            elif char == separator and depth == 0:
                if maxsplit < 0 or len(segments) < maxsplit:
                    segments.append(body[last_index:i])
                    last_index = i + 1

        segments.append(body[last_index:])
        return segments


def split_member(segment: str) -> tuple[str, str] | None:
    """
    Splits a raw object member into key text and value text.

    Cuts once at the first colon outside any string or nested structure.
    Returns None when the segment has no such colon.
    """
    parts = split_top_level(segment, ":", maxsplit=1)
    if len(parts) != 2:
        return None
    return parts[0], parts[1]
