"""String literal escaping for JSON text."""

_ASCII_LIMIT = 127

_ESCAPES = {
    '"': '\\"',
    "\\": "\\\\",
    "\b": "\\b",
    "\f": "\\f",
    "\n": "\\n",
    "\r": "\\r",
    "\t": "\\t",
}

_UNESCAPES = {
    '"': '"',
    "\\": "\\",
    "/": "/",
    "b": "\b",
    "f": "\f",
    "n": "\n",
    "r": "\r",
    "t": "\t",
}


def escape(text: str, ensure_ascii: bool = False) -> str:
    """
    Escapes the characters JSON forbids raw inside a string literal.

    Only the seven mandatory escapes are applied; other control characters
    pass through untouched. With ensure_ascii, code points above ASCII are
    written as \\uXXXX.
    """
    result = []
    for char in text:
        escaped = _ESCAPES.get(char)
        if escaped is not None:
            result.append(escaped)
        elif ensure_ascii and ord(char) > _ASCII_LIMIT:
            result.append(_escape_code_point(ord(char)))
        else:
            result.append(char)
    return "".join(result)


def _escape_code_point(code_point: int) -> str:
    if code_point > 0xFFFF:
        # Surrogate pair for characters outside the BMP
        code_point -= 0x10000
        high = 0xD800 | (code_point >> 10)
        low = 0xDC00 | (code_point & 0x3FF)
        return f"\\u{high:04x}\\u{low:04x}"
    return f"\\u{code_point:04x}"


def unescape(text: str) -> str:
    """
    Reverses escape sequences in the body of a JSON string literal.

    Unknown escapes and truncated \\u sequences are kept verbatim.
    """
    if "\\" not in text:
        return text

    result = []
    i = 0
    length = len(text)
    while i < length:
        char = text[i]
        if char != "\\" or i + 1 >= length:
            result.append(char)
            i += 1
            continue

        next_char = text[i + 1]
        if next_char in _UNESCAPES:
            result.append(_UNESCAPES[next_char])
            i += 2
        elif next_char == "u" and _is_hex(text[i + 2 : i + 6]):
            code_point = int(text[i + 2 : i + 6], 16)
            i += 6
            if 0xD800 <= code_point <= 0xDBFF and text[i : i + 2] == "\\u":
                low_digits = text[i + 2 : i + 6]
                low = int(low_digits, 16) if _is_hex(low_digits) else 0
                if 0xDC00 <= low <= 0xDFFF:
                    high = code_point - 0xD800
                    code_point = 0x10000 + (high << 10) + (low - 0xDC00)
                    i += 6
            result.append(chr(code_point))
        else:
            result.append(char)
            i += 1

    return "".join(result)


def _is_hex(digits: str) -> bool:
    hex_digits = "0123456789abcdefABCDEF"
    return len(digits) == 4 and all(c in hex_digits for c in digits)
