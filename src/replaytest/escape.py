from __future__ import annotations

import re

# `[0-f]` is an ASCII range, so `\0x:;` matches and decodes to nothing.
_ESCAPE_RE = re.compile(r"\\(?:t|b|n|r|0(?:b[01]{8}|x[0-f]{2}))")

_CONTROL_ESCAPES: dict[str, bytes] = {
    "\\n": b"\n",
    "\\r": b"\r",
    "\\t": b"\t",
    "\\b": b"\b",
}
_CONTROL_BYTES: dict[int, str] = {value[0]: key for key, value in _CONTROL_ESCAPES.items()}

_TEXT_ENCODING = "utf-8"
_TEXT_ERRORS = "surrogateescape"


def _bytes_from_bit_string(bits: str) -> bytes:
    return bytes([int(bits, 2)])


def _bytes_from_hex(digits: str) -> bytes:
    try:
        return bytes.fromhex(digits)
    except ValueError:
        return b""


def _decode_escape(escape: str) -> bytes:
    control = _CONTROL_ESCAPES.get(escape)
    if control is not None:
        return control
    if escape.startswith("\\0b"):
        return _bytes_from_bit_string(escape[3:])
    if escape.startswith("\\0x"):
        return _bytes_from_hex(escape[3:])
    return escape.encode(_TEXT_ENCODING, _TEXT_ERRORS)


def unescape_bytes(text: str) -> bytes:
    """Decode transcript escapes in `text` into raw bytes.

    Recognized: `\\n`, `\\r`, `\\t`, `\\b`, `\\0b` + 8 binary digits and `\\0x` +
    2 hex digits. Anything else is copied through unchanged.
    """

    out = bytearray()
    pos = 0
    for match in _ESCAPE_RE.finditer(text):
        out += text[pos : match.start()].encode(_TEXT_ENCODING, _TEXT_ERRORS)
        out += _decode_escape(match.group(0))
        pos = match.end()
    out += text[pos:].encode(_TEXT_ENCODING, _TEXT_ERRORS)
    return bytes(out)


def unescape(text: str) -> str:
    """Like `unescape_bytes` but returns text.

    Bytes that are not valid UTF-8 are carried as surrogate escapes, so
    `text.encode("utf-8", "surrogateescape")` gives back the exact bytes.
    """

    return unescape_bytes(text).decode(_TEXT_ENCODING, _TEXT_ERRORS)


def escape_bytes(data: bytes) -> str:
    parts: list[str] = []
    for byte in data:
        control = _CONTROL_BYTES.get(byte)
        if control is not None:
            parts.append(control)
        elif 0x20 <= byte < 0x7F and byte != ord("\\"):
            parts.append(chr(byte))
        else:
            parts.append(f"\\0x{byte:02x}")
    return "".join(parts)


__all__ = [
    "escape_bytes",
    "unescape",
    "unescape_bytes",
]
