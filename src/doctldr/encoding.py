"""Byte-order-mark sniffing and fallback decoding of raw file contents."""

from __future__ import annotations

import codecs

UTF8 = "UTF-8"
UTF16LE = "UTF-16LE"

# bytes left undefined by Python's cp1252 but mapped to C1 controls by the WHATWG table
_CP1252_UNDEFINED = frozenset(b"\x81\x8d\x8f\x90\x9d")
WHATWG_C1 = "doctldr-whatwg-c1"


def _whatwg_c1_handler(err: UnicodeError) -> tuple[str, int]:
    if not isinstance(err, UnicodeDecodeError):
        raise err
    chunk = err.object[err.start : err.end]
    if not all(b in _CP1252_UNDEFINED for b in chunk):
        raise err
    return "".join(chr(b) for b in chunk), err.end


codecs.register_error(WHATWG_C1, _whatwg_c1_handler)

# (python codec, error handler, reported name), tried in order after strict UTF-8 fails
FALLBACK_ENCODINGS: list[tuple[str, str, str]] = [
    ("cp1252", WHATWG_C1, "windows-1252"),
    ("mac_roman", "strict", "macintosh"),
    ("shift_jis", "strict", "Shift_JIS"),
]


def _decode_utf16_with_bom(data: bytes) -> str:
    codec = "utf-16-be" if data.startswith(codecs.BOM_UTF16_BE) else "utf-16-le"
    return data[2:].decode(codec, errors="replace")


def detect_and_decode(data: bytes) -> tuple[str, str]:
    """Detect the encoding of `data` and decode it.

    Detection order is BOM (UTF-8, then UTF-16), strict UTF-8, then the
    legacy encodings in `FALLBACK_ENCODINGS`. The first encoding that decodes
    cleanly wins, so ambiguous byte strings resolve to whichever is tried
    first. Windows-1252 follows the WHATWG table, where every byte is
    defined, so in practice it accepts anything that is not UTF-8. If
    nothing decodes cleanly the bytes are decoded as UTF-8 with replacement
    characters and still reported as UTF-8.

    Never raises.

    Args:
        data (bytes): raw file contents

    Returns:
        tuple[str, str]: the decoded text and the encoding name
    """
    if data.startswith(codecs.BOM_UTF8):
        return data[len(codecs.BOM_UTF8) :].decode("utf-8", errors="replace"), UTF8
    if data.startswith((codecs.BOM_UTF16_LE, codecs.BOM_UTF16_BE)):
        return _decode_utf16_with_bom(data), UTF16LE

    try:
        return data.decode("utf-8"), UTF8
    except UnicodeDecodeError:
        pass

    for codec, errors, name in FALLBACK_ENCODINGS:
        try:
            return data.decode(codec, errors=errors), name
        except UnicodeDecodeError:
            continue

    return data.decode("utf-8", errors="replace"), UTF8
