import codecs

import pytest
from pytest_mock import MockerFixture

from doctldr import encoding
from doctldr.encoding import detect_and_decode


@pytest.mark.unit
def test_clean_utf8_is_reported_as_utf8() -> None:
    assert detect_and_decode("héllo wörld\n".encode()) == ("héllo wörld\n", "UTF-8")


@pytest.mark.unit
def test_utf8_bom_is_stripped() -> None:
    assert detect_and_decode(codecs.BOM_UTF8 + b"# Title") == ("# Title", "UTF-8")


@pytest.mark.unit
@pytest.mark.parametrize(
    ("bom", "codec"),
    [(codecs.BOM_UTF16_LE, "utf-16-le"), (codecs.BOM_UTF16_BE, "utf-16-be")],
)
def test_utf16_bom_is_reported_as_utf16le(bom: bytes, codec: str) -> None:
    text, name = detect_and_decode(bom + "héllo".encode(codec))

    assert text == "héllo"
    assert name == "UTF-16LE"


@pytest.mark.unit
def test_windows_1252_is_tried_after_utf8() -> None:
    data = "café “quoted”".encode("cp1252")

    assert detect_and_decode(data) == ("café “quoted”", "windows-1252")


@pytest.mark.unit
@pytest.mark.parametrize("byte", [0x81, 0x8D, 0x8F, 0x90, 0x9D])
def test_windows_1252_maps_unassigned_bytes_to_c1_controls(byte: int) -> None:
    data = b"caf\xe9 " + bytes([byte])

    assert detect_and_decode(data) == ("café " + chr(byte), "windows-1252")


@pytest.mark.unit
def test_mac_roman_is_tried_after_windows_1252(mocker: MockerFixture) -> None:
    mocker.patch.object(
        encoding,
        "FALLBACK_ENCODINGS",
        [("ascii", "strict", "US-ASCII"), ("mac_roman", "strict", "macintosh")],
    )

    assert detect_and_decode(b"\x81bc") == ("Åbc", "macintosh")


@pytest.mark.unit
def test_lossy_fallback_is_reported_as_utf8(mocker: MockerFixture) -> None:
    mocker.patch.object(encoding, "FALLBACK_ENCODINGS", [])

    assert detect_and_decode(b"ab\xffcd") == ("ab�cd", "UTF-8")


@pytest.mark.unit
def test_empty_input() -> None:
    assert detect_and_decode(b"") == ("", "UTF-8")
