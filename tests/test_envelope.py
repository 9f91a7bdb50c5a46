import base64

import pytest

from core.envelope import AnalysisEnvelope, decode_data_uri, encode_data_uri
from core.errors import ImageDecodeError


def test_data_uri_reproduces_original_bytes(jpeg_bytes):
    uri = encode_data_uri(jpeg_bytes, "image/jpeg")
    assert uri.startswith("data:image/jpeg;base64,")
    assert decode_data_uri(uri) == jpeg_bytes


def test_jpeg_magic_bytes_encode_as_expected():
    uri = encode_data_uri(b"\xff\xd8\xff\xe0\x00\x10JFIF", "image/jpeg")
    assert uri.startswith("data:image/jpeg;base64,/9j/4AAQ")


@pytest.mark.parametrize("uri", [
    "not a data uri",
    "data:text/plain;base64,aGVsbG8=",
    "data:image/png,rawpayload",
    "data:image/png;base64,@@@not-base64@@@",
    "data:image/png;base64,",
])
def test_decode_rejects_malformed(uri):
    with pytest.raises(ImageDecodeError):
        decode_data_uri(uri)


def test_decode_only_strips_exact_prefix():
    payload = base64.b64encode(b"abc").decode()
    assert decode_data_uri(f"data:image/webp;base64,{payload}") == b"abc"


def test_envelope_emptiness():
    assert AnalysisEnvelope().is_empty
    assert AnalysisEnvelope(text="", image_data_uri="").is_empty
    assert not AnalysisEnvelope(text="x").is_empty
    assert not AnalysisEnvelope(image_data_uri="data:image/png;base64,AA==").is_empty
