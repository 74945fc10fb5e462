import asyncio
import json
from dataclasses import dataclass

import pytest

from layerx.domain.errors import DecodeError
from layerx.infrastructure.decoding.envelope_decoder import EnvelopeDecoder, extract_data


@dataclass
class Settings:
    theme: str

    @classmethod
    def from_json(cls, payload):
        return cls(theme=payload["theme"])


def decode(raw, from_json=lambda value: value, decoder=None):
    return asyncio.run((decoder or EnvelopeDecoder()).decode(raw, from_json))


def test_envelope_with_data_is_decoded():
    raw = json.dumps({
        "success": True,
        "message": "ok",
        "code": 200,
        "data": {"theme": "dark"},
        "token": "t1",
    })

    response = decode(raw, Settings.from_json)

    assert response.success is True
    assert response.message == "ok"
    assert response.code == 200
    assert response.data == Settings(theme="dark")
    assert response.token == "t1"


def test_payload_under_another_key_is_found():
    raw = json.dumps({"status": "success", "foo": {"theme": "light"}})

    response = decode(raw, Settings.from_json)

    assert response.success is True
    assert response.data == Settings(theme="light")


def test_envelope_metadata_and_scalars_are_never_the_payload():
    envelope = {"error": {"detail": "x"}, "token": "abc", "count": 3, "items": [1, 2]}

    assert extract_data(envelope) == [1, 2]


def test_first_candidate_in_document_order_wins():
    assert extract_data({"b": {"n": 1}, "a": {"n": 2}}) == {"n": 1}


def test_null_data_falls_back_to_other_keys():
    assert extract_data({"data": None, "result": {"n": 1}}) == {"n": 1}


def test_from_json_is_not_called_without_a_payload():
    calls = []

    response = decode(json.dumps({"success": False, "message": "nothing"}), calls.append)

    assert calls == []
    assert response.data is None
    assert response.success is False
    assert response.message == "nothing"


def test_success_requires_literal_true_or_success_status():
    assert decode(json.dumps({"success": "true"})).success is False
    assert decode(json.dumps({"status": "error"})).success is False


def test_non_integer_code_is_dropped():
    assert decode(json.dumps({"code": "E42"})).code is None
    assert decode(json.dumps({"code": "201"})).code == 201


def test_large_bodies_are_parsed_in_a_worker_thread(mocker):
    to_thread = mocker.spy(asyncio, "to_thread")
    raw = json.dumps({"success": True, "data": {"blob": "x" * 200}})

    response = decode(raw, decoder=EnvelopeDecoder(large_body_threshold=100))

    assert to_thread.call_count == 1
    assert response.data["blob"] == "x" * 200


def test_small_bodies_are_parsed_inline(mocker):
    to_thread = mocker.spy(asyncio, "to_thread")

    decode(json.dumps({"success": True}))

    assert to_thread.call_count == 0


@pytest.mark.parametrize("raw", ["not json", "[1, 2, 3]", ""])
def test_malformed_envelopes_raise_decode_error(raw):
    with pytest.raises(DecodeError):
        decode(raw)


def test_failing_from_json_raises_decode_error():
    with pytest.raises(DecodeError, match="KeyError"):
        decode(json.dumps({"data": {"colour": "red"}}), Settings.from_json)


def test_identity_decode_keeps_payload_verbatim():
    response = decode('{"success": true, "data": {"a": 1}}')

    assert response.success is True
    assert response.data == {"a": 1}
    assert response.message is None and response.code is None and response.token is None


def test_threshold_is_measured_in_bytes(mocker):
    to_thread = mocker.spy(asyncio, "to_thread")
    # 80 characters, 160 bytes once encoded
    raw = json.dumps({"data": {"text": "é" * 80}}, ensure_ascii=False)

    response = decode(raw, decoder=EnvelopeDecoder(large_body_threshold=150))

    assert to_thread.call_count == 1
    assert response.data == {"text": "é" * 80}


def test_bytes_bodies_are_accepted():
    response = decode(b'{"success": true, "data": [1]}')

    assert response.data == [1]


def test_parse_document_returns_none_for_invalid_json():
    assert asyncio.run(EnvelopeDecoder().parse_document(b"<html>")) is None


def test_decode_envelope_rejects_non_objects():
    with pytest.raises(DecodeError, match="NoneType"):
        EnvelopeDecoder().decode_envelope(None)
