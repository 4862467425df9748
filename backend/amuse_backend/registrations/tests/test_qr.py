import json

from registrations.qr import QR_TYPE, generate_qr_data, parse_qr_data, render_qr_image


def test_token_carries_type_id_and_timestamp():
    token = generate_qr_data(42, timestamp=1760000000000)

    assert json.loads(token) == {"type": QR_TYPE, "id": "42", "timestamp": 1760000000000}


def test_parse_rejects_foreign_or_broken_tokens():
    assert parse_qr_data("not json") is None
    assert parse_qr_data(json.dumps({"type": "ticket", "id": "1"})) is None
    assert parse_qr_data(json.dumps(["camp_registration", 1])) is None
    assert parse_qr_data(None) is None


def test_parse_accepts_generated_token():
    assert parse_qr_data(generate_qr_data(7))["id"] == "7"


def test_render_returns_png_data_url():
    image = render_qr_image(generate_qr_data(7))

    assert image.startswith("data:image/png;base64,")
    assert len(image) > 100
