import base64
import json
import time
from io import BytesIO

import qrcode

QR_TYPE = "camp_registration"


def generate_qr_data(registration_id, timestamp=None):
    """Opaque check-in token tied to a registration id."""
    payload = {
        "type": QR_TYPE,
        "id": str(registration_id),
        "timestamp": timestamp if timestamp is not None else int(time.time() * 1000),
    }
    return json.dumps(payload, separators=(",", ":"))


def parse_qr_data(qr_code_data):
    try:
        payload = json.loads(qr_code_data)
    except (TypeError, ValueError):
        return None
    if not isinstance(payload, dict) or payload.get("type") != QR_TYPE or not payload.get("id"):
        return None
    return payload


def render_qr_image(qr_code_data):
    """PNG data URL for the token, ready for an <img> tag or an email."""
    qr = qrcode.QRCode(box_size=10, border=2)
    qr.add_data(qr_code_data)
    qr.make(fit=True)
    image = qr.make_image(fill_color="black", back_color="white")

    buffer = BytesIO()
    image.save(buffer, format="PNG")
    encoded = base64.b64encode(buffer.getvalue()).decode("ascii")
    return f"data:image/png;base64,{encoded}"
