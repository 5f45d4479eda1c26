"""Access codes for public check-in and their QR encoding.

Codes come from ``secrets`` so they cannot be predicted from earlier codes.
Uniqueness is not checked here: the store's unique key on ``access_code``
rejects collisions and the event creation flow retries.
"""

from __future__ import annotations

import base64
import io
import secrets
from dataclasses import dataclass

import qrcode

from ..core.constants import ACCESS_CODE_ALPHABET, ACCESS_CODE_LENGTH

QR_DATA_URL_PREFIX = "data:image/png;base64,"


@dataclass(frozen=True)
class EventCodes:
    access_code: str
    qr_code_data: str


def generate_access_code(length: int = ACCESS_CODE_LENGTH) -> str:
    return "".join(secrets.choice(ACCESS_CODE_ALPHABET) for _ in range(length))


def render_qr_png(code: str, *, box_size: int = 10, border: int = 1) -> bytes:
    qr = qrcode.QRCode(
        version=None,
        error_correction=qrcode.constants.ERROR_CORRECT_H,
        box_size=box_size,
        border=border,
    )
    qr.add_data(code)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")

    buf = io.BytesIO()
    img.save(buf, format="PNG")
    return buf.getvalue()


def generate_encoded_code(code: str) -> str:
    """Encode ``code`` as a PNG QR image wrapped in a data URL."""
    png = render_qr_png(code)
    return QR_DATA_URL_PREFIX + base64.b64encode(png).decode("ascii")


def generate_event_codes() -> EventCodes:
    access_code = generate_access_code()
    return EventCodes(access_code=access_code, qr_code_data=generate_encoded_code(access_code))
