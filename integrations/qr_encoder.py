"""QR code rendering for anonymous feedback URLs."""

import io

import qrcode
from qrcode.image.svg import SvgPathImage


class SvgQrEncoder:
    """Renders a URL as an SVG QR code."""

    def __init__(self, box_size: int = 10, border: int = 4):
        self.box_size = box_size
        self.border = border

    def encode(self, url: str) -> bytes:
        qr = qrcode.QRCode(box_size=self.box_size, border=self.border, image_factory=SvgPathImage)
        qr.add_data(url)
        qr.make(fit=True)

        buffer = io.BytesIO()
        qr.make_image().save(buffer)
        return buffer.getvalue()


