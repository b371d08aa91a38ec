import base64
import io

import qrcode


def render_qr_data_url(token):
    """Render the token as a PNG QR code, returned as a data URL."""
    img = qrcode.make(token)
    buf = io.BytesIO()
    img.save(buf, format="PNG")
    qr_b64 = base64.b64encode(buf.getvalue()).decode("utf-8")
    return f"data:image/png;base64,{qr_b64}"
