import io

import qrcode

def render_qr_png(payload: str, box_size: int = 10, border: int = 1) -> bytes:
    """Render the attendee code as a plain black-on-white PNG"""
    qr = qrcode.QRCode(
        error_correction=qrcode.constants.ERROR_CORRECT_M,
        box_size=box_size,
        border=border,
    )
    qr.add_data(payload)
    qr.make(fit=True)

    img = qr.make_image(fill_color="black", back_color="white")
    buffer = io.BytesIO()
    img.save(buffer, format="PNG")
    return buffer.getvalue()
