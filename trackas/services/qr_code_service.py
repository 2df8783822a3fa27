# services/qr_code_service.py
"""
QR Code generation service for class registration links.
Renders the link as a PNG and returns it as a data URL stored on the class.
"""

import base64
import io
import logging

import qrcode


class QRCodeError:
    """QR Code service error codes."""
    INVALID_DATA = 'invalid_data'
    GENERATION_FAILED = 'generation_failed'


class QRCodeService:
    """Service for generating registration QR codes."""

    @staticmethod
    def generate_data_url(data):
        """
        Generate a QR code for `data`.

        Args:
            data: Text to encode (the registration link)

        Returns:
            dict: Generation result with the PNG data URL
        """
        logger = logging.getLogger('qr_code_service')

        if not data:
            return {
                'success': False,
                'message': 'Nothing to encode',
                'error_code': QRCodeError.INVALID_DATA
            }

        try:
            png_bytes = QRCodeService._render_png(data)
            data_url = f"data:image/png;base64,{base64.b64encode(png_bytes).decode('ascii')}"

            logger.info(f"Generated QR code ({len(png_bytes)} bytes)")
            return {
                'success': True,
                'message': 'QR code generated successfully',
                'data_url': data_url
            }

        except Exception as e:
            logger.error(f"Unexpected error generating QR code: {str(e)}", exc_info=True)
            return {
                'success': False,
                'message': 'Unexpected error during QR generation',
                'error_code': QRCodeError.GENERATION_FAILED
            }

    @staticmethod
    def _render_png(data):
        # High error correction so printed codes survive smudges
        qr = qrcode.QRCode(
            version=None,
            error_correction=qrcode.constants.ERROR_CORRECT_H,
            box_size=10,
            border=4,
        )
        qr.add_data(data)
        qr.make(fit=True)

        qr_image = qr.make_image(fill_color="black", back_color="white")

        buffer = io.BytesIO()
        qr_image.save(buffer, format='PNG')
        return buffer.getvalue()
