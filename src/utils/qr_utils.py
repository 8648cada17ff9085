"""Pure helpers for QR enrollment codes.

Nothing here touches the database: code generation, link building, scanned
input normalization and display-status derivation.
"""

import secrets
from datetime import datetime
from typing import Optional
from urllib.parse import urlencode

from config import (
    PUBLIC_BASE_URL,
    QR_CODE_ALPHABET,
    QR_CODE_LENGTH,
    QR_IMAGE_SERVICE_URL,
    QR_IMAGE_SIZE,
)
from schemas.qr_code import QRCodeStatus
from utils.time_utils import parse_timestamp, utc_now

ENROLL_MARKER = "/enroll/"


def generate_code_value(length: int = QR_CODE_LENGTH) -> str:
    """Return a random code drawn from the unambiguous uppercase alphabet."""
    return "".join(secrets.choice(QR_CODE_ALPHABET) for _ in range(length))


def extract_code(raw: str) -> str:
    """Normalize scanned input to a bare code.

    Accepts either a bare code or any link containing ``/enroll/<code>``.

    Args:
        raw: Text pasted or scanned by the student.

    Returns:
        The code, or an empty string if nothing usable was given.
    """
    value = (raw or "").strip()
    if ENROLL_MARKER in value:
        value = value.split(ENROLL_MARKER, 1)[1]
        for sep in ("?", "#", "/"):
            value = value.split(sep, 1)[0]
    return value.strip()


def build_enrollment_url(code: str, base_url: str = PUBLIC_BASE_URL) -> str:
    return f"{base_url.rstrip('/')}{ENROLL_MARKER}{code}"


def build_qr_image_url(code: str, size: int = QR_IMAGE_SIZE) -> str:
    query = urlencode({"size": f"{size}x{size}", "data": build_enrollment_url(code)})
    return f"{QR_IMAGE_SERVICE_URL}?{query}"


def derive_status(
    is_active: bool,
    expires_at: Optional[str],
    max_uses: Optional[int],
    current_uses: int,
    now: Optional[datetime] = None,
) -> QRCodeStatus:
    """Derive the display status of a code.

    Checks run in a fixed order: inactive, then expired, then limit reached.
    The result depends on the clock and must not be stored.

    Args:
        is_active: Manual activation flag.
        expires_at: ISO expiry timestamp, or None for no expiry.
        max_uses: Use cap, or None for unlimited.
        current_uses: Successful redemptions so far.
        now: Reference time; defaults to the current UTC time.

    Returns:
        The QRCodeStatus for display and redemption checks.
    """
    if not is_active:
        return QRCodeStatus.INACTIVE
    if expires_at:
        if parse_timestamp(expires_at) < (now or utc_now()):
            return QRCodeStatus.EXPIRED
    if max_uses is not None and current_uses >= max_uses:
        return QRCodeStatus.LIMIT_REACHED
    return QRCodeStatus.ACTIVE


def status_of(model, now: Optional[datetime] = None) -> QRCodeStatus:
    """Derive the status of an EnrollmentQRCodeModel row."""
    return derive_status(
        is_active=bool(model.is_active),
        expires_at=model.expires_at,
        max_uses=model.max_uses,
        current_uses=model.current_uses or 0,
        now=now,
    )
