from datetime import datetime, timedelta

import pytest
import pytz

from config import QR_CODE_ALPHABET
from schemas.qr_code import QRCodeStatus
from utils.qr_utils import (
    build_enrollment_url,
    build_qr_image_url,
    derive_status,
    extract_code,
    generate_code_value,
)

NOW = datetime(2025, 3, 1, 12, 0, tzinfo=pytz.utc)
PAST = (NOW - timedelta(days=1)).isoformat()
FUTURE = (NOW + timedelta(days=1)).isoformat()


@pytest.mark.parametrize(
    "raw",
    [
        "AB12CD34",
        "  AB12CD34  ",
        "https://app.example.com/enroll/AB12CD34",
        "https://app.example.com/enroll/AB12CD34?ref=poster",
        "https://app.example.com/enroll/AB12CD34#top",
        "https://app.example.com/enroll/AB12CD34/",
        "/enroll/AB12CD34",
    ],
)
def test_extract_code_accepts_bare_codes_and_links(raw):
    assert extract_code(raw) == "AB12CD34"


def test_extract_code_blank_input():
    assert extract_code("   ") == ""
    assert extract_code(None) == ""


def test_extract_code_leaves_other_urls_alone():
    assert extract_code("https://example.com/join/AB12") == "https://example.com/join/AB12"


def test_generated_code_uses_unambiguous_alphabet():
    code = generate_code_value(12)
    assert len(code) == 12
    assert all(ch in QR_CODE_ALPHABET for ch in code)
    for ambiguous in "0O1IL":
        assert ambiguous not in QR_CODE_ALPHABET


def test_enrollment_link_round_trips_through_extract():
    url = build_enrollment_url("XYZ98765", base_url="https://school.example.com/")
    assert url == "https://school.example.com/enroll/XYZ98765"
    assert extract_code(url) == "XYZ98765"


def test_qr_image_url_encodes_enrollment_link():
    url = build_qr_image_url("XYZ98765", size=200)
    assert "size=200x200" in url
    assert "enroll%2FXYZ98765" in url


def test_status_active_without_limits():
    assert derive_status(True, None, None, 0, now=NOW) == QRCodeStatus.ACTIVE
    assert derive_status(True, FUTURE, 5, 4, now=NOW) == QRCodeStatus.ACTIVE


def test_status_inactive_wins_over_everything():
    assert derive_status(False, PAST, 1, 1, now=NOW) == QRCodeStatus.INACTIVE


def test_status_expired_wins_over_limit_reached():
    assert derive_status(True, PAST, 1, 1, now=NOW) == QRCodeStatus.EXPIRED


def test_status_limit_reached():
    assert derive_status(True, FUTURE, 3, 3, now=NOW) == QRCodeStatus.LIMIT_REACHED


def test_status_naive_expiry_is_read_as_utc():
    naive_past = (NOW - timedelta(minutes=5)).replace(tzinfo=None).isoformat()
    assert derive_status(True, naive_past, None, 0, now=NOW) == QRCodeStatus.EXPIRED
