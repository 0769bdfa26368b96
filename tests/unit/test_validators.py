from datetime import date

import pytest

from leqet.client.validators import validate_otp, validate_password, require_email, iso_day, require_id


@pytest.mark.parametrize("otp", [
    "12345", "1234567", "12a456", "", None,
    "١٢٣٤٥٦",  # Arabic-Indic digits
    "１２３４５６",  # fullwidth digits
])
def test_otp_must_be_six_digits(otp):
    with pytest.raises(ValueError):
        validate_otp(otp)


def test_otp_is_trimmed():
    assert validate_otp(" 012345 ") == "012345"
    assert validate_otp(123456) == "123456"


def test_password_rules():
    assert validate_password("secret", "secret") == "secret"
    with pytest.raises(ValueError, match="at least 6"):
        validate_password("short")
    with pytest.raises(ValueError, match="do not match"):
        validate_password("secret1", "secret2")


def test_require_email_normalises():
    assert require_email("  Member@Leqet.LOCAL ") == "member@leqet.local"
    with pytest.raises(ValueError):
        require_email("   ")


def test_iso_day():
    assert iso_day(date(2025, 1, 2)) == "2025-01-02"
    assert iso_day("2025-01-02") == "2025-01-02"
    with pytest.raises(ValueError):
        iso_day("02/01/2025")


def test_require_id():
    assert require_id("7", "member_id") == 7
    with pytest.raises(ValueError):
        require_id(0, "member_id")
