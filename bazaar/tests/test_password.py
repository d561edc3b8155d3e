import pytest

from bazaar.core.auth.password import burn_password_check, hash_password, verify_password

pytestmark = pytest.mark.unit


def test_hash_and_verify_round_trip(app_ctx):
    hashed = hash_password("pass1234")
    assert hashed != "pass1234"
    assert hashed.startswith("$2")
    assert verify_password("pass1234", hashed) is True
    assert verify_password("pass12345", hashed) is False


def test_hashes_are_salted(app_ctx):
    assert hash_password("same-password") != hash_password("same-password")


@pytest.mark.parametrize("stored", [None, "", "not-a-bcrypt-hash", "$2b$04$short"])
def test_malformed_hash_is_a_mismatch_not_an_error(app_ctx, stored):
    assert verify_password("pass1234", stored) is False


def test_empty_plaintext_never_verifies(app_ctx):
    assert verify_password("", hash_password("pass1234")) is False


def test_burn_password_check_is_silent(app_ctx):
    assert burn_password_check("anything") is None
    assert burn_password_check("") is None
