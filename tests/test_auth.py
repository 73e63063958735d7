from mixmodas.auth import hash_password, verify_password


def test_hash_is_not_plaintext_and_verifies():
    hashed = hash_password("secret", rounds=4)
    assert hashed != "secret"
    assert verify_password("secret", hashed)
    assert not verify_password("Secret", hashed)


def test_hash_is_salted():
    assert hash_password("secret", rounds=4) != hash_password("secret", rounds=4)


def test_malformed_hash_does_not_match():
    assert verify_password("secret", "not-a-bcrypt-hash") is False
    assert verify_password("secret", "") is False
    assert verify_password("secret", None) is False


def test_long_passwords_are_truncated_consistently():
    password = "x" * 100
    hashed = hash_password(password, rounds=4)
    assert verify_password(password, hashed)
