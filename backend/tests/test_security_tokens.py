from datetime import timedelta

from scaffold_api.core.security import (
    create_access_token,
    create_oauth_state,
    decode_access_token,
    decode_token,
    generate_refresh_token,
    get_password_hash,
    split_refresh_token,
    verify_oauth_state,
    verify_password,
)


def test_access_token_round_trip():
    token = create_access_token({"sub": "7", "email": "alice@example.com", "roles": []})
    payload = decode_access_token(token)
    assert payload is not None
    assert payload["sub"] == "7"
    assert payload["typ"] == "access"
    assert payload["jti"]


def test_expired_access_token_is_rejected():
    token = create_access_token({"sub": "7"}, expires_delta=timedelta(seconds=-5))
    assert decode_access_token(token) is None


def test_tampered_access_token_is_rejected():
    token = create_access_token({"sub": "7"})
    assert decode_access_token(token[:-2] + ("A" if token[-2] != "A" else "B") + token[-1]) is None
    assert decode_access_token("not-a-jwt") is None


def test_oauth_state_is_not_an_access_token():
    state = create_oauth_state("github")
    assert decode_access_token(state) is None
    assert decode_token(state)["typ"] == "oauth_state"


def test_oauth_state_bound_to_provider():
    state = create_oauth_state("github")
    assert verify_oauth_state(state, "github") is True
    assert verify_oauth_state(state, "google") is False
    assert verify_oauth_state("garbage", "github") is False


def test_refresh_token_parts():
    raw, selector, verifier = generate_refresh_token()
    assert raw == f"{selector}.{verifier}"
    assert split_refresh_token(raw) == (selector, verifier)
    # bcrypt only hashes the first 72 bytes
    assert len(verifier.encode("utf-8")) <= 72


def test_split_refresh_token_rejects_malformed():
    assert split_refresh_token("") is None
    assert split_refresh_token("no-separator") is None
    assert split_refresh_token(".verifier") is None
    assert split_refresh_token("selector.") is None


def test_refresh_tokens_are_unique():
    assert generate_refresh_token()[0] != generate_refresh_token()[0]


def test_password_hash_round_trip():
    hashed = get_password_hash("Secret123!")
    assert hashed != "Secret123!"
    assert verify_password("Secret123!", hashed) is True
    assert verify_password("wrong", hashed) is False


def test_password_longer_than_bcrypt_limit_never_matches():
    hashed = get_password_hash("Secret123!")
    # 40 characters, 80 bytes
    assert verify_password("é" * 40, hashed) is False
    assert verify_password("a" * 100, hashed) is False
