"""Unit tests for account_api.core.security: bcrypt hashing and the token issuer."""

import base64
import json
import unittest
from dataclasses import replace
from datetime import timedelta

import jwt

from account_api.core.security import (
    TokenIssuer,
    TokenSettings,
    dummy_password_hash,
    hash_password,
    verify_password,
)

TEST_ROUNDS = 4


def _token_settings(**overrides: object) -> TokenSettings:
    config = TokenSettings(
        access_secret="test-access-secret",
        refresh_secret="test-refresh-secret",
        algorithm="HS256",
        access_expires=timedelta(minutes=10),
        refresh_expires=timedelta(days=7),
    )
    return replace(config, **overrides)


def _swap_payload(token: str, **claims: object) -> str:
    """Replace the payload segment of a JWT while keeping the original signature."""
    header, payload, signature = token.split(".")
    padded = payload + "=" * (-len(payload) % 4)
    data = json.loads(base64.urlsafe_b64decode(padded))
    data.update(claims)
    forged = base64.urlsafe_b64encode(json.dumps(data).encode()).rstrip(b"=").decode()
    return f"{header}.{forged}.{signature}"


class TestPasswordHashing(unittest.TestCase):
    """hash_password produces a salted bcrypt hash that verify_password accepts."""

    def test_hash_is_not_plaintext_and_verifies(self) -> None:
        hashed = hash_password("secret1", TEST_ROUNDS)
        self.assertNotEqual(hashed, "secret1")
        self.assertTrue(hashed.startswith("$2"))
        self.assertTrue(verify_password("secret1", hashed))

    def test_wrong_password_does_not_verify(self) -> None:
        hashed = hash_password("secret1", TEST_ROUNDS)
        self.assertFalse(verify_password("wrong", hashed))

    def test_same_password_hashes_differently(self) -> None:
        self.assertNotEqual(
            hash_password("secret1", TEST_ROUNDS),
            hash_password("secret1", TEST_ROUNDS),
        )

    def test_malformed_hash_returns_false(self) -> None:
        self.assertFalse(verify_password("secret1", "not-a-bcrypt-hash"))

    def test_cost_factor_is_embedded(self) -> None:
        self.assertIn("$04$", hash_password("secret1", TEST_ROUNDS))

    def test_dummy_hash_is_cached_and_rejects_passwords(self) -> None:
        dummy = dummy_password_hash(TEST_ROUNDS)
        self.assertIs(dummy, dummy_password_hash(TEST_ROUNDS))
        self.assertFalse(verify_password("secret1", dummy))


class TestTokenIssuer(unittest.TestCase):
    """Access and refresh tokens carry the username and are only valid for their own kind."""

    def setUp(self) -> None:
        self.issuer = TokenIssuer(_token_settings())

    def test_access_token_round_trip(self) -> None:
        claims = self.issuer.decode_access_token(self.issuer.issue_access_token("alice"))
        self.assertEqual(claims.username, "alice")
        self.assertEqual(claims.type, "access")
        self.assertEqual(claims.exp - claims.iat, timedelta(minutes=10))

    def test_refresh_token_round_trip(self) -> None:
        claims = self.issuer.decode_refresh_token(self.issuer.issue_refresh_token("alice"))
        self.assertEqual(claims.username, "alice")
        self.assertEqual(claims.type, "refresh")
        self.assertEqual(claims.exp - claims.iat, timedelta(days=7))

    def test_tokens_are_unique_per_issue(self) -> None:
        self.assertNotEqual(
            self.issuer.issue_refresh_token("alice"),
            self.issuer.issue_refresh_token("alice"),
        )

    def test_access_token_rejected_as_refresh(self) -> None:
        with self.assertRaises(jwt.PyJWTError):
            self.issuer.decode_refresh_token(self.issuer.issue_access_token("alice"))

    def test_refresh_token_rejected_as_access(self) -> None:
        with self.assertRaises(jwt.PyJWTError):
            self.issuer.decode_access_token(self.issuer.issue_refresh_token("alice"))

    def test_type_claim_checked_even_with_shared_secret(self) -> None:
        issuer = TokenIssuer(_token_settings(refresh_secret="test-access-secret"))
        with self.assertRaises(jwt.InvalidTokenError):
            issuer.decode_access_token(issuer.issue_refresh_token("alice"))

    def test_expired_token_rejected(self) -> None:
        expired = TokenIssuer(_token_settings(access_expires=timedelta(seconds=-30)))
        with self.assertRaises(jwt.ExpiredSignatureError):
            self.issuer.decode_access_token(expired.issue_access_token("alice"))

    def test_token_signed_with_other_secret_rejected(self) -> None:
        other = TokenIssuer(_token_settings(refresh_secret="someone-elses-secret"))
        with self.assertRaises(jwt.InvalidSignatureError):
            self.issuer.decode_refresh_token(other.issue_refresh_token("alice"))

    def test_tampered_payload_rejected(self) -> None:
        forged = _swap_payload(self.issuer.issue_access_token("alice"), username="mallory")
        with self.assertRaises(jwt.InvalidSignatureError):
            self.issuer.decode_access_token(forged)

    def test_missing_username_claim_rejected(self) -> None:
        token = jwt.encode(
            {"type": "access", "iat": 0, "exp": 32503680000},
            "test-access-secret",
            algorithm="HS256",
        )
        with self.assertRaises(jwt.MissingRequiredClaimError):
            self.issuer.decode_access_token(token)

    def test_garbage_rejected(self) -> None:
        with self.assertRaises(jwt.DecodeError):
            self.issuer.decode_refresh_token("not.a.token")


if __name__ == "__main__":
    unittest.main()
