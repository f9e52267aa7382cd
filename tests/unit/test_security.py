# -*- coding: utf-8 -*-
"""
安全模块单元测试
"""

import json
from datetime import datetime, timedelta, timezone

import pytest
from jose import jws, jwt

from filegate.core.security import (
    CredentialIssuer,
    Identity,
    PasswordHasher,
    TokenFailure,
    TokenFailureReason
)


SECRET = "test-secret-key-for-testing-only"
NOW = datetime(2026, 1, 1, 12, 0, 0, tzinfo=timezone.utc)


def _sign(payload: bytes, secret: str = SECRET) -> str:
    return jws.sign(payload, secret, algorithm="HS256")


class TestPasswordHasher:
    """密码哈希测试"""

    def test_hash_is_argon2(self, password_hasher: PasswordHasher):
        """测试使用 argon2"""
        digest = password_hasher.hash("test_password_123")

        assert digest != "test_password_123"
        assert digest.startswith("$argon2")

    def test_verify_correct(self, password_hasher: PasswordHasher):
        digest = password_hasher.hash("correct_password")

        assert password_hasher.verify(digest, "correct_password") is True

    def test_verify_incorrect(self, password_hasher: PasswordHasher):
        digest = password_hasher.hash("correct_password")

        assert password_hasher.verify(digest, "wrong_password") is False

    def test_same_secret_different_digests(self, password_hasher: PasswordHasher):
        """测试相同密码每次哈希结果不同（由于 salt）"""
        hash1 = password_hasher.hash("same_password")
        hash2 = password_hasher.hash("same_password")

        assert hash1 != hash2
        assert password_hasher.verify(hash1, "same_password") is True
        assert password_hasher.verify(hash2, "same_password") is True

    @pytest.mark.parametrize("digest", ["", "not-a-hash", "$argon2id$v=19$broken", None])
    def test_malformed_digest_fails_closed(self, password_hasher: PasswordHasher, digest):
        """测试格式错误的哈希按验证失败处理，不抛异常"""
        assert password_hasher.verify(digest, "anything") is False


class TestCredentialIssuer:
    """凭据签发和验证测试"""

    def test_issue_and_verify(self, credential_issuer: CredentialIssuer):
        credential = credential_issuer.issue(42, "alice", now=NOW)

        result = credential_issuer.verify(credential.token, now=NOW + timedelta(minutes=1))

        assert result == Identity(id=42, name="alice")

    def test_expires_after_twenty_minutes(self, credential_issuer: CredentialIssuer):
        credential = credential_issuer.issue(1, "alice", now=NOW)

        assert credential.expires_at == NOW + timedelta(minutes=20)

    def test_expires_at_matches_exp_claim(self, credential_issuer: CredentialIssuer):
        """测试返回的过期时间与 token 中的 exp 声明一致（整秒）"""
        now = NOW + timedelta(microseconds=750000)

        credential = credential_issuer.issue(1, "alice", now=now)
        claims = jwt.get_unverified_claims(credential.token)

        assert credential.expires_at.timestamp() == claims["exp"]
        assert credential.expires_at.microsecond == 0
        assert credential.expires_at.tzinfo is not None

    def test_valid_just_before_expiry(self, credential_issuer: CredentialIssuer):
        credential = credential_issuer.issue(1, "alice", now=NOW)

        result = credential_issuer.verify(
            credential.token, now=NOW + timedelta(minutes=19, seconds=59)
        )

        assert isinstance(result, Identity)

    @pytest.mark.parametrize("age", [
        timedelta(minutes=20),
        timedelta(minutes=21),
        timedelta(days=3),
    ])
    def test_expired_token(self, credential_issuer: CredentialIssuer, age):
        credential = credential_issuer.issue(1, "alice", now=NOW)

        result = credential_issuer.verify(credential.token, now=NOW + age)

        assert result == TokenFailure(TokenFailureReason.EXPIRED)

    @pytest.mark.parametrize("token", [None, ""])
    def test_missing_token(self, credential_issuer: CredentialIssuer, token):
        assert credential_issuer.verify(token) == TokenFailure(TokenFailureReason.MISSING)

    @pytest.mark.parametrize("token", ["invalid.token.here", "abc", "a.b"])
    def test_malformed_token(self, credential_issuer: CredentialIssuer, token):
        result = credential_issuer.verify(token)

        assert isinstance(result, TokenFailure)
        assert result.reason in (TokenFailureReason.MALFORMED, TokenFailureReason.BAD_SIGNATURE)

    def test_wrong_secret(self, credential_issuer: CredentialIssuer):
        other = CredentialIssuer("another-secret")
        credential = other.issue(1, "alice", now=NOW)

        result = credential_issuer.verify(credential.token, now=NOW)

        assert result == TokenFailure(TokenFailureReason.BAD_SIGNATURE)

    def test_tampered_payload(self, credential_issuer: CredentialIssuer):
        """测试替换载荷后签名不再匹配"""
        credential = credential_issuer.issue(1, "alice", now=NOW)
        header, _, signature = credential.token.split(".")
        forged = jwt.encode(
            {"id": 2, "name": "bob", "exp": int((NOW + timedelta(hours=1)).timestamp())},
            "attacker"
        ).split(".")[1]

        result = credential_issuer.verify(f"{header}.{forged}.{signature}", now=NOW)

        assert result == TokenFailure(TokenFailureReason.BAD_SIGNATURE)

    def test_non_object_payload(self, credential_issuer: CredentialIssuer):
        token = _sign(json.dumps([1, "alice"]).encode("utf-8"))

        assert credential_issuer.verify(token, now=NOW) == TokenFailure(TokenFailureReason.BAD_PAYLOAD)

    def test_non_json_payload(self, credential_issuer: CredentialIssuer):
        token = _sign(b"not json at all")

        assert credential_issuer.verify(token, now=NOW) == TokenFailure(TokenFailureReason.BAD_PAYLOAD)

    @pytest.mark.parametrize("claims", [
        {"name": "alice", "exp": 4102444800},
        {"id": 1, "exp": 4102444800},
        {"id": 1, "name": "alice"},
        {"id": "1", "name": "alice", "exp": 4102444800},
        {"id": True, "name": "alice", "exp": 4102444800},
    ])
    def test_missing_or_wrong_fields(self, credential_issuer: CredentialIssuer, claims):
        token = _sign(json.dumps(claims).encode("utf-8"))

        assert credential_issuer.verify(token, now=NOW) == TokenFailure(TokenFailureReason.BAD_PAYLOAD)
