"""
Tests for the HMAC and RSA thorn signers.
"""

import pytest

import jpt as m

DATA = b"crown.petal"


class TestHmacSigner:
    @pytest.mark.parametrize("alg", ["HS256", "HS384", "HS512"])
    def test_sign_and_verify(self, alg: str):
        signer = m.HmacSigner(alg)
        sig = signer.sign(DATA, "k")
        assert signer.algorithm == alg
        assert "=" not in sig
        assert signer.verify(DATA, sig, "k") is True

    def test_signature_lengths_follow_hash(self):
        # 32/48/64 raw bytes -> 43/64/86 base64url chars
        assert len(m.HmacSigner("HS256").sign(DATA, "k")) == 43
        assert len(m.HmacSigner("HS384").sign(DATA, "k")) == 64
        assert len(m.HmacSigner("HS512").sign(DATA, "k")) == 86

    def test_wrong_key_fails(self):
        signer = m.HmacSigner("HS256")
        assert signer.verify(DATA, signer.sign(DATA, "k"), "other") is False

    def test_tampered_data_fails(self):
        signer = m.HmacSigner("HS256")
        assert signer.verify(b"crown.petaL", signer.sign(DATA, "k"), "k") is False

    def test_missing_secret_raises_key_error(self):
        with pytest.raises(m.KeyMaterialError):
            m.HmacSigner("HS256").sign(DATA, None)

    def test_pem_secret_is_refused(self, rsa_keys: dict[str, bytes]):
        with pytest.raises(m.KeyMaterialError):
            m.HmacSigner("HS256").sign(DATA, rsa_keys["public"])

    def test_unsupported_algorithm(self):
        with pytest.raises(m.UnsupportedAlgorithm):
            m.HmacSigner("HS1024")

    def test_tags_are_case_sensitive(self):
        with pytest.raises(m.UnsupportedAlgorithm):
            m.HmacSigner("hs256")


class TestRsaSigner:
    @pytest.mark.parametrize("alg", ["RS256", "RS384", "RS512"])
    def test_sign_and_verify(self, alg: str, rsa_keys: dict[str, bytes]):
        signer = m.RsaSigner(alg, public_key=rsa_keys["public"])
        sig = signer.sign(DATA, rsa_keys["private"])
        assert signer.verify(DATA, sig) is True

    def test_public_key_can_be_passed_at_verify_time(self, rsa_keys: dict[str, bytes]):
        signer = m.RsaSigner("RS256", private_key=rsa_keys["private"])
        sig = signer.sign(DATA)
        assert signer.verify(DATA, sig, rsa_keys["public"]) is True

    def test_tampered_data_fails(self, rsa_keys: dict[str, bytes]):
        signer = m.RsaSigner("RS256", rsa_keys["private"], rsa_keys["public"])
        sig = signer.sign(DATA)
        assert signer.verify(b"crown.petaL", sig) is False

    def test_garbage_signature_fails(self, rsa_keys: dict[str, bytes]):
        signer = m.RsaSigner("RS256", public_key=rsa_keys["public"])
        assert signer.verify(DATA, "not-a-signature") is False

    def test_password_protected_private_key(self, rsa_keys: dict[str, bytes]):
        signer = m.RsaSigner(
            "RS256",
            private_key=rsa_keys["private_encrypted"],
            public_key=rsa_keys["public"],
            password="pem-password",
        )
        assert signer.verify(DATA, signer.sign(DATA)) is True

    def test_encrypted_key_without_password_raises(self, rsa_keys: dict[str, bytes]):
        signer = m.RsaSigner("RS256", private_key=rsa_keys["private_encrypted"])
        with pytest.raises(m.KeyMaterialError):
            signer.sign(DATA)

    def test_tags_are_case_sensitive(self):
        with pytest.raises(m.UnsupportedAlgorithm):
            m.RsaSigner("rs256")

    def test_missing_private_key_raises(self):
        with pytest.raises(m.KeyMaterialError):
            m.RsaSigner("RS256").sign(DATA)

    def test_public_key_cannot_sign(self, rsa_keys: dict[str, bytes]):
        with pytest.raises(m.KeyMaterialError):
            m.RsaSigner("RS256").sign(DATA, rsa_keys["public"])

    def test_missing_public_key_raises(self):
        with pytest.raises(m.KeyMaterialError):
            m.RsaSigner("RS256").verify(DATA, "sig")

    def test_unparsable_public_key_raises(self):
        with pytest.raises(m.KeyMaterialError):
            m.RsaSigner("RS256").verify(DATA, "sig", b"-----BEGIN NONSENSE-----")

    def test_backend_failure_is_crypto_backend_error(
        self, rsa_keys: dict[str, bytes], monkeypatch: pytest.MonkeyPatch
    ):
        signer = m.RsaSigner("RS256", rsa_keys["private"], rsa_keys["public"])
        sig = signer.sign(DATA)

        def boom(*args, **kwargs):
            raise RuntimeError("openssl exploded")

        monkeypatch.setattr(signer._impl, "verify", boom)
        with pytest.raises(m.CryptoBackendError):
            signer.verify(DATA, sig)


def test_get_signer_dispatches_by_tag():
    assert isinstance(m.get_signer("HS384"), m.HmacSigner)
    assert isinstance(m.get_signer("RS512"), m.RsaSigner)


@pytest.mark.parametrize("alg", ["none", "ES256", "hs256", "", None])
def test_get_signer_rejects_unknown_tags(alg):
    with pytest.raises(m.UnsupportedAlgorithm) as exc:
        m.get_signer(alg)
    assert exc.value.code == 401004
