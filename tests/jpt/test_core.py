import logging

import pytest

import jpt as m


def test_from_options(clock):
    jpt = m.Jpt.from_options({"secret": "s", "iss": "auth", "aud": "api", "ttl": 30})
    payload = jpt.validate(jpt.issue())
    assert payload.exp - payload.iat == 30


def test_default_config_needs_a_secret():
    with pytest.raises(m.KeyMaterialError):
        m.Jpt().issue()


def test_rekey_invalidates_old_tokens(make_config, caplog):
    jpt = m.Jpt(make_config())
    old_token = jpt.issue()

    with caplog.at_level(logging.INFO, logger="jpt.core"):
        rotated = jpt.rekey("brand-new-secret")

    assert "rotated" in caplog.text
    assert rotated.config.secret == "brand-new-secret"
    assert jpt.config.secret != "brand-new-secret"
    with pytest.raises(m.SignatureInvalid):
        rotated.validate(old_token)
    assert rotated.validate(rotated.issue())


def test_old_instance_keeps_working_after_rekey(make_config):
    jpt = m.Jpt(make_config())
    jpt.rekey("brand-new-secret")
    assert jpt.validate(jpt.issue())


def test_with_options_returns_new_instance(make_config):
    jpt = m.Jpt(make_config())
    other = jpt.with_options(ttl=5, iss="other")
    assert other is not jpt
    assert other.config.ttl == 5
    assert jpt.config.ttl == 3600


def test_draft(make_config):
    jpt = m.Jpt(make_config())
    draft = jpt.draft().with_petal("uid", 1)
    assert jpt.validate(jpt.issuer.issue_draft(draft)).petal_claim("uid") == 1


def test_issue_payload(make_config):
    jpt = m.Jpt(make_config())
    payload = jpt.issue_payload(crown={"k": "v"})
    assert payload.crown_claim("k") == "v"
    assert jpt.validate(payload.token).jti == payload.jti


def test_rekey_leaves_old_cipher_untouched(make_config):
    jpt = m.Jpt(make_config())
    rotated = jpt.rekey("brand-new-secret")
    assert rotated.cipher is not jpt.cipher
    assert jpt.cipher.seed == b"unit-test-secret"
    assert rotated.cipher.seed == b"brand-new-secret"


def test_rekey_reseeds_injected_cipher(make_config):
    class RecordingCipher(m.AesGcmCipher):
        def __init__(self):
            super().__init__()
            self.seeds: list[bytes] = []

        def update_seed(self, key):
            self.seeds.append(key)
            super().update_seed(key)

    cipher = RecordingCipher()
    jpt = m.Jpt(make_config(), cipher)
    rotated = jpt.rekey("brand-new-secret")
    assert rotated.cipher is cipher
    assert cipher.seeds == [b"brand-new-secret"]
    assert rotated.validate(rotated.issue())
