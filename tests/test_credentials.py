"""Tests for gitbridge.credentials."""

import base64

import pytest

from gitbridge.credentials import (
    CredentialError,
    CredentialOrigin,
    CredentialStore,
    DecryptionError,
    MissingEncryptionKeyError,
    decrypt_token,
    encrypt_token,
)


class TestTokenCipher:
    @pytest.mark.parametrize(
        "token, key",
        [
            ("ghp_abc", "k1"),
            ("ghp_" + "x" * 36, "a much longer passphrase with spaces"),
            ("github_pat_ünïcödé", "ключ"),
        ],
    )
    def test_round_trip(self, token: str, key: str) -> None:
        assert decrypt_token(encrypt_token(token, key), key) == token

    def test_output_uses_openssl_salted_format(self) -> None:
        # base64("Salted__") always starts with this prefix
        assert encrypt_token("ghp_abc", "k1").startswith("U2FsdGVkX1")

    def test_fixed_salt_is_deterministic(self) -> None:
        salt = b"\x00\x01\x02\x03\x04\x05\x06\x07"
        assert encrypt_token("ghp_abc", "k1", salt=salt) == encrypt_token(
            "ghp_abc", "k1", salt=salt
        )

    def test_rejects_bad_salt_length(self) -> None:
        with pytest.raises(ValueError, match="salt"):
            encrypt_token("ghp_abc", "k1", salt=b"short")

    def test_wrong_key_fails_instead_of_returning_garbage(self) -> None:
        cipher_text = encrypt_token("ghp_abc", "k1")
        with pytest.raises(DecryptionError) as excinfo:
            decrypt_token(cipher_text, "k2")
        assert isinstance(excinfo.value.__cause__, ValueError)

    def test_invalid_base64_is_chained(self) -> None:
        with pytest.raises(DecryptionError) as excinfo:
            decrypt_token("not base64 !!", "k1")
        assert excinfo.value.__cause__ is not None

    def test_missing_salt_header(self) -> None:
        with pytest.raises(DecryptionError, match="salt header"):
            decrypt_token("aGVsbG8gd29ybGQ=", "k1")

    def test_truncated_ciphertext(self) -> None:
        cipher_text = encrypt_token("ghp_abc", "k1")
        raw = base64.b64decode(cipher_text)[:-3]
        with pytest.raises(DecryptionError, match="truncated"):
            decrypt_token(base64.b64encode(raw).decode(), "k1")

    def test_empty_plaintext_is_an_error(self) -> None:
        with pytest.raises(DecryptionError, match="invalid encryption key"):
            decrypt_token(encrypt_token("", "k1"), "k1")


class TestCredentialStore:
    def test_absent_when_nothing_configured(self, store: CredentialStore) -> None:
        assert store.get_active_credential() is None
        assert store.state.origin is None

    def test_environment_credential_used_by_default(self) -> None:
        store = CredentialStore(environment_token="env_token")
        assert store.get_active_credential() == "env_token"
        assert store.state.origin is CredentialOrigin.ENVIRONMENT

    def test_dynamic_credential_shadows_environment(self) -> None:
        store = CredentialStore(environment_token="env_token")
        store.set_dynamic_credential("dyn_token")
        assert store.get_active_credential() == "dyn_token"
        assert store.state.origin is CredentialOrigin.DYNAMIC

    def test_clear_falls_back_to_environment(self) -> None:
        store = CredentialStore(environment_token="env_token")
        store.set_dynamic_credential("dyn_token")
        store.clear_dynamic_credential()
        assert store.get_active_credential() == "env_token"

    def test_dynamic_credential_is_last_writer_wins(self, store: CredentialStore) -> None:
        store.set_dynamic_credential("first")
        store.set_dynamic_credential("second")
        assert store.get_active_credential() == "second"

    def test_encrypted_credential_with_inline_key(self, store: CredentialStore) -> None:
        store.set_encrypted_credential(encrypt_token("ghp_abc", "k1"), "k1")
        assert store.get_active_credential() == "ghp_abc"

    def test_explicit_key_wins_over_default(self) -> None:
        store = CredentialStore(default_encryption_key="other")
        store.set_encrypted_credential(encrypt_token("ghp_abc", "k1"), "k1")
        assert store.get_active_credential() == "ghp_abc"

    def test_default_key_used_when_none_supplied(self) -> None:
        store = CredentialStore(default_encryption_key="k1")
        store.set_encrypted_credential(encrypt_token("ghp_abc", "k1"))
        assert store.get_active_credential() == "ghp_abc"

    def test_missing_key_fails_before_decrypting(
        self, store: CredentialStore, mocker
    ) -> None:
        decrypt = mocker.patch("gitbridge.credentials.decrypt_token")
        with pytest.raises(MissingEncryptionKeyError) as excinfo:
            store.set_encrypted_credential("U2FsdGVkX1whatever")
        assert isinstance(excinfo.value, CredentialError)
        decrypt.assert_not_called()

    def test_failed_decryption_leaves_state_untouched(self, store: CredentialStore) -> None:
        store.set_dynamic_credential("old")
        with pytest.raises(DecryptionError):
            store.set_encrypted_credential(encrypt_token("ghp_abc", "k1"), "wrong")
        assert store.get_active_credential() == "old"

    def test_from_env_reads_environment(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("GITHUB_PERSONAL_ACCESS_TOKEN", "env_token")
        monkeypatch.setenv("GITHUB_TOKEN_ENCRYPTION_KEY", "k1")
        store = CredentialStore.from_env()
        store.set_encrypted_credential(encrypt_token("ghp_abc", "k1"))
        assert store.get_active_credential() == "ghp_abc"
        store.clear_dynamic_credential()
        assert store.get_active_credential() == "env_token"

    def test_reload_env_picks_up_late_configuration(
        self, store: CredentialStore, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        monkeypatch.setenv("GITHUB_PERSONAL_ACCESS_TOKEN", "late_token")
        store.reload_env()
        assert store.get_active_credential() == "late_token"
