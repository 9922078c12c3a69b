"""Unit tests for HMAC invite code derivation."""

import pytest

from src.sb_invite.domain.codes import ALPHABET, codes_match, derive_code, normalize_code

BET_ID = "44444444-4444-4444-4444-444444444444"
SECRET = "s3cret"


class TestDeriveCode:
    def test_deterministic(self) -> None:
        assert derive_code(BET_ID, 0, SECRET) == derive_code(BET_ID, 0, SECRET)

    def test_length_and_alphabet(self) -> None:
        code = derive_code(BET_ID, 0, SECRET, length=12)
        assert len(code) == 12
        assert set(code) <= set(ALPHABET)

    def test_no_confusable_symbols(self) -> None:
        assert not set("01OI") & set(ALPHABET)
        assert len(ALPHABET) == 32

    def test_salt_changes_code(self) -> None:
        assert derive_code(BET_ID, 0, SECRET) != derive_code(BET_ID, 1, SECRET)

    def test_secret_changes_code(self) -> None:
        assert derive_code(BET_ID, 0, SECRET) != derive_code(BET_ID, 0, "other")

    def test_prefix_stable_across_lengths(self) -> None:
        assert derive_code(BET_ID, 3, SECRET, length=10).startswith(
            derive_code(BET_ID, 3, SECRET, length=6)
        )

    def test_empty_secret(self) -> None:
        with pytest.raises(ValueError):
            derive_code(BET_ID, 0, "")

    @pytest.mark.parametrize("length", [0, 52])
    def test_bad_length(self, length: int) -> None:
        with pytest.raises(ValueError):
            derive_code(BET_ID, 0, SECRET, length=length)


class TestMatching:
    def test_normalize(self) -> None:
        assert normalize_code("  abcd23 ") == "ABCD23"

    def test_match_is_case_insensitive(self) -> None:
        code = derive_code(BET_ID, 0, SECRET)
        assert codes_match(code, f" {code.lower()}\n")

    def test_mismatch(self) -> None:
        code = derive_code(BET_ID, 0, SECRET)
        assert not codes_match(code, derive_code(BET_ID, 1, SECRET))
