"""
Tests for presale_merkle/addresses.py
"""
import base58
import pytest

from presale_merkle.addresses import extract_token, normalize, tron_to_evm_address

from conftest import USER_1, USER_2


def tron_address(evm_address: str) -> str:
    return base58.b58encode_check(b"\x41" + bytes.fromhex(evm_address[2:])).decode()


class TestExtractToken:

    def test_first_word_run(self):
        assert extract_token(f"{USER_1},extra,columns") == USER_1
        assert extract_token(f"  {USER_1}  # comment") == USER_1

    def test_no_token(self):
        assert extract_token("") is None
        assert extract_token("  ,,; ") is None


class TestNormalize:

    def test_lowercase_is_checksummed(self):
        assert normalize(USER_1.lower()) == USER_1

    def test_missing_prefix(self):
        assert normalize(USER_2[2:].lower()) == USER_2

    def test_checksummed_passes_through(self):
        assert normalize(USER_2) == USER_2

    @pytest.mark.parametrize("token", [
        "0x1234",
        "hello",
        "0x" + "g" * 40,
        "0x" + "a" * 41,
    ])
    def test_invalid(self, token):
        with pytest.raises(ValueError):
            normalize(token)

    def test_bad_checksum(self):
        # Flip the case of one letter in a checksummed address.
        bad = USER_1[:2] + USER_1[2].swapcase() + USER_1[3:]

        with pytest.raises(ValueError):
            normalize(bad)

    def test_all_upper_accepted(self):
        assert normalize("0x" + USER_1[2:].upper()) == USER_1

    def test_surrounding_whitespace(self):
        assert normalize(f" {USER_2.lower()}\n") == USER_2

    def test_tron_rejected_by_default(self):
        with pytest.raises(ValueError):
            normalize(tron_address(USER_1))


class TestTron:

    def test_tron_to_evm(self):
        assert tron_to_evm_address(tron_address(USER_1)) == USER_1

    def test_normalize_accepts_tron(self):
        assert normalize(tron_address(USER_2), accept_tron=True) == USER_2

    def test_bad_tron_checksum(self):
        addr = tron_address(USER_1)
        tampered = addr[:-1] + ("A" if addr[-1] != "A" else "B")

        with pytest.raises(ValueError):
            normalize(tampered, accept_tron=True)

    def test_wrong_prefix(self):
        other = base58.b58encode_check(b"\x00" + bytes.fromhex(USER_1[2:])).decode()

        with pytest.raises(ValueError):
            tron_to_evm_address(other)
