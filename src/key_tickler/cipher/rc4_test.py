import pytest

from key_tickler.cipher import rc4
from key_tickler.errors import InvalidInput


class TestScheduleKey:
    """Test suite for the key schedule"""

    def test_known_prefix(self):
        """Schedule for b"Key" matches a precomputed table prefix"""
        assert rc4.schedule_key(b"Key")[:8] == [75, 51, 132, 157, 192, 200, 29, 168]

    @pytest.mark.parametrize("key", [b"A", b"AB", b"Key", bytes(range(256)), b"\xff" * 300])
    def test_is_permutation(self, key):
        """Schedule is a bijection of 0..255"""
        state = rc4.schedule_key(key)
        assert len(state) == rc4.STATE_SIZE
        assert sorted(state) == list(range(rc4.STATE_SIZE))

    def test_repeated_key_schedules_like_short_key(self):
        """key[k mod len] makes "A" and "AA" indistinguishable"""
        assert rc4.schedule_key(b"A") == rc4.schedule_key(b"AA")

    def test_empty_key(self):
        """Empty key is rejected"""
        with pytest.raises(InvalidInput, match="at least 1 byte"):
            rc4.schedule_key(b"")


class TestAdvance:
    """Test suite for single generator steps"""

    def test_advance_keeps_permutation(self):
        """Every step swaps two entries and keeps a bijection"""
        state = rc4.schedule_key(b"Key")
        i = j = 0
        for _ in range(600):
            i, j = rc4.advance(state, i, j)
            assert 0 <= i < 256 and 0 <= j < 256
        assert sorted(state) == list(range(256))

    def test_advance_updates_indices(self):
        """i increments, j accumulates S[i]"""
        state = list(range(256))
        i, j = rc4.advance(state, 0, 0)
        assert (i, j) == (1, 1)
        i, j = rc4.advance(state, i, j)
        assert (i, j) == (2, 3)


class TestKeystream:
    """Test suite for keystream generation"""

    def test_known_keystream(self):
        """Position 0 is read before the first advance step"""
        assert rc4.keystream(b"Key", 10).hex() == "adeb9f7781b734ca72a7"

    def test_known_ciphertexts(self):
        """Encryption matches precomputed vectors"""
        assert rc4.crypt(b"Plaintext", b"Key").hex() == "fd87fe1eefc351b206"
        assert rc4.crypt(b"HELLO", b"AB").hex() == "d8e0ec7ad2"

    def test_zero_length(self):
        """Empty input gives empty output"""
        assert rc4.keystream(b"Key", 0) == b""
        assert rc4.crypt(b"", b"Key") == b""

    @pytest.mark.parametrize("key", [b"A", b"AB", b"secret"])
    def test_position_from_scratch_matches_sequential(self, key):
        """Re-deriving position p from scratch agrees with a sequential pass, past the 256 wrap"""
        stream = rc4.keystream(key, 300)
        for p in range(300):
            assert rc4.keystream_byte_at(key, p) == stream[p]

    def test_decrypt_position(self):
        """Per-position decryption recovers each plaintext byte"""
        ciphertext = bytes.fromhex("d8e0ec7ad2")
        assert bytes(rc4.decrypt_position(ciphertext, b"AB", p) for p in range(5)) == b"HELLO"

    @pytest.mark.parametrize("data", [b"", b"x", b"HELLO", bytes(range(256)) * 2])
    def test_self_inverse(self, data):
        """Decrypting then re-encrypting with the same key gives the input back"""
        assert rc4.crypt(rc4.crypt(data, b"k3y"), b"k3y") == data


class TestStandardRC4Relation:
    """Cross-check against an independent RC4 implementation"""

    @pytest.mark.parametrize("key", [b"Key12", b"0123456789abcdef"])
    def test_shifted_by_one_byte(self, key):
        """keystream[1:] is the standard RC4 keystream"""
        decrepit = pytest.importorskip("cryptography.hazmat.decrepit.ciphers.algorithms")
        from cryptography.hazmat.primitives.ciphers import Cipher

        encryptor = Cipher(decrepit.ARC4(key), mode=None).encryptor()
        standard = encryptor.update(bytes(64))
        assert rc4.keystream(key, 65)[1:] == standard
