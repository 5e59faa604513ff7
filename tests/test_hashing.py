"""Test unitari della derivazione degli hash."""

import hashlib
from concurrent.futures import ThreadPoolExecutor

import mmh3
import pytest

from errors import HashCountError
from hashing import (
    MURMUR3,
    create_hash,
    create_hashes,
    create_murmur_hashes,
    digest_size,
    hash_function,
    index_for,
    max_hashes,
)


def _md5_groups(salt: int, data: bytes) -> list:
    digest = hashlib.md5(bytes((salt,)) + data).digest()
    return [int.from_bytes(digest[i:i + 4], "big", signed=True) for i in range(0, 16, 4)]


def test_create_hashes_is_deterministic():
    """Stesso input e stesso numero danno sempre la stessa sequenza."""
    assert create_hashes(b"hello", 7) == create_hashes(b"hello", 7)


def test_create_hashes_matches_salted_md5_layout():
    """Il salt 0 copre i primi quattro valori, il salt 1 i successivi."""
    data = b"10000"
    expected = _md5_groups(0, data) + _md5_groups(1, data)
    assert create_hashes(data, 7) == expected[:7]


def test_create_hashes_prefix_stable():
    """Chiedendo meno hash si ottiene un prefisso della sequenza lunga."""
    assert create_hashes(b"abc", 3) == create_hashes(b"abc", 9)[:3]


def test_create_hashes_are_signed_32_bit():
    values = create_hashes(b"range check", 200)
    assert all(-2**31 <= v < 2**31 for v in values)
    assert any(v < 0 for v in values)


def test_create_hashes_other_digest():
    """sha256 produce otto valori per round."""
    digest = hashlib.sha256(b"\x00data").digest()
    first_round = [int.from_bytes(digest[i:i + 4], "big", signed=True) for i in range(0, 32, 4)]
    assert create_hashes(b"data", 8, hash_name="sha256") == first_round


def test_create_hash_accepts_text_and_bytes():
    assert create_hash("abc") == create_hash(b"abc") == create_hashes(b"abc", 1)[0]


def test_salt_ceiling():
    """Un byte di salt consente 256 round: 1024 hash per md5."""
    assert max_hashes() == 1024
    assert max_hashes("sha256") == 2048
    assert max_hashes(MURMUR3) is None
    assert len(create_hashes(b"x", 1024)) == 1024
    with pytest.raises(HashCountError, match="1025"):
        create_hashes(b"x", 1025)


@pytest.mark.parametrize("count", [0, -1])
def test_non_positive_hash_count(count):
    with pytest.raises(HashCountError):
        create_hashes(b"x", count)
    with pytest.raises(HashCountError):
        create_murmur_hashes(b"x", count)


def test_murmur_family_has_no_ceiling():
    values = create_murmur_hashes(b"x", 2000)
    assert len(values) == 2000
    assert values[:3] == [mmh3.hash(b"x", seed, signed=True) for seed in range(3)]


def test_digest_size_rejects_variable_length_digest():
    assert digest_size("md5") == 16
    with pytest.raises(ValueError):
        digest_size("shake_128")
    with pytest.raises(ValueError):
        hash_function("not-a-digest")


def test_hash_function_selection():
    assert hash_function(MURMUR3) is create_murmur_hashes
    assert hash_function("md5")(b"abc", 5) == create_hashes(b"abc", 5)


def test_index_for_min_int():
    """abs(-2**31) non va in overflow: l'indice resta nel range."""
    assert index_for(-2**31, 7) == 2**31 % 7 == 2
    for size in (1, 2, 3, 1000, 95851):
        assert 0 <= index_for(-2**31, size) < size


def test_index_for_matches_truncated_remainder():
    """Stesso risultato dell'abs di un resto troncato."""
    for h in (-2**31, -12345, -1, 0, 1, 98765, 2**31 - 1):
        m = 95851
        truncated = abs(h) % m if h >= 0 else -(abs(h) % m)
        assert index_for(h, m) == abs(truncated)


def test_concurrent_hash_derivation():
    """Chiamate in parallelo ottengono gli stessi valori di quelle sequenziali."""
    inputs = [str(i).encode() for i in range(500)]
    expected = [create_hashes(data, 7) for data in inputs]
    with ThreadPoolExecutor(max_workers=8) as executor:
        results = list(executor.map(lambda d: create_hashes(d, 7), inputs))
    assert results == expected


def test_hash_function_builds_one_digest_per_round(monkeypatch):
    """La funzione del filtro crea solo i digest dei round, senza oggetti di servizio."""
    fn = hash_function("md5")
    real_new = hashlib.new
    calls = []

    def counting_new(name, *args, **kwargs):
        calls.append(name)
        return real_new(name, *args, **kwargs)

    monkeypatch.setattr(hashlib, "new", counting_new)
    assert fn(b"abc", 4) == create_hashes(b"abc", 4)
    calls.clear()
    fn(b"abc", 4)
    assert calls == ["md5"]
    calls.clear()
    fn(b"abc", 7)
    assert calls == ["md5", "md5"]
