# hashing.py
"""
Derivazione di k hash a 32 bit da un singolo input.

Due schemi:
 - digest con salt (default md5): per ogni round si calcola
   digest(salt || data) con un salt di un byte (0, 1, 2, ...), e il digest
   viene tagliato in gruppi da 4 byte big-endian, interpretati come interi
   con segno. Con un solo byte di salt i round distinti sono 256, quindi il
   numero massimo di hash distinti e' 256 * digest_size / 4.
 - murmur3: famiglia di MurmurHash3 a 32 bit con seed 0..k-1, senza limite.

Ogni chiamata usa un oggetto digest nuovo: nessuno stato condiviso tra thread.
"""

import hashlib
import struct
from functools import lru_cache, partial
from typing import Callable, List, Optional, Tuple, Union

import mmh3

from errors import HashCountError

# ============================================================
# CONFIGURAZIONE
# ============================================================

HASH_NAME = "md5"
MURMUR3 = "murmur3"
SALT_ROUNDS = 256
GROUP_SIZE = 4

HashFunction = Callable[[bytes, int], List[int]]


def digest_size(hash_name: str) -> int:
    """Dimensione in byte del digest; solleva ValueError se non utilizzabile."""
    size = hashlib.new(hash_name).digest_size
    if size < GROUP_SIZE or size % GROUP_SIZE:
        raise ValueError(f"Il digest {hash_name!r} non ha una dimensione fissa multipla di {GROUP_SIZE} byte")
    return size


def max_hashes(hash_name: str = HASH_NAME) -> Optional[int]:
    """Numero massimo di hash distinti ottenibili dallo schema (None = nessun limite)."""
    if hash_name == MURMUR3:
        return None
    return _round_layout(hash_name)[1]


def _check_count(hashes: int, ceiling: Optional[int]) -> None:
    if hashes < 1:
        raise HashCountError(f"Il numero di hash deve essere positivo, ricevuto {hashes}")
    if ceiling is not None and hashes > ceiling:
        raise HashCountError(
            f"Richiesti {hashes} hash, ma il salt a un byte ne produce al massimo {ceiling} distinti"
        )


@lru_cache(maxsize=None)
def _round_layout(hash_name: str) -> Tuple[struct.Struct, int]:
    """Formato di un round e limite di hash distinti, calcolati una volta per digest."""
    per_round = digest_size(hash_name) // GROUP_SIZE
    return struct.Struct(f">{per_round}i"), SALT_ROUNDS * per_round


def _salted_hashes(data: bytes, hashes: int, hash_name: str,
                   layout: Tuple[struct.Struct, int]) -> List[int]:
    unpack, ceiling = layout[0].unpack, layout[1]
    _check_count(hashes, ceiling)

    result: List[int] = []
    salt = 0
    while len(result) < hashes:
        # Un round = reset, salt, dati, finalize: un passo atomico su un oggetto locale
        digest = hashlib.new(hash_name)
        digest.update(bytes((salt,)))
        digest.update(data)
        result.extend(unpack(digest.digest()))
        salt += 1
    # L'ultimo round puo' essere consumato solo in parte
    return result[:hashes]


def create_hashes(data: bytes, hashes: int, hash_name: str = HASH_NAME) -> List[int]:
    """Produce 'hashes' interi a 32 bit con segno da digest(salt || data)."""
    return _salted_hashes(data, hashes, hash_name, _round_layout(hash_name))


def create_murmur_hashes(data: bytes, hashes: int) -> List[int]:
    """Famiglia MurmurHash3 con seed 0..hashes-1."""
    _check_count(hashes, None)
    return [mmh3.hash(data, seed, signed=True) for seed in range(hashes)]


def create_hash(data: Union[str, bytes], charset: str = "utf-8") -> int:
    """Singolo hash per testo o bytes."""
    if isinstance(data, str):
        data = data.encode(charset)
    return create_hashes(data, 1)[0]


def hash_function(hash_name: str = HASH_NAME) -> HashFunction:
    """Restituisce la funzione (data, hashes) -> List[int] per lo schema scelto."""
    if hash_name == MURMUR3:
        return create_murmur_hashes
    return partial(_salted_hashes, hash_name=hash_name, layout=_round_layout(hash_name))


def index_for(hash_value: int, size: int) -> int:
    """
    Posizione nel bit array: abs(hash) % size.
    Gli interi Python non vanno in overflow, quindi abs(-2**31) == 2**31
    e il risultato e' sempre in [0, size).
    """
    return abs(hash_value) % size
