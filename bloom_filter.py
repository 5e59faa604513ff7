# bloom_filter.py

import codecs
import logging
import math
import operator
from typing import Iterable, Optional

from bitarray import bitarray

from bloom_interface import BloomFilterInterface, ByteEncodable
from errors import ConstructionError, CountError, EncodingError, RangeError
from hashing import HASH_NAME, hash_function, index_for, max_hashes

logger = logging.getLogger(__name__)

DEFAULT_CHARSET = "utf-8"
LN2 = math.log(2.0)


def encode_element(element, charset: str = DEFAULT_CHARSET) -> bytes:
    """
    Rappresentazione canonica in bytes di un elemento.
     - bytes / bytearray / memoryview: usati cosi' come sono
     - str: codificata con 'charset' (strict)
     - ByteEncodable (__bytes__): bytes(element)
     - int: testo decimale codificato con 'charset'
    Qualsiasi altro tipo solleva EncodingError.
    """
    if isinstance(element, (bytes, bytearray, memoryview)):
        return bytes(element)
    if isinstance(element, str):
        try:
            return element.encode(charset)
        except UnicodeError as e:
            raise EncodingError(f"Impossibile codificare {element!r} in {charset}: {e}") from e
    if isinstance(element, ByteEncodable):
        return bytes(element)
    if isinstance(element, int):
        return str(element).encode(charset)
    raise EncodingError(
        f"Tipo {type(element).__name__} non supportato: implementare __bytes__ o passare str/bytes/int"
    )


def _positive_int(name: str, value) -> int:
    if isinstance(value, bool) or not isinstance(value, int) or value < 1:
        raise ConstructionError(f"{name} deve essere un intero positivo, ricevuto {value!r}")
    return value


class BloomFilter(BloomFilterInterface):
    """
    Bloom Filter con bit array di dimensione fissa m e k funzioni hash.

    Nessun falso negativo; probabilita' di falso positivo ~ (1 - e^(-k*n/m))^k.
    Gli elementi non possono essere rimossi. Non thread-safe in scrittura:
    add/set_bit concorrenti sulla stessa istanza vanno serializzati dal chiamante.
    """

    def __init__(self, bits_per_element: float, expected_count: int, k: int,
                 hash_name: str = HASH_NAME, charset: str = DEFAULT_CHARSET):
        """Costruttore canonico: m = ceil(bits_per_element * expected_count)."""
        if isinstance(bits_per_element, bool) or not isinstance(bits_per_element, (int, float)) \
                or not math.isfinite(bits_per_element) or bits_per_element <= 0:
            raise ConstructionError(f"bits_per_element deve essere un reale positivo, ricevuto {bits_per_element!r}")
        self._expected_count = _positive_int("expected_count", expected_count)
        self._k = _positive_int("k", k)

        try:
            ceiling = max_hashes(hash_name)
            self._hash = hash_function(hash_name)
            codecs.lookup(charset)
        except (ValueError, LookupError) as e:
            raise ConstructionError(str(e)) from e
        if ceiling is not None and self._k > ceiling:
            raise ConstructionError(
                f"k={self._k} supera il massimo di {ceiling} hash distinti per {hash_name!r}; usare 'murmur3'"
            )

        # Il prodotto float viene riportato all'intero solo se ne dista pochi ulp
        # (es. (a / b) * b puo' superare a di un ulp); altrimenti ceil esatto
        product = bits_per_element * self._expected_count
        nearest = round(product)
        if nearest >= 1 and math.isclose(product, nearest, rel_tol=1e-12, abs_tol=0.0):
            self._size = nearest
        else:
            self._size = math.ceil(product)
        if self._size < 1:
            raise ConstructionError(f"Dimensione del bit array non positiva: {self._size}")

        self._hash_name = hash_name
        self._charset = charset
        self._actual_count = 0
        self._overfull_logged = False
        self.bit_array = bitarray(self._size)
        self.bit_array.setall(0)

        logger.debug("BloomFilter creato: m=%d, k=%d, n atteso=%d, hash=%s",
                     self._size, self._k, self._expected_count, hash_name)

    @classmethod
    def from_bit_size(cls, bit_set_size: int, expected_count: int, **kwargs) -> "BloomFilter":
        """Dato il numero totale di bit: k = round(m/n * ln2), l'ottimo per quel rapporto."""
        bit_set_size = _positive_int("bit_set_size", bit_set_size)
        expected_count = _positive_int("expected_count", expected_count)
        bits_per_element = bit_set_size / expected_count
        # Arrotondamento half-up
        k = int(math.floor(bits_per_element * LN2 + 0.5))
        if k < 1:
            raise ConstructionError(
                f"{bit_set_size} bit per {expected_count} elementi producono k={k}: servono piu' bit"
            )
        return cls(bits_per_element, expected_count, k, **kwargs)

    @classmethod
    def from_false_positive_probability(cls, probability: float, expected_count: int,
                                        **kwargs) -> "BloomFilter":
        """Dimensionamento ottimo per una probabilita' di falso positivo p in (0, 1)."""
        if isinstance(probability, bool) or not isinstance(probability, (int, float)) \
                or not 0.0 < probability < 1.0:
            raise ConstructionError(f"La probabilita' deve essere in (0, 1), ricevuto {probability!r}")
        bits_per_element = -math.log(probability) / (LN2 ** 2)
        k = math.ceil(-math.log(probability) / LN2)
        return cls(bits_per_element, expected_count, k, **kwargs)

    # --- Proprieta' ---

    @property
    def bit_array_size(self) -> int:
        return self._size

    @property
    def k(self) -> int:
        return self._k

    @property
    def expected_count(self) -> int:
        return self._expected_count

    @property
    def actual_count(self) -> int:
        return self._actual_count

    @property
    def hash_name(self) -> str:
        return self._hash_name

    @property
    def charset(self) -> str:
        return self._charset

    def bits_per_element(self) -> float:
        """Rapporto m / expected_count."""
        return self._size / self._expected_count

    # --- Inserimento e ricerca ---

    def _indexes(self, element) -> list[int]:
        data = encode_element(element, self._charset)
        return [index_for(h, self._size) for h in self._hash(data, self._k)]

    def add(self, element) -> None:
        """Aggiunge un elemento al filtro."""
        for index in self._indexes(element):
            self.bit_array[index] = 1
        self._actual_count += 1

        if self._actual_count > self._expected_count and not self._overfull_logged:
            self._overfull_logged = True
            logger.warning("Inseriti %d elementi su %d previsti: il tasso di falsi positivi peggiora",
                           self._actual_count, self._expected_count)

    def add_all(self, elements: Iterable) -> None:
        for element in elements:
            self.add(element)

    def contains(self, element) -> bool:
        """True se l'elemento è potenzialmente presente, False se sicuramente assente."""
        return all(self.bit_array[index] for index in self._indexes(element))

    def contains_all(self, elements: Iterable) -> bool:
        """True solo se tutti gli elementi sono (forse) presenti; si ferma al primo assente."""
        for element in elements:
            if not self.contains(element):
                return False
        return True

    # --- Stima dei falsi positivi ---

    def estimated_false_positive_probability(self, count: Optional[int] = None) -> float:
        """(1 - e^(-k*n/m))^k per n = count, o per il numero attuale di inserimenti."""
        n = self._actual_count if count is None else count
        if n < 0:
            raise CountError(f"Il numero di elementi non puo' essere negativo: {n}")
        return (1.0 - math.exp(-self._k * n / self._size)) ** self._k

    # --- Accesso diretto ai bit ---
    # Scorciatoia di basso livello (ispezione, test, ricostruzione bit per bit):
    # non passa dagli hash e non aggiorna actual_count.

    def _check_index(self, index) -> int:
        index = operator.index(index)
        if not 0 <= index < self._size:
            raise RangeError(f"Indice {index} fuori da [0, {self._size})")
        return index

    def get_bit(self, index: int) -> bool:
        return bool(self.bit_array[self._check_index(index)])

    def set_bit(self, index: int, value: bool) -> None:
        self.bit_array[self._check_index(index)] = bool(value)

    # --- Uguaglianza ---

    def __eq__(self, other):
        # actual_count escluso di proposito
        if not isinstance(other, BloomFilter):
            return NotImplemented
        return (self._expected_count == other._expected_count
                and self._k == other._k
                and self._size == other._size
                and self.bit_array == other.bit_array)

    __hash__ = None

    def __repr__(self) -> str:
        return (f"{type(self).__name__}(m={self._size}, k={self._k}, "
                f"expected_count={self._expected_count}, actual_count={self._actual_count})")
