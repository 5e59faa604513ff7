# errors.py
"""Gerarchia delle eccezioni del Bloom Filter."""


class BloomFilterError(Exception):
    """Eccezione base per tutti gli errori del filtro."""
    pass


class ConstructionError(BloomFilterError, ValueError):
    """Parametri di dimensionamento non validi: nessun filtro viene creato."""
    pass


class RangeError(BloomFilterError, IndexError):
    """Indice di bit fuori da [0, m)."""
    pass


class EncodingError(BloomFilterError, ValueError):
    """L'elemento non puo' essere convertito in bytes."""
    pass


class HashCountError(BloomFilterError, ValueError):
    """Numero di hash richiesto non positivo o oltre il limite dello schema."""
    pass


class CountError(BloomFilterError, ValueError):
    """Numero di elementi negativo nella stima dei falsi positivi."""
    pass
