from abc import ABC, abstractmethod
from typing import Protocol, runtime_checkable


@runtime_checkable
class ByteEncodable(Protocol):
    """Capacita' esplicita: l'elemento sa produrre i propri bytes canonici."""

    def __bytes__(self) -> bytes:
        ...


class BloomFilterInterface(ABC):
    @abstractmethod
    def add(self, element) -> None:
        """Aggiunge un elemento al filtro."""
        pass

    @abstractmethod
    def contains(self, element) -> bool:
        """Restituisce True se l'elemento potrebbe essere presente, False se sicuramente non lo è."""
        pass

    def __contains__(self, element) -> bool:
        return self.contains(element)
