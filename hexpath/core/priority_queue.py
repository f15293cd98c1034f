"""
Kolejka priorytetowa z kubełkami (bucket queue) dla frontu wyszukiwania.

Dlaczego nie zwykły heapq na elementach:
    Koszty ruchu to nieujemne liczby rzeczywiste sumowane w małych stałych
    krokach (0.5, 1.0, 1.5, ...). Po dyskretyzacji priorytetów do kluczy
    całkowitych wiele elementów trafia do tego samego kubełka, więc
    enqueue/dequeue są zamortyzowane O(1) zamiast O(log n).

Dyskretyzacja:
    key = floor(priority * precision)      # domyślnie precision = 10

    Kolejka nie zmienia optymalności tylko wtedy, gdy każdy priorytet jest
    wielokrotnością 1 / precision (MovementRules.check_precision). Domyślne
    koszty to wielokrotności 0.5, więc precision = 10 jest dokładne.

Remisy:
    Każdy kubełek to FIFO - elementy o tym samym kluczu wychodzą w kolejności
    wstawienia. Dzięki temu kolejność ekspansji (a więc wybór między
    równie tanimi ścieżkami) jest w pełni deterministyczna.

Pamięć:
    Klucze żywych kubełków trzymamy w kopcu (heapq), a puste kubełki są
    usuwane - pamięć zależy od liczby elementów, nie od zakresu kluczy.

Przykład użycia:
    >>> queue = BucketQueue()
    >>> queue.enqueue("c", 3.0)
    >>> queue.enqueue("a", 1.0)
    >>> queue.enqueue("b", 1.0)
    >>> [queue.dequeue() for _ in range(4)]
    ['a', 'b', 'c', None]
"""

from __future__ import annotations
from collections import deque
from typing import Deque, Dict, Generic, List, Optional, TypeVar
import heapq
import math


_KEY_EPSILON = 1e-9

T = TypeVar('T')


class BucketQueue(Generic[T]):
    """
    Kolejka min-priorytetowa z kubełkami FIFO.

    Attributes:
        precision (int): Mnożnik priorytetu przed zaokrągleniem w dół
        _buckets (Dict[int, Deque[T]]): Klucz -> kubełek FIFO
        _keys (List[int]): Kopiec kluczy istniejących kubełków
        _size (int): Liczba elementów

    Example:
        >>> queue = BucketQueue(precision=10)
        >>> queue.enqueue("x", 0.25)
        >>> queue.peek()
        'x'
    """

    def __init__(self, precision: int = 10):
        """
        Args:
            precision: Mnożnik priorytetów (10 = dokładność 0.1)

        Raises:
            ValueError: Jeśli precision <= 0
        """
        if precision <= 0:
            raise ValueError(f"Precision must be positive, got {precision}")
        self.precision = precision
        self._buckets: Dict[int, Deque[T]] = {}
        self._keys: List[int] = []
        self._size = 0

    # ─────────────────────────────────────────────────────────────────────────
    # OPERACJE
    # ─────────────────────────────────────────────────────────────────────────

    def bucket_key(self, priority: float) -> int:
        """Klucz kubełka dla priorytetu: floor(priority * precision)."""
        # epsilon: (0.7 + 0.1) * 10 daje 7.999999999999999
        return math.floor(priority * self.precision + _KEY_EPSILON)

    def enqueue(self, item: T, priority: float) -> None:
        """
        Dodaje element z podanym priorytetem (niższy = wcześniej).

        Raises:
            ValueError: Jeśli priorytet nie jest skończony (inf/nan)
        """
        if not math.isfinite(priority):
            raise ValueError(f"Priority must be finite, got {priority}")

        key = self.bucket_key(priority)
        bucket = self._buckets.get(key)
        if bucket is None:
            bucket = deque()
            self._buckets[key] = bucket
            heapq.heappush(self._keys, key)

        bucket.append(item)
        self._size += 1

    def dequeue(self) -> Optional[T]:
        """
        Usuwa i zwraca najstarszy element z najniższego niepustego kubełka.

        Returns:
            Optional[T]: Element lub None jeśli kolejka jest pusta
        """
        while self._keys:
            key = self._keys[0]
            bucket = self._buckets[key]
            if bucket:
                item = bucket.popleft()
                self._size -= 1
                if not bucket:
                    self._drop_min_bucket()
                return item
            self._drop_min_bucket()

        return None

    def peek(self) -> Optional[T]:
        """Zwraca element, który wyjdzie jako następny (bez usuwania)."""
        while self._keys:
            bucket = self._buckets[self._keys[0]]
            if bucket:
                return bucket[0]
            self._drop_min_bucket()
        return None

    def is_empty(self) -> bool:
        return self._size == 0

    def clear(self) -> None:
        """Usuwa wszystkie elementy."""
        self._buckets.clear()
        self._keys.clear()
        self._size = 0

    @property
    def min_key(self) -> Optional[int]:
        """Najniższy klucz żywego kubełka (None gdy pusto)."""
        return self._keys[0] if self._keys else None

    @property
    def bucket_count(self) -> int:
        """Liczba kubełków trzymanych w pamięci."""
        return len(self._buckets)

    def __len__(self) -> int:
        return self._size

    def __bool__(self) -> bool:
        return self._size > 0

    # ─────────────────────────────────────────────────────────────────────────
    # HELPERY
    # ─────────────────────────────────────────────────────────────────────────

    def _drop_min_bucket(self) -> None:
        key = heapq.heappop(self._keys)
        del self._buckets[key]
