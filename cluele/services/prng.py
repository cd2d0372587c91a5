"""
Générateur pseudo-aléatoire déterministe pour les tirages du jour.

- `hash_seed` : hachage FNV-1a 32 bits de la chaîne de date.
- `SeededRandom` : pas "mulberry32" sur un état 32 bits.

Toute l'arithmétique est modulo 2**32 : une même chaîne de date produit
la même suite de flottants dans [0, 1), d'un processus à l'autre.
"""
from __future__ import annotations

MASK_32 = 0xFFFFFFFF
FNV_OFFSET_BASIS = 2166136261
FNV_PRIME = 16777619
MULBERRY_INCREMENT = 0x6D2B79F5
TWO_POW_32 = 4294967296


def _imul(a: int, b: int) -> int:
    return (a * b) & MASK_32


def hash_seed(seed_str: str) -> int:
    """FNV-1a : xor du caractère puis multiplication par le nombre premier FNV."""
    h = FNV_OFFSET_BASIS
    for ch in seed_str:
        h ^= ord(ch)
        h = (h * FNV_PRIME) & MASK_32
    return h


class SeededRandom:
    """Flux de flottants reproductible à partir d'une graine 32 bits."""

    def __init__(self, seed: int) -> None:
        self.state = seed & MASK_32

    @classmethod
    def from_string(cls, seed_str: str) -> "SeededRandom":
        return cls(hash_seed(seed_str))

    def random(self) -> float:
        self.state = (self.state + MULBERRY_INCREMENT) & MASK_32
        s = self.state
        t = _imul(s ^ (s >> 15), 1 | s)
        t = (t ^ ((t + _imul(t ^ (t >> 7), 61 | t)) & MASK_32)) & MASK_32
        return ((t ^ (t >> 14)) & MASK_32) / TWO_POW_32

    def index(self, length: int) -> int:
        """Index uniforme dans [0, length)."""
        return int(self.random() * length)

    def __call__(self) -> float:
        return self.random()
