"""A fixed-size bit map keyed by hashed values."""

from __future__ import annotations

from collections.abc import Iterator


class ValueBitMap:
    """A map of 65536 bits; values are folded into it by modulo."""

    MAP_SIZE_IN_BITS = 1 << 16
    MAP_PRIME_MOD = 65371  # Largest prime below MAP_SIZE_IN_BITS.

    def __init__(self) -> None:
        self._bits = bytearray(self.MAP_SIZE_IN_BITS // 8)

    def reset(self) -> None:
        """Clear every bit."""
        self._bits[:] = bytes(len(self._bits))

    def add_value(self, value: int) -> bool:
        """Set the bit for ``value``; return True if it was not set before."""
        idx = value % self.MAP_SIZE_IN_BITS
        byte_idx, mask = divmod(idx, 8)
        mask = 1 << mask
        old = self._bits[byte_idx]
        self._bits[byte_idx] = old | mask
        return not old & mask

    def add_value_mod_prime(self, value: int) -> bool:
        """Like :meth:`add_value`, after reducing ``value`` modulo a prime."""
        return self.add_value(value % self.MAP_PRIME_MOD)

    def get(self, idx: int) -> bool:
        """Return whether bit ``idx`` is set."""
        if not 0 <= idx < self.MAP_SIZE_IN_BITS:
            raise IndexError(f"bit index {idx} out of range")
        byte_idx, bit = divmod(idx, 8)
        return bool(self._bits[byte_idx] >> bit & 1)

    def size_in_bits(self) -> int:
        """Return the number of bits in the map."""
        return self.MAP_SIZE_IN_BITS

    def __iter__(self) -> Iterator[int]:
        """Yield the indices of set bits in increasing order."""
        for byte_idx, byte in enumerate(self._bits):
            if byte:
                base = byte_idx * 8
                for bit in range(8):
                    if byte >> bit & 1:
                        yield base + bit