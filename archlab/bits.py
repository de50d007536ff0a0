"""Bit-level integer and single-precision float operations on 32-bit words.

Integer results are signed 32-bit values; the float operations take and
return the raw IEEE-754 single-precision bit pattern as an unsigned value.
"""

from __future__ import annotations

_MASK32 = 0xFFFFFFFF
_SIGN_BIT = 0x80000000
_INT_MIN = -(1 << 31)

_EXP_MASK = 0xFF
_FRAC_MASK = 0x007FFFFF
_IMPLICIT_ONE = 0x00800000


def _s32(value: int) -> int:
    """Reinterpret the low 32 bits of ``value`` as a signed integer."""
    value &= _MASK32
    return value - (1 << 32) if value & _SIGN_BIT else value


def _u32(value: int) -> int:
    """Keep the low 32 bits of ``value`` as an unsigned integer."""
    return value & _MASK32


def _check_range(name: str, value: int, low: int, high: int) -> None:
    if not low <= value <= high:
        raise ValueError(f"{name} must be between {low} and {high}, got {value}")


def bit_nor(x: int, y: int) -> int:
    """Return ``~(x | y)`` computed as ``~x & ~y``."""
    return _s32(~_s32(x) & ~_s32(y))


def get_byte(x: int, n: int) -> int:
    """Extract byte ``n`` (0 is least significant, 3 most) from word ``x``."""
    _check_range("n", n, 0, 3)
    return (_s32(x) >> (n << 3)) & 0xFF


def bit_mask(highbit: int, lowbit: int) -> int:
    """Return a mask of ones from ``lowbit`` to ``highbit`` inclusive, else 0."""
    _check_range("highbit", highbit, 0, 31)
    _check_range("lowbit", lowbit, 0, 31)
    low_mask = ~_s32(-1 << lowbit)
    high_mask = _s32(-1 << highbit) & ~_s32(1 << highbit)
    return _s32(~(low_mask | high_mask))


def bang(x: int) -> int:
    """Compute logical not of ``x`` without using a logical operator."""
    x = _s32(x)
    x = (x | _s32(~x + 1)) >> 31
    return ((x | _s32(~x + 1)) >> 31) + 1


def bit_parity(x: int) -> int:
    """Return 1 if ``x`` has an odd number of set bits, else 0."""
    x = _s32(x)
    for shift in (1, 2, 4, 8, 16):
        x ^= x >> shift
    return x & 1


def tmax() -> int:
    """Return the largest two's complement 32-bit integer."""
    return ~_s32(1 << 31)


def is_negative(x: int) -> int:
    """Return 1 if ``x`` is negative, else 0."""
    return (_s32(x) >> 31) & 1


def fits_bits(x: int, n: int) -> int:
    """Return 1 if ``x`` fits in an ``n``-bit two's complement integer."""
    _check_range("n", n, 1, 32)
    x = _s32(x)
    sign = x >> 31
    return int(((x >> (n - 1)) ^ sign) == 0)


def divide_power2(x: int, n: int) -> int:
    """Compute ``x / 2**n`` rounding toward zero, for 0 <= n <= 30."""
    _check_range("n", n, 0, 30)
    x = _s32(x)
    sign = x >> 31
    bias = (1 << n) - 1
    return _s32((sign & bias) + x) >> n


def conditional(x: int, y: int, z: int) -> int:
    """Return ``y`` if ``x`` is nonzero, else ``z``."""
    x = _s32(x)
    for shift in (16, 8, 4, 2, 1):
        x = _s32(x | (x << shift))
    x >>= 31
    return _s32((~x & _s32(z)) | (x & _s32(y)))


def ez_three_fourths(x: int) -> int:
    """Compute ``x * 3 / 4`` with 32-bit overflow, rounding toward zero."""
    x = _s32(x)
    tripled = _s32((x << 1) + x)
    bias = 3 if tripled & _SIGN_BIT else 0
    return _s32(tripled + bias) >> 2


def sign_mag_to_twos_comp(x: int) -> int:
    """Convert a sign-magnitude word (sign in the top bit) to two's complement."""
    x = _s32(x)
    sign = x >> 31
    magnitude = x ^ _s32(sign << 31)
    return _s32((magnitude ^ sign) + (sign & 1))


def float_abs_val(uf: int) -> int:
    """Return the bits of ``|f|``; a NaN is returned unchanged."""
    uf = _u32(uf)
    exponent = (uf >> 23) & _EXP_MASK
    if exponent == _EXP_MASK and uf & _FRAC_MASK:
        return uf
    return uf & ~_SIGN_BIT & _MASK32


def float_to_int(uf: int) -> int:
    """Return ``int(f)``; out-of-range values, NaN and infinity give INT_MIN."""
    uf = _u32(uf)
    negative = uf >> 31
    exponent = ((uf & 0x7F800000) >> 23) - 127
    fraction = (uf & _FRAC_MASK) | _IMPLICIT_ONE

    if exponent < 0:
        return 0
    if exponent >= 31:
        return _INT_MIN
    if exponent > 23:
        fraction <<= exponent - 23
    else:
        fraction >>= 23 - exponent
    return -fraction if negative else fraction


def float_scale4(uf: int) -> int:
    """Return the bits of ``4 * f``; a NaN is returned unchanged."""
    uf = _u32(uf)
    sign = uf >> 31
    exponent = (uf & ~_SIGN_BIT & _MASK32) >> 23
    fraction = uf & _FRAC_MASK

    if exponent == _EXP_MASK and fraction:
        return uf

    for _ in range(2):
        if exponent:
            if exponent != _EXP_MASK:
                exponent += 1
            if exponent == _EXP_MASK:
                fraction = 0
        else:
            exponent = 1 if fraction & (1 << 22) else 0
            fraction <<= 1

    fraction &= _FRAC_MASK
    exponent &= _EXP_MASK
    return (sign << 31) | (exponent << 23) | fraction