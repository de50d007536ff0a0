import math
import struct

import pytest

from archlab.bits import (
    bang,
    bit_mask,
    bit_nor,
    bit_parity,
    conditional,
    divide_power2,
    ez_three_fourths,
    fits_bits,
    float_abs_val,
    float_scale4,
    float_to_int,
    get_byte,
    is_negative,
    sign_mag_to_twos_comp,
    tmax,
)

INT_MIN = -(2**31)
INT_MAX = 2**31 - 1
SAMPLES = [0, 1, -1, 5, 7, -33, 0x12345678, INT_MIN, INT_MAX, -123456789, 255, 256]


def _bits(value: float) -> int:
    return struct.unpack("<I", struct.pack("<f", value))[0]


def _float(bits: int) -> float:
    return struct.unpack("<f", struct.pack("<I", bits))[0]


def test_bit_nor_example():
    assert bit_nor(0x6, 0x5) & 0xFFFFFFFF == 0xFFFFFFF8


@pytest.mark.parametrize("x", SAMPLES)
@pytest.mark.parametrize("y", [0, 3, -8, INT_MIN])
def test_bit_nor_matches_not_or(x, y):
    assert bit_nor(x, y) == ~(x | y)


def test_get_byte_example():
    assert get_byte(0x12345678, 1) == 0x56


@pytest.mark.parametrize("x", SAMPLES)
def test_get_byte_reassembles_word(x):
    word = sum(get_byte(x, n) << (8 * n) for n in range(4))
    assert word == x & 0xFFFFFFFF


def test_get_byte_rejects_bad_index():
    with pytest.raises(ValueError):
        get_byte(0x12345678, 4)


def test_bit_mask_example():
    assert bit_mask(5, 3) == 0x38


def test_bit_mask_empty_when_low_above_high():
    assert bit_mask(3, 5) == 0


def test_bit_mask_full_word():
    assert bit_mask(31, 0) & 0xFFFFFFFF == 0xFFFFFFFF


@pytest.mark.parametrize("bit", [0, 7, 31])
def test_bit_mask_single_bit(bit):
    assert bit_mask(bit, bit) & 0xFFFFFFFF == 1 << bit


def test_bit_mask_rejects_out_of_range():
    with pytest.raises(ValueError):
        bit_mask(32, 0)


def test_bang_examples():
    assert bang(3) == 0
    assert bang(0) == 1


@pytest.mark.parametrize("x", SAMPLES)
def test_bang_is_logical_not(x):
    assert bang(x) == int(x == 0)


def test_bit_parity_examples():
    assert bit_parity(5) == 0
    assert bit_parity(7) == 1


@pytest.mark.parametrize("x", SAMPLES)
def test_bit_parity_counts_set_bits(x):
    assert bit_parity(x) == bin(x & 0xFFFFFFFF).count("1") % 2


def test_tmax():
    assert tmax() == INT_MAX


def test_is_negative():
    assert is_negative(-1) == 1
    assert is_negative(0) == 0
    assert is_negative(INT_MIN) == 1
    assert is_negative(INT_MAX) == 0


def test_fits_bits_examples():
    assert fits_bits(5, 3) == 0
    assert fits_bits(-4, 3) == 1


@pytest.mark.parametrize("x", SAMPLES)
def test_fits_bits_always_in_32(x):
    assert fits_bits(x, 32) == 1


@pytest.mark.parametrize("x", SAMPLES)
@pytest.mark.parametrize("n", [1, 4, 8, 16, 31])
def test_fits_bits_matches_range(x, n):
    assert fits_bits(x, n) == int(-(2 ** (n - 1)) <= x < 2 ** (n - 1))


def test_fits_bits_rejects_zero_width():
    with pytest.raises(ValueError):
        fits_bits(1, 0)


def test_divide_power2_examples():
    assert divide_power2(15, 1) == 7
    assert divide_power2(-33, 4) == -2


@pytest.mark.parametrize("x", SAMPLES)
@pytest.mark.parametrize("n", [0, 1, 3, 30])
def test_divide_power2_truncates_toward_zero(x, n):
    quotient = abs(x) // (2**n)
    assert divide_power2(x, n) == (quotient if x >= 0 else -quotient)


def test_divide_power2_rejects_large_shift():
    with pytest.raises(ValueError):
        divide_power2(1, 31)


def test_conditional_example():
    assert conditional(2, 4, 5) == 4


@pytest.mark.parametrize("x", SAMPLES)
def test_conditional_selects(x):
    assert conditional(x, 11, -22) == (11 if x else -22)


def test_ez_three_fourths_examples():
    assert ez_three_fourths(11) == 8
    assert ez_three_fourths(-9) == -6
    assert ez_three_fourths(1073741824) == -268435456


@pytest.mark.parametrize("x", [0, 4, -4, 100, -100, 12345])
def test_ez_three_fourths_without_overflow(x):
    product = 3 * abs(x) // 4
    assert ez_three_fourths(x) == (product if x >= 0 else -product)


def test_sign_mag_example():
    assert sign_mag_to_twos_comp(0x80000005) == -5


def test_sign_mag_positive_unchanged():
    assert sign_mag_to_twos_comp(0x12345678) == 0x12345678


def test_sign_mag_negative_zero():
    assert sign_mag_to_twos_comp(0x80000000) == 0


@pytest.mark.parametrize("value", [2.5, -2.5, 0.0, -0.0, 1e-40, -3.0e38])
def test_float_abs_val(value):
    assert float_abs_val(_bits(value)) == _bits(abs(value))


def test_float_abs_val_keeps_nan():
    assert float_abs_val(0xFFC00000) == 0xFFC00000


def test_float_abs_val_negative_infinity():
    assert float_abs_val(_bits(-math.inf)) == _bits(math.inf)


@pytest.mark.parametrize("value", [3.7, -3.7, 0.5, -0.5, 0.0, 1e6, -1e6, 16777217.0, 1e9])
def test_float_to_int_truncates(value):
    assert float_to_int(_bits(value)) == int(_float(_bits(value)))


@pytest.mark.parametrize("value", [math.nan, math.inf, -math.inf, 1e10, 2.0**31])
def test_float_to_int_out_of_range(value):
    assert float_to_int(_bits(value)) == INT_MIN


def test_float_to_int_int_min():
    assert float_to_int(_bits(-(2.0**31))) == INT_MIN


@pytest.mark.parametrize("value", [3.0e38, -3.0e38, math.inf, -math.inf])
def test_float_scale4_overflow_to_infinity(value):
    assert _float(float_scale4(_bits(value))) == math.copysign(math.inf, value)


def test_float_scale4_keeps_nan():
    assert float_scale4(0x7FC00001) == 0x7FC00001