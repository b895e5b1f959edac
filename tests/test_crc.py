import pytest

from layertwo.crc import crc_update, crc_write_header


def _frame_for(payload: bytes) -> bytearray:
    # Header bytes 2 and 3 carry the first two payload bytes, the rest follows the CRC word.
    return bytearray(b"\xff\xfd" + payload[:2] + b"\x00\x00" + payload[2:])


def test_check_value_of_standard_string():
    frame = _frame_for(b"123456789")
    crc = crc_write_header(frame, 7 * 8)
    assert crc == 0xAEE7
    assert frame[4:6] == b"\xae\xe7"


def test_first_two_header_bytes_are_ignored():
    a = _frame_for(b"abcdefgh")
    b = bytearray(a)
    b[0] = 0x12
    b[1] = 0x34
    assert crc_write_header(a, 48) == crc_write_header(b, 48)


def test_old_crc_bytes_are_ignored():
    a = _frame_for(b"abcdefgh")
    b = bytearray(a)
    b[4] = 0x55
    b[5] = 0xAA
    assert crc_write_header(a, 48) == crc_write_header(b, 48)
    assert a == b


def test_bits_beyond_count_do_not_matter():
    a = bytearray(b"\xff\xfd\x10\x20\x00\x00\x33\xf0")
    b = bytearray(b"\xff\xfd\x10\x20\x00\x00\x33\xff")
    assert crc_write_header(a, 12) == crc_write_header(b, 12)


def test_counted_bits_do_matter():
    a = bytearray(b"\xff\xfd\x10\x20\x00\x00\x33\xf0")
    b = bytearray(b"\xff\xfd\x10\x20\x00\x00\x33\xe0")
    assert crc_write_header(a, 12) != crc_write_header(b, 12)
    assert a[4:6] != b[4:6]


def test_zero_bits_returns_unchanged_crc():
    assert crc_update(0xAB, 0x1234, 0) == 0x1234


@pytest.mark.parametrize("byte", [0x00, 0x5A, 0xAB, 0xFF])
@pytest.mark.parametrize("start", [0xFFFF, 0x0000, 0x1D0F])
def test_split_byte_equals_whole_byte(byte, start):
    half = crc_update(byte, start, 4)
    split = crc_update((byte << 4) & 0xFF, half, 4)
    assert split == crc_update(byte, start, 8)


def test_result_fits_sixteen_bits():
    crc = 0xFFFF
    for byte in range(256):
        crc = crc_update(byte, crc, 8)
        assert 0 <= crc <= 0xFFFF


def test_short_frame_raises():
    with pytest.raises(ValueError):
        crc_write_header(bytearray(7), 9)


def test_negative_bit_count_raises():
    with pytest.raises(ValueError):
        crc_write_header(bytearray(8), -1)