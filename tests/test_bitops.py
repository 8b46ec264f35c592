import pytest

from bitops import BitWriter, BitReader


def test_bitwriter_write_bits_and_flush_basic():
    bw = BitWriter()
    bw.write_bits(0b1010, 4)
    bw.write_bits(0b11110000, 8)
    assert bw.bits_written == 12
    out = bw.flush()
    assert isinstance(out, (bytes, bytearray))
    assert len(out) == 2
    assert out[0] == 0b10101111
    assert out[1] == 0b00000000


def test_bitwriter_writes_only_low_bits():
    bw = BitWriter()
    bw.write_bits(0xFF01, 8)
    assert bw.flush() == b"\x01"


def test_bitwriter_accepts_codes_wider_than_32_bits():
    bw = BitWriter()
    bw.write_bits((1 << 39) | 1, 40)
    out = bw.flush()
    assert out == b"\x80\x00\x00\x00\x01"


def test_write_zero_bits_is_noop_and_flush_padding():
    bw = BitWriter()
    bw.write_bits(0xAA, 8)
    bw.write_bits(0, 0)
    out = bw.flush()
    assert out == bytes([0xAA])


def test_bitreader_read_bits_across_bytes():
    data = bytes([0b11001010, 0xFF, 0x00])
    br = BitReader(data)
    assert br.read_bits(3) == 0b110
    assert br.read_bits(9) == 0b010101111
    assert br.bits_read == 12
    assert br.bits_remaining == 12


def test_bitreader_eoferror_on_insufficient_bits():
    br = BitReader(b"\xF0")
    with pytest.raises(EOFError):
        _ = br.read_bits(9)


def test_failed_read_consumes_nothing():
    br = BitReader(b"\xF0")
    assert br.read_bits(4) == 0xF
    with pytest.raises(EOFError):
        br.read_bits(5)
    assert br.read_bits(4) == 0
    with pytest.raises(EOFError):
        br.read_bits(1)


def test_reset_rewinds_to_first_bit():
    br = BitReader(b"AB")
    assert br.read_bits(8) == ord("A")
    assert br.read_bits(8) == ord("B")
    br.reset()
    assert br.bits_read == 0
    assert br.read_bits(8) == ord("A")


def test_empty_reader_is_exhausted():
    br = BitReader(b"")
    assert br.total_bytes == 0
    with pytest.raises(EOFError):
        br.read_bits(1)
