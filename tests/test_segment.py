import pytest

from qrservice.segment import ALPHANUMERIC_CHARSET, BitBuffer, Mode, QrSegment


def _to_int(bits):
    value = 0
    for b in bits:
        value = (value << 1) | int(b)
    return value


def test_append_bits_msb_first():
    bb = BitBuffer()
    bb.append_bits(5, 3)
    bb.append_bits(1, 2)
    assert bb == [True, False, True, False, True]


def test_append_bits_zero_length():
    bb = BitBuffer()
    bb.append_bits(0, 0)
    assert bb == []


@pytest.mark.parametrize("val,length", [(8, 3), (0, 32), (0, -1), (-1, 4)])
def test_append_bits_out_of_range(val, length):
    with pytest.raises(ValueError):
        BitBuffer().append_bits(val, length)


def test_append_bits_round_trip():
    bb = BitBuffer()
    bb.append_bits(0x7FFFFFFF, 31)
    assert len(bb) == 31
    assert _to_int(bb) == 0x7FFFFFFF


@pytest.mark.parametrize(
    "mode,ver,expected",
    [
        (Mode.NUMERIC, 1, 10),
        (Mode.NUMERIC, 9, 10),
        (Mode.NUMERIC, 10, 12),
        (Mode.NUMERIC, 26, 12),
        (Mode.NUMERIC, 27, 14),
        (Mode.ALPHANUMERIC, 40, 13),
        (Mode.BYTE, 1, 8),
        (Mode.BYTE, 40, 16),
        (Mode.KANJI, 10, 10),
        (Mode.ECI, 20, 0),
    ],
)
def test_num_char_count_bits(mode, ver, expected):
    assert mode.num_char_count_bits(ver) == expected


def test_mode_bits_of_built_segments():
    segs = [
        QrSegment.make_numeric("1"),
        QrSegment.make_alphanumeric("A"),
        QrSegment.make_bytes(b"a"),
        QrSegment(Mode.KANJI, 0, []),
        QrSegment.make_eci(1),
    ]
    assert [s.mode.mode_bits for s in segs] == [0x1, 0x2, 0x4, 0x8, 0x7]


def test_make_numeric_groups():
    seg = QrSegment.make_numeric("01234567")
    assert seg.mode is Mode.NUMERIC
    assert seg.num_chars == 8
    assert len(seg.data) == 10 + 10 + 7
    assert _to_int(seg.data[0:10]) == 12
    assert _to_int(seg.data[10:20]) == 345
    assert _to_int(seg.data[20:27]) == 67


def test_make_numeric_single_digit():
    seg = QrSegment.make_numeric("7")
    assert len(seg.data) == 4
    assert _to_int(seg.data) == 7


def test_make_numeric_empty():
    seg = QrSegment.make_numeric("")
    assert seg.num_chars == 0
    assert seg.data == ()


def test_make_numeric_rejects_letters():
    with pytest.raises(ValueError):
        QrSegment.make_numeric("12a")


def test_make_alphanumeric_worked_example():
    seg = QrSegment.make_alphanumeric("AC-42")
    assert seg.mode is Mode.ALPHANUMERIC
    assert seg.num_chars == 5
    assert len(seg.data) == 11 + 11 + 6
    assert _to_int(seg.data[0:11]) == 462
    assert _to_int(seg.data[11:22]) == 1849
    assert _to_int(seg.data[22:]) == 2


def test_make_alphanumeric_round_trip():
    text = ALPHANUMERIC_CHARSET
    seg = QrSegment.make_alphanumeric(text)
    decoded = []
    bits = seg.data
    pos = 0
    while pos + 11 <= len(bits):
        value = _to_int(bits[pos:pos + 11])
        decoded += [ALPHANUMERIC_CHARSET[value // 45], ALPHANUMERIC_CHARSET[value % 45]]
        pos += 11
    if pos < len(bits):
        decoded.append(ALPHANUMERIC_CHARSET[_to_int(bits[pos:])])
    assert "".join(decoded) == text


def test_make_alphanumeric_rejects_lowercase():
    with pytest.raises(ValueError):
        QrSegment.make_alphanumeric("abc")


def test_make_bytes_round_trip():
    payload = bytes(range(256))
    seg = QrSegment.make_bytes(payload)
    assert seg.mode is Mode.BYTE
    assert seg.num_chars == 256
    decoded = bytes(_to_int(seg.data[i:i + 8]) for i in range(0, len(seg.data), 8))
    assert decoded == payload


def test_make_segments_empty():
    assert QrSegment.make_segments("") == []


@pytest.mark.parametrize(
    "text,mode",
    [("123", Mode.NUMERIC), ("HELLO WORLD", Mode.ALPHANUMERIC), ("hello", Mode.BYTE)],
)
def test_make_segments_mode_choice(text, mode):
    segs = QrSegment.make_segments(text)
    assert len(segs) == 1
    assert segs[0].mode is mode
    assert segs[0].num_chars == len(text)


def test_make_segments_utf8_bytes():
    text = "\u00e9"
    (seg,) = QrSegment.make_segments(text)
    assert seg.mode is Mode.BYTE
    assert seg.num_chars == len(text.encode("utf-8"))
    assert seg == QrSegment.make_bytes(text.encode("utf-8"))


def test_make_eci_short():
    seg = QrSegment.make_eci(127)
    assert seg.mode is Mode.ECI
    assert seg.num_chars == 0
    assert len(seg.data) == 8
    assert _to_int(seg.data) == 127


def test_make_eci_two_bytes():
    seg = QrSegment.make_eci(128)
    assert len(seg.data) == 16
    assert seg.data[:2] == (True, False)
    assert _to_int(seg.data[2:]) == 128


def test_make_eci_three_bytes():
    seg = QrSegment.make_eci(999999)
    assert len(seg.data) == 24
    assert seg.data[:3] == (True, True, False)
    assert _to_int(seg.data[3:]) == 999999


@pytest.mark.parametrize("value", [-1, 1000000])
def test_make_eci_out_of_range(value):
    with pytest.raises(ValueError):
        QrSegment.make_eci(value)


@pytest.mark.parametrize(
    "text,expected", [("", True), ("0123456789", True), ("12 3", False), ("1.5", False)]
)
def test_is_numeric(text, expected):
    assert QrSegment.is_numeric(text) is expected


@pytest.mark.parametrize(
    "text,expected",
    [("", True), ("HELLO $%*+-./:", True), ("Hello", False), ("A#B", False)],
)
def test_is_alphanumeric(text, expected):
    assert QrSegment.is_alphanumeric(text) is expected


def test_negative_num_chars_rejected():
    with pytest.raises(ValueError):
        QrSegment(Mode.BYTE, -1, [])


def test_segment_data_is_copied():
    bits = [True, False]
    seg = QrSegment(Mode.BYTE, 0, bits)
    bits.append(True)
    assert seg.data == (True, False)


def test_total_bits_empty():
    assert QrSegment.get_total_bits([], 1) == 0


def test_total_bits_sum_of_headers_and_data():
    segs = [QrSegment.make_numeric("123"), QrSegment.make_bytes(b"ab")]
    for ver in (1, 10, 27):
        expected = sum(
            4 + s.mode.num_char_count_bits(ver) + len(s.data) for s in segs
        )
        assert QrSegment.get_total_bits(segs, ver) == expected


def test_total_bits_count_field_overflow():
    seg = QrSegment(Mode.NUMERIC, 1024, [])
    assert QrSegment.get_total_bits([seg], 1) is None
    assert QrSegment.get_total_bits([seg], 10) == 4 + 12