"""QR Code data segments and the bit buffer used to build them."""

from __future__ import annotations

from dataclasses import dataclass, field
from enum import Enum
from typing import Iterable, Sequence

ALPHANUMERIC_CHARSET = "0123456789ABCDEFGHIJKLMNOPQRSTUVWXYZ $%*+-./:"

_INT_MAX = 2**31 - 1


class BitBuffer(list):
    """An appendable sequence of bits (booleans)."""

    def append_bits(self, val: int, length: int) -> None:
        """Append the ``length`` low-order bits of ``val``, most significant first.

        Requires 0 <= length <= 31 and 0 <= val < 2**length.
        """
        if length < 0 or length > 31 or val < 0 or val >> length != 0:
            raise ValueError("Value out of range")
        self.extend(((val >> i) & 1) != 0 for i in reversed(range(length)))


class Mode(Enum):
    """How a segment's data bits are interpreted."""

    NUMERIC = (0x1, (10, 12, 14))
    ALPHANUMERIC = (0x2, (9, 11, 13))
    BYTE = (0x4, (8, 16, 16))
    KANJI = (0x8, (8, 10, 12))
    ECI = (0x7, (0, 0, 0))

    def __init__(self, mode_bits: int, char_count_bits: tuple[int, int, int]) -> None:
        self.mode_bits = mode_bits
        self.char_count_bits = char_count_bits

    def num_char_count_bits(self, ver: int) -> int:
        """Bit width of the character count field at the given version."""
        return self.char_count_bits[(ver + 7) // 17]


@dataclass(frozen=True)
class QrSegment:
    """An immutable segment of character, binary or control data."""

    mode: Mode
    num_chars: int
    data: tuple[bool, ...] = field(default=())

    def __post_init__(self) -> None:
        if self.num_chars < 0:
            raise ValueError("Invalid value")
        object.__setattr__(self, "data", tuple(bool(b) for b in self.data))

    @staticmethod
    def make_bytes(data: bytes | Iterable[int]) -> QrSegment:
        """Encode arbitrary binary data in byte mode."""
        raw = bytes(data)
        if len(raw) > _INT_MAX:
            raise ValueError("Data too long")
        bb = BitBuffer()
        for b in raw:
            bb.append_bits(b, 8)
        return QrSegment(Mode.BYTE, len(raw), bb)

    @staticmethod
    def make_numeric(digits: str) -> QrSegment:
        """Encode a string of decimal digits in numeric mode."""
        if not QrSegment.is_numeric(digits):
            raise ValueError("String contains non-numeric characters")
        bb = BitBuffer()
        for start in range(0, len(digits), 3):
            chunk = digits[start:start + 3]
            bb.append_bits(int(chunk), len(chunk) * 3 + 1)
        return QrSegment(Mode.NUMERIC, len(digits), bb)

    @staticmethod
    def make_alphanumeric(text: str) -> QrSegment:
        """Encode text in alphanumeric mode."""
        if not QrSegment.is_alphanumeric(text):
            raise ValueError(
                "String contains unencodable characters in alphanumeric mode"
            )
        bb = BitBuffer()
        for start in range(0, len(text), 2):
            pair = text[start:start + 2]
            if len(pair) == 2:
                value = (
                    ALPHANUMERIC_CHARSET.index(pair[0]) * 45
                    + ALPHANUMERIC_CHARSET.index(pair[1])
                )
                bb.append_bits(value, 11)
            else:
                bb.append_bits(ALPHANUMERIC_CHARSET.index(pair), 6)
        return QrSegment(Mode.ALPHANUMERIC, len(text), bb)

    @staticmethod
    def make_segments(text: str) -> list[QrSegment]:
        """Choose the most compact single-segment encoding for the text."""
        if not text:
            return []
        if QrSegment.is_numeric(text):
            return [QrSegment.make_numeric(text)]
        if QrSegment.is_alphanumeric(text):
            return [QrSegment.make_alphanumeric(text)]
        return [QrSegment.make_bytes(text.encode("utf-8"))]

    @staticmethod
    def make_eci(assign_val: int) -> QrSegment:
        """Make an Extended Channel Interpretation designator segment."""
        bb = BitBuffer()
        if assign_val < 0:
            raise ValueError("ECI assignment value out of range")
        if assign_val < (1 << 7):
            bb.append_bits(assign_val, 8)
        elif assign_val < (1 << 14):
            bb.append_bits(2, 2)
            bb.append_bits(assign_val, 14)
        elif assign_val < 1_000_000:
            bb.append_bits(6, 3)
            bb.append_bits(assign_val, 21)
        else:
            raise ValueError("ECI assignment value out of range")
        return QrSegment(Mode.ECI, 0, bb)

    @staticmethod
    def is_numeric(text: str) -> bool:
        """True iff every character is a digit 0 to 9."""
        return all("0" <= c <= "9" for c in text)

    @staticmethod
    def is_alphanumeric(text: str) -> bool:
        """True iff every character is in the alphanumeric charset."""
        return all(c in ALPHANUMERIC_CHARSET for c in text)

    @staticmethod
    def get_total_bits(segs: Sequence[QrSegment], version: int) -> int | None:
        """Bits needed to encode the segments at the version.

        Returns None if a segment's length does not fit its count field or
        the total would exceed the signed 32-bit range.
        """
        result = 0
        for seg in segs:
            ccbits = seg.mode.num_char_count_bits(version)
            if seg.num_chars >= (1 << ccbits):
                return None
            if 4 + ccbits > _INT_MAX - result:
                return None
            result += 4 + ccbits
            if len(seg.data) > _INT_MAX - result:
                return None
            result += len(seg.data)
        return result