"""QR Code symbols: encoding segments into a grid of dark and light modules."""

from __future__ import annotations

from enum import Enum
from itertools import cycle, product
from typing import Iterable, Sequence

from qrservice.segment import BitBuffer, QrSegment

MIN_VERSION = 1
MAX_VERSION = 40

_PENALTY_N1 = 3
_PENALTY_N2 = 3
_PENALTY_N3 = 40
_PENALTY_N4 = 10

# Indexed by [Ecc.ordinal][version]; index 0 is padding and holds an illegal value.
_ECC_CODEWORDS_PER_BLOCK = (
    (-1, 7, 10, 15, 20, 26, 18, 20, 24, 30, 18, 20, 24, 26, 30, 22, 24, 28, 30, 28, 28,
     28, 28, 30, 30, 26, 28, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30),
    (-1, 10, 16, 26, 18, 24, 16, 18, 22, 22, 26, 30, 22, 22, 24, 24, 28, 28, 26, 26, 26,
     26, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28, 28),
    (-1, 13, 22, 18, 26, 18, 24, 18, 22, 20, 24, 28, 26, 24, 20, 30, 24, 28, 28, 26, 30,
     28, 30, 30, 30, 30, 28, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30),
    (-1, 17, 28, 22, 16, 22, 28, 26, 26, 24, 28, 24, 28, 22, 24, 24, 30, 28, 28, 26, 28,
     30, 24, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30, 30),
)

_NUM_ERROR_CORRECTION_BLOCKS = (
    (-1, 1, 1, 1, 1, 1, 2, 2, 2, 2, 4, 4, 4, 4, 4, 6, 6, 6, 6, 7, 8,
     8, 9, 9, 10, 12, 12, 12, 13, 14, 15, 16, 17, 18, 19, 19, 20, 21, 22, 24, 25),
    (-1, 1, 1, 1, 2, 2, 4, 4, 4, 5, 5, 5, 8, 9, 9, 10, 10, 11, 13, 14, 16,
     17, 17, 18, 20, 21, 23, 25, 26, 28, 29, 31, 33, 35, 37, 38, 40, 43, 45, 47, 49),
    (-1, 1, 1, 2, 2, 4, 4, 6, 6, 8, 8, 8, 10, 12, 16, 12, 17, 16, 18, 21, 20,
     23, 23, 25, 27, 29, 34, 34, 35, 38, 40, 43, 45, 48, 51, 53, 56, 59, 62, 65, 68),
    (-1, 1, 1, 2, 4, 4, 4, 5, 6, 8, 8, 11, 11, 16, 16, 18, 16, 19, 21, 25, 25,
     25, 34, 30, 32, 35, 37, 40, 42, 45, 48, 51, 54, 57, 60, 63, 66, 70, 74, 77, 81),
)

_MASK_PATTERNS = (
    lambda x, y: (x + y) % 2 == 0,
    lambda x, y: y % 2 == 0,
    lambda x, y: x % 3 == 0,
    lambda x, y: (x + y) % 3 == 0,
    lambda x, y: (x // 3 + y // 2) % 2 == 0,
    lambda x, y: x * y % 2 + x * y % 3 == 0,
    lambda x, y: (x * y % 2 + x * y % 3) % 2 == 0,
    lambda x, y: ((x + y) % 2 + x * y % 3) % 2 == 0,
)


class Ecc(Enum):
    """Error correction level of a QR Code."""

    LOW = (0, 1)  # tolerates about 7% erroneous codewords
    MEDIUM = (1, 0)  # about 15%
    QUARTILE = (2, 3)  # about 25%
    HIGH = (3, 2)  # about 30%

    def __init__(self, ordinal: int, format_bits: int) -> None:
        self.ordinal = ordinal
        self.format_bits = format_bits


class DataTooLongError(ValueError):
    """The supplied data does not fit any QR Code version in the allowed range."""


def _bit(x: int, i: int) -> bool:
    return ((x >> i) & 1) != 0


def _num_raw_data_modules(ver: int) -> int:
    """Data bits available at a version once function modules are excluded."""
    if not MIN_VERSION <= ver <= MAX_VERSION:
        raise ValueError("Version number out of range")
    result = (16 * ver + 128) * ver + 64
    if ver >= 2:
        num_align = ver // 7 + 2
        result -= (25 * num_align - 10) * num_align - 55
        if ver >= 7:
            result -= 36
    return result


def _num_data_codewords(ver: int, ecl: Ecc) -> int:
    return (
        _num_raw_data_modules(ver) // 8
        - _ECC_CODEWORDS_PER_BLOCK[ecl.ordinal][ver]
        * _NUM_ERROR_CORRECTION_BLOCKS[ecl.ordinal][ver]
    )


def _rs_multiply(x: int, y: int) -> int:
    """Product of two elements of GF(2^8/0x11D)."""
    z = 0
    for i in reversed(range(8)):
        z = (z << 1) ^ ((z >> 7) * 0x11D)
        z ^= ((y >> i) & 1) * x
    return z


def _rs_compute_divisor(degree: int) -> list[int]:
    """Reed-Solomon generator polynomial of the given degree, leading term dropped."""
    if not 1 <= degree <= 255:
        raise ValueError("Degree out of range")
    result = [0] * (degree - 1) + [1]
    root = 1
    for _ in range(degree):
        result = [
            _rs_multiply(coef, root) ^ following
            for coef, following in zip(result, result[1:] + [0])
        ]
        root = _rs_multiply(root, 0x02)
    return result


def _rs_compute_remainder(data: Iterable[int], divisor: Sequence[int]) -> list[int]:
    result = [0] * len(divisor)
    for b in data:
        factor = b ^ result[0]
        shifted = result[1:] + [0]
        result = [r ^ _rs_multiply(d, factor) for r, d in zip(shifted, divisor)]
    return result


class QrCode:
    """An immutable square grid of dark and light modules (QR Code Model 2)."""

    def __init__(self, version: int, ecl: Ecc, data_codewords: bytes | Iterable[int], mask: int) -> None:
        if not MIN_VERSION <= version <= MAX_VERSION:
            raise ValueError("Version value out of range")
        if not -1 <= mask <= 7:
            raise ValueError("Mask value out of range")
        self.version = version
        self.size = version * 4 + 17
        self.error_correction_level = ecl
        self._modules = [[False] * self.size for _ in range(self.size)]
        self._is_function = [[False] * self.size for _ in range(self.size)]

        self._draw_function_patterns()
        all_codewords = self._add_ecc_and_interleave(bytes(data_codewords))
        self._draw_codewords(all_codewords)

        if mask == -1:
            penalties = []
            for candidate in range(8):
                self._apply_mask(candidate)
                self._draw_format_bits(candidate)
                penalties.append(self._penalty_score())
                self._apply_mask(candidate)  # XOR undoes the mask
            mask = min(range(8), key=penalties.__getitem__)
        self.mask = mask
        self._apply_mask(mask)
        self._draw_format_bits(mask)
        del self._is_function

    # ---- factories ----

    @staticmethod
    def encode_text(text: str, ecl: Ecc) -> QrCode:
        """Encode Unicode text, choosing the smallest version that fits."""
        return QrCode.encode_segments(QrSegment.make_segments(text), ecl)

    @staticmethod
    def encode_binary(data: bytes | Iterable[int], ecl: Ecc) -> QrCode:
        """Encode binary data in byte mode, choosing the smallest version that fits."""
        return QrCode.encode_segments([QrSegment.make_bytes(data)], ecl)

    @staticmethod
    def encode_segments(
        segs: Sequence[QrSegment],
        ecl: Ecc,
        min_version: int = MIN_VERSION,
        max_version: int = MAX_VERSION,
        mask: int = -1,
        boost_ecl: bool = True,
    ) -> QrCode:
        """Encode segments using the smallest version in the given range."""
        if not (MIN_VERSION <= min_version <= max_version <= MAX_VERSION) or not -1 <= mask <= 7:
            raise ValueError("Invalid value")

        version = min_version
        while True:
            capacity_bits = _num_data_codewords(version, ecl) * 8
            used_bits = QrSegment.get_total_bits(segs, version)
            if used_bits is not None and used_bits <= capacity_bits:
                break
            if version >= max_version:
                if used_bits is None:
                    message = "Segment too long"
                else:
                    message = (
                        f"Data length = {used_bits} bits, "
                        f"Max capacity = {capacity_bits} bits"
                    )
                raise DataTooLongError(message)
            version += 1

        if boost_ecl:
            for new_ecl in (Ecc.MEDIUM, Ecc.QUARTILE, Ecc.HIGH):
                if used_bits <= _num_data_codewords(version, new_ecl) * 8:
                    ecl = new_ecl

        bb = BitBuffer()
        for seg in segs:
            bb.append_bits(seg.mode.mode_bits, 4)
            bb.append_bits(seg.num_chars, seg.mode.num_char_count_bits(version))
            bb.extend(seg.data)

        capacity_bits = _num_data_codewords(version, ecl) * 8
        bb.append_bits(0, min(4, capacity_bits - len(bb)))
        bb.append_bits(0, -len(bb) % 8)
        for pad_byte in cycle((0xEC, 0x11)):
            if len(bb) >= capacity_bits:
                break
            bb.append_bits(pad_byte, 8)

        codewords = bytes(
            sum(bit << (7 - j) for j, bit in enumerate(bb[start:start + 8]))
            for start in range(0, len(bb), 8)
        )
        return QrCode(version, ecl, codewords, mask)

    # ---- queries ----

    def get_module(self, x: int, y: int) -> bool:
        """Colour at (x, y): True for dark; out-of-bounds coordinates are light."""
        return 0 <= x < self.size and 0 <= y < self.size and self._modules[y][x]

    # ---- drawing function modules ----

    def _set_function_module(self, x: int, y: int, is_dark: bool) -> None:
        self._modules[y][x] = is_dark
        self._is_function[y][x] = True

    def _draw_function_patterns(self) -> None:
        for i in range(self.size):
            self._set_function_module(6, i, i % 2 == 0)
            self._set_function_module(i, 6, i % 2 == 0)

        self._draw_finder_pattern(3, 3)
        self._draw_finder_pattern(self.size - 4, 3)
        self._draw_finder_pattern(3, self.size - 4)

        positions = self._alignment_pattern_positions()
        last = len(positions) - 1
        for (i, px), (j, py) in product(enumerate(positions), repeat=2):
            if (i, j) not in ((0, 0), (0, last), (last, 0)):
                self._draw_alignment_pattern(px, py)

        self._draw_format_bits(0)  # placeholder mask, overwritten later
        self._draw_version()

    def _draw_format_bits(self, mask: int) -> None:
        data = self.error_correction_level.format_bits << 3 | mask
        rem = data
        for _ in range(10):
            rem = (rem << 1) ^ ((rem >> 9) * 0x537)
        bits = (data << 10 | rem) ^ 0x5412

        for i in range(6):
            self._set_function_module(8, i, _bit(bits, i))
        self._set_function_module(8, 7, _bit(bits, 6))
        self._set_function_module(8, 8, _bit(bits, 7))
        self._set_function_module(7, 8, _bit(bits, 8))
        for i in range(9, 15):
            self._set_function_module(14 - i, 8, _bit(bits, i))

        size = self.size
        for i in range(8):
            self._set_function_module(size - 1 - i, 8, _bit(bits, i))
        for i in range(8, 15):
            self._set_function_module(8, size - 15 + i, _bit(bits, i))
        self._set_function_module(8, size - 8, True)

    def _draw_version(self) -> None:
        if self.version < 7:
            return
        rem = self.version
        for _ in range(12):
            rem = (rem << 1) ^ ((rem >> 11) * 0x1F25)
        bits = self.version << 12 | rem
        for i in range(18):
            bit = _bit(bits, i)
            a = self.size - 11 + i % 3
            b = i // 3
            self._set_function_module(a, b, bit)
            self._set_function_module(b, a, bit)

    def _draw_finder_pattern(self, x: int, y: int) -> None:
        for dy, dx in product(range(-4, 5), repeat=2):
            dist = max(abs(dx), abs(dy))
            xx, yy = x + dx, y + dy
            if 0 <= xx < self.size and 0 <= yy < self.size:
                self._set_function_module(xx, yy, dist not in (2, 4))

    def _draw_alignment_pattern(self, x: int, y: int) -> None:
        for dy, dx in product(range(-2, 3), repeat=2):
            self._set_function_module(x + dx, y + dy, max(abs(dx), abs(dy)) != 1)

    def _alignment_pattern_positions(self) -> list[int]:
        if self.version == 1:
            return []
        num_align = self.version // 7 + 2
        step = (self.version * 8 + num_align * 3 + 5) // (num_align * 4 - 4) * 2
        descending = [self.size - 7 - i * step for i in range(num_align - 1)]
        return [6, *reversed(descending)]

    # ---- codewords and masking ----

    def _add_ecc_and_interleave(self, data: bytes) -> bytes:
        ecl = self.error_correction_level
        ver = self.version
        if len(data) != _num_data_codewords(ver, ecl):
            raise ValueError("Invalid argument")

        num_blocks = _NUM_ERROR_CORRECTION_BLOCKS[ecl.ordinal][ver]
        block_ecc_len = _ECC_CODEWORDS_PER_BLOCK[ecl.ordinal][ver]
        raw_codewords = _num_raw_data_modules(ver) // 8
        num_short_blocks = num_blocks - raw_codewords % num_blocks
        short_block_len = raw_codewords // num_blocks

        divisor = _rs_compute_divisor(block_ecc_len)
        blocks = []
        offset = 0
        for i in range(num_blocks):
            length = short_block_len - block_ecc_len + (0 if i < num_short_blocks else 1)
            dat = list(data[offset:offset + length])
            offset += length
            ecc = _rs_compute_remainder(dat, divisor)
            if i < num_short_blocks:
                dat.append(0)
            blocks.append(dat + ecc)

        pad_index = short_block_len - block_ecc_len
        return bytes(
            block[i]
            for i in range(len(blocks[0]))
            for j, block in enumerate(blocks)
            if i != pad_index or j >= num_short_blocks
        )

    def _draw_codewords(self, data: bytes) -> None:
        if len(data) != _num_raw_data_modules(self.version) // 8:
            raise ValueError("Invalid argument")
        total_bits = len(data) * 8
        i = 0
        right = self.size - 1
        while right >= 1:
            if right == 6:
                right = 5
            upward = ((right + 1) & 2) == 0
            for vert in range(self.size):
                y = self.size - 1 - vert if upward else vert
                for x in (right, right - 1):
                    if not self._is_function[y][x] and i < total_bits:
                        self._modules[y][x] = _bit(data[i >> 3], 7 - (i & 7))
                        i += 1
            right -= 2

    def _apply_mask(self, mask: int) -> None:
        if not 0 <= mask <= 7:
            raise ValueError("Mask value out of range")
        pattern = _MASK_PATTERNS[mask]
        for y, (row, func_row) in enumerate(zip(self._modules, self._is_function)):
            for x, is_func in enumerate(func_row):
                if not is_func and pattern(x, y):
                    row[x] = not row[x]

    def _penalty_score(self) -> int:
        modules = self._modules
        result = sum(self._line_penalty(row) for row in modules)
        result += sum(self._line_penalty(col) for col in zip(*modules))

        for upper, lower in zip(modules, modules[1:]):
            for a, b, c, d in zip(upper, upper[1:], lower, lower[1:]):
                if a == b == c == d:
                    result += _PENALTY_N2

        dark = sum(map(sum, modules))
        total = self.size * self.size
        k = (abs(dark * 20 - total * 10) + total - 1) // total - 1
        result += k * _PENALTY_N4
        return result

    def _line_penalty(self, line: Iterable[bool]) -> int:
        result = 0
        run_color = False
        run_length = 0
        history = [0] * 7
        for color in line:
            if color == run_color:
                run_length += 1
                if run_length == 5:
                    result += _PENALTY_N1
                elif run_length > 5:
                    result += 1
            else:
                self._add_history(run_length, history)
                if not run_color:
                    result += self._count_finder_patterns(history) * _PENALTY_N3
                run_color = color
                run_length = 1
        if run_color:
            self._add_history(run_length, history)
            run_length = 0
        self._add_history(run_length + self.size, history)
        result += self._count_finder_patterns(history) * _PENALTY_N3
        return result

    def _add_history(self, run_length: int, history: list[int]) -> None:
        if history[0] == 0:
            run_length += self.size  # light border before the first run
        history.insert(0, run_length)
        history.pop()

    @staticmethod
    def _count_finder_patterns(history: Sequence[int]) -> int:
        n = history[1]
        core = (
            n > 0
            and history[2] == n
            and history[3] == n * 3
            and history[4] == n
            and history[5] == n
        )
        return int(core and history[0] >= n * 4 and history[6] >= n) + int(
            core and history[6] >= n * 4 and history[0] >= n
        )