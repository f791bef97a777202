"""Tests for sprite_markers.core.sanitizer — reserved colour removal."""

from sprite_markers.core.palette import DEFAULT_PALETTE, Palette, pack, unpack
from sprite_markers.core.sanitizer import replacement_for, reserved_pixels, sanitize
from sprite_markers.core.types import MarkerType


class TestReplacement:
    def test_armor_gets_red_plus_one(self, make_buffer):
        buf = make_buffer(1, 1, {(0, 0): 0x000000FF})
        result = sanitize(buf)
        assert buf.rgba(0, 0) == (1, 0, 0, 255)
        assert result.replaced == 1
        assert result.clean

    def test_thruster_clamped_red_falls_through_to_minus_one(self, make_buffer):
        buf = make_buffer(1, 1, {(0, 0): 0xFFA500FF})
        sanitize(buf)
        assert buf.rgba(0, 0) == (254, 165, 0, 255)

    def test_rocket(self, make_buffer):
        buf = make_buffer(1, 1, {(0, 0): 0xFFFFFFFF})
        sanitize(buf)
        assert buf.rgba(0, 0) == (254, 255, 255, 255)

    def test_laser(self, make_buffer):
        buf = make_buffer(1, 1, {(0, 0): 0x00FF00FF})
        sanitize(buf)
        assert buf.rgba(0, 0) == (1, 255, 0, 255)

    def test_orientation_is_also_stripped(self, make_buffer):
        buf = make_buffer(1, 1, {(0, 0): 0xFF0000FF})
        sanitize(buf)
        assert buf.rgba(0, 0) == (254, 0, 0, 255)

    def test_replacement_for_is_pure(self):
        assert replacement_for((0, 0, 0, 255)) == (1, 0, 0, 255)


class TestUntouched:
    def test_transparent_pixels(self, make_buffer):
        buf = make_buffer(3, 1, {(0, 0): 0x00000000, (1, 0): 0xFFA50000, (2, 0): 0xFFFFFF00})
        before = bytes(buf.data)
        result = sanitize(buf)
        assert bytes(buf.data) == before
        assert result.replaced == 0

    def test_non_marker_colours(self, make_buffer):
        buf = make_buffer(2, 1, {(0, 0): 0x0000FFFF, (1, 0): 0x000000FE})
        before = bytes(buf.data)
        sanitize(buf)
        assert bytes(buf.data) == before


class TestProperties:
    def _sprite(self, make_buffer):
        pixels = {}
        colours = [c for _, c in DEFAULT_PALETTE] + [0x0000FFFF, 0x12345678, 0xFFA50000, 0x00000000]
        for i, colour in enumerate(colours * 3):
            pixels[(i % 8, i // 8)] = colour
        return make_buffer(8, 6, pixels)

    def test_alpha_preserved(self, make_buffer):
        buf = self._sprite(make_buffer)
        before = buf.array().copy()
        sanitize(buf)
        assert (buf.array()[..., 3] == before[..., 3]).all()

    def test_minimal_change(self, make_buffer):
        buf = self._sprite(make_buffer)
        before = buf.array().astype(int).copy()
        sanitize(buf)
        diff = buf.array().astype(int) - before
        for y in range(buf.height):
            for x in range(buf.width):
                d = [int(v) for v in diff[y, x, :3]]
                changed = [v for v in d if v != 0]
                assert len(changed) <= 1 and all(abs(v) <= 2 for v in changed) or d == [2, 2, 2]

    def test_no_reserved_colour_remains(self, make_buffer):
        buf = self._sprite(make_buffer)
        result = sanitize(buf)
        assert result.unresolved == []
        assert reserved_pixels(buf) == []

    def test_second_pass_is_noop(self, make_buffer):
        buf = self._sprite(make_buffer)
        sanitize(buf)
        after_first = bytes(buf.data)
        assert sanitize(buf).replaced == 0
        assert bytes(buf.data) == after_first

    def test_replaced_count(self, make_buffer):
        buf = self._sprite(make_buffer)
        assert sanitize(buf).replaced == 15  # 5 reserved colours × 3 repeats


def _crowded_palette(base: tuple[int, int, int], include_fallback: bool) -> Palette:
    """Palette reserving base and every single-channel nudge of it."""
    colours = [pack(*base, 255)]
    for ch in range(3):
        for delta in (1, -1, 2, -2):
            c = list(base)
            c[ch] += delta
            colours.append(pack(*c, 255))
    if include_fallback:
        colours.append(pack(base[0] + 2, base[1] + 2, base[2] + 2, 255))
    return Palette([(MarkerType.ARMOR, c) for c in colours])


class TestFallback:
    def test_all_channels_plus_two(self, make_buffer):
        palette = _crowded_palette((10, 10, 10), include_fallback=False)
        buf = make_buffer(1, 1, {(0, 0): pack(10, 10, 10, 255)})
        result = sanitize(buf, palette)
        assert buf.rgba(0, 0) == (12, 12, 12, 255)
        assert result.replaced == 1
        assert result.clean

    def test_residual_reported_and_left_unchanged(self, make_buffer):
        palette = _crowded_palette((10, 10, 10), include_fallback=True)
        buf = make_buffer(3, 2, {(2, 1): pack(10, 10, 10, 255)})
        result = sanitize(buf, palette)
        assert buf.rgba(2, 1) == (10, 10, 10, 255)
        assert result.unresolved == [(2, 1)]
        assert result.replaced == 0
        assert not result.clean

    def test_residual_replacement_is_none(self):
        palette = _crowded_palette((10, 10, 10), include_fallback=True)
        assert replacement_for(unpack(pack(10, 10, 10, 255)), palette) is None
