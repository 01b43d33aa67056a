"""
Colour helpers for category colours.

Categories store CSS colour strings as entered in the admin panel:
'hsl(215, 100%, 50%)', the space separated 'hsl(215 100% 50%)' form, or hex.
PDF rendering needs plain hex.
"""

import re

DEFAULT_COLOR = '#A1A1AA'

_HSL_COMMA = re.compile(r'hsl\(\s*([\d.]+)\s*,\s*([\d.]+)%\s*,\s*([\d.]+)%\s*\)', re.IGNORECASE)
_HSL_SPACE = re.compile(r'hsl\(\s*([\d.]+)\s+([\d.]+)%?\s+([\d.]+)%?\s*\)', re.IGNORECASE)
_HEX = re.compile(r'^#?([0-9a-f]{3}|[0-9a-f]{6})$', re.IGNORECASE)


def parse_hsl(value):
    """Return (h, s, l) from an hsl() string, or None."""
    if not value:
        return None
    match = _HSL_COMMA.search(value) or _HSL_SPACE.search(value)
    if not match:
        return None
    return float(match.group(1)), float(match.group(2)), float(match.group(3))


def hsl_to_hex(h, s, l):
    """Convert hue (degrees), saturation and lightness (percent) to '#rrggbb'."""
    l /= 100
    a = s * min(l, 1 - l) / 100

    def channel(n):
        k = (n + h / 30) % 12
        color = l - a * max(min(k - 3, 9 - k, 1), -1)
        return f'{round(255 * color):02x}'

    return f'#{channel(0)}{channel(8)}{channel(4)}'


def to_hex(value, default=DEFAULT_COLOR):
    """Normalize any supported colour string to '#rrggbb'."""
    if not value:
        return default
    value = value.strip()
    match = _HEX.match(value)
    if match:
        digits = match.group(1)
        if len(digits) == 3:
            digits = ''.join(c * 2 for c in digits)
        return f'#{digits.lower()}'
    hsl = parse_hsl(value)
    if hsl:
        return hsl_to_hex(*hsl)
    return default


def hex_to_rgb(value):
    """'#rrggbb' (or 3-digit shorthand) to an (r, g, b) tuple, None when invalid."""
    match = _HEX.match(value.strip()) if value else None
    if not match:
        return None
    digits = match.group(1)
    if len(digits) == 3:
        digits = ''.join(c * 2 for c in digits)
    return tuple(int(digits[i:i + 2], 16) for i in (0, 2, 4))
