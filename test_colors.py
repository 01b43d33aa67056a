from utils.colors import DEFAULT_COLOR, hex_to_rgb, hsl_to_hex, parse_hsl, to_hex


def test_parse_hsl_comma_form():
    assert parse_hsl('hsl(215, 100%, 50%)') == (215.0, 100.0, 50.0)


def test_parse_hsl_space_form():
    assert parse_hsl('hsl(142 70% 40%)') == (142.0, 70.0, 40.0)


def test_parse_hsl_rejects_other_strings():
    assert parse_hsl('#ffffff') is None
    assert parse_hsl('') is None


def test_hsl_to_hex_primaries():
    assert hsl_to_hex(0, 100, 50) == '#ff0000'
    assert hsl_to_hex(120, 100, 50) == '#00ff00'
    assert hsl_to_hex(240, 100, 50) == '#0000ff'
    assert hsl_to_hex(0, 0, 100) == '#ffffff'
    assert hsl_to_hex(0, 0, 0) == '#000000'


def test_to_hex_accepts_all_category_formats():
    assert to_hex('#1E3A8A') == '#1e3a8a'
    assert to_hex('#abc') == '#aabbcc'
    assert to_hex('hsl(0, 100%, 50%)') == '#ff0000'
    assert to_hex('hsl(0 100% 50%)') == '#ff0000'


def test_to_hex_falls_back_to_default():
    assert to_hex(None) == DEFAULT_COLOR
    assert to_hex('not a colour') == DEFAULT_COLOR
    assert to_hex('', default='#000000') == '#000000'


def test_hex_to_rgb():
    assert hex_to_rgb('#ff8000') == (255, 128, 0)
    assert hex_to_rgb('#fff') == (255, 255, 255)
    assert hex_to_rgb('blue') is None
