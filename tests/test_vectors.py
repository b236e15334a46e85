import pytest

from lcforge.rand import Unspecified
from lcforge.vectors import (
    VectorCase,
    VectorError,
    VectorFile,
    from_dirty_hex,
    from_hex,
    load_file,
    parse_cases,
    run,
    to_hex,
    to_hex_upper,
)

ONE_CASE = VectorFile("test_1_tests.txt", "# one case\n\nKey = Value\n")
THREE_CASES = VectorFile(
    "test_3_tests.txt",
    "# three cases\n\nKey = Value1\n\nKey = Value2\n\nKey = Value3\n",
)
SYNTAX_ERROR = VectorFile("test_1_syntax_error_tests.txt", "Key: Value\n")


def _cases(text):
    return list(parse_cases(text))


def test_one_ok():
    def f(_section, case):
        case.consume_string("Key")

    assert run(ONE_CASE, f) == 1


def test_one_err():
    def f(_section, case):
        case.consume_string("Key")
        raise Unspecified

    with pytest.raises(VectorError, match="Test failed."):
        run(ONE_CASE, f)


def test_one_panics():
    def f(_section, case):
        case.consume_string("Key")
        raise RuntimeError("Oh noes!")

    with pytest.raises(RuntimeError, match="Oh noes!"):
        run(ONE_CASE, f)


@pytest.mark.parametrize("to_fail", [0, 1, 2])
def test_err_one(to_fail):
    seen = []

    def f(_section, case):
        seen.append(case.consume_string("Key"))
        if len(seen) - 1 == to_fail:
            raise Unspecified

    with pytest.raises(VectorError, match="Test failed."):
        run(THREE_CASES, f)
    assert seen == ["Value1", "Value2", "Value3"]


@pytest.mark.parametrize("to_fail", [0, 1, 2])
def test_panic_one(to_fail):
    seen = []

    def f(_section, case):
        case.consume_string("Key")
        if len(seen) == to_fail:
            raise RuntimeError("Oh Noes!")
        seen.append(True)

    with pytest.raises(RuntimeError, match="Oh Noes!"):
        run(THREE_CASES, f)
    assert len(seen) == to_fail


def test_syntax_error():
    with pytest.raises(VectorError, match="Syntax error: Expected Key = Value."):
        run(SYNTAX_ERROR, lambda _s, _c: None)


def test_unconsumed_attribute_fails():
    with pytest.raises(VectorError, match="Test failed."):
        run(ONE_CASE, lambda _s, _c: None)


def test_to_hex_upper():
    hex_text = "abcdef0123"
    data = from_dirty_hex(hex_text)
    assert to_hex_upper(data) == hex_text.upper()


def test_to_hex():
    assert to_hex(b"\x00\x0f\xa0\xff") == "000fa0ff"


def test_from_hex_odd_length():
    assert from_hex("abc") == b"\xab\xc0"


def test_from_hex_rejects_non_hex():
    with pytest.raises(ValueError, match="Invalid hex string"):
        from_hex("zz")


def test_from_dirty_hex_ignores_noise():
    assert from_dirty_hex("30 82\n01-0a") == b"\x30\x82\x01\x0a"


def test_sections_and_comments():
    text = (
        "# comment\n\n[SHA256]\nA = 01\n\nA = 02\n\n[SHA384]\n# inner\nA = 03\n"
    )
    got = [(section, case.consume_bytes("A")) for section, case in _cases(text)]
    assert got == [("SHA256", b"\x01"), ("SHA256", b"\x02"), ("SHA384", b"\x03")]


def test_section_inside_case_is_error():
    with pytest.raises(VectorError):
        _cases("A = 01\n[S]\n")


def test_empty_value_is_error():
    with pytest.raises(VectorError):
        _cases("A =  \n")


def test_crlf_lines():
    ((_, case),) = _cases("A = 01\r\nB = 02\r\n")
    assert case.consume_bytes("B") == b"\x02"
    assert case.consume_bytes("A") == b"\x01"


def test_quoted_bytes():
    ((_, case),) = _cases(
        'E = ""\nS = "My test data"\nX = "a\\tb\\nc\\0"\n'
    )
    assert case.consume_bytes("E") == b""
    assert case.consume_bytes("S") == b"My test data"
    assert case.consume_bytes("X") == b"a\tb\nc\x00"


@pytest.mark.parametrize(
    "value", ['"abc', '"a"b', '"a\\x"']
)
def test_bad_quoted_bytes(value):
    case = VectorCase()
    ((_, case),) = _cases(f"V = {value}\n")
    with pytest.raises(VectorError):
        case.consume_bytes("V")


def test_bad_hex_value():
    ((_, case),) = _cases("V = 0g\n")
    with pytest.raises(VectorError, match="Invalid hex string in 0g"):
        case.consume_bytes("V")


def test_consume_twice_is_error():
    ((_, case),) = _cases("K = v\n")
    assert case.consume_string("K") == "v"
    with pytest.raises(VectorError, match="already consumed"):
        case.consume_string("K")


def test_missing_attribute():
    ((_, case),) = _cases("K = v\n")
    assert case.consume_optional_string("Other") is None
    assert case.consume_optional_bytes("Other") is None
    with pytest.raises(VectorError, match='No attribute named "Other"'):
        case.consume_bytes("Other")


def test_consume_usize():
    ((_, case),) = _cases("N = 42\nM = -1\n")
    assert case.consume_usize("N") == 42
    with pytest.raises(VectorError):
        case.consume_usize("M")


@pytest.mark.parametrize(
    ("name", "expected"),
    [("SHA1", "sha1"), ("SHA256", "sha256"), ("SHA512_256", "sha512_256"), ("SHA3_384", "sha3_384")],
)
def test_consume_digest_alg(name, expected):
    ((_, case),) = _cases(f"Hash = {name}\n")
    assert case.consume_digest_alg("Hash") == expected


def test_unsupported_digest_alg():
    ((_, case),) = _cases("Hash = MD5\n")
    with pytest.raises(VectorError, match="Unsupported digest algorithm: MD5"):
        case.consume_digest_alg("Hash")


def test_load_file(tmp_path):
    path = tmp_path / "vectors.txt"
    path.write_text("Key = 0102\n\nKey = 03\n", encoding="utf-8")
    loaded = load_file(path)
    assert loaded.file_name == str(path)
    collected = []
    assert run(loaded, lambda _s, c: collected.append(c.consume_bytes("Key"))) == 2
    assert collected == [b"\x01\x02", b"\x03"]