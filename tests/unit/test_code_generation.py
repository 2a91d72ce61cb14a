import re

from shorturlapi.services.code_generator import CODE_ALPHABET, CODE_LENGTH, generate_code

_BASE62_RE = re.compile(r"^[0-9a-zA-Z]+$")


def test_code_has_only_base62_chars():
    code = generate_code()
    assert _BASE62_RE.fullmatch(code)
    assert set(code).issubset(set(CODE_ALPHABET))


def test_alphabet_is_62_alphanumerics():
    assert len(CODE_ALPHABET) == 62
    assert len(set(CODE_ALPHABET)) == 62


def test_default_code_length_is_8():
    assert CODE_LENGTH == 8
    assert len(generate_code()) == 8


def test_code_length_can_be_chosen():
    assert len(generate_code(6)) == 6
    assert len(generate_code(12)) == 12


def test_codes_are_not_repeated_in_practice():
    codes = {generate_code() for _ in range(1000)}
    assert len(codes) == 1000
