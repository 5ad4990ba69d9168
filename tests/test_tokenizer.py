import pytest

from optbind import tokenize


@pytest.mark.parametrize(
    "line, expected",
    [
        ("", []),
        ("   \t  ", []),
        ("--name test", ["--name", "test"]),
        ("--name    test  ", ["--name", "test"]),
        ('--message "Hello World"', ["--message", "Hello World"]),
        ('"C:\\Program Files\\test"', ["C:\\Program Files\\test"]),
        ("--name=test", ["--name=test"]),
        ("--name = test", ["--name", "=", "test"]),
        ('--config="key=value"', ['--config="key=value"']),
        ('--config="a b"', ['--config="a b"']),
        ("--expr=a=b=c", ["--expr=a=b=c"]),
        ("--name=", ["--name="]),
        ("-n=value", ["-n=value"]),
        ('--name ""', ["--name", ""]),
    ],
)
def test_tokenize(line, expected):
    assert tokenize(line).tokens == expected


def test_tokenize_comment_stripped():
    assert tokenize("--name test # trailing comment", True).tokens == ["--name", "test"]


def test_tokenize_comment_kept_when_disabled():
    assert tokenize("--name test #comment").tokens == ["--name", "test", "#comment"]


def test_tokenize_comment_inside_quotes():
    assert tokenize('--name "a # b" # c', True).tokens == ["--name", "a # b"]


def test_tokenize_custom_comment_marker():
    assert tokenize("--name test // rest # kept", True, comment_marker="//").tokens == ["--name", "test"]


def test_tokenize_illegal_char():
    tokens, illegal_char = tokenize("--name test|value")
    assert illegal_char == "|"
    # Tokenization continues past the illegal character.
    assert tokens == ["--name", "test|value"]


def test_tokenize_no_illegal_char():
    assert tokenize("--path=/tmp/a.txt --n 3").illegal_char is None
