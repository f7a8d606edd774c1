import pytest

from envbind.naming import derive_name, is_compound, split_words


@pytest.mark.parametrize(
    "name, expected",
    [
        ("URL", "URL"),
        ("Name", "NAME"),
        ("name", "NAME"),
        ("etc", "ETC"),
        ("HTML", "HTML"),
        ("Folder", "FOLDER"),
        ("MTime", "MTIME"),
        ("LastName", "LAST_NAME"),
        ("LongBeard", "LONG_BEARD"),
        ("LongHorse", "LONG_HORSE"),
        ("URLEncoding", "URL_ENCODING"),
        ("SSLPort", "SSL_PORT"),
        ("VIPath", "VI_PATH"),
        ("loginURL", "LOGIN_URL"),
        ("newHomeAddress", "NEW_HOME_ADDRESS"),
        ("PointA", "POINT_A"),
        ("HTTPServerURL", "HTTP_SERVER_URL"),
        ("my2B", "MY2_B"),
        ("b2B", "B2_B"),
        ("B2B", "B2B"),
    ],
)
def test_derive_name(name, expected):
    assert derive_name(name) == expected


@pytest.mark.parametrize(
    "name, expected",
    [
        ("last_name", "LAST_NAME"),
        ("ping_interval", "PING_INTERVAL"),
        ("port", "PORT"),
        ("_private", "_PRIVATE"),
    ],
)
def test_derive_name_snake_case(name, expected):
    assert derive_name(name) == expected


def test_acronym_inside_word_is_split_on_both_sides():
    assert derive_name("fooURLBar") == "FOO_URL_BAR"


def test_digits_stay_with_preceding_word():
    assert split_words("version2Name") == ["version2", "Name"]
    assert split_words("ABC2def") == ["AB", "C2def"]


def test_is_compound():
    assert is_compound("LastName")
    assert is_compound("URLEncoding")
    assert is_compound("b2B")
    assert not is_compound("B2B")
    assert not is_compound("MTime")
    assert not is_compound("snake_case")


def test_derive_name_is_deterministic():
    assert derive_name("URLEncoding") == derive_name("URLEncoding")
