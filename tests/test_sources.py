import argparse
from datetime import date

import pytest

from envbind.sources import (
    ChainSource,
    DotenvSource,
    EnvironSource,
    MappingSource,
    NamespaceSource,
    Source,
    SourceError,
    YamlSource,
    as_source,
    stringify,
)


def test_environ_source_reads_live_environment(config_env):
    source = EnvironSource()
    config_env(ENVBIND_TEST_VALUE="one")
    assert source.lookup("ENVBIND_TEST_VALUE") == ("one", True)
    config_env(ENVBIND_TEST_VALUE=None)
    assert source.lookup("ENVBIND_TEST_VALUE") == ("", False)


def test_environ_source_distinguishes_empty_from_unset():
    source = EnvironSource({"EMPTY": ""})
    assert source.lookup("EMPTY") == ("", True)
    assert source.lookup("MISSING") == ("", False)


def test_mapping_source():
    source = MappingSource({"A": "1", "B": None}, C=3, D=True)
    assert source.lookup("A") == ("1", True)
    assert source.lookup("B") == ("", False)
    assert source.lookup("C") == ("3", True)
    assert source.lookup("D") == ("true", True)
    assert source.as_dict() == {"A": "1", "C": "3", "D": "true"}


def test_dotenv_source(tmp_path):
    path = tmp_path / ".env"
    path.write_text(
        "# comment\n"
        "HOSTNAME=api.example.com\n"
        "export PORT=9000\n"
        'GREETING="hello ${HOSTNAME}"\n'
        "BARE\n",
        encoding="utf-8",
    )
    source = DotenvSource(path)
    assert source.lookup("HOSTNAME") == ("api.example.com", True)
    assert source.lookup("PORT") == ("9000", True)
    assert source.lookup("GREETING") == ("hello api.example.com", True)
    assert source.lookup("BARE") == ("", False)

    raw = DotenvSource(path, interpolate=False)
    assert raw.lookup("GREETING") == ("hello ${HOSTNAME}", True)


def test_dotenv_source_missing_file(tmp_path):
    with pytest.raises(FileNotFoundError):
        DotenvSource(tmp_path / "missing.env")


def test_yaml_source_from_text():
    source = YamlSource.from_text(
        "HOSTNAME: api.example.com\n"
        "PORT: 9000\n"
        "ONLINE: yes\n"
        "RATIO: 0.5\n"
        "SINCE: 2024-01-02\n"
        "PORTS: [80, 443]\n"
        "EMPTY:\n"
    )
    assert source.lookup("HOSTNAME") == ("api.example.com", True)
    assert source.lookup("PORT") == ("9000", True)
    assert source.lookup("ONLINE") == ("true", True)
    assert source.lookup("RATIO") == ("0.5", True)
    assert source.lookup("SINCE") == ("2024-01-02", True)
    assert source.lookup("PORTS") == ("80,443", True)
    assert source.lookup("EMPTY") == ("", False)


def test_yaml_source_empty_document():
    assert YamlSource.from_text("").as_dict() == {}


@pytest.mark.parametrize(
    "text",
    [
        "- a\n- b\n",
        "just a string\n",
        "SERVER:\n  HOST: x\n",
        "KEY: [unterminated\n",
    ],
)
def test_yaml_source_rejects_bad_documents(text):
    with pytest.raises(SourceError):
        YamlSource.from_text(text)


def test_yaml_source_from_file(tmp_path):
    path = tmp_path / "env.yaml"
    path.write_text("PORT: 8080\n", encoding="utf-8")
    assert YamlSource.from_file(path).lookup("PORT") == ("8080", True)

    with pytest.raises(FileNotFoundError):
        YamlSource.from_file(tmp_path / "missing.yaml")
    with pytest.raises(SourceError):
        YamlSource.from_file(tmp_path)


def test_namespace_source():
    source = NamespaceSource(argparse.Namespace(cache_path="/tmp", verbose=False, name=None))
    assert source.lookup("CACHE_PATH") == ("/tmp", True)
    assert source.lookup("VERBOSE") == ("false", True)
    assert source.lookup("NAME") == ("", False)
    assert source.lookup("MISSING") == ("", False)


def test_chain_source_first_present_wins():
    source = ChainSource({"A": "first", "B": ""}, {"A": "second", "B": "fallback", "C": "third"})
    assert source.lookup("A") == ("first", True)
    assert source.lookup("B") == ("", True)
    assert source.lookup("C") == ("third", True)
    assert source.lookup("D") == ("", False)


def test_as_source():
    assert isinstance(as_source(None), EnvironSource)
    assert isinstance(as_source({"A": "1"}), MappingSource)
    assert isinstance(as_source(argparse.Namespace()), NamespaceSource)

    existing = MappingSource()
    assert as_source(existing) is existing
    assert isinstance(existing, Source)

    with pytest.raises(TypeError):
        as_source(["A=1"])


def test_stringify():
    assert stringify("x") == "x"
    assert stringify(True) == "true"
    assert stringify(3) == "3"
    assert stringify(date(2024, 1, 2)) == "2024-01-02"
    assert stringify([1, None, "b"]) == "1,,b"
