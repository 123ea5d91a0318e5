import os
import stat

import pytest

from errors import ConfigError
from settings import Settings, read_private_dirs, read_token


def test_read_token_strips_trailing_newline(tmp_path):
    p = tmp_path / "token"
    p.write_bytes(b"abc def\r\n")
    assert read_token(str(p)) == b"abc def"


def test_missing_token_is_config_error(tmp_path):
    with pytest.raises(ConfigError):
        read_token(str(tmp_path / "nope"))


def test_private_dirs_relative_to_public(tmp_path):
    pub = tmp_path / "filesystem" / "public"
    p = tmp_path / "private_folders"
    p.write_text("secret/\n\n  /deep/er  \n")
    assert read_private_dirs(str(p), pub) == frozenset({str(pub / "secret"), str(pub / "deep" / "er")})


def test_private_dirs_missing_file_is_empty(tmp_path):
    assert read_private_dirs(str(tmp_path / "missing"), tmp_path) == frozenset()


def test_ensure_roots_owner_only(tmp_path):
    s = Settings(root=tmp_path / "fs", token=b"t")
    s.ensure_roots()
    s.ensure_roots()
    for d in (s.root, s.public_root):
        assert d.is_dir()
        assert stat.S_IMODE(os.stat(d).st_mode) == 0o700


def test_from_env(tmp_path, monkeypatch):
    (tmp_path / "tok").write_text("xyz\n")
    (tmp_path / "priv").write_text("p\n")
    monkeypatch.setenv("FSOH_ROOT", str(tmp_path / "fs"))
    monkeypatch.setenv("FSOH_TOKEN_FILE", str(tmp_path / "tok"))
    monkeypatch.setenv("FSOH_PRIVATE_FILE", str(tmp_path / "priv"))
    monkeypatch.setenv("FSOH_COMPRESS", "no")
    monkeypatch.setenv("FSOH_PORT", "7070")

    s = Settings.from_env()
    assert s.token == b"xyz"
    assert s.public_root == tmp_path / "fs" / "public"
    assert s.private_dirs == frozenset({str(tmp_path / "fs" / "public" / "p")})
    assert s.compress is False
    assert s.addr == "localhost:7070"
