import json

import pytest

from filestats import config as config_module


def _prepare_config(tmp_path, monkeypatch):
    config_dir = tmp_path / "config"
    config_file = config_dir / "config.json"
    monkeypatch.setattr(config_module, "CONFIG_DIR", config_dir)
    monkeypatch.setattr(config_module, "CONFIG_FILE", config_file)
    return config_file


def test_load_config_defaults(tmp_path, monkeypatch):
    _prepare_config(tmp_path, monkeypatch)

    cfg = config_module.load_config()

    assert cfg.state_dir is None
    assert cfg.file_stats_cachefile is None
    assert cfg.use_caching is True
    assert cfg.html_scope == config_module.DEFAULT_HTML_SCOPE
    assert cfg.entry_extensions == config_module.DEFAULT_ENTRY_EXTENSIONS


def test_default_cache_file_lives_in_state_dir(tmp_path, monkeypatch):
    _prepare_config(tmp_path, monkeypatch)

    cfg = config_module.load_config()

    assert config_module.resolve_state_dir(cfg) == tmp_path / "config" / "state"
    assert config_module.resolve_cache_file(cfg) == tmp_path / "config" / "state" / "file_stats.dat"

    cfg.state_dir = tmp_path / "posy-state"
    assert config_module.resolve_cache_file(cfg) == tmp_path / "posy-state" / "file_stats.dat"

    cfg.file_stats_cachefile = tmp_path / "explicit.dat"
    assert config_module.resolve_cache_file(cfg) == tmp_path / "explicit.dat"


def test_save_and_load_round_trip(tmp_path, monkeypatch):
    config_file = _prepare_config(tmp_path, monkeypatch)

    config_module.save_config(
        config_module.Config(
            state_dir=tmp_path / "state",
            use_caching=False,
            html_scope="document",
            entry_extensions=(".md",),
        )
    )

    stored = json.loads(config_file.read_text())
    assert stored["use_caching"] is False
    assert stored["html_scope"] == "document"
    assert stored["entry_extensions"] == [".md"]
    assert "file_stats_cachefile" not in stored

    cfg = config_module.load_config()
    assert cfg.state_dir == tmp_path / "state"
    assert cfg.use_caching is False
    assert cfg.html_scope == "document"
    assert cfg.entry_extensions == (".md",)


def test_load_config_coerces_invalid_values(tmp_path, monkeypatch):
    config_file = _prepare_config(tmp_path, monkeypatch)
    config_file.parent.mkdir(parents=True)
    config_file.write_text(
        json.dumps(
            {
                "use_caching": "off",
                "html_scope": "everything",
                "entry_extensions": "txt, HTML",
                "state_dir": "  ",
            }
        )
    )

    cfg = config_module.load_config()

    assert cfg.use_caching is False
    assert cfg.html_scope == "body"
    assert cfg.entry_extensions == (".html", ".txt")
    assert cfg.state_dir is None


def test_setters_persist(tmp_path, monkeypatch):
    _prepare_config(tmp_path, monkeypatch)

    config_module.set_state_dir(tmp_path / "s")
    config_module.set_cachefile(tmp_path / "c.dat")
    config_module.set_use_caching(False)
    config_module.set_html_scope("Document")
    config_module.set_entry_extensions(["md", ".TXT"])

    cfg = config_module.load_config()
    assert cfg.state_dir == tmp_path / "s"
    assert cfg.file_stats_cachefile == tmp_path / "c.dat"
    assert cfg.use_caching is False
    assert cfg.html_scope == "document"
    assert cfg.entry_extensions == (".md", ".txt")

    config_module.set_cachefile(None)
    assert config_module.load_config().file_stats_cachefile is None


def test_setters_reject_invalid_values(tmp_path, monkeypatch):
    _prepare_config(tmp_path, monkeypatch)

    with pytest.raises(ValueError):
        config_module.set_html_scope("head")
    with pytest.raises(ValueError):
        config_module.set_entry_extensions([" ", "."])


def test_load_config_malformed_json_uses_defaults(tmp_path, monkeypatch):
    config_file = _prepare_config(tmp_path, monkeypatch)
    config_file.parent.mkdir(parents=True)
    config_file.write_text('{"use_caching": false,', encoding="utf-8")

    cfg = config_module.load_config()

    assert cfg == config_module.Config()

    config_file.write_text("[1, 2]", encoding="utf-8")
    assert config_module.load_config() == config_module.Config()


def test_config_dir_context_overrides(tmp_path, monkeypatch):
    _prepare_config(tmp_path, monkeypatch)
    override = tmp_path / "other"

    with config_module.config_dir_context(override):
        config_module.set_use_caching(False)
        assert config_module.load_config().use_caching is False
        assert config_module.resolve_state_dir(config_module.Config()) == override.resolve() / "state"

    assert config_module.load_config().use_caching is True
    assert (override / "config.json").exists()
