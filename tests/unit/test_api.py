from __future__ import annotations

from pathlib import Path

import pytest

import filestats
from filestats import api
from filestats.config import Config
from filestats.services.index_service import IndexStatus, ReindexMode


@pytest.fixture(autouse=True)
def fake_mime(monkeypatch):
    def detect(path) -> str:
        text = str(path)
        if text.endswith(".html"):
            return "text/html"
        if text.endswith(".txt"):
            return "text/plain"
        return "application/octet-stream"

    monkeypatch.setattr("filestats.stats.detect_mime_type", detect)
    monkeypatch.setattr("filestats.api.detect_mime_type", detect)
    return detect


@pytest.fixture
def site(tmp_path: Path) -> Path:
    root = tmp_path / "site"
    (root / "stories").mkdir(parents=True)
    (root / "intro.txt").write_text("hello there world", encoding="utf-8")
    (root / "stories" / "one.html").write_text(
        "<html><body><p>a short story</p></body></html>", encoding="utf-8"
    )
    return root


@pytest.fixture
def config(tmp_path: Path) -> Config:
    return Config(file_stats_cachefile=tmp_path / "state" / "file_stats.dat")


def test_index_then_lookup(site: Path, config: Config) -> None:
    result = api.index(site, config=config)

    assert result.status is IndexStatus.STORED
    assert result.request.mode is ReindexMode.FULL
    intro = str(site.resolve() / "intro.txt")
    story = str(site.resolve() / "stories" / "one.html")
    assert result.stats[intro].word_count == 3
    assert result.stats[story].word_count == 3

    entry = api.get_file_stats(intro, config=config)
    assert entry is not None
    assert entry.size_string == "17b"
    assert api.get_file_stats(site / "missing.txt", config=config) is None
    assert set(api.load_file_stats(config=config)) == {intro, story}


def test_index_category_and_sweep(site: Path, config: Config) -> None:
    api.index(site, config=config)
    (site / "stories" / "two.txt").write_text("fresh words", encoding="utf-8")

    category = api.index(site, reindex_cat="/stories/", config=config)
    assert category.request.mode is ReindexMode.CATEGORY
    assert category.scanned == 2

    (site / "intro.txt").unlink()
    sweep = api.index(site, delindex=True, config=config)
    assert sweep.request.mode is ReindexMode.DELETION_SWEEP
    assert sweep.deleted == 1
    assert str(site.resolve() / "intro.txt") not in api.load_file_stats(config=config)


def test_index_without_caching_writes_nothing(site: Path, config: Config) -> None:
    result = api.index(site, use_caching=False, config=config)

    assert result.status is IndexStatus.UNCACHED
    assert len(result.stats) == 2
    assert not config.file_stats_cachefile.exists()
    assert api.load_file_stats(config=config) == {}


def test_index_cache_file_override(site: Path, config: Config, tmp_path: Path) -> None:
    target = tmp_path / "elsewhere.dat"

    result = api.index(site, cache_file=target, config=config)

    assert result.cache_path == target
    assert target.exists()
    assert len(api.load_file_stats(cache_file=target, config=config)) == 2


def test_index_rejects_bad_input(site: Path, config: Config, tmp_path: Path) -> None:
    with pytest.raises(api.FileStatsError):
        api.index(tmp_path / "nope", config=config)
    with pytest.raises(api.FileStatsError):
        api.index(site, html_scope="head", config=config)
    with pytest.raises(api.FileStatsError):
        api.index(site, entry_extensions=[" "], config=config)


def test_index_html_scope_document(site: Path, config: Config) -> None:
    (site / "page.html").write_text(
        "<html>\n<head><title>Title here</title></head>\n<body>x</body>\n</html>",
        encoding="utf-8",
    )

    result = api.index(site, html_scope="document", use_caching=False, config=config)

    assert result.stats[str(site.resolve() / "page.html")].word_count == 3


def test_helpers_for_other_plugins(site: Path) -> None:
    story = site / "stories" / "one.html"
    assert api.get_mime_type(story) == "text/html"
    assert api.get_word_count(story, "text/html") == 3
    assert api.get_word_count(story, "text/html", html_scope="document") == 3
    with pytest.raises(api.FileStatsError):
        api.get_word_count(story, "text/html", html_scope="nope")


def test_package_exports() -> None:
    assert filestats.index is api.index
    assert filestats.get_version() == filestats.__version__
