import json

from music_finder import i18n


def test_tr_falls_back_to_english(monkeypatch):
    monkeypatch.setattr(i18n, "_translations", {})
    assert i18n.tr("{} results", 4) == "4 results"
    assert i18n.tr("Some unlisted text") == "Some unlisted text"


def test_load_language_reads_locale_file(tmp_path, monkeypatch):
    locales = tmp_path / "locales"
    locales.mkdir()
    (locales / "tr.json").write_text(json.dumps({"Search": "Ara"}), encoding="utf-8")
    monkeypatch.setattr(i18n, "get_resource_path", lambda rel: tmp_path / rel)
    monkeypatch.setattr(i18n, "_translations", {})

    i18n.load_language("tr")
    assert i18n.tr("Search") == "Ara"

    i18n.load_language("xx")
    assert i18n.tr("Search") == "Search"
