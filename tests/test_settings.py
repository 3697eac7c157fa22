from dupfind.settings import (
    DEFAULT_THRESHOLD,
    Settings,
    database_path,
    settings_path,
)


def test_missing_file_gives_defaults(tmp_path):
    settings = Settings.load(tmp_path / "none.ini")
    assert settings.threshold == DEFAULT_THRESHOLD
    assert settings.strict_mode is False
    assert settings.directories == []


def test_round_trip(tmp_path):
    path = tmp_path / "conf" / "settings.ini"
    original = Settings(threshold=7, strict_mode=True, directories=["/a", "/b,c", 'd"e'])
    original.save(path)
    assert Settings.load(path) == original


def test_saved_format(tmp_path):
    path = tmp_path / "settings.ini"
    Settings(threshold=7, strict_mode=True, directories=["/x"]).save(path)
    text = path.read_text(encoding="utf-8")
    assert "[General]" in text
    assert "threshold=7" in text
    assert "strict_mode=true" in text
    assert "directories=/x" in text


def test_empty_directories_removes_key(tmp_path):
    path = tmp_path / "settings.ini"
    Settings(directories=["/x"]).save(path)
    Settings(directories=[]).save(path)
    assert "directories" not in path.read_text(encoding="utf-8")
    assert Settings.load(path).directories == []


def test_save_keeps_other_entries(tmp_path):
    path = tmp_path / "settings.ini"
    path.write_text("[Other]\nkey=value\n", encoding="utf-8")
    Settings(threshold=3).save(path)
    text = path.read_text(encoding="utf-8")
    assert "key=value" in text
    assert Settings.load(path).threshold == 3


def test_reads_existing_ini(tmp_path):
    path = tmp_path / "settings.ini"
    path.write_text(
        "[General]\nthreshold=9\nstrict_mode=true\ndirectories=/x, /y\n", encoding="utf-8"
    )
    settings = Settings.load(path)
    assert settings.threshold == 9
    assert settings.strict_mode is True
    assert settings.directories == ["/x", "/y"]


def test_reads_file_without_section(tmp_path):
    path = tmp_path / "settings.ini"
    path.write_text("threshold=3\nstrict_mode=0\n", encoding="utf-8")
    settings = Settings.load(path)
    assert settings.threshold == 3
    assert settings.strict_mode is False


def test_invalid_list_marker_is_empty(tmp_path):
    path = tmp_path / "settings.ini"
    path.write_text("[General]\ndirectories=@Invalid()\n", encoding="utf-8")
    assert Settings.load(path).directories == []


def test_bad_threshold_falls_back(tmp_path):
    path = tmp_path / "settings.ini"
    path.write_text("[General]\nthreshold=abc\nstrict_mode=false\n", encoding="utf-8")
    settings = Settings.load(path)
    assert settings.threshold == DEFAULT_THRESHOLD
    assert settings.strict_mode is False


def test_add_directories_ignores_case():
    settings = Settings()
    assert settings.add_directories(["/Pics"]) is True
    assert settings.add_directories(["/pics"]) is False
    assert settings.directories == ["/Pics"]


def test_add_directories_dedupes_input():
    settings = Settings()
    assert settings.add_directories(["/a", "/a", "/b"]) is True
    assert settings.directories == ["/a", "/b"]


def test_remove_directories():
    settings = Settings(directories=["/a", "/b"])
    assert settings.remove_directories(["/A"]) is True
    assert settings.directories == ["/b"]
    assert settings.remove_directories(["/zzz"]) is False
    assert settings.directories == ["/b"]


def test_standard_file_names():
    assert settings_path().name == "settings.ini"
    assert database_path().name == "dupfind_cache.db"