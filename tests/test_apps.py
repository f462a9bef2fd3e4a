"""Tests for installed application discovery."""

from weather.apps import list_installed_apps, read_desktop_entry


def write_entry(directory, filename, body):
    path = directory / filename
    path.write_text("[Desktop Entry]\n" + body, encoding="utf-8")
    return path


def test_desktop_entries(tmp_path):
    write_entry(tmp_path, "firefox.desktop", "Type=Application\nName=Firefox\nExec=firefox %u\n")
    write_entry(tmp_path, "hidden.desktop", "Type=Application\nName=Hidden\nNoDisplay=true\n")
    write_entry(tmp_path, "link.desktop", "Type=Link\nName=Docs\nURL=https://example.com\n")
    write_entry(tmp_path, "editor.desktop", "Type=Application\nName=Text Editor\n")

    apps = list_installed_apps(platform="linux", dirs=[tmp_path])

    assert [a["name"] for a in apps] == ["Firefox", "Text Editor"]
    assert apps[0]["exec"] == "firefox %u"


def test_duplicates_are_listed_once(tmp_path):
    user, system = tmp_path / "user", tmp_path / "system"
    user.mkdir()
    system.mkdir()
    write_entry(user, "app.desktop", "Name=Calculator\n")
    write_entry(system, "app.desktop", "Name=Calculator\n")

    apps = list_installed_apps(platform="linux", dirs=[user, system, tmp_path / "missing"])

    assert [a["name"] for a in apps] == ["Calculator"]


def test_mac_bundles(tmp_path):
    (tmp_path / "Safari.app").mkdir()
    (tmp_path / "notes.txt").write_text("x")

    apps = list_installed_apps(platform="darwin", dirs=[tmp_path])

    assert apps == [{"name": "Safari", "location": str(tmp_path / "Safari.app")}]


def test_file_without_desktop_section(tmp_path):
    path = tmp_path / "broken.desktop"
    path.write_text("[Other]\nName=Nope\n", encoding="utf-8")

    assert read_desktop_entry(path) is None
