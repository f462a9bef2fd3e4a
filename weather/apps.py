"""Discovery of the applications installed on this machine."""

import configparser
import logging
import os
import sys
from pathlib import Path
from typing import Dict, Iterable, List, Optional

logger = logging.getLogger(__name__)

UNINSTALL_KEYS = (
    r"SOFTWARE\Microsoft\Windows\CurrentVersion\Uninstall",
    r"SOFTWARE\WOW6432Node\Microsoft\Windows\CurrentVersion\Uninstall",
)


def _windows_apps() -> List[Dict[str, str]]:
    import winreg

    apps = []
    for hive in (winreg.HKEY_LOCAL_MACHINE, winreg.HKEY_CURRENT_USER):
        for key_path in UNINSTALL_KEYS:
            try:
                root = winreg.OpenKey(hive, key_path)
            except OSError:
                continue
            with root:
                for i in range(winreg.QueryInfoKey(root)[0]):
                    try:
                        with winreg.OpenKey(root, winreg.EnumKey(root, i)) as sub:
                            app = _registry_entry(winreg, sub)
                    except OSError:
                        continue
                    if app:
                        apps.append(app)
    return apps


def _registry_entry(winreg, key) -> Optional[Dict[str, str]]:
    entry = {}
    for field, value_name in (
        ("name", "DisplayName"),
        ("version", "DisplayVersion"),
        ("publisher", "Publisher"),
        ("location", "InstallLocation"),
    ):
        try:
            entry[field] = str(winreg.QueryValueEx(key, value_name)[0])
        except OSError:
            pass
    return entry if entry.get("name") else None


def _mac_apps(dirs: Iterable[Path]) -> List[Dict[str, str]]:
    apps = []
    for d in dirs:
        if not d.is_dir():
            continue
        for bundle in sorted(d.glob("*.app")):
            apps.append({"name": bundle.stem, "location": str(bundle)})
    return apps


def read_desktop_entry(path: Path) -> Optional[Dict[str, str]]:
    """Read the [Desktop Entry] of a .desktop file; hidden or non-app entries give None."""
    parser = configparser.ConfigParser(interpolation=None, strict=False)
    try:
        parser.read(path, encoding="utf-8")
    except (configparser.Error, UnicodeDecodeError) as e:
        logger.debug("Skipping unreadable desktop entry %s: %s", path, e)
        return None
    if not parser.has_section("Desktop Entry"):
        return None
    entry = parser["Desktop Entry"]
    if entry.get("Type", "Application") != "Application":
        return None
    if entry.get("NoDisplay", "false").lower() == "true" or entry.get("Hidden", "false").lower() == "true":
        return None
    name = entry.get("Name")
    if not name:
        return None
    app = {"name": name, "location": str(path)}
    if entry.get("Exec"):
        app["exec"] = entry["Exec"]
    return app


def _desktop_apps(dirs: Iterable[Path]) -> List[Dict[str, str]]:
    apps = []
    for d in dirs:
        if not d.is_dir():
            continue
        for path in sorted(d.glob("*.desktop")):
            app = read_desktop_entry(path)
            if app:
                apps.append(app)
    return apps


def xdg_application_dirs() -> List[Path]:
    data_home = os.environ.get("XDG_DATA_HOME") or str(Path.home() / ".local" / "share")
    data_dirs = os.environ.get("XDG_DATA_DIRS") or "/usr/local/share:/usr/share"
    return [Path(p) / "applications" for p in [data_home, *data_dirs.split(":")] if p]


def list_installed_apps(platform: str = sys.platform, dirs: Optional[Iterable[Path]] = None) -> List[Dict[str, str]]:
    """
    List installed applications as dicts with at least a ``name`` key.

    Windows reads the uninstall registry keys, macOS lists ``.app`` bundles,
    anything else reads XDG ``.desktop`` entries. ``dirs`` overrides the
    directories searched on macOS and XDG systems.
    """
    if platform == "win32":
        apps = _windows_apps()
    elif platform == "darwin":
        apps = _mac_apps(dirs or [Path("/Applications"), Path.home() / "Applications"])
    else:
        apps = _desktop_apps(dirs or xdg_application_dirs())

    seen = set()
    unique = []
    for app in apps:
        if app["name"] in seen:
            continue
        seen.add(app["name"])
        unique.append(app)
    return sorted(unique, key=lambda a: a["name"].lower())
