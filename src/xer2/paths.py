from __future__ import annotations

from pathlib import Path

from platformdirs import PlatformDirs

APP_NAME = "xer2"


def _app_dirs() -> PlatformDirs:
    return PlatformDirs(appname=APP_NAME, appauthor=False)


def default_runtime_dir() -> Path:
    return Path(_app_dirs().user_data_path)
