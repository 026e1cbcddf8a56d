"""Shared pytest fixtures for Qt application lifecycle."""

import os
import sys

import pytest
from PySide6.QtCore import QCoreApplication, QSettings
from PySide6.QtGui import QGuiApplication

os.environ.setdefault("QT_QPA_PLATFORM", "offscreen")


@pytest.fixture(scope="session")
def app():
    """Provide a single QGuiApplication for all tests."""
    instance = QGuiApplication.instance()
    if instance is None:
        instance = QGuiApplication(sys.argv)

    yield instance

    QCoreApplication.processEvents()


@pytest.fixture
def qsettings(tmp_path):
    """Isolated QSettings so tests never touch the user's recent documents."""
    return QSettings(str(tmp_path / "settings.ini"), QSettings.Format.IniFormat)
