"""Packaging for FocusLoop.

Install for development:
    pip install -e ".[test]"

Build a macOS .app bundle:
    pip install py2app
    python setup.py py2app
"""

from setuptools import find_packages, setup

APP = ["main.py"]
DATA_FILES = []
OPTIONS = {
    "argv_emulation": False,
    "iconfile": None,  # Replace with .icns path when a proper icon exists
    "plist": {
        "CFBundleName": "FocusLoop",
        "CFBundleDisplayName": "FocusLoop",
        "CFBundleIdentifier": "com.focusloop.app",
        "CFBundleVersion": "0.1.0",
        "CFBundleShortVersionString": "0.1.0",
        "NSHighResolutionCapable": True,
        "LSMinimumSystemVersion": "13.0",
    },
}

setup(
    app=APP,
    data_files=DATA_FILES,
    options={"py2app": OPTIONS},
    name="FocusLoop",
    version="0.1.0",
    packages=find_packages(include=["focusloop", "focusloop.*"]),
    python_requires=">=3.10",
    install_requires=[
        "PyQt6>=6.4",
        "SQLAlchemy>=2.0",
        "numpy>=1.24",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "gui_scripts": ["focusloop = focusloop.__main__:main"],
    },
)
