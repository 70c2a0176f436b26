"""Packaging for droplet.

Install for development:
    pip install -e ".[test]"

Build a macOS .app bundle:
    pip install py2app
    python setup.py py2app
"""

import sys

from setuptools import setup, find_packages

APP = ["main.py"]
DATA_FILES = []
OPTIONS = {
    "argv_emulation": False,
    "iconfile": None,  # Replace with .icns path when a proper icon exists
    "plist": {
        "CFBundleName": "droplet",
        "CFBundleDisplayName": "droplet",
        "CFBundleIdentifier": "com.droplet.app",
        "CFBundleVersion": "0.1.0",
        "CFBundleShortVersionString": "0.1.0",
        "NSHighResolutionCapable": True,
        "LSMinimumSystemVersion": "13.0",
        "LSUIElement": True,  # menu-bar app, no dock icon
    },
}

setup(
    app=APP,
    data_files=DATA_FILES,
    options={"py2app": OPTIONS},
    setup_requires=["py2app"] if "py2app" in sys.argv else [],
    name="droplet",
    version="0.1.0",
    packages=find_packages(include=["droplet", "droplet.*"]),
    python_requires=">=3.10",
    install_requires=[
        "PyQt6>=6.5",
        "numpy>=1.24",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "gui_scripts": ["droplet = droplet.__main__:main"],
    },
)
