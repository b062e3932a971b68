#!/usr/bin/env python3
import os

from setuptools import find_packages, setup


def read_version():
    """Read __version__ from the package without importing it."""
    init_path = os.path.join(os.path.dirname(os.path.abspath(__file__)), "screen_text", "__init__.py")
    with open(init_path) as f:
        for line in f:
            if line.startswith("__version__"):
                return line.split("=", 1)[1].strip().strip('"\'')
    raise RuntimeError("Unable to find __version__ in screen_text/__init__.py")


setup(
    name="screen-text",
    version=read_version(),
    description="Screen capture and OCR tools served over MCP and Socket.IO",
    packages=find_packages(exclude=["tests", "tests.*"]),
    python_requires=">=3.9",
    install_requires=[
        "mcp>=1.10,<2",
        "python-socketio>=5.0",
        "aiohttp>=3.8",
        "mss>=9.0",
        "Pillow>=10.1",
        "pytesseract>=0.3.10",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": [
            "screen-text=screen_text.__main__:main",
        ],
    },
)
