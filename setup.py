"""
Setup script for Statsview.
"""

from pathlib import Path
from setuptools import find_packages, setup

# Read version from VERSION file
version_file = Path(__file__).parent / "VERSION"
version = version_file.read_text().strip()

setup(
    name="statsview",
    version=version,
    description="HTTP query endpoint for process-internal counters and gauges",
    author="Garudex Labs",
    python_requires=">=3.9",
    packages=find_packages(include=["statsview", "statsview.*"]),
    install_requires=[
        "click>=8.0",
        "prometheus-client>=0.16",
        "PyYAML>=6.0",
        "requests>=2.28",
        "structlog>=23.1",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "statsview=statsview.cli.main:main",
        ],
    },
)
