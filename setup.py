#!/usr/bin/env python3
"""
Setup configuration for Sound Companion
Keeps a local sound library in sync and plays sounds for live game events
"""

from setuptools import setup, find_packages

# Read README for long description
with open("README.md", "r", encoding="utf-8") as fh:
    long_description = fh.read()

# Core requirements (always installed)
core_requirements = [
    "requests>=2.31.0",
    "click>=8.1.7",
    "pyyaml>=6.0.1",
    "python-dotenv>=1.0.0",
    "colorama>=0.4.6",
    "tqdm>=4.66.1",
    "pydub>=0.25.1",
    "audioop-lts>=0.2.1; python_version>='3.13'",  # pydub needs audioop, removed in 3.13
    "aiohttp>=3.9.1",
]

setup(
    name="sound-companion",
    version="1.0.0",
    author="Sound Companion Team",
    description="Sync a sound library and play sounds for live game events",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    classifiers=[
        "Development Status :: 4 - Beta",
        "Environment :: Console",
        "Intended Audience :: End Users/Desktop",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Programming Language :: Python :: 3.13",
        "Topic :: Multimedia :: Sound/Audio",
        "Topic :: Games/Entertainment",
    ],
    python_requires=">=3.9",
    install_requires=core_requirements,
    extras_require={
        "test": [
            "pytest>=7.4.3",
            "pytest-asyncio>=0.21.1",
        ],
        "dev": [
            "pytest>=7.4.3",
            "pytest-asyncio>=0.21.1",
            "black>=23.11.0",
            "flake8>=6.1.0",
            "mypy>=1.7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "sound-companion=sound_companion.main:cli",
        ],
    },
    include_package_data=True,
    package_data={
        "sound_companion": ["resources/bundled/*.wav"],
    },
    keywords="game sounds soundboard sync gsi",
)
