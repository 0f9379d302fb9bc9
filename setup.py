#!/usr/bin/env python
"""
autovideo - Automatic video source detection
Picks the best working video source available on the machine
"""

from setuptools import setup, find_namespace_packages
from pathlib import Path

# Read the contents of README file
this_directory = Path(__file__).parent
long_description = (this_directory / "README.md").read_text()

setup(
    name="autovideo",
    version="0.1.0",
    description="Automatic video source detection with ranked probing and fallback",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_namespace_packages(include=["core*", "modules*", "autovideo*"]),
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Multimedia :: Video :: Capture",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
        "Operating System :: POSIX :: Linux",
    ],
    python_requires=">=3.10",
    install_requires=[
        "mss>=9.0.1",
        "Pillow>=10.0.0",
        "pyyaml>=6.0.1",
        "python-dotenv>=1.0.0",
        "coloredlogs>=15.0.1",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
            "pytest-mock>=3.12.0",
            "black>=23.0.0",
            "flake8>=6.0.0",
            "mypy>=1.5.0",
            "isort>=5.12.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "autovideo=autovideo.cli:main",
        ],
    },
    include_package_data=True,
    package_data={
        "": ["config/*.yaml"],
    },
    keywords="video source autodetect v4l2 camera screen-capture fallback",
)
