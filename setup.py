"""
Setup script for the MDM ML Adapter.

Installation:
    pip install -e .

Development installation:
    pip install -e ".[dev]"
"""

from setuptools import setup, find_packages
from pathlib import Path

# Read README
readme_file = Path(__file__).parent / "README.md"
long_description = readme_file.read_text() if readme_file.exists() else ""

# Read requirements
requirements_file = Path(__file__).parent / "requirements.txt"
requirements = []
if requirements_file.exists():
    with open(requirements_file) as f:
        requirements = [
            line.strip()
            for line in f
            if line.strip() and not line.startswith('#')
        ]

setup(
    name="mdm-ml-adapter",
    version="1.0.0",
    description="MDM ML Adapter - match configuration and ground-truth proxy for record-linkage tuning",
    long_description=long_description,
    long_description_content_type="text/markdown",
    license="MIT",

    # Package configuration
    packages=find_packages(include=["mdm_adapter", "mdm_adapter.*"]),

    # Dependencies
    install_requires=requirements,

    # Development dependencies
    extras_require={
        "dev": [
            "pytest>=7.4.4",
            "pytest-asyncio>=0.23.0",
            "pytest-cov>=4.1.0",
        ],
    },

    # Python version requirement
    python_requires=">=3.9",

    # Classifiers
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Healthcare Industry",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Framework :: FastAPI",
        "Operating System :: OS Independent",
    ],

    # Keywords
    keywords=[
        "mdm",
        "record-linkage",
        "fellegi-sunter",
        "fhir",
        "santedb",
    ],
)
