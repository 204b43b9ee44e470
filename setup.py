"""Setup script for sqlpolish."""

from setuptools import find_packages, setup

setup(
    name="sqlpolish",
    version="0.1.0",
    description="SQL tokenizer and configurable multi-pass formatter",
    author="sqlpolish Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "click>=8.0.0,<8.2.0",  # CLI framework
        "typer>=0.9.0,<0.10.0",  # Modern CLI framework
        "rich>=13.0.0",  # Tables, panels and error display
        "pyyaml>=6.0",  # Presets and configuration files
    ],
    package_data={
        "sqlpolish": ["py.typed", "formatter/presets/builtin/*.yaml"],
    },
    extras_require={
        "dev": [
            "pytest>=7.0.0",
            "pytest-cov>=4.1.0",
            "black>=22.1.0",
            "isort>=5.10.1",
            "flake8>=4.0.1",
            "autoflake>=2.2.0",
            "pre-commit>=3.0.0",
            "mypy>=1.0.0",  # Type checking
        ],
        "test": [
            "pytest>=7.0.0",
            "pytest-cov>=4.1.0",
            "mock>=5.0.0",  # For mocking in tests
        ],
    },
    entry_points={
        "console_scripts": [
            "sqlpolish=sqlpolish.cli.main:cli",
        ],
    },
    python_requires=">=3.8",
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Topic :: Database",
        "Topic :: Software Development :: Libraries :: Python Modules",
    ],
)
