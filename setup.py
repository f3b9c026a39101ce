"""Setup configuration for the puzzle-engine package."""

from setuptools import find_packages, setup

setup(
    name="puzzle-engine",
    version="0.1.0",
    packages=find_packages(include=["puzzle_engine", "puzzle_engine.*"]),
    python_requires=">=3.9",
    install_requires=[
        "numpy",
        "pillow",
        "pydantic",
        "pydantic-settings",
    ],
    extras_require={
        "dev": [
            "pytest",
            "pytest-cov",
            "black",
            "flake8",
            "mypy",
            "isort",
        ],
    },
)
