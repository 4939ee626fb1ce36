# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="ArenaServer",
    version="0.1.0",
    description="Authoritative tick-based simulation server for a 2D multiplayer arena",
    python_requires=">=3.8",
    packages=find_namespace_packages(include=["arena", "arena.*", "common", "engine"]),
    py_modules=["server"],
    data_files=[("configs", ["configs/defaults.json"])],
    install_requires=[],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": ["arena-server=server:main"],
    },
)
