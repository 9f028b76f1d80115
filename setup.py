# setup.py - Package build
from setuptools import setup, find_packages

setup(
    name="chain_homology",
    version="0.1.0",
    description="Integral homology of graded and bigraded chain complexes via Smith normal form",
    packages=find_packages(include=["chain_homology", "chain_homology.*"]),
    python_requires=">=3.8",
    install_requires=[
        "numpy>=1.20",
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
)
