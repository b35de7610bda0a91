from setuptools import setup, find_packages

setup(
    name="equine-genetics",
    version="0.1.0",
    description="Genetics and trait simulation engine for bred horses",
    author="Equine Genetics Team",
    packages=find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        "numpy>=1.24.0",
        "pyyaml>=6.0",
        "structlog>=23.1.0",
    ],
    python_requires=">=3.10",
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-cov>=4.1.0",
        ],
    },
)
