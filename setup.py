from setuptools import setup, find_packages

setup(
    name="core-search-cache",
    version="0.1.0",
    description="Cached, deterministic query client for the CORE academic search API",
    packages=find_packages(include=["src", "src.*"]),
    python_requires=">=3.10",
    install_requires=[
        "requests",
        "urllib3",
        "pydantic>=2",
        "python-dotenv",
        "redis",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
