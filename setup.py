from setuptools import setup, find_packages

setup(
    name="oneshare",
    version="0.1.0",
    packages=find_packages(include=["oneshare", "oneshare.*"]),
    python_requires=">=3.10",
    install_requires=[
        "fastapi>=0.110",
        "pydantic>=2.5",
        "pydantic-settings>=2.1",
        "sqlalchemy>=2.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "httpx>=0.25",
        ],
        "server": [
            "uvicorn>=0.27",
        ],
    },
)
