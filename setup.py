# setup.py
from setuptools import find_packages, setup

setup(
    name="proximity",
    version="0.1.0",
    packages=find_packages(include=["proximity", "proximity.*"]),
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "uvicorn[standard]>=0.29",
        "sqlalchemy[asyncio]>=2.0",
        "asyncpg>=0.29",
        "aiosqlite>=0.20",
        "alembic>=1.13",
        "pydantic>=2.6",
        "pydantic-settings>=2.2",
        "email-validator>=2.1",
        "structlog>=24.1",
        "sentry-sdk>=1.45",
        "slowapi>=0.1.9",
        "limits>=3.10",
        "httpx>=0.27",
        "openai>=1.30",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
)
