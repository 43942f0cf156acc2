from setuptools import find_namespace_packages, setup

setup(
    name="confess",
    version="0.1.0",
    # Several app subpackages have no __init__.py
    packages=find_namespace_packages(include=["app", "app.*"]),
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        "fastapi>=0.110",
        "uvicorn[standard]>=0.29",
        "sqlalchemy[asyncio]>=2.0",
        "asyncpg>=0.29",
        "aiosqlite>=0.20",
        "alembic>=1.13",
        "psycopg[binary]>=3.1",
        "pydantic>=2.6",
        "pydantic-settings>=2.2",
        "structlog>=24.1",
        "sentry-sdk>=1.45",
        "slowapi>=0.1.9",
        "limits>=3.10",
        "httpx>=0.27",
        "python-dotenv>=1.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
        ],
    },
)
