from setuptools import setup, find_packages

setup(
    name="gh-org-migrations",
    version="0.1.0",
    description="Bulk launch, track and archive GitHub organization migrations",
    packages=find_packages(exclude=["tests*", "archives*"]),
    install_requires=[
        "httpx>=0.25.0",
        "aiofiles>=23.0.0",
        "pydantic>=2.0.0",
        "pydantic-settings>=2.0.0",
        "structlog>=23.0.0",
        "tenacity>=8.2.0",
        "click>=8.1.0",
        "python-dotenv>=1.0.0",
        "azure-storage-blob>=12.19.0",
        "aiohttp>=3.9.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.4.0",
            "pytest-asyncio>=0.21.0",
            "pytest-cov>=4.1.0",
            "mypy>=1.5.0",
            "black>=23.7.0",
            "flake8>=6.0.0",
            "isort>=5.12.0",
        ]
    },
    entry_points={
        "console_scripts": [
            "gh-migrations=gh_migrations.cli:main",
        ],
    },
    python_requires=">=3.9",
)
