from setuptools import find_namespace_packages, setup

setup(
    name="tourstack-backend",
    version="0.1.0",
    packages=find_namespace_packages(include=["shared*", "services*", "models*"]),
    py_modules=["app", "database"],
    install_requires=[
        "fastapi>=0.110",
        "uvicorn>=0.27",
        "pydantic>=2.5",
        "sqlalchemy>=2.0",
        "alembic>=1.13",
        "aiohttp>=3.9",
        "python-dotenv>=1.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=8.0",
            "pytest-asyncio>=0.23",
            "httpx>=0.27",
        ],
    },
    include_package_data=True,
    # config/pipeline.yaml is read from the source tree; installed copies point
    # PIPELINE_CONFIG_PATH at their own file.
    python_requires=">=3.11",
    description="Backend package for TourStack (multi-language audio collections)",
)
