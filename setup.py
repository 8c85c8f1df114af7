from setuptools import setup, find_packages

setup(
    name="custom-search",
    version="2.5",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    package_data={"custom_search": ["templates/*.html"]},
    python_requires=">=3.11",
    url="",
    license="",
    author="Wetpaint Advertising",
    author_email="",
    description="Shortcode-driven search forms scoped to selected content types",
    install_requires=[
        "sqlalchemy[asyncio]>=2.0",
        "asyncpg",
        "pydantic>=2",
        "fastapi",
        "python-dotenv",
        "click",
        "jinja2",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-asyncio",
            "httpx",
            "aiosqlite",
        ],
    },
    entry_points={
        "console_scripts": [
            "custom-search=custom_search.cli:main",
        ],
    },
)
