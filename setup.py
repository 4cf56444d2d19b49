"""
pgmodelgen - PostgreSQL catalog to typed SQLAlchemy Core models
Install: pip install -e .
"""

from setuptools import setup, find_packages

with open("README.md", "r", encoding="utf-8") as f:
    long_description = f.read()

setup(
    name="pgmodelgen",
    version="0.1.0",
    author="Diegoproggramer",
    author_email="",
    description="Generate typed data-access modules from a live PostgreSQL catalog",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={"pgmodelgen": ["jinja/*.j2"]},
    include_package_data=True,
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "Topic :: Software Development :: Code Generators",
        "Topic :: Database",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    install_requires=[
        "sqlalchemy>=2.0.0",
        "pydantic>=2.0.0",
        "psycopg[binary]>=3.1",
        "jinja2>=3.1",
        "black>=23.0",
        "pyyaml>=6.0",
    ],
    extras_require={
        "dev": [
            "pytest>=7.0",
            "ruff>=0.1.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "pgmodelgen=pgmodelgen.cli:cli_main",
        ],
    },
    keywords="postgresql, sqlalchemy, generator, code-generator, crud, introspection",
)
