from setuptools import setup, find_packages

setup(
    name="syncgraph",
    version="0.1",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "networkx",
        "tenacity",
        "psycopg2-binary",
        "pandas",
        "sqlalchemy>=1.4",
        "pyyaml",
        "python-dotenv",
        "loguru"
    ],
    extras_require={
        "test": ["pytest"],
    },
)
