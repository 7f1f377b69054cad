from setuptools import setup, find_namespace_packages

setup(
    name="disease-training-sync",
    version="0.1",
    packages=find_namespace_packages(include=["disease_sync", "disease_sync.*"]),
    py_modules=["main"],
    install_requires=[
        "loguru",
        "sqlalchemy>=2.0",
        "pymysql",
        "python-dotenv",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": [
            "disease-sync=main:run",
        ],
    },
)
