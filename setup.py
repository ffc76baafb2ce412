from setuptools import setup, find_packages
import pathlib

# Detect layout
use_src = pathlib.Path("src/jsonmetrics").exists()
pkg_args = {"package_dir": {"": "src"}, "packages": find_packages(where="src")} if use_src \
           else {"packages": find_packages(where=".")}

setup(
    name="jsonmetrics",
    version="0.1.0",
    include_package_data=True,
    python_requires=">=3.9",
    install_requires=[
        "typer",
        "pyyaml",
        "pydantic>=2",
        "pandas",
        "jsonpath-ng",
    ],
    extras_require={
        "test": ["pytest"],
    },
    entry_points={
        "console_scripts": ["jsonmetrics=jsonmetrics.cli:app"],
    },
    **pkg_args
)
