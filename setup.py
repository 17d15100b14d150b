from setuptools import setup, find_namespace_packages

setup(
    name="r2d",
    version="0.1.0",
    packages=find_namespace_packages(where="src", include=["r2d", "r2d.*"]),
    package_dir={"": "src"},
    install_requires=[
        "pydantic>=2.0",
        "pyyaml>=6.0",
        "click>=8.2",
        "python-dotenv>=1.0",
        "jinja2>=3.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "r2d=r2d.CLI.main:main",
        ],
    },
)
