from setuptools import setup, find_namespace_packages

setup(
    name="library_lending",
    version="0.1.0",
    packages=find_namespace_packages(include=['cli*', 'lending*']),
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        "Click",
        "SQLAlchemy>=2.0",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        "console_scripts": [
            "library-lending=cli.main:main",
        ],
    },
)
