from setuptools import find_packages, setup

setup(
    name="tpgit",
    version="0.1.0",
    description="Comment on TargetProcess entities referenced by git commit messages, once per commit",
    packages=find_packages(include=["tpgit", "tpgit.*"]),
    include_package_data=True,
    python_requires=">=3.11",
    install_requires=[
        "pydantic>=2",
        "PyYAML>=6",
        "redis>=4",
    ],
    extras_require={
        "test": ["pytest>=7"],
    },
    entry_points={
        "console_scripts": ["tpgit=tpgit.cli:main"],
    },
)
