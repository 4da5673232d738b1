from setuptools import setup, find_packages


setup(
    name="embedfs",
    version="0.1",
    packages=find_packages(include=["embedfs", "embedfs.*"]),
    description="Embed a read-only file tree into the tail of an executable or any other binary blob.",
    author="vercingetorx",
    python_requires=">=3.8",
    install_requires=[],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        "console_scripts": [
            "embedfs=embedfs.cli:main",
        ]
    },
)
