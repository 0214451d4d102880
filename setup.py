from setuptools import setup, find_packages

setup(
    name="manprobe",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    entry_points={
        'console_scripts': [
            'manprobe=manprobe.cli:main',
        ],
    },
    install_requires=[
        "pyelftools>=0.29",
        "pefile>=2023.2.7",
        "lief>=0.14.0",
        "requests>=2.25.0",
        "rich>=12.0.0",
    ],
    extras_require={
        'test': [
            "pytest>=7.0",
        ],
    },
    python_requires=">=3.8",
    author="manprobe",
    description="Show the README of the project a Go binary was built from",
)
