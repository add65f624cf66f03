"""Build and install the avgmeteo package."""

from setuptools import setup, find_packages

setup(
    name="avgmeteo",
    version="0.1.0",
    description="Rolling sensor averages from a binary telemetry stream",
    python_requires=">=3.9",
    package_dir={"": "python"},
    packages=find_packages("python"),
    install_requires=["numpy"],
    extras_require={"test": ["pytest"]},
    entry_points={
        "console_scripts": ["avgmeteo = avgmeteo.cli:main"],
    },
)
