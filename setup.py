"""Setup script for agentdash package."""

from setuptools import find_packages, setup

setup(
    name="agentdash",
    version="0.1.0",
    description="Terminal dashboard for coding agents: lifecycle, cost budgets and quality gates",
    author="Your Name",
    author_email="your.email@example.com",
    packages=find_packages(include=["agentdash", "agentdash.*"]),
    package_data={"agentdash.dashboard": ["styles/*.tcss"]},
    python_requires=">=3.10",
    install_requires=[
        "pyyaml>=6.0",
        "rich>=13.0",
        "textual>=0.47",
    ],
    extras_require={
        "test": [
            "pytest>=7.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "agentdash=agentdash.dashboard.__main__:main",
        ],
    },
    classifiers=[
        "Development Status :: 3 - Alpha",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
)
