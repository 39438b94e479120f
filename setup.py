"""Setup configuration for loginprobe package."""

from setuptools import setup, find_packages

setup(
    name="loginprobe",
    version="0.1.0",
    description="Browser-driven UI, security and accessibility tests for a login page",
    packages=find_packages(include=["loginprobe", "loginprobe.*"]),
    package_data={"loginprobe.config": ["default.properties"]},
    python_requires=">=3.8",
    install_requires=[
        "pydantic>=2.0.0",
        "python-dotenv>=1.0.0",
        "playwright>=1.40.0",
        "pyyaml>=6.0",
        "click>=8.1.0",
        "rich>=13.0.0",
        "pytest>=7.4.0",
    ],
    extras_require={
        "dev": [
            "pytest-cov>=4.1.0",
            "pytest-mock>=3.11.0",
            "ruff>=0.1.0",
            "mypy>=1.5.0",
            "black>=23.0.0",
        ],
    },
    entry_points={
        "console_scripts": [
            "loginprobe=loginprobe.cli:main",
        ],
        "pytest11": [
            "loginprobe=loginprobe.plugin",
        ],
    },
)
