# setup.py
from setuptools import setup, find_packages

setup(
    name="wp_diff",
    version="0.1.0",
    description="Page-by-page structural diff of WordPress REST collections on an origin site and its mirror",
    packages=find_packages(include=["wp_diff", "wp_diff.*"]),
    package_data={"wp_diff": ["templates/*.j2"]},
    install_requires=[
        "aiohttp>=3.9",
        "click>=8.1",
        "deepdiff>=6.0",
        "jinja2>=3.1",
        "pydantic>=2.5",
        "python-dotenv>=1.0",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": ["wp-diff=wp_diff.cli:cli"],
    },
    python_requires=">=3.11",
)
