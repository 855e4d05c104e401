# setup.py
from setuptools import setup, find_packages

setup(
    name="site_spider",
    version="0.1.0",
    description="Breadth-first crawler for auditing a single site",
    packages=find_packages(include=["site_spider", "site_spider.*"]),
    install_requires=[
        "aiohttp>=3.9",
        "beautifulsoup4>=4.12",
        "click>=8.1",
        "Jinja2>=3.1",
        "pydantic>=2.5",
        "PyYAML>=6.0",
    ],
    extras_require={
        "test": [
            "pytest>=7.4",
            "pytest-asyncio>=0.23",
        ],
    },
    entry_points={
        "console_scripts": ["site-spider=site_spider.cli:cli"],
    },
    python_requires=">=3.11",
)
