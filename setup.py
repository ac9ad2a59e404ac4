from setuptools import setup, find_packages

setup(
    name="feed_sheet_sync",
    version="1.0.0",
    description="Sync YML product feeds into Google Sheets",
    packages=find_packages(where="src"),
    package_dir={"": "src"},
    install_requires=[
        "requests>=2.25.0",
        "beautifulsoup4>=4.9.3",
        "lxml>=4.6.0",
        "pandas>=1.3.0",
        "gspread>=5.0.0",
        "oauth2client>=4.1.3",
        "google-auth>=1.12.0",
        "pytz>=2021.1",
        "python-dotenv>=0.19.0",
        "PyYAML>=5.4",
    ],
    extras_require={
        "test": ["pytest>=6.0"],
    },
    python_requires=">=3.8",
    entry_points={
        "console_scripts": [
            "feed-sheet-sync=feed_sheet_sync.cli:main",
        ],
    },
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "License :: OSI Approved :: MIT License",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
    ],
)
