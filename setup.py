# setup.py
from setuptools import setup, find_namespace_packages

setup(
    name="debugstream",
    version="1.0.0",
    description="Timestamped, call-site annotated stderr with rotating log files and retention purging",
    author="Enrique Paredes",
    author_email="eparedesbalen@gmail.com",
    package_dir={"": "src"},
    packages=find_namespace_packages(where="src", include=["debugstream*"]),
    python_requires=">=3.9",
    install_requires=[
        "platformdirs>=3.0",  # Default log directory per OS
    ],
    extras_require={
        "test": ["pytest>=7.0"],
    },
    entry_points={
        'console_scripts': [
            'debugstream=debugstream.main:main',
        ],
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
)
