import pathlib

import setuptools

here = pathlib.Path(__file__).parent.resolve()

long_description = (here / "README.md").read_text(encoding="utf-8")

setuptools.setup(
    name="bridged-evm",
    version="0.1.0",
    description=(
        "EVM compatible execution engine running on a foreign account backend"
    ),
    long_description=long_description,
    long_description_content_type="text/markdown",
    classifiers=[
        "License :: CC0 1.0 Universal (CC0 1.0) Public Domain Dedication",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    python_requires=">=3.10",
    package_dir={"": "src"},
    packages=setuptools.find_packages(where="src"),
    package_data={"bridged_evm": ["py.typed", "logger.cfg"]},
    install_requires=[
        "pycryptodome>=3.20,<4",
        "coincurve>=20,<22",
        "typing_extensions>=4.4",
        "py-ecc>=8.0.0,<9",
        "ethereum-types>=0.2.1,<0.3",
        "ethereum-rlp>=0.1.1,<0.2",
        "cryptography>=41",
    ],
    extras_require={
        "test": [
            "pytest>=8,<10",
            "hypothesis>=6.100,<7",
        ],
    },
    entry_points={
        "console_scripts": [
            "bridged-evm = bridged_evm.cli:main",
        ],
    },
)
