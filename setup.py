from setuptools import setup, find_packages

# Base dependencies for myrnn
INSTALL_REQUIRES = [
    "numpy",
    "pyyaml",
    "questionary",
    "safetensors",
]

# Optional dependencies for myrnn[cuda] and myrnn[test]
EXTRAS_REQUIRE = {
    "cuda": [
        "cupy-cuda12x",
    ],
    "test": [
        "pytest",
    ],
}

setup(
    name="myrnn",
    version="0.1.0",
    author="Priyam Mazumdar",
    description="Recurrent cells with training-time dropout on a numpy/cupy autograd core",
    packages=find_packages(include=["myrnn", "myrnn.*"]),
    python_requires=">=3.10,<3.14",
    install_requires=INSTALL_REQUIRES,
    extras_require=EXTRAS_REQUIRE,
    entry_points={
        "console_scripts": [
            "myrnn=myrnn.cli:main",
        ],
    },
)
