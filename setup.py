from setuptools import setup, find_packages


setup(
    name="splitbits",
    version="0.1.0",
    description="Bit layout templates compiled to Python functions",
    python_requires="~=3.9",
    install_requires=[
        "jschon~=0.11.1",   # for splitbits.lib.meta
        "Jinja2~=3.0",      # for splitbits.back.python
    ],
    extras_require={
        "test": [
            "coverage",
            "pytest",
        ],
    },
    packages=find_packages(include=["splitbits", "splitbits.*"]),
)
