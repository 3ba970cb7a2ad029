from setuptools import setup, find_packages

setup(
    name="tileflow",
    version="0.1.0",
    packages=find_packages(include=["tileflow", "tileflow.*"]),
    install_requires=[
        "numpy",
        "networkx",
    ],
    extras_require={
        "test": ["pytest"],
    },
    description="Bounded A* search and flow-field steering on a mutable tile grid",
    classifiers=[
        "Programming Language :: Python :: 3",
        "Operating System :: OS Independent",
    ],
    python_requires=">=3.8",
    zip_safe=False,
)
