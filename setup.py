from setuptools import setup, find_namespace_packages

setup(
    name="marksman",
    version="0.1.0",
    description="Shot group analysis and training history for marksmanship practice",
    author="Marksman",
    packages=find_namespace_packages(include=["marksman", "marksman.*"]),
    package_data={"marksman.database": ["schema.sql"]},
    python_requires=">=3.11",
    install_requires=[
        "numpy>=1.26.0",
    ],
    extras_require={
        "ai": ["anthropic>=0.40.0"],
        "dev": ["pytest>=7.4.0", "anthropic>=0.40.0"],
    },
)
