#!python

import os.path

from setuptools import find_packages, setup


def versionstring():
    # Read the version without importing the package (and its dependencies)
    namespace = {}
    here = os.path.dirname(os.path.abspath(__file__))
    path = os.path.join(here, "src", "nfapaths", "version.py")
    with open(path) as f:
        exec(f.read(), namespace)
    return namespace["versionstring"]()


if __name__ == "__main__":
    setup(
        name="NFA-Paths",
        version=versionstring(),
        package_dir={"": "src"},
        packages=find_packages("src"),
        description="Nondeterministic finite automata with compact enumeration of every transition path for an input.",
        long_description=open("README.md").read(),
        long_description_content_type="text/markdown",
        license="Two-clause BSD license",
        keywords="automata nfa state machine transition paths",
        zip_safe=True,
        python_requires=">=3.8",
        install_requires=[
            "cached-property==1.5.2",
            "loguru==0.7.2",
        ],
        tests_require=[
            "pytest==8.3.2",
        ],
        extras_require={
            "test": ["pytest==8.3.2"],
        },
        classifiers=[
            "Programming Language :: Python :: 3",
            "Development Status :: 5 - Production/Stable",
            "Intended Audience :: Developers",
            "License :: OSI Approved :: BSD License",
            "Natural Language :: English",
            "Operating System :: OS Independent",
            "Programming Language :: Python :: 3.8",
            "Programming Language :: Python :: 3.9",
            "Programming Language :: Python :: 3.10",
            "Programming Language :: Python :: 3.11",
            "Programming Language :: Python :: 3.12",
            "Topic :: Software Development :: Libraries :: Python Modules",
        ],
    )
