import json
import sys

with open("python_versions.json", "r") as f:
    supported_python_versions = json.load(f)


def _as_tuple(version):
    return tuple(int(part) for part in version.split("."))


python_versions = [_as_tuple(v) for v in supported_python_versions]
min_version = min(python_versions)
max_version = max(python_versions)

if not (min_version <= sys.version_info[:2] <= max_version):
    py_version = ".".join([str(v) for v in sys.version_info[:3]])
    error = (
        "\n----------------------------------------\n"
        "Error: treeconf runs under python {min_version}-{max_version}.\n"
        "You are running python {py_version}".format(
            min_version=".".join(str(v) for v in min_version),
            max_version=".".join(str(v) for v in max_version),
            py_version=py_version,
        )
    )
    print(error, file=sys.stderr)
    sys.exit(1)

from pathlib import Path

from setuptools import find_packages, setup

if __name__ == "__main__":
    base_dir = Path(__file__).parent
    src_dir = base_dir / "src"

    about = {}
    with (src_dir / "treeconf" / "__about__.py").open() as f:
        exec(f.read(), about)

    with (base_dir / "README.rst").open() as f:
        long_description = f.read()

    install_requirements = [
        "pyyaml>=5.1",
        "click",
        "loguru",
        "requests",
        # Type stubs
        "types-PyYAML",
        "types-requests",
    ]

    test_requirements = [
        "pytest",
        "pytest-cov",
        "pytest-mock",
    ]

    lint_requirements = [
        "black==22.3.0",
        "isort==5.13.2",
        "mypy",
    ]

    doc_requirements = [
        "sphinx>=4.0,<8.0.0",
        "sphinx-rtd-theme>=0.6",
        "sphinx-click",
        "sphinx-autodoc-typehints",
    ]

    setup(
        name=about["__title__"],
        version=about["__version__"],
        description=about["__summary__"],
        long_description=long_description,
        license=about["__license__"],
        url=about["__uri__"],
        author=about["__author__"],
        author_email=about["__email__"],
        classifiers=[
            "Intended Audience :: Developers",
            "License :: OSI Approved :: BSD License",
            "Natural Language :: English",
            "Operating System :: MacOS :: MacOS X",
            "Operating System :: POSIX",
            "Operating System :: POSIX :: Linux",
            "Operating System :: Microsoft :: Windows",
            "Programming Language :: Python",
            "Programming Language :: Python :: Implementation :: CPython",
            "Topic :: Software Development :: Libraries",
            "Topic :: Utilities",
        ],
        package_dir={"": "src"},
        packages=find_packages(where="src"),
        include_package_data=True,
        python_requires=">=3.10",
        install_requires=install_requirements,
        tests_require=test_requirements,
        extras_require={
            "docs": doc_requirements,
            "test": test_requirements,
            "dev": doc_requirements + test_requirements + lint_requirements,
        },
        entry_points="""
                [console_scripts]
                treeconf=treeconf.interface.cli:treeconf
            """,
        zip_safe=False,
    )
