"""Install MySQL server on Debian hosts, with batou or standalone.
"""

import os.path

from setuptools import find_packages, setup


def project_path(*names):
    return os.path.join(*names)


setup(
    name="batou_mysql_server",
    version="1.0.0.dev0",
    install_requires=[
        "batou >= 2.3b4",
        "pyaml",
        "InquirerPy",
    ],
    extras_require={
        "test": [
            "pytest",
            "pytest-mock",
        ],
    },
    author="Flying Circus <support@flyingcircus.io>",
    author_email="support@flyingcircus.io",
    license="BSD (2-clause)",
    keywords="deployment mysql debian",
    classifiers="""\
License :: OSI Approved :: BSD License
Operating System :: POSIX :: Linux
Programming Language :: Python
Programming Language :: Python :: 3
Programming Language :: Python :: 3 :: Only
"""[
        :-1
    ].split(
        "\n"
    ),
    description=__doc__.strip(),
    long_description="\n\n".join(
        open(project_path(name)).read()
        for name in (
            "README.md",
            "CHANGES.md",
        )
    ),
    long_description_content_type="text/markdown",
    packages=find_packages("src"),
    package_dir={"": "src"},
    include_package_data=True,
    entry_points=dict(
        console_scripts=[
            "mysql-server-setup = batou_mysql_server.cli:main",
        ]
    ),
    zip_safe=False,
)
