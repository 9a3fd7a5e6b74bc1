import io

from setuptools import find_packages, setup

install_requires = open("requirements.txt").readlines()
dev_requires = open("requirements-dev.txt").readlines()

setup(
    name="snowplow-tracker",
    version="0.3.0",
    description="Builds Snowplow Tracker Protocol payloads for analytics events",
    long_description=io.open("README.md", encoding="utf-8").read(),
    long_description_content_type="text/markdown",
    keywords="snowplow analytics tracker events",
    license="Apache License 2.0",
    packages=find_packages(include=["snowplow_tracker", "snowplow_tracker.*"]),
    python_requires=">=3.10",
    install_requires=install_requires,
    extras_require={
        "dev": dev_requires,
    },
    include_package_data=True,
    classifiers=[
        "License :: OSI Approved :: Apache Software License",
        "Programming Language :: Python",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
        "Programming Language :: Python :: 3.12",
    ],
    entry_points={
        "console_scripts": [
            "snowplow_tracker=snowplow_tracker.__main__:app"
        ],
    },
)
