#!/usr/bin/env python
#  -*- coding: utf-8 -*-
# SPDX-License-Identifier: MPL-2.0
# Copyright 2020-2022 John Mille<john@compose-x.io>

"""The setup script for ecs-service-builder"""

import os
import re

from setuptools import find_packages, setup

DIR_HERE = os.path.abspath(os.path.dirname(__file__))
# REMOVE UNSUPPORTED RST syntax
REF_REGX = re.compile(r"(\:ref\:)")

try:
    with open(f"{DIR_HERE}/README.rst", encoding="utf-8") as readme_file:
        readme = readme_file.read()
        readme = REF_REGX.sub("", readme)
except FileNotFoundError:
    readme = "ECS Service Builder"

requirements = []
with open(f"{DIR_HERE}/requirements.txt", "r") as req_fd:
    for line in req_fd:
        if line.strip():
            requirements.append(line.strip())

test_requirements = []
try:
    with open(f"{DIR_HERE}/requirements_dev.txt", "r") as req_fd:
        for line in req_fd:
            if line.strip():
                test_requirements.append(line.strip())
except FileNotFoundError:
    print("Failed to load dev requirements. Skipping")

setup(
    author="John Preston",
    author_email="john@compose-x.io",
    python_requires=">=3.8",
    classifiers=[
        "Development Status :: 4 - Beta",
        "Intended Audience :: Developers",
        "Intended Audience :: System Administrators",
        "Intended Audience :: Information Technology",
        "License :: OSI Approved :: Mozilla Public License 2.0 (MPL 2.0)",
        "Natural Language :: English",
        "Programming Language :: Python :: 3",
        "Programming Language :: Python :: 3.8",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
    description="Derives an ECS Fargate service, its load balancer, DNS, TLS and autoscaling as a CloudFormation stack",
    entry_points={
        "console_scripts": [
            "ecs-service-builder=ecs_service_builder.cli:main",
        ]
    },
    install_requires=requirements,
    extras_require={"test": test_requirements},
    license="MPL-2.0",
    long_description=readme,
    long_description_content_type="text/x-rst",
    include_package_data=True,
    package_data={"ecs_service_builder": ["specs/*.json"]},
    keywords="ecs aws cloudformation iac fargate",
    name="ecs_service_builder",
    packages=find_packages(include=["ecs_service_builder", "ecs_service_builder.*"]),
    test_suite="pytests",
    tests_require=test_requirements,
    version="0.1.0",
    zip_safe=False,
)
