from setuptools import setup, find_packages

setup(
    name="mule_flow_diagram",
    version="1.0.0",
    packages=find_packages(exclude=["tests", "tests.*"]),
    package_data={
        "mule_diagram": ["report_template.html"],
    },
    install_requires=[
        "lxml",
        "PyYAML",
        "tabulate",
    ],
    extras_require={
        "test": [
            "pytest",
        ],
    },
    entry_points={
        'console_scripts': [
            "mule-diagram = mule_diagram.main:main",
        ],
    },
)
