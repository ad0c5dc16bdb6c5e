from setuptools import setup

import spindle

setup(
    name="spindle",
    description='The spindle firstboot storage provisioner',
    version=spindle.__version__,
    license="AGPL",
    packages=[
        'spindle',
        'spindle.block',
        'spindle.commands',
        'spindle.reporter',
    ],
    python_requires='>=3.8',
    install_requires=[
        'PyYAML',
        'attrs',
        'jsonschema',
    ],
    extras_require={
        'test': ['pytest', 'mock'],
    },
    entry_points={
        'console_scripts': [
            'spindle = spindle.commands.main:main',
        ],
    },
)
