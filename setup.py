"""Install the kvsession package."""

from setuptools import setup, find_packages

setup(
    name='kvsession',
    version='0.1.0',
    description='Signed-cookie HTTP sessions over an ordered key-value store.',
    packages=find_packages(exclude=['*test*']),
    python_requires='>=3.8',
    install_requires=[
        "flask",
        "pyjwt>=2",
        "redis>=4",
        "python-json-logger>=3.1",
    ],
    extras_require={
        'test': [
            "pytest",
        ],
    },
    zip_safe=False
)
