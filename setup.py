from setuptools import setup, find_namespace_packages

setup(
    name="indent-config",
    version="1.0.0",
    packages=find_namespace_packages(include=["indent_config", "indent_config.*"]),
    entry_points={
        'console_scripts': [
            'indent-config=indent_config.cli:main',
        ],
    },
    install_requires=[
        "colorama",
        "tqdm",
    ],
    extras_require={
        "test": ["pytest"],
    },
)
