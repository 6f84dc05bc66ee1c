from setuptools import setup, find_packages

setup(
    name='eckprov',
    version='0.1.0',
    packages=find_packages(),
    include_package_data=True,
    install_requires=[
        'typer[all]',
        'fastapi',
        'uvicorn',
        'kubernetes',
        'python-dotenv',
        'requests',
        'pydantic>=2',
        'jsonschema',
        'PyYAML'
    ],
    extras_require={
        'test': [
            'pytest',
            'httpx'
        ]
    },
    entry_points={
        'console_scripts': [
            'eckprov=eckprov.cli:app',
            'eckprov-api=eckprov.api.main:run'
        ]
    },
    author='Your Name',
    description='Declarative provider, CLI and API for ECK control planes and Kubernetes clusters',
    classifiers=[
        'Programming Language :: Python :: 3',
        'Operating System :: OS Independent',
    ],
    python_requires='>=3.8',
)
