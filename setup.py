from setuptools import setup, find_namespace_packages

setup(
    name='smartpark',
    version='0.1.0',
    description='Parking lot reservation backend',
    author='Smart Parking Team',
    packages=find_namespace_packages(include=('smartpark', 'smartpark.*')),
    python_requires='>=3.8',
    install_requires=[
        'attrs>=20.3',
        'tornado>=6.1',
        'asyncpg>=0.22',
        'testing.postgresql>=1.3',
    ],
    extras_require={
        'test': [
            'pytest>=7',
            'pytest-asyncio>=0.21',
            'pytest-mock>=3',
        ],
    },
)
