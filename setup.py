from setuptools import setup, find_packages

setup(
    name='module-dependence',
    version='0.1.0',
    py_modules=['dependence', 'builder'],
    packages=find_packages(exclude=['tests', 'tests.*']),
    package_data={
        'modpack': ['runtime/*.js'],
    },
    install_requires=[
        'lark',
        'pydantic>=2.0',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'dependence = dependence:main',
        ],
    },
)
