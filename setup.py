from setuptools import setup, find_packages

setup(
    name='timelogPy',
    version='0.1.0',
    description='A CLI tool for clocking in and out of projects and reporting hours from a plain-text timelog.',
    author='timelogPy contributors',
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=[
        'tabulate',
        'python-dotenv',
        'markdown',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        'console_scripts': [
            'timelogpy=timelogpy.__main__:main',
        ],
    },
    include_package_data=True,
    package_data={
        '': ['timelogpy.env.example'],
    },
    python_requires='>=3.7',
    classifiers=[
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
    ],
)
