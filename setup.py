from pathlib import Path
from setuptools import setup, find_packages


def read_requirements(filename):
    with open(filename) as f:
        return [req for req in (req.partition('#')[0].strip() for req in f) if req]


setup(
    name='restlayer',
    version='0.1.0',
    description='REST resource dispatch layer over SQLAlchemy entities.',
    long_description=Path('README.rst').read_text(),
    license='MIT',
    python_requires='>=3.8',
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=read_requirements('requirements.in'),
    extras_require={
        'test': [
            'pytest',
            'pytest-mock',
            'httpx',
        ],
    },
    entry_points={
        'console_scripts': [
            'restlayer = restlayer.cli.main:app',
        ]
    },
    classifiers=[
        'Development Status :: 2 - Pre-Alpha',
        'Environment :: Console',
        'Environment :: Web Environment',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: MIT License',
        'Operating System :: POSIX',
        'Operating System :: POSIX :: Linux',
        'Programming Language :: Python :: 3 :: Only',
        'Topic :: Internet :: WWW/HTTP :: HTTP Servers',
        'Topic :: Database :: Front-Ends',
    ],
)
