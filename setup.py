from setuptools import setup, find_packages

setup(
    name='interference-market-engine',
    version='0.1.0',
    packages=find_packages(include=['app', 'app.*']),
    install_requires=[
        'numpy',
        'pandas',
        'python-dotenv',
        'typing_extensions',
    ],
    extras_require={
        'test': ['pytest'],
    },
    description='Deterministic Python settlement engine for a pari-mutuel prediction market with interference stakes, including ledgers, resolution and payouts.',
    classifiers=[
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
    ],
    python_requires='>=3.11',
)
