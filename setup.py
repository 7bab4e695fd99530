from setuptools import setup, find_packages  # type: ignore

setup(
    name='sibyl-oracle',
    version='0.1.0',
    packages=find_packages(exclude=['tests', 'tests.*']),
    install_requires=[
        'openai',
        'httpx',
        'solana>=0.34,<0.37',
        'solders>=0.21',
        'python-dotenv',
        'loguru',
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },
    include_package_data=True,
    description='Sibyl Oracle: AI-powered prediction oracle agent for Solana',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    classifiers=[
        'Programming Language :: Python :: 3',
        'License :: OSI Approved :: MIT License',
        'Operating System :: OS Independent',
    ],
    python_requires='>=3.11',
    entry_points={
        'console_scripts': [
            'sibyl=sibyl.cli:main',
        ],
    },
)
