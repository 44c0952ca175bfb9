from setuptools import setup, find_packages

setup(
    name='rdf-transformer',
    version='0.1.0',
    description='RDF Transformer',
    long_description=open('README.md').read(),
    long_description_content_type='text/markdown',
    packages=find_packages(include=["rdftransformer", "rdftransformer.*"]),
    include_package_data=True,
    entry_points={
        'console_scripts': [
            'rdftransformer=rdftransformer.cmd.rdftransformer_cmd:main',
        ],
    },

    license='Apache License 2.0',
    install_requires=[
        "rdflib>=7.0.0",
        "pyoxigraph>=0.4.0",
        "requests",
        "lxml",
        "PyYAML",
        "python-dotenv",
    ],
    extras_require={
        'test': [
            'pytest',
        ],
    },

    classifiers=[
        "Programming Language :: Python :: 3.11",
        "License :: OSI Approved :: Apache Software License",
        "Operating System :: OS Independent",
    ],
    python_requires='>=3.11',
)
