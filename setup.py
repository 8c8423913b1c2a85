import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()


setuptools.setup(
    name="pysobol",
    version="1.0.0",
    description="Sampling based Sobol' sensitivity indices of scalar models",
    long_description=long_description,
    long_description_content_type="text/markdown",
    packages=setuptools.find_packages(include=["pysobol", "pysobol.*"]),
    python_requires='>=3.8',
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: MIT License",
        "Operating System :: OS Independent",
    ],
    install_requires=[
        'numpy >= 1.16.4',
        'scipy >= 1.0.0',
        'numba',
    ],
    extras_require={
        'tests': ['coverage>=6.4', 'pytest-cov', 'pytest>=4.6'],
    },
    license='MIT',
)

# to run all tests use
# python -m unittest discover pysobol

# to run a single test with pytest use
# pytest pysobol/analysis/tests/test_sensitivity_analysis.py -k test_full_index_set

# the Halton kernel is compiled by numba on first use and cached
# next to the module, so the first test run is slower
