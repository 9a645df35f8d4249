import setuptools

setuptools.setup(
    name="shimsign",
    version="0.1.0",
    description=("Payload image signing for the TD shim"),
    license="Apache Software License",
    packages=setuptools.find_packages(exclude=["tests", "tests.*"]),
    install_requires=[
        'cryptography>=42.0',
        'intelhex>=2.2.1',
        'click',
        'pyyaml',
    ],
    extras_require={
        'test': ['pytest'],
    },
    entry_points={
        "console_scripts": ["shimsign=shimsign.main:shimsign"]
    },
    classifiers=[
        "Programming Language :: Python :: 3",
        "Development Status :: 4 - Beta",
        "Topic :: Software Development :: Build Tools",
        "License :: OSI Approved :: Apache Software License",
    ],
)
