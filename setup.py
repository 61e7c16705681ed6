import setuptools

with open("README.md", "r") as fh:
    long_description = fh.read()

setuptools.setup(
    name="pyregistry-image",
    version="0.1.0",
    author="Mark Gordon",
    author_email="msg@clinc.com",
    description="Push container images to a registry and delete their remote manifests",
    long_description=long_description,
    long_description_content_type="text/markdown",
    url="https://github.com/clinc/PyRegistry",
    packages=setuptools.find_packages(exclude=["tests"]),
    classifiers=[
        "Programming Language :: Python :: 3",
        "License :: OSI Approved :: BSD License",
        "Operating System :: OS Independent",
    ],
    install_requires=[
        "docker>=4.0",
        "requests>=2.0",
    ],
    test_suite="tests",
    python_requires=">=3.6",
)
