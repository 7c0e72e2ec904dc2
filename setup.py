"""
setup.py
"""

from setuptools import setup, find_packages

setup(
    name='perun-proxy',
    version='1.0.0',
    description='Proxy micro services releasing attributes and capabilities from the Perun registry.',
    license='Apache 2.0',
    packages=find_packages('src/'),
    package_dir={'': 'src'},
    install_requires=[
        "requests",
        "PyYAML",
        "ldap3",
        "click",
    ],
    extras_require={
        "test": ["pytest", "responses"],
    },
    python_requires=">=3.9",
    zip_safe=False,
    classifiers=[
        "Programming Language :: Python :: 3 :: Only",
        "Programming Language :: Python :: 3.9",
        "Programming Language :: Python :: 3.10",
        "Programming Language :: Python :: 3.11",
    ],
    entry_points={
        "console_scripts": ["perun-attributes=perun_proxy.scripts.perun_attributes:show_released_attributes"]
    }
)
