from setuptools import find_packages
from setuptools import setup

version = '1.0.0'

install_requires = [
    'cryptography>=43.0.0',
    # Only the FILETYPE_* constants and PKey.to_cryptography_key() are used,
    # both of which survive the deprecation of the pyOpenSSL crypto module.
    'PyOpenSSL>=25.0.0',
]

docs_extras = [
    'Sphinx>=1.0',  # autodoc_member_order = 'bysource', autodoc_default_flags
    'sphinx_rtd_theme',
]

test_extras = [
    'pytest',
    'pytest-xdist',
]

setup(
    name='josekit',
    version=version,
    description='JSON Object Signing and Encryption (JWK, JWS, JWE, JWT) in Python',
    author="josekit developers",
    license='Apache License 2.0',
    python_requires='>=3.9',
    classifiers=[
        'Development Status :: 5 - Production/Stable',
        'Intended Audience :: Developers',
        'License :: OSI Approved :: Apache Software License',
        'Programming Language :: Python',
        'Programming Language :: Python :: 3',
        'Programming Language :: Python :: 3.9',
        'Programming Language :: Python :: 3.10',
        'Programming Language :: Python :: 3.11',
        'Programming Language :: Python :: 3.12',
        'Programming Language :: Python :: 3.13',
        'Topic :: Internet :: WWW/HTTP',
        'Topic :: Security',
        'Topic :: Security :: Cryptography',
    ],

    package_dir={'': 'src'},
    packages=find_packages(where='src'),
    package_data={
        'josekit': ['py.typed'],
        'josekit._internal.tests': ['testdata/*'],
    },
    include_package_data=True,
    install_requires=install_requires,
    extras_require={
        'docs': docs_extras,
        'test': test_extras,
    },
)
