"""Test utilities.

.. warning:: This module is not part of the public API.

"""
import importlib.resources
import os
from typing import Callable

from cryptography import x509
from cryptography.hazmat.primitives import serialization

from josekit import jwk


def load_vector(*names: str) -> bytes:
    """Load contents of a test vector."""
    vector_ref = importlib.resources.files(__package__).joinpath('testdata', *names)
    return vector_ref.read_bytes()


def _guess_loader(filename: str, loader_pem: Callable, loader_der: Callable) -> Callable:
    _, ext = os.path.splitext(filename)
    if ext.lower() == ".pem":
        return loader_pem
    elif ext.lower() == ".der":
        return loader_der
    else:  # pragma: no cover
        raise ValueError("Loader could not be recognized based on extension")


def load_cert(*names: str) -> x509.Certificate:
    """Load certificate."""
    loader = _guess_loader(
        names[-1], x509.load_pem_x509_certificate, x509.load_der_x509_certificate
    )
    return loader(load_vector(*names))


def load_private_key(*names: str):
    """Load native private key."""
    loader = _guess_loader(names[-1], serialization.load_pem_private_key,
                           serialization.load_der_private_key)
    return loader(load_vector(*names), password=None)


def load_rsa_jwk(*names: str, **params) -> jwk.JWKRSA:
    """Load RSA private key as JWK."""
    return jwk.JWKRSA(key=load_private_key(*names), **params)


def load_ec_jwk(*names: str, **params) -> jwk.JWKEC:
    """Load EC private key as JWK."""
    return jwk.JWKEC(key=load_private_key(*names), **params)


def load_okp_jwk(*names: str, **params) -> jwk.JWKOKP:
    """Load OKP private key as JWK."""
    return jwk.JWKOKP(key=load_private_key(*names), **params)


_B64_ALPHABET = b'ABCDEFGHIJKLMNOPQRSTUVWXYZabcdefghijklmnopqrstuvwxyz0123456789-_'


def flip_trailing_bit(segment: bytes) -> bytes:
    """Alternate Base64URL encoding of ``segment`` that decodes to the
    same bytes, by setting an unused trailing bit."""
    assert len(segment) % 4 in (2, 3)
    index = _B64_ALPHABET.index(segment[-1:]) ^ 1
    return segment[:-1] + _B64_ALPHABET[index:index + 1]
