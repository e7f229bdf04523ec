"""JSON Web Algorithm.

https://www.rfc-editor.org/rfc/rfc7518

"""
import abc
from collections.abc import Hashable
import logging
from typing import Any
from typing import Dict
from typing import Mapping
from typing import Type

import cryptography.exceptions
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.asymmetric.utils import decode_dss_signature
from cryptography.hazmat.primitives.asymmetric.utils import encode_dss_signature

from josekit import errors
from josekit import interfaces
from josekit import jwk
from josekit import util

logger = logging.getLogger(__name__)


class JWA(interfaces.JSONDeSerializable, Hashable):
    """JSON Web Algorithm.

    Algorithms of each family are registered by name in the family's
    ``ALGORITHMS`` table, which is frozen once the defining module has
    been imported.

    """
    ALGORITHMS: Mapping[str, 'JWA'] = NotImplemented
    """Registered algorithms of the family. Subclasses must override."""

    def __init__(self, name: str) -> None:
        self.name = name

    def __eq__(self, other: Any) -> bool:
        if not isinstance(other, JWA):
            return NotImplemented
        return self.name == other.name

    def __hash__(self) -> int:
        return hash((JWA, self.name))

    @classmethod
    def register(cls, algorithm: 'JWA') -> 'JWA':
        """Register algorithm for JSON deserialization."""
        cls.ALGORITHMS[algorithm.name] = algorithm  # type: ignore
        return algorithm

    def to_partial_json(self) -> Any:
        return self.name

    @classmethod
    def from_json(cls, jobj: Any) -> 'JWA':
        """Look up a registered algorithm by name.

        :raises josekit.errors.UnsupportedAlgorithmError: if ``jobj`` is
            not the name of an algorithm of this family

        """
        try:
            return cls.ALGORITHMS[jobj]
        except (KeyError, TypeError):
            raise errors.UnsupportedAlgorithmError(
                'Unsupported algorithm: {0!r}'.format(jobj))

    def __repr__(self) -> str:
        return self.name


class JWASignature(JWA):
    """JSON Web Signature Algorithm."""
    ALGORITHMS: Dict[str, 'JWASignature'] = {}

    kty: Type[jwk.JWK] = jwk.JWK
    """Key type this algorithm works with."""

    def _check_key(self, key: jwk.JWK, operation: str) -> None:
        if not isinstance(key, self.kty):
            raise errors.InvalidKeyError(
                '{0} requires a {1} key, got {2}'.format(
                    self.name, self.kty.typ, key.__class__.__name__))
        key.check_operation(operation, self.name)

    @abc.abstractmethod
    def sign(self, key: jwk.JWK, msg: bytes) -> bytes:  # pragma: no cover
        """Sign the ``msg`` using ``key``.

        :returns: Raw signature (not Base64URL encoded).

        :raises josekit.errors.InvalidKeyError: if ``key`` cannot be used
            with this algorithm

        """
        raise NotImplementedError()

    @abc.abstractmethod
    def verify(self, key: jwk.JWK, msg: bytes, sig: bytes) -> None:  # pragma: no cover
        """Verify the ``msg`` and ``sig`` using ``key``.

        :raises josekit.errors.InvalidSignatureError: if the signature
            does not match
        :raises josekit.errors.InvalidKeyError: if ``key`` cannot be used
            with this algorithm

        """
        raise NotImplementedError()


class _JWANone(JWASignature):
    """Unsecured JWS. Only ever used when explicitly allowed by the caller."""

    def sign(self, key: Any, msg: bytes) -> bytes:
        return b''

    def verify(self, key: Any, msg: bytes, sig: bytes) -> None:
        return None


class _JWAHS(JWASignature):

    kty = jwk.JWKOct

    def __init__(self, name: str, hash_: Type[hashes.HashAlgorithm]) -> None:
        super().__init__(name)
        self.hash = hash_()

    def _hmac(self, key: jwk.JWK, operation: str, msg: bytes) -> hmac.HMAC:
        self._check_key(key, operation)
        secret = key.secret_key
        if len(secret) < self.hash.digest_size:
            raise errors.InvalidKeyError(
                '{0} requires a key of at least {1} bytes.'.format(
                    self.name, self.hash.digest_size))
        mac = hmac.HMAC(secret, self.hash)
        mac.update(msg)
        return mac

    def sign(self, key: jwk.JWK, msg: bytes) -> bytes:
        return self._hmac(key, 'sign', msg).finalize()

    def verify(self, key: jwk.JWK, msg: bytes, sig: bytes) -> None:
        verifier = self._hmac(key, 'verify', msg)
        try:
            verifier.verify(sig)
        except cryptography.exceptions.InvalidSignature as error:
            logger.debug(error, exc_info=True)
            raise errors.InvalidSignatureError('Signature does not match')


class _JWARSA:

    kty = jwk.JWKRSA
    name: str = NotImplemented
    padding: Any = NotImplemented
    hash: hashes.HashAlgorithm = NotImplemented

    def sign(self, key: jwk.JWK, msg: bytes) -> bytes:
        """Sign the ``msg`` using ``key``."""
        self._check_key(key, 'sign')  # type: ignore
        private_key = key.private_key
        try:
            return private_key.sign(msg, self.padding, self.hash)
        except ValueError as error:  # digest too large
            logger.debug(error, exc_info=True)
            raise errors.InvalidKeyError(str(error))

    def verify(self, key: jwk.JWK, msg: bytes, sig: bytes) -> None:
        """Verify the ``msg`` and ``sig`` using ``key``."""
        self._check_key(key, 'verify')  # type: ignore
        try:
            key.public_key.verify(sig, msg, self.padding, self.hash)
        except cryptography.exceptions.InvalidSignature as error:
            logger.debug(error, exc_info=True)
            raise errors.InvalidSignatureError('Signature does not match')


class _JWARS(_JWARSA, JWASignature):

    def __init__(self, name: str, hash_: Type[hashes.HashAlgorithm]) -> None:
        super().__init__(name)
        self.padding = padding.PKCS1v15()
        self.hash = hash_()


class _JWAPS(_JWARSA, JWASignature):

    def __init__(self, name: str, hash_: Type[hashes.HashAlgorithm]) -> None:
        super().__init__(name)
        # "The size of the salt value is the same size as the hash
        # function output."
        self.padding = padding.PSS(
            mgf=padding.MGF1(hash_()),
            salt_length=hash_.digest_size)
        self.hash = hash_()


class _JWAES(JWASignature):

    kty = jwk.JWKEC

    def __init__(self, name: str, hash_: Type[hashes.HashAlgorithm], crv: str) -> None:
        super().__init__(name)
        self.hash = hash_()
        self.crv = crv

    def _check_curve(self, key: jwk.JWK, operation: str) -> int:
        self._check_key(key, operation)
        if key.crv != self.crv:
            raise errors.InvalidKeyError('{0} requires a {1} key, got {2}'.format(
                self.name, self.crv, key.crv))
        return jwk.JWKEC.coordinate_size(key.public_key.curve)

    def sign(self, key: jwk.JWK, msg: bytes) -> bytes:
        size = self._check_curve(key, 'sign')
        private_key = key.private_key
        r, s = decode_dss_signature(private_key.sign(msg, ec.ECDSA(self.hash)))
        return r.to_bytes(size, 'big') + s.to_bytes(size, 'big')

    def verify(self, key: jwk.JWK, msg: bytes, sig: bytes) -> None:
        size = self._check_curve(key, 'verify')
        if len(sig) != 2 * size:
            raise errors.InvalidSignatureError(
                'Signature must be {0} bytes long'.format(2 * size))
        r = int.from_bytes(sig[:size], 'big')
        s = int.from_bytes(sig[size:], 'big')
        try:
            key.public_key.verify(
                encode_dss_signature(r, s), msg, ec.ECDSA(self.hash))
        except cryptography.exceptions.InvalidSignature as error:
            logger.debug(error, exc_info=True)
            raise errors.InvalidSignatureError('Signature does not match')


class _JWAEdDSA(JWASignature):

    kty = jwk.JWKOKP

    def _check_curve(self, key: jwk.JWK, operation: str) -> None:
        self._check_key(key, operation)
        if key.crv not in jwk.JWKOKP.SIGNATURE_CURVES:
            raise errors.InvalidKeyError(
                '{0} requires an Ed25519 or Ed448 key, got {1}'.format(
                    self.name, key.crv))

    def sign(self, key: jwk.JWK, msg: bytes) -> bytes:
        self._check_curve(key, 'sign')
        return key.private_key.sign(msg)

    def verify(self, key: jwk.JWK, msg: bytes, sig: bytes) -> None:
        self._check_curve(key, 'verify')
        try:
            key.public_key.verify(sig, msg)
        except cryptography.exceptions.InvalidSignature as error:
            logger.debug(error, exc_info=True)
            raise errors.InvalidSignatureError('Signature does not match')


NONE = JWASignature.register(_JWANone('none'))

HS256 = JWASignature.register(_JWAHS('HS256', hashes.SHA256))
HS384 = JWASignature.register(_JWAHS('HS384', hashes.SHA384))
HS512 = JWASignature.register(_JWAHS('HS512', hashes.SHA512))

RS256 = JWASignature.register(_JWARS('RS256', hashes.SHA256))
RS384 = JWASignature.register(_JWARS('RS384', hashes.SHA384))
RS512 = JWASignature.register(_JWARS('RS512', hashes.SHA512))

PS256 = JWASignature.register(_JWAPS('PS256', hashes.SHA256))
PS384 = JWASignature.register(_JWAPS('PS384', hashes.SHA384))
PS512 = JWASignature.register(_JWAPS('PS512', hashes.SHA512))

ES256 = JWASignature.register(_JWAES('ES256', hashes.SHA256, 'P-256'))
ES384 = JWASignature.register(_JWAES('ES384', hashes.SHA384, 'P-384'))
ES512 = JWASignature.register(_JWAES('ES512', hashes.SHA512, 'P-521'))

EDDSA = JWASignature.register(_JWAEdDSA('EdDSA'))

JWASignature.ALGORITHMS = util.frozendict(JWASignature.ALGORITHMS)
