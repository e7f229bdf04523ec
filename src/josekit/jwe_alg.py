"""JWE key management algorithms ("alg").

https://www.rfc-editor.org/rfc/rfc7518#section-4

"""
import abc
import logging
import os
import struct
from typing import Any
from typing import Dict
from typing import Mapping
from typing import Optional

import cryptography.exceptions
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric import padding
from cryptography.hazmat.primitives.ciphers.aead import AESGCM
from cryptography.hazmat.primitives.kdf.concatkdf import ConcatKDFHash
from cryptography.hazmat.primitives.keywrap import InvalidUnwrap
from cryptography.hazmat.primitives.keywrap import aes_key_unwrap
from cryptography.hazmat.primitives.keywrap import aes_key_wrap

from josekit import errors
from josekit import jwa
from josekit import jwe_enc
from josekit import jwk
from josekit import util

logger = logging.getLogger(__name__)


class WrappedKey(util.ImmutableMap):
    """Content Encryption Key together with its encrypted form.

    :ivar bytes cek: Content Encryption Key.
    :ivar bytes ek: JWE Encrypted Key, empty for direct algorithms.
    :ivar header: Additional JWE Header parameters required to unwrap
        ``ek``, e.g. ``iv`` and ``tag`` for AES GCM key wrapping
        (:class:`~josekit.util.frozendict`).

    """
    __slots__ = ('cek', 'ek', 'header')


class JWAKeyManagement(jwa.JWA):
    """JWE Key Management Algorithm."""
    ALGORITHMS: Dict[str, 'JWAKeyManagement'] = {}

    kty = jwk.JWK
    """Key type this algorithm works with."""

    wrap_operation = 'wrapKey'
    unwrap_operation = 'unwrapKey'

    def _check_key(self, key: jwk.JWK, operation: str) -> None:
        if not isinstance(key, self.kty):
            raise errors.InvalidKeyError(
                '{0} requires a {1} key, got {2}'.format(
                    self.name, self.kty.typ, key.__class__.__name__))
        key.check_operation(operation, self.name)

    def wrap(self, key: jwk.JWK, enc: jwe_enc.JWAContentEncryption,
             cek: Optional[bytes] = None,
             header: Optional[Mapping[str, Any]] = None) -> WrappedKey:
        """Produce (and protect) the Content Encryption Key.

        :param JWK key: Recipient's key.
        :param enc: Content encryption algorithm the CEK is meant for.
        :param bytes cek: CEK to wrap. A fresh one is generated if not
            provided.
        :param header: JWE Header parameters known so far (``apu``,
            ``apv``).

        :raises josekit.errors.InvalidKeyError: if ``key`` cannot be
            used with this algorithm, or ``cek`` has the wrong size

        """
        self._check_key(key, self.wrap_operation)
        if cek is not None:
            enc.check_key(cek)
        return self._wrap(key, enc, cek, header or {})

    def unwrap(self, key: jwk.JWK, ek: bytes, enc: jwe_enc.JWAContentEncryption,
               header: Optional[Mapping[str, Any]] = None) -> bytes:
        """Recover the Content Encryption Key.

        :param JWK key: Recipient's key.
        :param bytes ek: JWE Encrypted Key.
        :param enc: Content encryption algorithm of the JWE.
        :param header: JWE Header with the additional parameters
            produced by :meth:`wrap`.

        :raises josekit.errors.InvalidJsonWebEncryptionError: on any
            failure

        """
        try:
            self._check_key(key, self.unwrap_operation)
            cek = self._unwrap(key, ek, enc, header or {})
            enc.check_key(cek)
        except (errors.Error, ValueError, InvalidUnwrap,
                cryptography.exceptions.InvalidTag) as error:
            logger.debug(error, exc_info=True)
            raise errors.InvalidJsonWebEncryptionError()
        return cek

    @abc.abstractmethod
    def _wrap(self, key: jwk.JWK, enc: jwe_enc.JWAContentEncryption,
              cek: Optional[bytes], header: Mapping[str, Any]) -> WrappedKey:  # pragma: no cover
        raise NotImplementedError()

    @abc.abstractmethod
    def _unwrap(self, key: jwk.JWK, ek: bytes, enc: jwe_enc.JWAContentEncryption,
                header: Mapping[str, Any]) -> bytes:  # pragma: no cover
        raise NotImplementedError()


class _JWADirect(JWAKeyManagement):
    """Direct use of a shared symmetric key as the CEK."""

    kty = jwk.JWKOct
    wrap_operation = 'encrypt'
    unwrap_operation = 'decrypt'

    def _wrap(self, key: jwk.JWK, enc: jwe_enc.JWAContentEncryption,
              cek: Optional[bytes], header: Mapping[str, Any]) -> WrappedKey:
        secret = key.secret_key
        enc.check_key(secret)
        if cek is not None and cek != secret:
            raise errors.InvalidParameterError(
                'The content encryption key of "dir" is the key itself.')
        return WrappedKey(cek=secret, ek=b'', header=util.frozendict())

    def _unwrap(self, key: jwk.JWK, ek: bytes, enc: jwe_enc.JWAContentEncryption,
                header: Mapping[str, Any]) -> bytes:
        if ek:
            raise errors.InvalidParameterError('Encrypted key must be empty')
        return key.secret_key


def _check_kek(name: str, key: jwk.JWK, size: int) -> bytes:
    kek = key.secret_key
    if len(kek) != size:
        raise errors.InvalidKeyError(
            '{0} requires a key of exactly {1} bytes.'.format(name, size))
    return kek


class _JWAAESKW(JWAKeyManagement):
    """AES Key Wrap (RFC 3394) with the default initial value."""

    kty = jwk.JWKOct

    def __init__(self, name: str, key_size: int) -> None:
        super().__init__(name)
        self.key_size = key_size

    def _wrap(self, key: jwk.JWK, enc: jwe_enc.JWAContentEncryption,
              cek: Optional[bytes], header: Mapping[str, Any]) -> WrappedKey:
        kek = _check_kek(self.name, key, self.key_size)
        cek = enc.generate_cek() if cek is None else cek
        return WrappedKey(cek=cek, ek=aes_key_wrap(kek, cek), header=util.frozendict())

    def _unwrap(self, key: jwk.JWK, ek: bytes, enc: jwe_enc.JWAContentEncryption,
                header: Mapping[str, Any]) -> bytes:
        return aes_key_unwrap(_check_kek(self.name, key, self.key_size), ek)


class _JWAAESGCMKW(JWAKeyManagement):
    """Key wrapping with AES GCM."""

    kty = jwk.JWKOct
    iv_size = 12
    tag_size = 16

    def __init__(self, name: str, key_size: int) -> None:
        super().__init__(name)
        self.key_size = key_size

    def _wrap(self, key: jwk.JWK, enc: jwe_enc.JWAContentEncryption,
              cek: Optional[bytes], header: Mapping[str, Any]) -> WrappedKey:
        kek = _check_kek(self.name, key, self.key_size)
        cek = enc.generate_cek() if cek is None else cek
        iv = os.urandom(self.iv_size)
        sealed = AESGCM(kek).encrypt(iv, cek, None)
        return WrappedKey(cek=cek, ek=sealed[:-self.tag_size], header=util.frozendict(
            iv=iv, tag=sealed[-self.tag_size:]))

    def _unwrap(self, key: jwk.JWK, ek: bytes, enc: jwe_enc.JWAContentEncryption,
                header: Mapping[str, Any]) -> bytes:
        kek = _check_kek(self.name, key, self.key_size)
        iv, tag = header.get('iv'), header.get('tag')
        if (not isinstance(iv, bytes) or len(iv) != self.iv_size or
                not isinstance(tag, bytes) or len(tag) != self.tag_size):
            raise errors.InvalidParameterError(
                '{0} requires "iv" and "tag" header parameters'.format(self.name))
        return AESGCM(kek).decrypt(iv, ek + tag, None)


class _JWARSAKeyTransport(JWAKeyManagement):
    """Key encryption with RSAES-PKCS1-v1_5 or RSAES OAEP."""

    kty = jwk.JWKRSA

    def __init__(self, name: str, padding_: Any) -> None:
        super().__init__(name)
        self.padding = padding_

    def _wrap(self, key: jwk.JWK, enc: jwe_enc.JWAContentEncryption,
              cek: Optional[bytes], header: Mapping[str, Any]) -> WrappedKey:
        cek = enc.generate_cek() if cek is None else cek
        return WrappedKey(cek=cek, ek=key.public_key.encrypt(cek, self.padding),
                          header=util.frozendict())

    def _unwrap(self, key: jwk.JWK, ek: bytes, enc: jwe_enc.JWAContentEncryption,
                header: Mapping[str, Any]) -> bytes:
        return key.private_key.decrypt(ek, self.padding)


class _JWARSA15(_JWARSAKeyTransport):

    def _unwrap(self, key: jwk.JWK, ek: bytes, enc: jwe_enc.JWAContentEncryption,
                header: Mapping[str, Any]) -> bytes:
        private_key = key.private_key
        # RFC 7516, section 11.5: on a padding error continue with a
        # random CEK, so that the failure surfaces in content decryption
        # like any other integrity failure.
        random_cek = enc.generate_cek()
        try:
            cek = private_key.decrypt(ek, self.padding)
        except ValueError as error:
            logger.debug(error, exc_info=True)
            return random_cek
        if len(cek) != enc.cek_size:
            logger.debug('Decrypted key has the wrong size for %s', enc.name)
            return random_cek
        return cek


class _JWAECDHES(JWAKeyManagement):
    """Ephemeral-Static ECDH key agreement, optionally followed by AES KW.

    Works with EC keys and with X25519/X448 OKP keys (RFC 8037).

    """
    kty = jwk.JWKEC
    wrap_operation = 'deriveKey'
    unwrap_operation = 'deriveKey'

    def __init__(self, name: str, key_wrap: Optional[_JWAAESKW] = None) -> None:
        super().__init__(name)
        self.key_wrap = key_wrap

    def _check_key(self, key: jwk.JWK, operation: str) -> None:
        if isinstance(key, jwk.JWKOKP):
            if key.crv not in jwk.JWKOKP.KEY_AGREEMENT_CURVES:
                raise errors.InvalidKeyError(
                    '{0} requires an X25519 or X448 key, got {1}'.format(
                        self.name, key.crv))
            key.check_operation(operation, self.name)
        else:
            super()._check_key(key, operation)

    @staticmethod
    def _exchange(private_key: Any, public_key: Any) -> bytes:
        if isinstance(private_key, ec.EllipticCurvePrivateKey):
            return private_key.exchange(ec.ECDH(), public_key)
        return private_key.exchange(public_key)

    @staticmethod
    def _length_prefixed(data: bytes) -> bytes:
        return struct.pack('>I', len(data)) + data

    def _derive(self, shared_key: bytes, enc: jwe_enc.JWAContentEncryption,
                header: Mapping[str, Any]) -> bytes:
        if self.key_wrap is None:
            algorithm_id, length = enc.name, enc.cek_size
        else:
            algorithm_id, length = self.name, self.key_wrap.key_size
        other_info = (
            self._length_prefixed(algorithm_id.encode('ascii')) +
            self._length_prefixed(header.get('apu') or b'') +
            self._length_prefixed(header.get('apv') or b'') +
            struct.pack('>I', length * 8)
        )
        ckdf = ConcatKDFHash(algorithm=hashes.SHA256(), length=length,
                             otherinfo=other_info)
        return ckdf.derive(shared_key)

    def _wrap(self, key: jwk.JWK, enc: jwe_enc.JWAContentEncryption,
              cek: Optional[bytes], header: Mapping[str, Any]) -> WrappedKey:
        ephemeral = type(key).generate(key.crv)
        derived = self._derive(
            self._exchange(ephemeral.private_key, key.public_key), enc, header)
        epk = ephemeral.public_jwk()

        if self.key_wrap is None:
            if cek is not None:
                raise errors.InvalidParameterError(
                    'The content encryption key of "{0}" is derived.'.format(self.name))
            return WrappedKey(cek=derived, ek=b'', header=util.frozendict(epk=epk))
        cek = enc.generate_cek() if cek is None else cek
        return WrappedKey(cek=cek, ek=aes_key_wrap(derived, cek),
                          header=util.frozendict(epk=epk))

    def _unwrap(self, key: jwk.JWK, ek: bytes, enc: jwe_enc.JWAContentEncryption,
                header: Mapping[str, Any]) -> bytes:
        epk = header.get('epk')
        if not isinstance(epk, type(key)) or epk.crv != key.crv:
            raise errors.InvalidParameterError(
                '{0} requires an "epk" header parameter on the key\'s curve'.format(
                    self.name))
        derived = self._derive(
            self._exchange(key.private_key, epk.public_key), enc, header)
        if self.key_wrap is None:
            if ek:
                raise errors.InvalidParameterError('Encrypted key must be empty')
            return derived
        return aes_key_unwrap(derived, ek)


DIR = JWAKeyManagement.register(_JWADirect('dir'))

A128KW = JWAKeyManagement.register(_JWAAESKW('A128KW', 16))
A192KW = JWAKeyManagement.register(_JWAAESKW('A192KW', 24))
A256KW = JWAKeyManagement.register(_JWAAESKW('A256KW', 32))

A128GCMKW = JWAKeyManagement.register(_JWAAESGCMKW('A128GCMKW', 16))
A192GCMKW = JWAKeyManagement.register(_JWAAESGCMKW('A192GCMKW', 24))
A256GCMKW = JWAKeyManagement.register(_JWAAESGCMKW('A256GCMKW', 32))

RSA1_5 = JWAKeyManagement.register(_JWARSA15('RSA1_5', padding.PKCS1v15()))
RSA_OAEP = JWAKeyManagement.register(_JWARSAKeyTransport('RSA-OAEP', padding.OAEP(
    mgf=padding.MGF1(hashes.SHA1()), algorithm=hashes.SHA1(), label=None)))
RSA_OAEP_256 = JWAKeyManagement.register(_JWARSAKeyTransport('RSA-OAEP-256', padding.OAEP(
    mgf=padding.MGF1(hashes.SHA256()), algorithm=hashes.SHA256(), label=None)))
RSA_OAEP_384 = JWAKeyManagement.register(_JWARSAKeyTransport('RSA-OAEP-384', padding.OAEP(
    mgf=padding.MGF1(hashes.SHA384()), algorithm=hashes.SHA384(), label=None)))
RSA_OAEP_512 = JWAKeyManagement.register(_JWARSAKeyTransport('RSA-OAEP-512', padding.OAEP(
    mgf=padding.MGF1(hashes.SHA512()), algorithm=hashes.SHA512(), label=None)))

ECDH_ES = JWAKeyManagement.register(_JWAECDHES('ECDH-ES'))
ECDH_ES_A128KW = JWAKeyManagement.register(_JWAECDHES('ECDH-ES+A128KW', A128KW))
ECDH_ES_A192KW = JWAKeyManagement.register(_JWAECDHES('ECDH-ES+A192KW', A192KW))
ECDH_ES_A256KW = JWAKeyManagement.register(_JWAECDHES('ECDH-ES+A256KW', A256KW))

JWAKeyManagement.ALGORITHMS = util.frozendict(JWAKeyManagement.ALGORITHMS)
