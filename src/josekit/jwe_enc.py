"""JWE content encryption algorithms ("enc").

https://www.rfc-editor.org/rfc/rfc7518#section-5

"""
import abc
import logging
import os
import struct
from typing import Dict
from typing import Tuple
from typing import Type

import cryptography.exceptions
from cryptography.hazmat.primitives import constant_time
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import hmac
from cryptography.hazmat.primitives import padding
from cryptography.hazmat.primitives.ciphers import Cipher
from cryptography.hazmat.primitives.ciphers import algorithms
from cryptography.hazmat.primitives.ciphers import modes
from cryptography.hazmat.primitives.ciphers.aead import AESGCM

from josekit import errors
from josekit import jwa
from josekit import util

logger = logging.getLogger(__name__)


class JWAContentEncryption(jwa.JWA):
    """JWE Content Encryption Algorithm.

    :ivar int cek_size: Size of the Content Encryption Key, in bytes.
    :ivar int iv_size: Size of the Initialization Vector, in bytes.
    :ivar int tag_size: Size of the Authentication Tag, in bytes.

    """
    ALGORITHMS: Dict[str, 'JWAContentEncryption'] = {}

    cek_size: int = NotImplemented
    iv_size: int = NotImplemented
    tag_size: int = NotImplemented

    def generate_cek(self) -> bytes:
        """Generate a random Content Encryption Key."""
        return os.urandom(self.cek_size)

    def generate_iv(self) -> bytes:
        """Generate a random Initialization Vector."""
        return os.urandom(self.iv_size)

    def check_key(self, cek: bytes) -> None:
        """Check the Content Encryption Key size.

        :raises josekit.errors.InvalidKeyError: if ``cek`` is not exactly
            :attr:`cek_size` bytes long

        """
        if not isinstance(cek, bytes) or len(cek) != self.cek_size:
            raise errors.InvalidKeyError(
                '{0} requires a content encryption key of {1} bytes.'.format(
                    self.name, self.cek_size))

    def encrypt(self, plaintext: bytes, aad: bytes, iv: bytes,
                cek: bytes) -> Tuple[bytes, bytes]:
        """Encrypt and authenticate.

        :param bytes plaintext: Message to be encrypted.
        :param bytes aad: Additional Authenticated Data.
        :param bytes iv: Initialization Vector.
        :param bytes cek: Content Encryption Key.

        :returns: Ciphertext and Authentication Tag.
        :rtype: tuple

        :raises josekit.errors.InvalidKeyError: if ``cek`` has the wrong
            size

        """
        self.check_key(cek)
        if len(iv) != self.iv_size:
            raise errors.InvalidParameterError(
                '{0} requires an IV of {1} bytes.'.format(self.name, self.iv_size))
        return self._encrypt(plaintext, aad, iv, cek)

    def decrypt(self, ciphertext: bytes, aad: bytes, iv: bytes, tag: bytes,
                cek: bytes) -> bytes:
        """Authenticate and decrypt.

        :raises josekit.errors.InvalidJsonWebEncryptionError: on any
            failure, including a wrongly sized ``cek``, ``iv`` or ``tag``

        """
        try:
            self.check_key(cek)
        except errors.InvalidKeyError as error:
            logger.debug(error, exc_info=True)
            raise errors.InvalidJsonWebEncryptionError()
        if len(iv) != self.iv_size or len(tag) != self.tag_size:
            logger.debug('Wrong IV or tag size for %s', self.name)
            raise errors.InvalidJsonWebEncryptionError()
        return self._decrypt(ciphertext, aad, iv, tag, cek)

    @abc.abstractmethod
    def _encrypt(self, plaintext: bytes, aad: bytes, iv: bytes,
                 cek: bytes) -> Tuple[bytes, bytes]:  # pragma: no cover
        raise NotImplementedError()

    @abc.abstractmethod
    def _decrypt(self, ciphertext: bytes, aad: bytes, iv: bytes, tag: bytes,
                 cek: bytes) -> bytes:  # pragma: no cover
        raise NotImplementedError()


class _JWACBCHS(JWAContentEncryption):
    """AES_CBC_HMAC_SHA2 composite (RFC 7518, section 5.2)."""

    iv_size = 16

    def __init__(self, name: str, key_size: int, hash_: Type[hashes.HashAlgorithm]) -> None:
        super().__init__(name)
        self.key_size = key_size
        self.cek_size = 2 * key_size
        self.tag_size = key_size
        self.hash = hash_()

    def _tag(self, mac_key: bytes, aad: bytes, iv: bytes, ciphertext: bytes) -> bytes:
        mac = hmac.HMAC(mac_key, self.hash)
        mac.update(aad)
        mac.update(iv)
        mac.update(ciphertext)
        mac.update(struct.pack('>Q', len(aad) * 8))
        return mac.finalize()[:self.tag_size]

    def _encrypt(self, plaintext: bytes, aad: bytes, iv: bytes,
                 cek: bytes) -> Tuple[bytes, bytes]:
        mac_key, enc_key = cek[:self.key_size], cek[self.key_size:]
        padder = padding.PKCS7(algorithms.AES.block_size).padder()
        padded = padder.update(plaintext) + padder.finalize()
        encryptor = Cipher(algorithms.AES(enc_key), modes.CBC(iv)).encryptor()
        ciphertext = encryptor.update(padded) + encryptor.finalize()
        return ciphertext, self._tag(mac_key, aad, iv, ciphertext)

    def _decrypt(self, ciphertext: bytes, aad: bytes, iv: bytes, tag: bytes,
                 cek: bytes) -> bytes:
        mac_key, enc_key = cek[:self.key_size], cek[self.key_size:]
        # authenticate before touching the ciphertext
        if not constant_time.bytes_eq(self._tag(mac_key, aad, iv, ciphertext), tag):
            logger.debug('Authentication tag mismatch for %s', self.name)
            raise errors.InvalidJsonWebEncryptionError()
        try:
            decryptor = Cipher(algorithms.AES(enc_key), modes.CBC(iv)).decryptor()
            padded = decryptor.update(ciphertext) + decryptor.finalize()
            unpadder = padding.PKCS7(algorithms.AES.block_size).unpadder()
            return unpadder.update(padded) + unpadder.finalize()
        except ValueError as error:
            logger.debug(error, exc_info=True)
            raise errors.InvalidJsonWebEncryptionError()


class _JWAGCM(JWAContentEncryption):
    """AES GCM (RFC 7518, section 5.3)."""

    iv_size = 12
    tag_size = 16

    def __init__(self, name: str, cek_size: int) -> None:
        super().__init__(name)
        self.cek_size = cek_size

    def _encrypt(self, plaintext: bytes, aad: bytes, iv: bytes,
                 cek: bytes) -> Tuple[bytes, bytes]:
        sealed = AESGCM(cek).encrypt(iv, plaintext, aad)
        return sealed[:-self.tag_size], sealed[-self.tag_size:]

    def _decrypt(self, ciphertext: bytes, aad: bytes, iv: bytes, tag: bytes,
                 cek: bytes) -> bytes:
        try:
            return AESGCM(cek).decrypt(iv, ciphertext + tag, aad)
        except cryptography.exceptions.InvalidTag as error:
            logger.debug(error, exc_info=True)
            raise errors.InvalidJsonWebEncryptionError()


A128CBC_HS256 = JWAContentEncryption.register(
    _JWACBCHS('A128CBC-HS256', 16, hashes.SHA256))
A192CBC_HS384 = JWAContentEncryption.register(
    _JWACBCHS('A192CBC-HS384', 24, hashes.SHA384))
A256CBC_HS512 = JWAContentEncryption.register(
    _JWACBCHS('A256CBC-HS512', 32, hashes.SHA512))

A128GCM = JWAContentEncryption.register(_JWAGCM('A128GCM', 16))
A192GCM = JWAContentEncryption.register(_JWAGCM('A192GCM', 24))
A256GCM = JWAContentEncryption.register(_JWAGCM('A256GCM', 32))

JWAContentEncryption.ALGORITHMS = util.frozendict(JWAContentEncryption.ALGORITHMS)
