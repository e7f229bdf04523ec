"""JSON Web Encryption.

https://www.rfc-editor.org/rfc/rfc7516

Only the compact serialization is supported. Decryption failures of any
kind are reported as a single, detail free
:class:`~josekit.errors.InvalidJsonWebEncryptionError`.

"""
import logging
from typing import Any
from typing import Iterable
from typing import Optional
from typing import Union
import zlib

from josekit import b64
from josekit import constants
from josekit import errors
from josekit import header as jose_header
from josekit import json_util
from josekit import jwe_alg
from josekit import jwe_enc
from josekit import jwk as jose_jwk
from josekit import jwks
from josekit import util

logger = logging.getLogger(__name__)

DEFLATE = 'DEF'
"""The only supported ``zip`` value, raw DEFLATE (RFC 1951)."""


def _deflate(data: bytes) -> bytes:
    compressor = zlib.compressobj(zlib.Z_DEFAULT_COMPRESSION, zlib.DEFLATED, -15)
    return compressor.compress(data) + compressor.flush()


def _inflate(data: bytes) -> bytes:
    decompressor = zlib.decompressobj(-15)
    inflated = decompressor.decompress(data) + decompressor.flush()
    if not decompressor.eof:
        raise zlib.error('Truncated DEFLATE stream')
    return inflated


def _algorithm(family: Any, alg: Any) -> Any:
    return alg if isinstance(alg, family) else family.from_json(alg)


def _names(algorithms: Iterable[Any]) -> frozenset:
    return frozenset(getattr(alg, 'name', alg) for alg in algorithms)


class Header(jose_header.Header):
    """JWE Header.

    :ivar alg: Key management algorithm
        (:class:`~josekit.jwe_alg.JWAKeyManagement`).
    :ivar enc: Content encryption algorithm
        (:class:`~josekit.jwe_enc.JWAContentEncryption`).
    :ivar str zip: Compression algorithm.
    :ivar epk: Ephemeral public key of ECDH-ES (:class:`~josekit.jwk.JWK`).
    :ivar bytes apu: Agreement PartyUInfo.
    :ivar bytes apv: Agreement PartyVInfo.
    :ivar bytes iv: IV of AES GCM key wrapping.
    :ivar bytes tag: Authentication tag of AES GCM key wrapping.

    """
    alg = json_util.Field(
        'alg', decoder=jwe_alg.JWAKeyManagement.from_json, omitempty=True)
    enc = json_util.Field(
        'enc', decoder=jwe_enc.JWAContentEncryption.from_json, omitempty=True)
    zip = json_util.Field('zip', omitempty=True)
    epk = json_util.Field('epk', decoder=jose_jwk.JWK.from_json, omitempty=True)
    apu = json_util.Field(
        'apu', decoder=json_util.decode_b64jose,
        encoder=json_util.encode_b64jose, omitempty=True)
    apv = json_util.Field(
        'apv', decoder=json_util.decode_b64jose,
        encoder=json_util.encode_b64jose, omitempty=True)
    iv = json_util.Field(
        'iv', decoder=json_util.decode_b64jose,
        encoder=json_util.encode_b64jose, omitempty=True)
    tag = json_util.Field(
        'tag', decoder=json_util.decode_b64jose,
        encoder=json_util.encode_b64jose, omitempty=True)


class JWE(util.ImmutableMap):
    """JSON Web Encryption.

    :ivar str protected: JWE Protected Header (Jose Base-64 decoded).
    :ivar header: Parsed protected header (:class:`Header`).
    :ivar bytes encoded_protected: Protected header exactly as received,
        the Additional Authenticated Data of the content encryption.
    :ivar bytes encrypted_key: JWE Encrypted Key.
    :ivar bytes iv: JWE Initialization Vector.
    :ivar bytes ciphertext: JWE Ciphertext.
    :ivar bytes tag: JWE Authentication Tag.

    """
    __slots__ = ('protected', 'header', 'encoded_protected', 'encrypted_key',
                 'iv', 'ciphertext', 'tag')

    header_cls = Header

    def __init__(self, **kwargs: Any) -> None:
        if 'header' not in kwargs:
            kwargs['header'] = self.header_cls.json_loads(kwargs.get('protected'))
        if 'encoded_protected' not in kwargs:
            kwargs['encoded_protected'] = b64.b64encode(
                kwargs['protected'].encode('utf-8'))
        super().__init__(**kwargs)

    @classmethod
    def encrypt(cls, plaintext: bytes, key: jose_jwk.JWK,
                alg: Union[str, jwe_alg.JWAKeyManagement],
                enc: Union[str, jwe_enc.JWAContentEncryption],
                zip: Optional[str] = None,  # pylint: disable=redefined-builtin
                cek: Optional[bytes] = None, **header: Any) -> 'JWE':
        """Encrypt ``plaintext`` for the holder of ``key``.

        A fresh IV is generated for every call. All header parameters
        are protected. The key's ``kid``, if any, is added to the header
        unless ``kid`` is given explicitly.

        :param bytes plaintext: Message to be encrypted.
        :param JWK key: Recipient's key.
        :param alg: Key management algorithm (name or instance).
        :param enc: Content encryption algorithm (name or instance).
        :param str zip: ``'DEF'`` to compress ``plaintext`` first.
        :param bytes cek: Content Encryption Key to use instead of a
            generated one. Not allowed with direct key agreement.
        :param header: Additional header parameters, e.g. ``typ``,
            ``apu`` and ``apv``.

        :raises josekit.errors.UnsupportedAlgorithmError: if ``alg`` or
            ``enc`` is not known
        :raises josekit.errors.InvalidParameterError: if ``zip`` is not
            supported
        :raises josekit.errors.InvalidKeyError: if ``key`` cannot be
            used with ``alg`` and ``enc``

        """
        alg = _algorithm(jwe_alg.JWAKeyManagement, alg)
        enc = _algorithm(jwe_enc.JWAContentEncryption, enc)
        if zip not in (None, DEFLATE):
            raise errors.InvalidParameterError(
                'Unsupported compression: {0}'.format(zip))

        header_params = header
        header_params.update(alg=alg, enc=enc)
        if zip is not None:
            header_params['zip'] = zip
        if key.kid is not None:
            header_params.setdefault('kid', key.kid)
        partial = cls.header_cls(**header_params)

        wrapped = alg.wrap(key, enc, cek=cek, header=partial)
        protected_header = partial.update(**wrapped.header)
        protected = protected_header.json_dumps(
            separators=constants.COMPACT_SEPARATORS)
        encoded_protected = b64.b64encode(protected.encode('utf-8'))

        if zip is not None:
            plaintext = _deflate(plaintext)
        iv = enc.generate_iv()
        ciphertext, tag = enc.encrypt(plaintext, encoded_protected, iv, wrapped.cek)

        return cls(protected=protected, header=protected_header,
                   encoded_protected=encoded_protected,
                   encrypted_key=wrapped.ek, iv=iv, ciphertext=ciphertext, tag=tag)

    def to_compact(self) -> bytes:
        """Compact serialization.

        :rtype: bytes

        """
        return b'.'.join([self.encoded_protected] + [
            b64.b64encode(part) for part in (
                self.encrypted_key, self.iv, self.ciphertext, self.tag)])

    @classmethod
    def from_compact(cls, compact: Union[bytes, str]) -> 'JWE':
        """Compact deserialization.

        :param compact: JWE Compact Serialization.
        :type compact: bytes or str

        :raises josekit.errors.InvalidJsonWebEncryptionError: if
            ``compact`` is not a well formed JWE

        """
        try:
            if isinstance(compact, str):
                compact = compact.encode('ascii')
            parts = compact.split(b'.')
            if len(parts) != 5 or not parts[0]:
                raise errors.DeserializationError(
                    'Compact JWE serialization should comprise of exactly'
                    ' 5 dot-separated components')
            protected, encrypted_key, iv, ciphertext, tag = (
                b64.b64decode(part) for part in parts)
            return cls(protected=protected.decode('utf-8'), encoded_protected=parts[0],
                       encrypted_key=encrypted_key, iv=iv,
                       ciphertext=ciphertext, tag=tag)
        except (errors.Error, ValueError) as error:
            logger.debug(error, exc_info=True)
            raise errors.InvalidJsonWebEncryptionError() from None

    def _resolve_key(self, key: Any) -> jose_jwk.JWK:
        if not isinstance(key, jwks.JWKSet):
            return key
        if self.header.kid is None:
            raise errors.KeyNotFoundError('JWE header has no "kid"')
        return key.get(lambda candidate: candidate.kid == self.header.kid)

    def decrypt(self, key: Union[jose_jwk.JWK, jwks.JWKSet],
                algorithms: Optional[Iterable[Any]] = None,
                encryptions: Optional[Iterable[Any]] = None,
                critical: Iterable[str] = ()) -> bytes:
        """Decrypt.

        :param key: Recipient's key, or a key set in which the key is
            looked up by the header's ``kid``.
        :param algorithms: Acceptable key management algorithms, any
            registered one if ``None``.
        :param encryptions: Acceptable content encryption algorithms,
            any registered one if ``None``.
        :param critical: Names of the ``crit`` extensions understood by
            the caller.

        :returns: Plaintext.
        :rtype: bytes

        :raises josekit.errors.InvalidJsonWebEncryptionError: on any
            failure

        """
        try:
            return self._decrypt(key, algorithms, encryptions, frozenset(critical))
        except errors.InvalidJsonWebEncryptionError:
            raise
        except (errors.Error, zlib.error) as error:
            logger.debug(error, exc_info=True)
            raise errors.InvalidJsonWebEncryptionError() from None

    def _decrypt(self, key: Any, algorithms: Optional[Iterable[Any]],
                 encryptions: Optional[Iterable[Any]],
                 critical: frozenset) -> bytes:
        header = self.header
        if header.alg is None or header.enc is None:
            raise errors.InvalidHeaderError('"alg" and "enc" are required')
        if algorithms is not None and header.alg.name not in _names(algorithms):
            raise errors.UnsupportedAlgorithmError(
                'Algorithm "{0}" is not allowed'.format(header.alg.name))
        if encryptions is not None and header.enc.name not in _names(encryptions):
            raise errors.UnsupportedAlgorithmError(
                'Encryption "{0}" is not allowed'.format(header.enc.name))
        if set(header.crit or ()) - critical:
            raise errors.InvalidHeaderError('Unsupported critical extensions')
        if header.zip not in (None, DEFLATE):
            raise errors.InvalidHeaderError('Unsupported compression')

        cek = header.alg.unwrap(self._resolve_key(key), self.encrypted_key,
                                header.enc, header)
        plaintext = header.enc.decrypt(
            self.ciphertext, self.encoded_protected, self.iv, self.tag, cek)
        if header.zip == DEFLATE:
            plaintext = _inflate(plaintext)
        return plaintext

    @classmethod
    def decode(cls, compact: Union[bytes, str], key: Union[jose_jwk.JWK, jwks.JWKSet],
               algorithms: Optional[Iterable[Any]] = None,
               encryptions: Optional[Iterable[Any]] = None,
               critical: Iterable[str] = ()) -> bytes:
        """Parse and decrypt a compact JWE.

        :returns: Plaintext.
        :rtype: bytes

        :raises josekit.errors.InvalidJsonWebEncryptionError: on any
            failure

        """
        return cls.from_compact(compact).decrypt(
            key, algorithms=algorithms, encryptions=encryptions,
            critical=critical)
