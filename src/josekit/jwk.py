"""JSON Web Key.

https://www.rfc-editor.org/rfc/rfc7517

"""
import abc
import json
import logging
import os
import re
from typing import Any
from typing import Dict
from typing import FrozenSet
from typing import Mapping
from typing import Optional
from typing import Sequence
from typing import Tuple
from typing import Type
from typing import Union

import cryptography.exceptions
from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric import ed448
from cryptography.hazmat.primitives.asymmetric import ed25519
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric import x448
from cryptography.hazmat.primitives.asymmetric import x25519

from josekit import constants
from josekit import crypto_util
from josekit import errors
from josekit import json_util
from josekit import util

logger = logging.getLogger(__name__)

KEY_TYPES = ('private', 'public')
"""Values accepted by the ``key_type`` argument of load/export."""

_PEM_LABEL = re.compile(rb'-----BEGIN ([A-Z0-9 ]+)-----')

_PEM_LABELS = {
    ('pkcs1', 'private'): (b'RSA PRIVATE KEY',),
    ('pkcs1', 'public'): (b'RSA PUBLIC KEY',),
    ('pkcs8', 'private'): (b'PRIVATE KEY', b'ENCRYPTED PRIVATE KEY'),
    ('sec1', 'private'): (b'EC PRIVATE KEY',),
    ('spki', 'public'): (b'PUBLIC KEY',),
}


class JWK(json_util.TypedJSONObjectWithFields):
    """JSON Web Key.

    Common parameters (``use``, ``key_ops``, ``alg``, ``kid``) are
    fields of this class; key material lives in the ``key`` slot of the
    subclasses. Instances are validated on construction and immutable
    afterwards.

    """
    type_field_name = 'kty'
    TYPES: Dict[str, Type['JWK']] = {}
    cryptography_key_types: Tuple[Type[Any], ...] = ()
    """Subclasses should override."""

    required: Sequence[str] = NotImplemented
    """Required members of public key's representation as defined by JWK/JWA."""

    containers: Mapping[str, FrozenSet[str]] = {}
    """Export/import containers, keyed by ``'private'``/``'public'``."""

    use = json_util.Field('use', omitempty=True)
    key_ops = json_util.Field('key_ops', omitempty=True)
    alg = json_util.Field('alg', omitempty=True)
    kid = json_util.Field('kid', omitempty=True)

    _thumbprint_json_dumps_params: Dict[str, Any] = {
        # "no whitespace or line breaks before or after any syntactic
        # elements"
        'indent': None,
        'separators': constants.COMPACT_SEPARATORS,
        # "members ordered lexicographically by the Unicode [UNICODE]
        # code points of the member names"
        'sort_keys': True,
    }

    def __init__(self, **kwargs: Any) -> None:
        if isinstance(kwargs.get('key_ops'), list):
            kwargs['key_ops'] = tuple(kwargs['key_ops'])
        super().__init__(**kwargs)
        self._check_common()
        self._check_key()

    def _check_common(self) -> None:
        if self.use is not None and self.use not in constants.KEY_USES:
            raise errors.InvalidKeyError('Invalid parameter "use".')

        if self.key_ops is not None:
            if (not isinstance(self.key_ops, tuple) or not self.key_ops or
                    any(not isinstance(op, str) for op in self.key_ops)):
                raise errors.InvalidKeyError('Invalid parameter "key_ops".')
            if len(set(self.key_ops)) != len(self.key_ops):
                raise errors.InvalidKeyError(
                    'Parameter "key_ops" must not contain duplicates.')
            unknown = set(self.key_ops) - constants.KEY_OPS
            if unknown:
                raise errors.InvalidKeyError(
                    'Unknown values in parameter "key_ops": {0}'.format(
                        ', '.join(sorted(unknown))))
            if (self.use is not None and
                    not set(self.key_ops) <= constants.KEY_OPS_BY_USE[self.use]):
                raise errors.InvalidKeyError(
                    'Parameter "key_ops" is inconsistent with "use".')

        for name in ('alg', 'kid'):
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                raise errors.InvalidKeyError('Invalid parameter "{0}".'.format(name))

    @abc.abstractmethod
    def _check_key(self) -> None:  # pragma: no cover
        """Validate the key material.

        :raises josekit.errors.InvalidKeyError: if invalid

        """
        raise NotImplementedError()

    @classmethod
    def from_json(cls, jobj: Mapping[str, Any]) -> 'JWK':
        """Deserialize JWK from its JSON parameters.

        :raises josekit.errors.InvalidKeyError: if ``kty`` is missing or
            unsupported, or any parameter is malformed

        """
        try:
            type_cls = cls.get_type_cls(jobj)
        except errors.DeserializationError as error:
            raise errors.InvalidKeyError(
                'Invalid parameter "kty": {0}'.format(error)) from error
        return type_cls(**type_cls.fields_from_json(jobj))

    @classmethod
    def generate(cls, kty: str, *args: Any, **kwargs: Any) -> 'JWK':
        """Generate a new private key of the given type.

        Remaining arguments are passed to the ``generate`` of the
        appropriate subclass.

        :raises josekit.errors.InvalidParameterError: if ``kty`` is not
            supported

        """
        try:
            jwk_cls = cls.TYPES[kty]
        except KeyError:
            raise errors.InvalidParameterError(
                'Unsupported key type: {0}'.format(kty))
        return jwk_cls.generate(*args, **kwargs)

    def common_params(self) -> Dict[str, Any]:
        """Common (non key material) parameters of this key."""
        return {name: getattr(self, name) for name in JWK._fields}

    def thumbprint(self, hash_function: Type[hashes.HashAlgorithm] = hashes.SHA256) -> bytes:
        """Compute JWK Thumbprint.

        https://www.rfc-editor.org/rfc/rfc7638

        :returns: bytes

        """
        digest = hashes.Hash(hash_function())
        digest.update(json.dumps(
            {k: v for k, v in self.to_json().items() if k in self.required},
            **self._thumbprint_json_dumps_params).encode())
        return digest.finalize()

    def check_operation(self, operation: str, alg: Optional[str] = None) -> None:
        """Check that the key may be used for ``operation`` with ``alg``.

        :param str operation: One of the ``key_ops`` values.
        :param str alg: Name of the algorithm about to use the key.

        :raises josekit.errors.InvalidKeyError: if ``alg`` differs from
            the key's ``alg`` pin, or ``operation`` is excluded by the
            key's ``use`` or ``key_ops``

        """
        if alg is not None and self.alg is not None and self.alg != alg:
            raise errors.InvalidKeyError(
                'Key is restricted to algorithm "{0}", not "{1}".'.format(
                    self.alg, alg))
        if self.key_ops is not None and operation not in self.key_ops:
            raise errors.InvalidKeyError(
                'Key does not allow operation "{0}".'.format(operation))
        if (self.use is not None and
                operation not in constants.KEY_OPS_BY_USE[self.use]):
            raise errors.InvalidKeyError(
                'Key intended for "{0}" cannot be used to {1}.'.format(
                    self.use, operation))

    @property
    def has_private(self) -> bool:
        """Does this key carry private (or secret) material?"""
        return False

    @abc.abstractmethod
    def public_jwk(self) -> 'JWK':  # pragma: no cover
        """Generate JWK with public key.

        For symmetric cryptosystems, this would return ``self``.

        """
        raise NotImplementedError()

    @property
    def secret_key(self) -> bytes:
        """Raw secret of a symmetric key.

        :raises josekit.errors.InvalidKeyError: if not a symmetric key

        """
        raise errors.InvalidKeyError(
            'Keys of type "{0}" have no secret key.'.format(self.typ))

    @property
    def public_key(self) -> Any:
        """Native ``cryptography`` public key.

        :raises josekit.errors.InvalidKeyError: if not an asymmetric key

        """
        raise errors.InvalidKeyError(
            'Keys of type "{0}" have no public key.'.format(self.typ))

    @property
    def private_key(self) -> Any:
        """Native ``cryptography`` private key.

        :raises josekit.errors.InvalidKeyError: if not an asymmetric
            private key

        """
        raise errors.InvalidKeyError(
            'Keys of type "{0}" have no private key.'.format(self.typ))

    @classmethod
    def _check_key_type_and_container(cls, key_type: Optional[str],
                                      container: Optional[str]) -> None:
        if key_type is not None and key_type not in KEY_TYPES:
            raise errors.InvalidParameterError(
                'Unsupported key type: {0}'.format(key_type))
        if container is None:
            return
        key_types = KEY_TYPES if key_type is None else (key_type,)
        if cls.typ is NotImplemented:
            allowed = [kt for kt in key_types if (container, kt) in _PEM_LABELS]
        else:
            allowed = [kt for kt in key_types
                       if container in cls.containers.get(kt, ())]
        if not allowed:
            raise errors.InvalidParameterError(
                'Format "{0}" is not supported for {1} {2} keys.'.format(
                    container, key_type or 'private or public',
                    cls.__name__))

    @classmethod
    def _check_pem_label(cls, data: bytes, key_type: Optional[str],
                         container: str) -> None:
        match = _PEM_LABEL.search(data)
        if match is None:  # DER, container is implied by the loader
            return
        labels = set()
        for kt in (KEY_TYPES if key_type is None else (key_type,)):
            labels.update(_PEM_LABELS.get((container, kt), ()))
        if match.group(1) not in labels:
            raise errors.ParseError('Expected a {0} PEM block, found "{1}"'.format(
                container, match.group(1).decode('ascii')))

    @classmethod
    def _load_cryptography_key(cls, data: bytes, password: Optional[bytes] = None,
                               key_type: Optional[str] = None) -> Any:
        exceptions = {}

        # private key?
        if key_type in (None, 'private'):
            for loader in (serialization.load_pem_private_key,
                           serialization.load_der_private_key):
                try:
                    return loader(data, password)
                except (ValueError, TypeError,
                        cryptography.exceptions.UnsupportedAlgorithm) as error:
                    exceptions[loader.__name__] = error

        # public key?
        if key_type in (None, 'public'):
            for loader in (serialization.load_pem_public_key,
                           serialization.load_der_public_key):
                try:
                    return loader(data)
                except (ValueError,
                        cryptography.exceptions.UnsupportedAlgorithm) as error:
                    exceptions[loader.__name__] = error

        # no luck
        raise errors.ParseError('Unable to deserialize key: {0}'.format(exceptions))

    @classmethod
    def load(cls, data: Union[bytes, Any], password: Optional[bytes] = None,
             key_type: Optional[str] = None, container: Optional[str] = None,
             **params: Any) -> 'JWK':
        """Load serialized key as JWK.

        The encoding (PEM or DER) and the container (PKCS#1, PKCS#8,
        SEC1 or SubjectPublicKeyInfo) are detected from ``data``. When
        ``container`` is given, PEM input must carry the matching
        block label.

        :param bytes data: Public or private key serialized as PEM or
            DER. A ``cryptography`` key object or an `OpenSSL.crypto.PKey`
            is accepted as well.
        :param bytes password: Optional password.
        :param str key_type: Restrict to ``'private'`` or ``'public'``.
        :param str container: Expected container, one of ``'pkcs1'``,
            ``'pkcs8'``, ``'sec1'`` or ``'spki'``.
        :param params: Common JWK parameters (``use``, ``kid``...).

        :raises josekit.errors.ParseError: if unable to deserialize
        :raises josekit.errors.InvalidParameterError: if ``key_type`` or
            ``container`` is not valid for the key type
        :raises josekit.errors.InvalidKeyError: if the key is of an
            unsupported or unexpected type, or fails validation

        :returns: JWK of an appropriate type.
        :rtype: `JWK`

        """
        cls._check_key_type_and_container(key_type, container)

        data = crypto_util.to_cryptography_key(data)
        if isinstance(data, bytes):
            if container is not None:
                cls._check_pem_label(data, key_type, container)
            key = cls._load_cryptography_key(data, password, key_type)
        else:
            key = data

        if cls.typ is not NotImplemented and not isinstance(
                key, cls.cryptography_key_types):
            raise errors.InvalidKeyError('Unable to deserialize {0} into {1}'.format(
                key.__class__.__name__, cls.__name__))
        for jwk_cls in cls.TYPES.values():
            if isinstance(key, jwk_cls.cryptography_key_types):
                if container is not None:
                    jwk_cls._check_key_type_and_container(key_type, container)
                return jwk_cls(key=key, **params)
        raise errors.InvalidKeyError(
            'Unsupported key type: {0}'.format(key.__class__.__name__))

    def export(self, container: Optional[str] = None, key_type: Optional[str] = None,
               encoding: crypto_util.Format = crypto_util.Format.PEM,
               password: Optional[bytes] = None) -> bytes:
        """Serialize the native key material.

        Inverse of :meth:`load`.

        :param str container: ``'pkcs1'``, ``'pkcs8'``, ``'sec1'`` or
            ``'spki'``, as applicable to the key type. Defaults to
            ``'pkcs8'`` for private and ``'spki'`` for public keys.
        :param str key_type: ``'private'`` or ``'public'``. Defaults to
            ``'private'`` when private material is available.
        :param Format encoding: PEM or DER.
        :param bytes password: Encrypts private keys when given.

        :raises josekit.errors.InvalidParameterError: if the combination
            of ``container`` and ``key_type`` is not valid for the key type
        :raises josekit.errors.InvalidKeyError: if private export is
            requested from a public key

        :rtype: bytes

        """
        if key_type is None:
            key_type = 'private' if self.has_private else 'public'
        if key_type not in self.containers:
            raise errors.InvalidParameterError(
                'Unsupported key type: {0}'.format(key_type))
        if container is None:
            container = 'pkcs8' if key_type == 'private' else 'spki'
        self._check_key_type_and_container(key_type, container)

        cryptography_encoding = crypto_util.Format(encoding).to_cryptography_encoding()
        try:
            if key_type == 'public':
                return self.public_key.public_bytes(
                    cryptography_encoding,
                    serialization.PublicFormat.PKCS1 if container == 'pkcs1'
                    else serialization.PublicFormat.SubjectPublicKeyInfo)

            if password:
                encryption = serialization.BestAvailableEncryption(password)
            else:
                encryption = serialization.NoEncryption()
            return self.private_key.private_bytes(
                cryptography_encoding,
                serialization.PrivateFormat.PKCS8 if container == 'pkcs8'
                else serialization.PrivateFormat.TraditionalOpenSSL,
                encryption)
        except ValueError as error:
            logger.debug(error, exc_info=True)
            raise errors.InvalidParameterError(str(error))


@JWK.register
class JWKOct(JWK):
    """Symmetric JWK.

    :ivar bytes key: Raw secret.

    """
    typ = 'oct'
    __slots__ = ('key',)
    required = ('k', JWK.type_field_name)

    @classmethod
    def _min_size(cls, alg: Optional[str]) -> int:
        if alg in constants.OCT_SHORT_KEY_ALGORITHMS:
            return constants.OCT_SHORT_KEY_SIZE
        return constants.OCT_MIN_KEY_SIZE

    def _check_key(self) -> None:
        if not isinstance(self.key, bytes):
            raise errors.InvalidKeyError('Invalid parameter "k".')
        minimum = self._min_size(self.alg)
        if len(self.key) < minimum:
            raise errors.InvalidKeyError(
                'Parameter "k" must be at least {0} bytes.'.format(minimum))

    @classmethod
    def generate(cls, size: int = constants.OCT_MIN_KEY_SIZE,  # pylint: disable=arguments-differ
                 **params: Any) -> 'JWKOct':
        """Generate a random secret.

        :param int size: Size of the secret in bytes.

        :raises josekit.errors.InvalidParameterError: if ``size`` is too
            small

        """
        minimum = cls._min_size(params.get('alg'))
        if not isinstance(size, int) or size < minimum:
            raise errors.InvalidParameterError(
                'Octet keys must be at least {0} bytes.'.format(minimum))
        return cls(key=os.urandom(size), **params)

    @classmethod
    def _check_raw(cls, key_type: Optional[str], container: Optional[str]) -> None:
        if key_type not in (None, 'private'):
            raise errors.InvalidParameterError(
                'Key type "{0}" is not supported for oct keys.'.format(key_type))
        if container not in (None, 'raw'):
            raise errors.InvalidParameterError(
                'Format "{0}" is not supported for oct keys.'.format(container))

    @classmethod
    def load(cls, data: bytes, password: Optional[bytes] = None,  # pylint: disable=unused-argument
             key_type: Optional[str] = None, container: Optional[str] = None,
             **params: Any) -> 'JWKOct':
        """Load raw secret as JWK."""
        cls._check_raw(key_type, container)
        return cls(key=data, **params)

    def export(self, container: Optional[str] = None, key_type: Optional[str] = None,
               encoding: crypto_util.Format = crypto_util.Format.PEM,
               password: Optional[bytes] = None) -> bytes:
        """Export the raw secret.

        :raises josekit.errors.InvalidParameterError: for any container
            but ``'raw'``, or any ``key_type`` but ``'private'``

        """
        self._check_raw(key_type, container)
        return self.key

    def fields_to_partial_json(self) -> Dict[str, Any]:
        jobj = super().fields_to_partial_json()
        jobj['k'] = json_util.encode_b64jose(self.key)
        return jobj

    @classmethod
    def fields_from_json(cls, jobj: Mapping[str, Any]) -> Dict[str, Any]:
        fields = super().fields_from_json(jobj)
        if 'k' not in jobj:
            raise errors.InvalidKeyError('Missing parameter "k".')
        try:
            fields['key'] = json_util.decode_b64jose(jobj['k'])
        except errors.DeserializationError as error:
            raise errors.InvalidKeyError('Invalid parameter "k".') from error
        return fields

    @property
    def has_private(self) -> bool:
        return True

    def public_jwk(self) -> 'JWKOct':
        return self

    @property
    def secret_key(self) -> bytes:
        return self.key


class _JWKAsymmetric(JWK):  # pylint: disable=abstract-method
    """Shared behaviour of RSA and EC keys.

    :ivar key: Native key wrapped in a :class:`.ComparableKey`.

    """
    __slots__ = ('key',)
    comparable_cls: Type[util.ComparableKey] = util.ComparableKey

    def __init__(self, **kwargs: Any) -> None:
        key = crypto_util.to_cryptography_key(kwargs.get('key'))
        if key is not None and not isinstance(key, util.ComparableKey):
            kwargs['key'] = self.comparable_cls(key)
        super().__init__(**kwargs)

    def _check_key_class(self) -> None:
        # pylint: disable=protected-access
        if not isinstance(self.key, self.comparable_cls) or not isinstance(
                self.key._wrapped, self.cryptography_key_types):
            raise errors.InvalidKeyError(
                'Expected a {0} key, got {1!r}'.format(self.typ, self.key))

    @property
    def has_private(self) -> bool:
        # pylint: disable=protected-access
        return hasattr(self.key._wrapped, 'private_numbers')

    def public_jwk(self) -> JWK:
        return self.update(key=self.key.public_key())

    @property
    def public_key(self) -> Any:
        # pylint: disable=protected-access
        return self.key.public_key()._wrapped

    @property
    def private_key(self) -> Any:
        if not self.has_private:
            raise errors.InvalidKeyError('Public keys have no private key.')
        return self.key._wrapped  # pylint: disable=protected-access

    @classmethod
    def _encode_param(cls, data: int, size: Optional[int] = None) -> str:
        """Encode Base64urlUInt.

        :param int data: Unsigned integer.
        :param int size: Fixed width in bytes, minimal width otherwise.

        :rtype: str

        """
        if size is None:
            size = max((data.bit_length() + 7) // 8, 1)
        return json_util.encode_b64jose(data.to_bytes(size, 'big'))

    @classmethod
    def _decode_param(cls, jobj: Mapping[str, Any], name: str,
                      size: Optional[int] = None) -> int:
        """Decode Base64urlUInt parameter ``name`` from ``jobj``."""
        if name not in jobj:
            raise errors.InvalidKeyError('Missing parameter "{0}".'.format(name))
        try:
            decoded = json_util.decode_b64jose(jobj[name], size=size)
        except errors.DeserializationError as error:
            raise errors.InvalidKeyError(
                'Invalid parameter "{0}".'.format(name)) from error
        if not decoded:
            raise errors.InvalidKeyError('Invalid parameter "{0}".'.format(name))
        return int.from_bytes(decoded, 'big')


@JWK.register
class JWKRSA(_JWKAsymmetric):
    """RSA JWK.

    :ivar key: :class:`~cryptography.hazmat.primitives.asymmetric.rsa.RSAPrivateKey`
        or :class:`~cryptography.hazmat.primitives.asymmetric.rsa.RSAPublicKey`
        wrapped in :class:`.ComparableRSAKey`

    """
    typ = 'RSA'
    cryptography_key_types = (rsa.RSAPublicKey, rsa.RSAPrivateKey)
    comparable_cls = util.ComparableRSAKey
    required = ('e', JWK.type_field_name, 'n')
    containers = {
        'private': frozenset(['pkcs1', 'pkcs8']),
        'public': frozenset(['pkcs1', 'spki']),
    }

    _private_params = ('d', 'p', 'q', 'dp', 'dq', 'qi')

    def _check_key(self) -> None:
        self._check_key_class()
        if self.key.key_size < constants.RSA_MIN_KEY_SIZE:
            raise errors.InvalidKeyError(
                'Parameter "n" must be at least {0} bits.'.format(
                    constants.RSA_MIN_KEY_SIZE))

    @classmethod
    def generate(cls, key_size: int = constants.RSA_DEFAULT_KEY_SIZE,  # pylint: disable=arguments-differ
                 public_exponent: int = constants.RSA_DEFAULT_PUBLIC_EXPONENT,
                 **params: Any) -> 'JWKRSA':
        """Generate a new RSA private key.

        :param int key_size: Modulus size in bits.
        :param int public_exponent: Public exponent.

        :raises josekit.errors.InvalidParameterError: if ``key_size`` is
            below 2048 bits or ``public_exponent`` is not supported

        """
        if not isinstance(key_size, int) or key_size < constants.RSA_MIN_KEY_SIZE:
            raise errors.InvalidParameterError(
                'RSA modulus must be at least {0} bits.'.format(
                    constants.RSA_MIN_KEY_SIZE))
        try:
            key = rsa.generate_private_key(
                public_exponent=public_exponent, key_size=key_size)
        except ValueError as error:
            logger.debug(error, exc_info=True)
            raise errors.InvalidParameterError(str(error))
        return cls(key=key, **params)

    @classmethod
    def fields_from_json(cls, jobj: Mapping[str, Any]) -> Dict[str, Any]:
        # pylint: disable=invalid-name
        fields = super().fields_from_json(jobj)
        n, e = (cls._decode_param(jobj, x) for x in ('n', 'e'))
        public_numbers = rsa.RSAPublicNumbers(e=e, n=n)

        present = [param for param in cls._private_params if param in jobj]
        if 'oth' in jobj:
            raise errors.InvalidKeyError(
                'Multi-prime RSA keys (parameter "oth") are not supported.')
        try:
            if not present:  # public key
                key = public_numbers.public_key()
            else:  # private key
                # "If the producer includes any of the other private
                # key parameters, then all of the others MUST be
                # present"
                missing = [param for param in cls._private_params
                           if param not in present]
                if missing:
                    raise errors.InvalidKeyError(
                        'Missing private parameters: {0}'.format(', '.join(missing)))
                d, p, q, dp, dq, qi = (
                    cls._decode_param(jobj, x) for x in cls._private_params)
                key = rsa.RSAPrivateNumbers(
                    p, q, d, dp, dq, qi, public_numbers).private_key()
        except ValueError as error:
            logger.debug(error, exc_info=True)
            raise errors.InvalidKeyError(
                'Inconsistent RSA parameters: {0}'.format(error)) from error

        fields['key'] = key
        return fields

    def fields_to_partial_json(self) -> Dict[str, Any]:
        jobj = super().fields_to_partial_json()
        if not self.has_private:
            numbers = self.key.public_numbers()
            params = {
                'n': numbers.n,
                'e': numbers.e,
            }
        else:  # rsa.RSAPrivateKey
            private = self.key.private_numbers()
            public = private.public_numbers
            params = {
                'n': public.n,
                'e': public.e,
                'd': private.d,
                'p': private.p,
                'q': private.q,
                'dp': private.dmp1,
                'dq': private.dmq1,
                'qi': private.iqmp,
            }
        jobj.update((key, self._encode_param(value))
                    for key, value in params.items())
        return jobj


@JWK.register
class JWKEC(_JWKAsymmetric):
    """EC JWK.

    :ivar key: :class:`~cryptography.hazmat.primitives.asymmetric.ec.EllipticCurvePrivateKey`
        or :class:`~cryptography.hazmat.primitives.asymmetric.ec.EllipticCurvePublicKey`
        wrapped in :class:`.ComparableECKey`

    """
    typ = 'EC'
    cryptography_key_types = (
        ec.EllipticCurvePublicKey, ec.EllipticCurvePrivateKey)
    comparable_cls = util.ComparableECKey
    required = ('crv', JWK.type_field_name, 'x', 'y')
    containers = {
        'private': frozenset(['sec1', 'pkcs8']),
        'public': frozenset(['spki']),
    }

    CURVES: Mapping[str, Type[ec.EllipticCurve]] = util.frozendict({
        'P-256': ec.SECP256R1,
        'P-384': ec.SECP384R1,
        'P-521': ec.SECP521R1,
    })
    """Supported curves, by JWA name."""

    @classmethod
    def _curve_name(cls, curve: ec.EllipticCurve) -> Optional[str]:
        for name, curve_cls in cls.CURVES.items():
            if curve.name == curve_cls.name:
                return name
        return None

    @staticmethod
    def coordinate_size(curve: ec.EllipticCurve) -> int:
        """Size of a coordinate or private scalar on ``curve``, in bytes."""
        return (curve.key_size + 7) // 8

    @property
    def crv(self) -> str:
        """JWA name of the curve, e.g. ``'P-256'``."""
        return self._curve_name(self.key.curve)

    def _check_key(self) -> None:
        self._check_key_class()
        if self._curve_name(self.key.curve) is None:
            raise errors.InvalidKeyError(
                'Unsupported curve: {0}'.format(self.key.curve.name))

    @classmethod
    def generate(cls, crv: str = constants.EC_DEFAULT_CURVE,  # pylint: disable=arguments-differ
                 **params: Any) -> 'JWKEC':
        """Generate a new EC private key.

        :param str crv: ``'P-256'``, ``'P-384'`` or ``'P-521'``.

        :raises josekit.errors.InvalidParameterError: if ``crv`` is not
            supported

        """
        try:
            curve_cls = cls.CURVES[crv]
        except (KeyError, TypeError):
            raise errors.InvalidParameterError('Unsupported curve: {0}'.format(crv))
        return cls(key=ec.generate_private_key(curve_cls()), **params)

    @classmethod
    def fields_from_json(cls, jobj: Mapping[str, Any]) -> Dict[str, Any]:
        # pylint: disable=invalid-name
        fields = super().fields_from_json(jobj)
        try:
            curve = cls.CURVES[jobj['crv']]()
        except KeyError:
            raise errors.InvalidKeyError('Missing or unsupported parameter "crv".')
        except TypeError:
            raise errors.InvalidKeyError('Invalid parameter "crv".')
        size = cls.coordinate_size(curve)

        x, y = (cls._decode_param(jobj, param, size) for param in ('x', 'y'))
        try:
            public_numbers = ec.EllipticCurvePublicNumbers(x, y, curve)
            if 'd' not in jobj:
                key = public_numbers.public_key()
            else:
                key = ec.derive_private_key(cls._decode_param(jobj, 'd', size), curve)
                if key.public_key().public_numbers() != public_numbers:
                    raise errors.InvalidKeyError(
                        'Parameter "d" does not match "x" and "y".')
        except ValueError as error:
            logger.debug(error, exc_info=True)
            raise errors.InvalidKeyError(
                'Invalid EC parameters: {0}'.format(error)) from error

        fields['key'] = key
        return fields

    def fields_to_partial_json(self) -> Dict[str, Any]:
        jobj = super().fields_to_partial_json()
        size = self.coordinate_size(self.key.curve)
        public = self.public_key.public_numbers()
        jobj['crv'] = self.crv
        jobj['x'] = self._encode_param(public.x, size)
        jobj['y'] = self._encode_param(public.y, size)
        if self.has_private:
            jobj['d'] = self._encode_param(
                self.key.private_numbers().private_value, size)
        return jobj


@JWK.register
class JWKOKP(_JWKAsymmetric):
    """Octet key pair JWK.

    https://www.rfc-editor.org/rfc/rfc8037

    :ivar key: Ed25519, Ed448, X25519 or X448 private or public key
        wrapped in :class:`.ComparableOKPKey`

    """
    typ = 'OKP'
    cryptography_key_types = (
        ed25519.Ed25519PublicKey, ed25519.Ed25519PrivateKey,
        ed448.Ed448PublicKey, ed448.Ed448PrivateKey,
        x25519.X25519PublicKey, x25519.X25519PrivateKey,
        x448.X448PublicKey, x448.X448PrivateKey,
    )
    comparable_cls = util.ComparableOKPKey
    required = ('crv', JWK.type_field_name, 'x')
    containers = {
        'private': frozenset(['pkcs8']),
        'public': frozenset(['spki']),
    }

    CURVES: Mapping[str, Tuple[Type[Any], Type[Any]]] = util.frozendict({
        'Ed25519': (ed25519.Ed25519PrivateKey, ed25519.Ed25519PublicKey),
        'Ed448': (ed448.Ed448PrivateKey, ed448.Ed448PublicKey),
        'X25519': (x25519.X25519PrivateKey, x25519.X25519PublicKey),
        'X448': (x448.X448PrivateKey, x448.X448PublicKey),
    })
    """Supported curves, by JWA name: (private key class, public key class)."""

    SIGNATURE_CURVES = frozenset(['Ed25519', 'Ed448'])
    KEY_AGREEMENT_CURVES = frozenset(['X25519', 'X448'])

    @property
    def crv(self) -> str:
        """Name of the curve, e.g. ``'Ed25519'``."""
        # pylint: disable=protected-access
        for name, key_types in self.CURVES.items():
            if isinstance(self.key._wrapped, key_types):
                return name
        raise errors.InvalidKeyError(  # pragma: no cover
            'Unsupported key: {0!r}'.format(self.key))

    def _check_key(self) -> None:
        self._check_key_class()

    @property
    def has_private(self) -> bool:
        return self.key.is_private()

    @classmethod
    def generate(cls, crv: str = constants.OKP_DEFAULT_CURVE,  # pylint: disable=arguments-differ
                 **params: Any) -> 'JWKOKP':
        """Generate a new private key.

        :param str crv: ``'Ed25519'``, ``'Ed448'``, ``'X25519'`` or
            ``'X448'``.

        :raises josekit.errors.InvalidParameterError: if ``crv`` is not
            supported

        """
        try:
            private_cls, _ = cls.CURVES[crv]
        except (KeyError, TypeError):
            raise errors.InvalidParameterError('Unsupported curve: {0}'.format(crv))
        return cls(key=private_cls.generate(), **params)

    @classmethod
    def _decode_raw(cls, jobj: Mapping[str, Any], name: str) -> bytes:
        if name not in jobj:
            raise errors.InvalidKeyError('Missing parameter "{0}".'.format(name))
        try:
            return json_util.decode_b64jose(jobj[name])
        except errors.DeserializationError as error:
            raise errors.InvalidKeyError(
                'Invalid parameter "{0}".'.format(name)) from error

    @classmethod
    def fields_from_json(cls, jobj: Mapping[str, Any]) -> Dict[str, Any]:
        fields = super().fields_from_json(jobj)
        try:
            private_cls, public_cls = cls.CURVES[jobj['crv']]
        except KeyError:
            raise errors.InvalidKeyError('Missing or unsupported parameter "crv".')
        except TypeError:
            raise errors.InvalidKeyError('Invalid parameter "crv".')

        x = cls._decode_raw(jobj, 'x')
        try:
            public_key = public_cls.from_public_bytes(x)
            if 'd' not in jobj:
                key = public_key
            else:
                key = private_cls.from_private_bytes(cls._decode_raw(jobj, 'd'))
                if (cls.comparable_cls(key.public_key()) !=
                        cls.comparable_cls(public_key)):
                    raise errors.InvalidKeyError('Parameter "d" does not match "x".')
        except ValueError as error:
            logger.debug(error, exc_info=True)
            raise errors.InvalidKeyError(
                'Invalid OKP parameters: {0}'.format(error)) from error

        fields['key'] = key
        return fields

    def fields_to_partial_json(self) -> Dict[str, Any]:
        jobj = super().fields_to_partial_json()
        jobj['crv'] = self.crv
        jobj['x'] = json_util.encode_b64jose(self.key.public_key().raw_bytes())
        if self.has_private:
            jobj['d'] = json_util.encode_b64jose(self.key.raw_bytes())
        return jobj


JWK.TYPES = util.frozendict(JWK.TYPES)
