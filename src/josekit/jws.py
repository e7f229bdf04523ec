"""JSON Web Signature.

https://www.rfc-editor.org/rfc/rfc7515

"""
import logging
from typing import Any
from typing import Dict
from typing import Iterable
from typing import Mapping
from typing import Optional
from typing import Union

from josekit import b64
from josekit import constants
from josekit import errors
from josekit import header as jose_header
from josekit import json_util
from josekit import jwa
from josekit import jwk as jose_jwk
from josekit import jwks

logger = logging.getLogger(__name__)


def _algorithm_names(algorithms: Iterable[Union[str, jwa.JWASignature]]) -> frozenset:
    return frozenset(getattr(alg, 'name', alg) for alg in algorithms)


class Header(jose_header.Header):
    """JWS Header.

    :ivar alg: Signature algorithm (:class:`~josekit.jwa.JWASignature`).

    """
    alg = json_util.Field(
        'alg', decoder=jwa.JWASignature.from_json, omitempty=True)


class Signature(json_util.JSONObjectWithFields):
    """JWS Signature.

    :ivar combined: Combined Header (protected and unprotected,
        :class:`Header`).
    :ivar str protected: JWS protected header (Jose Base-64 decoded).
    :ivar bytes encoded_protected: JWS protected header exactly as
        received, the first part of the signing input.
    :ivar header: JWS Unprotected Header (:class:`Header`).
    :ivar bytes signature: The signature.

    """
    header_cls = Header

    __slots__ = ('combined', 'encoded_protected')
    protected = json_util.Field('protected', omitempty=True, default='')
    header = json_util.Field(
        'header', omitempty=True, default=header_cls(),
        decoder=header_cls.from_json)
    signature = json_util.Field(
        'signature', decoder=json_util.decode_b64jose,
        encoder=json_util.encode_b64jose)

    @protected.encoder
    def protected(value):  # pylint: disable=missing-docstring,no-self-argument
        return json_util.encode_b64jose(value.encode('utf-8'))

    @protected.decoder
    def protected(value):  # pylint: disable=missing-docstring,no-self-argument
        try:
            return json_util.decode_b64jose(value).decode('utf-8')
        except UnicodeDecodeError as error:
            raise errors.DecodingError(error)

    def __init__(self, **kwargs: Any) -> None:
        if 'combined' not in kwargs:
            kwargs = self._with_combined(kwargs)
        if 'encoded_protected' not in kwargs:
            kwargs['encoded_protected'] = b64.b64encode(kwargs.get(
                'protected', self._fields['protected'].default).encode('utf-8'))
        super().__init__(**kwargs)
        if self.combined.alg is None:
            raise errors.DeserializationError('alg not present')

    @classmethod
    def _with_combined(cls, kwargs: Dict[str, Any]) -> Dict[str, Any]:
        header = kwargs.get('header', cls._fields['header'].default)
        protected = kwargs.get('protected', cls._fields['protected'].default)

        if protected:
            combined = header + cls.header_cls.json_loads(protected)
        else:
            combined = header

        kwargs['combined'] = combined
        return kwargs

    @classmethod
    def _msg(cls, encoded_protected: bytes, payload: bytes) -> bytes:
        return encoded_protected + b'.' + b64.b64encode(payload)

    def verify(self, payload: bytes, key: Optional[jose_jwk.JWK]) -> None:
        """Verify the signature over ``payload``.

        :param JWK key: Key used for verification, ignored by ``none``.

        :raises josekit.errors.InvalidSignatureError: if the signature
            does not match

        """
        self.combined.alg.verify(
            key=key, msg=self._msg(self.encoded_protected, payload), sig=self.signature)

    @classmethod
    def sign(cls, payload: bytes, key: jose_jwk.JWK, alg: jwa.JWASignature,
             protect: Optional[Iterable[str]] = None, include_jwk: bool = False,
             **kwargs: Any) -> 'Signature':
        """Sign.

        :param bytes payload: Payload to be signed.
        :param JWK key: Key for signature.
        :param alg: Signature algorithm.
        :param protect: Names of the header parameters to be integrity
            protected. All of them are protected by default.
        :param bool include_jwk: Include the public key as ``jwk``.
        :param kwargs: Header parameters, registered or not.

        """
        header_params = kwargs
        header_params['alg'] = alg
        if key is not None and key.kid is not None:
            header_params.setdefault('kid', key.kid)
        if include_jwk:
            if isinstance(key, jose_jwk.JWKOct):
                raise errors.InvalidParameterError(
                    'Symmetric keys cannot be included in the header')
            header_params['jwk'] = key.public_jwk()

        protect = set(header_params) if protect is None else set(protect)
        unknown = protect - set(header_params)
        if unknown:
            raise errors.InvalidParameterError(
                'Cannot protect parameters that are not set: {0}'.format(
                    ', '.join(sorted(unknown))))

        protected_params = {}
        for name in protect:
            protected_params[name] = header_params.pop(name)
        if protected_params:
            protected = cls.header_cls(**protected_params).json_dumps(
                separators=constants.COMPACT_SEPARATORS)
        else:
            protected = ''

        header = cls.header_cls(**header_params)
        encoded_protected = b64.b64encode(protected.encode('utf-8'))
        signature = alg.sign(key, cls._msg(encoded_protected, payload))

        return cls(protected=protected, header=header, signature=signature,
                   encoded_protected=encoded_protected)

    def fields_to_partial_json(self) -> Dict[str, Any]:
        fields = super().fields_to_partial_json()
        if not fields['header'].to_partial_json():
            del fields['header']
        if 'protected' in fields:
            fields['protected'] = self.encoded_protected.decode('ascii')
        return fields

    @classmethod
    def fields_from_json(cls, jobj: Mapping[str, Any]) -> Dict[str, Any]:
        fields = super().fields_from_json(jobj)
        fields['encoded_protected'] = jobj.get('protected', '').encode('ascii')
        return cls._with_combined(fields)


class JWS(json_util.JSONObjectWithFields):
    """JSON Web Signature.

    :ivar bytes payload: JWS Payload.
    :ivar tuple signatures: JWS Signatures (:class:`Signature`).

    """
    __slots__ = ('payload', 'signatures')

    signature_cls = Signature

    @classmethod
    def sign(cls, payload: bytes, key: jose_jwk.JWK,
             alg: Union[str, jwa.JWASignature],
             protect: Optional[Iterable[str]] = None, include_jwk: bool = False,
             **header: Any) -> 'JWS':
        """Sign ``payload``, producing a single signature JWS.

        The key's ``kid``, if any, is added to the header unless
        ``kid`` is given explicitly.

        :param bytes payload: Payload to be signed.
        :param JWK key: Signing key.
        :param alg: Algorithm (name or :class:`~josekit.jwa.JWASignature`).
        :param protect: Names of the header parameters to be integrity
            protected, all by default. Compact serialization requires
            all of them to be protected.
        :param bool include_jwk: Include the public key as ``jwk``.
        :param header: Additional header parameters.

        :raises josekit.errors.UnsupportedAlgorithmError: if ``alg`` is
            not a known signature algorithm
        :raises josekit.errors.InvalidKeyError: if ``key`` cannot be
            used with ``alg``

        """
        if not isinstance(alg, jwa.JWASignature):
            alg = jwa.JWASignature.from_json(alg)
        return cls(payload=payload, signatures=(cls.signature_cls.sign(
            payload=payload, key=key, alg=alg, protect=protect,
            include_jwk=include_jwk, **header),))

    @property
    def signature(self) -> Signature:
        """Get a singleton signature.

        :rtype: `signature_cls`

        :raises josekit.errors.InvalidJsonWebSignatureError: if there is
            not exactly one signature

        """
        if len(self.signatures) != 1:
            raise errors.InvalidJsonWebSignatureError(
                'Expected exactly one signature, found {0}'.format(
                    len(self.signatures)))
        return self.signatures[0]

    @property
    def header(self) -> Header:
        """Combined header of the singleton signature."""
        return self.signature.combined

    def to_compact(self) -> bytes:
        """Compact serialization.

        :rtype: bytes

        :raises josekit.errors.SerializationError: if part of the header
            is unprotected, or the payload is empty

        """
        signature = self.signature
        if not self.payload:
            raise errors.SerializationError(
                'Compact serialization requires a non-empty payload')
        if signature.header.to_partial_json():
            raise errors.SerializationError(
                'Compact serialization requires every header parameter '
                'to be protected')

        return b'.'.join([
            signature.encoded_protected,
            b64.b64encode(self.payload),
            b64.b64encode(signature.signature),
        ])

    @classmethod
    def from_compact(cls, compact: Union[bytes, str]) -> 'JWS':
        """Compact deserialization.

        :param compact: JWS Compact Serialization.
        :type compact: bytes or str

        :raises josekit.errors.InvalidJsonWebSignatureError: if
            ``compact`` is not a well formed JWS, i.e. three segments with
            a non-empty header and payload, and a signature unless the
            algorithm is ``none``

        """
        if isinstance(compact, str):
            compact = compact.encode('utf-8')
        parts = compact.split(b'.')
        if len(parts) != 3:
            raise errors.InvalidJsonWebSignatureError(
                'Compact JWS serialization should comprise of exactly'
                ' 3 dot-separated components')
        protected, payload, signature = parts
        if not protected:
            raise errors.InvalidJsonWebSignatureError('JWS header is empty')
        if not payload:
            raise errors.InvalidJsonWebSignatureError('JWS payload is empty')

        try:
            sig = cls.signature_cls(
                protected=b64.b64decode(protected).decode('utf-8'),
                signature=b64.b64decode(signature),
                encoded_protected=protected)
            jws = cls(payload=b64.b64decode(payload), signatures=(sig,))
        except (errors.Error, UnicodeDecodeError) as error:
            logger.debug(error, exc_info=True)
            raise errors.InvalidJsonWebSignatureError(
                'Malformed JWS: {0}'.format(error)) from error

        if not signature and sig.combined.alg != jwa.NONE:
            raise errors.InvalidJsonWebSignatureError(
                'JWS signature is empty')
        return jws

    @classmethod
    def _resolve_key(cls, key: Any, combined: Header) -> Any:
        if not isinstance(key, jwks.JWKSet):
            return key
        if combined.kid is None:
            raise errors.KeyNotFoundError('JWS header has no "kid"')
        found = key.get_key(combined.kid)
        if found is None:
            raise errors.KeyNotFoundError(
                'No key with kid "{0}"'.format(combined.kid))
        return found

    def verify(self, key: Union[jose_jwk.JWK, jwks.JWKSet, None],
               algorithms: Optional[Iterable[Union[str, jwa.JWASignature]]] = None,
               critical: Iterable[str] = ()) -> None:
        """Verify every signature.

        :param key: Verification key, or a key set in which the key is
            looked up by the header's ``kid``.
        :param algorithms: Acceptable algorithms. Defaults to
            :const:`josekit.constants.DEFAULT_SIGNATURE_ALGORITHMS`, so
            ``none`` is only accepted when listed explicitly.
        :param critical: Names of the ``crit`` extensions understood by
            the caller.

        :raises josekit.errors.InvalidJsonWebSignatureError: if the
            algorithm is not acceptable or an unknown critical extension
            is used
        :raises josekit.errors.InvalidSignatureError: if a signature does
            not match
        :raises josekit.errors.KeyNotFoundError: if the key set has no
            key for the header's ``kid``
        :raises josekit.errors.InvalidKeyError: if the key cannot be used
            with the algorithm

        """
        if algorithms is None:
            algorithms = constants.DEFAULT_SIGNATURE_ALGORITHMS
        allowed = _algorithm_names(algorithms)
        critical = frozenset(critical)

        for sig in self.signatures:
            combined = sig.combined
            if combined.alg.name not in allowed:
                raise errors.InvalidJsonWebSignatureError(
                    'Algorithm "{0}" is not allowed'.format(combined.alg.name))
            unsupported = set(combined.crit or ()) - critical
            if unsupported:
                raise errors.InvalidJsonWebSignatureError(
                    'Unsupported critical extensions: {0}'.format(
                        ', '.join(sorted(unsupported))))
            if combined.alg == jwa.NONE:
                if sig.signature:
                    raise errors.InvalidJsonWebSignatureError(
                        'Unsecured JWS must have an empty signature')
                sig.verify(self.payload, None)
                continue
            if key is None:
                raise errors.InvalidParameterError(
                    'A key is required to verify "{0}"'.format(combined.alg.name))
            sig.verify(self.payload, self._resolve_key(key, combined))

    @classmethod
    def decode(cls, compact: Union[bytes, str],
               key: Union[jose_jwk.JWK, jwks.JWKSet, None] = None,
               algorithms: Optional[Iterable[Union[str, jwa.JWASignature]]] = None,
               verify: bool = True, critical: Iterable[str] = ()) -> 'JWS':
        """Parse and verify a compact JWS.

        Verification is skipped only if ``verify=False`` is passed.

        :returns: The parsed JWS.
        :rtype: `JWS`

        """
        jws = cls.from_compact(compact)
        if verify:
            jws.verify(key, algorithms=algorithms, critical=critical)
        else:
            logger.debug('Skipping verification of JWS signed with %s',
                         [sig.combined.alg for sig in jws.signatures])
        return jws

    def to_partial_json(self, flat: bool = True) -> Dict[str, Any]:  # pylint: disable=arguments-differ
        if not self.signatures:
            raise errors.SerializationError('JWS has no signatures')
        payload = json_util.encode_b64jose(self.payload)

        if flat and len(self.signatures) == 1:
            ret = self.signatures[0].to_partial_json()
            ret['payload'] = payload
            return ret
        else:
            return {
                'payload': payload,
                'signatures': self.signatures,
            }

    @classmethod
    def from_json(cls, jobj: Mapping[str, Any]) -> 'JWS':
        if not isinstance(jobj, Mapping) or 'payload' not in jobj:
            raise errors.DeserializationError('JWS must have a payload')
        if 'signature' in jobj and 'signatures' in jobj:
            raise errors.DeserializationError('Flat mixed with non-flat')
        payload = json_util.decode_b64jose(jobj['payload'])
        if 'signature' in jobj:  # flat
            signature = {name: value for name, value in jobj.items()
                         if name != 'payload'}
            return cls(payload=payload,
                       signatures=(cls.signature_cls.from_json(signature),))
        signatures = jobj.get('signatures')
        if not isinstance(signatures, list) or not signatures:
            raise errors.DeserializationError('JWS must have signatures')
        return cls(payload=payload, signatures=tuple(
            cls.signature_cls.from_json(sig) for sig in signatures))
