"""JOSE Header.

Parameters shared by JWS and JWE headers (RFC 7515, section 4.1 and
RFC 7516, section 4.1). The algorithm specific parameters live in
:class:`josekit.jws.Header` and :class:`josekit.jwe.Header`.

"""
import logging
from typing import Any
from typing import Dict

from josekit import constants
from josekit import errors
from josekit import json_util
from josekit import jwk

logger = logging.getLogger(__name__)

REGISTERED_PARAMETERS = frozenset([
    # RFC 7515
    'alg', 'jku', 'jwk', 'kid', 'x5u', 'x5c', 'x5t', 'x5t#S256', 'typ',
    'cty', 'crit',
    # RFC 7516
    'enc', 'zip',
    # RFC 7518
    'epk', 'apu', 'apv', 'iv', 'tag', 'p2s', 'p2c',
])
"""Header Parameter Names registered by the JOSE RFCs. They are never
extensions, so they may not be listed in ``crit``."""


class MediaType:
    """MediaType field encoder/decoder."""

    PREFIX = constants.MEDIA_TYPE_PREFIX
    """MIME Media Type and Content Type prefix."""

    @classmethod
    def decode(cls, value: str) -> str:
        """Decoder."""
        if not isinstance(value, str):
            raise errors.DeserializationError('Media type must be a string')
        # 4.1.10
        if '/' not in value:
            if ';' in value:
                raise errors.DeserializationError('Unexpected semi-colon')
            return cls.PREFIX + value
        return value

    @classmethod
    def encode(cls, value: str) -> str:
        """Encoder."""
        # 4.1.10
        if ';' not in value and value.startswith(cls.PREFIX):
            return value[len(cls.PREFIX):]
        return value


def _decode_string(value: Any) -> str:
    if not isinstance(value, str):
        raise errors.DeserializationError('Expected a string, got {0!r}'.format(value))
    return value


class Header(json_util.JSONObjectWithExtraFields):
    """JOSE Header.

    Registered Header Parameters are fields, everything else (Public and
    Private Header Parameter Names) is kept in ``extra``.

    :ivar x5tS256: "x5t#S256"
    :ivar str typ: MIME Media Type, inc. :const:`MediaType.PREFIX`.
    :ivar str cty: Content-Type, inc. :const:`MediaType.PREFIX`.
    :ivar tuple crit: Names of the extensions that must be understood.
    :ivar extra: Remaining parameters (:class:`~josekit.util.frozendict`).

    """
    jku = json_util.Field('jku', decoder=_decode_string, omitempty=True)
    jwk = json_util.Field('jwk', decoder=jwk.JWK.from_json, omitempty=True)
    kid = json_util.Field('kid', decoder=_decode_string, omitempty=True)
    x5u = json_util.Field('x5u', decoder=_decode_string, omitempty=True)
    x5c = json_util.Field('x5c', omitempty=True, default=())
    x5t = json_util.Field(
        'x5t', decoder=json_util.decode_b64jose,
        encoder=json_util.encode_b64jose, omitempty=True)
    x5tS256 = json_util.Field(
        'x5t#S256', decoder=json_util.decode_b64jose,
        encoder=json_util.encode_b64jose, omitempty=True)
    typ = json_util.Field('typ', encoder=MediaType.encode,
                          decoder=MediaType.decode, omitempty=True)
    cty = json_util.Field('cty', encoder=MediaType.encode,
                          decoder=MediaType.decode, omitempty=True)
    crit = json_util.Field('crit', omitempty=True)

    def __init__(self, **kwargs: Any) -> None:
        for name in ('x5c', 'crit'):
            if isinstance(kwargs.get(name), list):
                kwargs[name] = tuple(kwargs[name])
        super().__init__(**kwargs)
        self._check_crit()

    def _check_crit(self) -> None:
        if self.crit is None:
            return
        if (not isinstance(self.crit, tuple) or not self.crit or
                any(not isinstance(name, str) or not name for name in self.crit)):
            raise errors.InvalidHeaderError(
                '"crit" must be a non-empty list of parameter names')
        for name in self.crit:
            if name in REGISTERED_PARAMETERS:
                raise errors.InvalidHeaderError(
                    '"crit" must not list registered parameter "{0}"'.format(name))
            if name not in self.extra:
                raise errors.InvalidHeaderError(
                    'Critical parameter "{0}" is missing'.format(name))

    def not_omitted(self) -> Dict[str, Any]:
        """Fields that would not be omitted in the JSON object."""
        return {name: getattr(self, name)
                for name, field in self._fields.items()
                if not field.omit(getattr(self, name))}

    def __add__(self, other: Any) -> 'Header':
        """Merge two headers, values of ``other`` taking precedence.

        Used to combine the unprotected (``self``) with the protected
        (``other``) header.

        """
        if not isinstance(other, type(self)):
            raise TypeError('Header cannot be added to: {0}'.format(
                type(other)))

        merged = self.not_omitted()
        merged.update(other.not_omitted())
        extra = dict(self.extra)
        extra.update(other.extra)
        return type(self)(extra=extra, **merged)

    # x5c does NOT use JOSE Base64 (4.1.6)

    @x5c.encoder
    def x5c(value):  # pylint: disable=missing-docstring,no-self-argument
        return [json_util.encode_cert(cert) for cert in value]

    @x5c.decoder
    def x5c(value):  # pylint: disable=missing-docstring,no-self-argument
        if not isinstance(value, list) or not value:
            raise errors.DeserializationError(
                '"x5c" must be a non-empty list of certificates')
        return tuple(json_util.decode_cert(cert) for cert in value)
