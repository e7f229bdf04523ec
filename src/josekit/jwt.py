"""JSON Web Token claims.

https://www.rfc-editor.org/rfc/rfc7519#section-4

The claims set is the payload of a JWS or JWE. Registered claims are
type checked on construction; time based claims and caller supplied
expectations are checked by :meth:`JWTClaims.validate`.

"""
import logging
import time
from typing import Any
from typing import Mapping
from typing import Optional

from josekit import errors
from josekit import json_util
from josekit import util

logger = logging.getLogger(__name__)


class NumericDate(json_util.Field):
    """Field holding seconds since the epoch.

    Zero is a valid date, so only ``None`` counts as empty.

    """

    @classmethod
    def _empty(cls, value: Any) -> bool:
        return value is None


class ClaimOptions(util.ImmutableMap):
    """Expectations about a single claim.

    :ivar bool essential: The claim must be present.
    :ivar value: The claim must equal this value.
    :ivar tuple values: The claim must be one of these values.

    For ``aud``, which may hold several audiences, it is enough that one
    of them matches.

    """
    __slots__ = ('essential', 'value', 'values')

    def __init__(self, essential: bool = False, value: Any = None,
                 values: Optional[Any] = None) -> None:
        if value is not None and values is not None:
            raise errors.InvalidParameterError(
                '"value" and "values" are mutually exclusive')
        if values is not None:
            values = tuple(values)
        super().__init__(essential=essential, value=value, values=values)

    def matches(self, claim: Any) -> bool:
        """Does ``claim`` satisfy :attr:`value`/:attr:`values`?"""
        candidates = claim if isinstance(claim, tuple) else (claim,)
        if self.value is not None:
            return self.value in candidates
        if self.values is not None:
            return any(candidate in self.values for candidate in candidates)
        return True


class JWTClaims(json_util.JSONObjectWithExtraFields):
    """JWT Claims Set.

    Custom claims are kept in ``extra``.

    :ivar str iss: Issuer.
    :ivar str sub: Subject.
    :ivar aud: Audience, a string or a tuple of strings.
    :ivar int exp: Expiration Time.
    :ivar int nbf: Not Before.
    :ivar int iat: Issued At.
    :ivar str jti: JWT ID.

    """
    iss = json_util.Field('iss', omitempty=True)
    sub = json_util.Field('sub', omitempty=True)
    aud = json_util.Field('aud', omitempty=True)
    exp = NumericDate('exp', omitempty=True)
    nbf = NumericDate('nbf', omitempty=True)
    iat = NumericDate('iat', omitempty=True)
    jti = json_util.Field('jti', omitempty=True)

    @aud.encoder
    def aud(value):  # pylint: disable=missing-docstring,no-self-argument
        return list(value) if isinstance(value, tuple) else value

    def __init__(self, **kwargs: Any) -> None:
        if isinstance(kwargs.get('aud'), list):
            kwargs['aud'] = tuple(kwargs['aud'])
        super().__init__(**kwargs)
        self._check_types()

    def _check_types(self) -> None:
        for name in ('iss', 'sub', 'jti'):
            value = getattr(self, name)
            if value is not None and not isinstance(value, str):
                raise errors.InvalidClaimError(
                    'Claim "{0}" must be a string'.format(name))
        if self.aud is not None and not isinstance(self.aud, str) and (
                not isinstance(self.aud, tuple) or
                any(not isinstance(aud, str) for aud in self.aud)):
            raise errors.InvalidClaimError(
                'Claim "aud" must be a string or a list of strings')
        for name in ('exp', 'nbf', 'iat'):
            value = getattr(self, name)
            if value is not None and (
                    isinstance(value, bool) or not isinstance(value, int)):
                raise errors.InvalidClaimError(
                    'Claim "{0}" must be an integer'.format(name))

    def claim(self, name: str) -> Any:
        """Value of claim ``name``, registered or not, ``None`` if absent."""
        if name in self._fields:
            return getattr(self, name)
        return self.extra.get(name)

    @classmethod
    def from_json(cls, jobj: Mapping[str, Any], now: Optional[int] = None,  # pylint: disable=arguments-differ
                  ignore_expired: bool = False, leeway: int = 0,
                  options: Optional[Mapping[str, Any]] = None) -> 'JWTClaims':
        """Deserialize and validate a claims set.

        See :meth:`validate` for the arguments.

        :raises josekit.errors.InvalidClaimError: if ``jobj`` is not a
            valid claims set

        """
        try:
            claims = cls(**cls.fields_from_json(jobj))
        except errors.DeserializationError as error:
            raise errors.InvalidClaimError(str(error)) from error
        claims.validate(now=now, ignore_expired=ignore_expired,
                        leeway=leeway, options=options)
        return claims

    def validate(self, now: Optional[int] = None, ignore_expired: bool = False,
                 leeway: int = 0, options: Optional[Mapping[str, Any]] = None) -> None:
        """Validate time based claims and caller expectations.

        :param int now: Current time, seconds since the epoch.
            Defaults to the system clock.
        :param bool ignore_expired: Do not check ``exp``.
        :param int leeway: Clock skew tolerance in seconds.
        :param options: Claim name to :class:`ClaimOptions` (or a
            mapping of its arguments).

        :raises josekit.errors.ExpiredTokenError: if ``now`` is past
            ``exp`` + ``leeway``
        :raises josekit.errors.TokenNotYetValidError: if ``now`` is
            before ``nbf`` - ``leeway``
        :raises josekit.errors.InvalidClaimError: if an essential claim
            is missing or a claim does not have the expected value

        """
        if now is None:
            now = int(time.time())

        if self.exp is not None and not ignore_expired and now > self.exp + leeway:
            raise errors.ExpiredTokenError('Token expired at {0}'.format(self.exp))
        if self.nbf is not None and now < self.nbf - leeway:
            raise errors.TokenNotYetValidError(
                'Token is not valid before {0}'.format(self.nbf))

        for name, option in (options or {}).items():
            if not isinstance(option, ClaimOptions):
                option = ClaimOptions(**option)
            value = self.claim(name)
            if value is None:
                if option.essential:
                    raise errors.InvalidClaimError(
                        'Missing essential claim "{0}"'.format(name))
                continue
            if not option.matches(value):
                logger.debug('Claim %s has unexpected value %r', name, value)
                raise errors.InvalidClaimError(
                    'Invalid value of claim "{0}"'.format(name))
