"""JSON Web Key Set.

https://www.rfc-editor.org/rfc/rfc7517#section-5

"""
import logging
from typing import Any
from typing import Callable
from typing import Dict
from typing import List
from typing import Mapping
from typing import Optional

from josekit import errors
from josekit import json_util
from josekit import jwk

logger = logging.getLogger(__name__)


class JWKSet(json_util.JSONObjectWithFields):
    """JSON Web Key Set.

    Every key has a ``kid``, unique within the set.

    .. note:: The ``keys`` attribute is the tuple of keys, and shadows
        :meth:`Mapping.keys <collections.abc.Mapping.keys>`.

    :ivar tuple keys: :class:`~josekit.jwk.JWK` instances, in the order
        they were given.

    """
    keys = json_util.Field('keys')

    @keys.encoder
    def keys(value):  # pylint: disable=missing-docstring,no-self-argument
        return list(value)

    @keys.decoder
    def keys(value):  # pylint: disable=missing-docstring,no-self-argument
        if not isinstance(value, list):
            raise errors.DeserializationError('"keys" must be a list')
        return tuple(jwk.JWK.from_json(key) for key in value)

    def __init__(self, **kwargs: Any) -> None:
        if isinstance(kwargs.get('keys'), list):
            kwargs['keys'] = tuple(kwargs['keys'])
        super().__init__(**kwargs)
        self._check_keys()

    def _check_keys(self) -> None:
        if not isinstance(self.keys, tuple) or not self.keys:
            raise errors.InvalidKeySetError('Key set must contain at least one key')
        seen = set()
        for key in self.keys:
            if not isinstance(key, jwk.JWK):
                raise errors.InvalidKeySetError(
                    'Not a JSON Web Key: {0!r}'.format(key))
            if not key.kid:
                raise errors.InvalidKeySetError('Every key must have a "kid"')
            if key.kid in seen:
                raise errors.InvalidKeySetError(
                    'Duplicate "kid": {0}'.format(key.kid))
            seen.add(key.kid)

    @classmethod
    def from_json(cls, jobj: Mapping[str, Any]) -> 'JWKSet':
        """Deserialize a ``{"keys": [...]}`` document.

        :raises josekit.errors.InvalidKeySetError: if the document or
            any of its keys is invalid

        """
        try:
            return super().from_json(jobj)
        except errors.InvalidKeySetError:
            raise
        except errors.Error as error:
            logger.debug(error, exc_info=True)
            raise errors.InvalidKeySetError(
                'Invalid key set: {0}'.format(error)) from error

    @classmethod
    def json_loads(cls, json_string: Any) -> 'JWKSet':
        try:
            return super().json_loads(json_string)
        except errors.DecodingError as error:
            raise errors.InvalidKeySetError(
                'Invalid key set: {0}'.format(error)) from error

    def get_key(self, kid: str) -> Optional[jwk.JWK]:
        """Find the key identified by ``kid``.

        :returns: The key, or ``None`` if there is none.

        """
        return self.find(lambda key: key.kid == kid)

    def find(self, predicate: Callable[[jwk.JWK], bool]) -> Optional[jwk.JWK]:
        """First key for which ``predicate`` holds, or ``None``."""
        for key in self.keys:
            if predicate(key):
                return key
        return None

    def get(self, predicate: Callable[[jwk.JWK], bool]) -> jwk.JWK:  # pylint: disable=arguments-differ
        """First key for which ``predicate`` holds.

        :raises josekit.errors.KeyNotFoundError: if no key matches

        """
        key = self.find(predicate)
        if key is None:
            raise errors.KeyNotFoundError('No matching key in the key set')
        return key

    def to_public_json(self) -> Dict[str, List[Dict[str, Any]]]:
        """Public form of the key set, e.g. for a JWKS endpoint.

        Private parameters are stripped and symmetric keys left out.

        """
        return {'keys': [key.public_jwk().to_json() for key in self.keys
                         if not isinstance(key, jwk.JWKOct)]}
