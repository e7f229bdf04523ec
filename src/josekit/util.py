"""JOSE utilities."""
from collections.abc import Hashable, Mapping
from typing import Any, Iterator

from cryptography.hazmat.primitives import serialization
from cryptography.hazmat.primitives.asymmetric import ec
from cryptography.hazmat.primitives.asymmetric import ed448
from cryptography.hazmat.primitives.asymmetric import ed25519
from cryptography.hazmat.primitives.asymmetric import rsa
from cryptography.hazmat.primitives.asymmetric import x448
from cryptography.hazmat.primitives.asymmetric import x25519


class ComparableKey:
    """Comparable wrapper for ``cryptography`` keys.

    See https://github.com/pyca/cryptography/issues/2122.

    """
    __hash__: Any = NotImplemented

    def __init__(self, wrapped):
        self._wrapped = wrapped

    def __getattr__(self, name: str) -> Any:
        return getattr(self._wrapped, name)

    def __eq__(self, other: Any) -> bool:
        # pylint: disable=protected-access
        if (not isinstance(other, self.__class__) or
                self._wrapped.__class__ is not other._wrapped.__class__):
            return NotImplemented
        elif hasattr(self._wrapped, 'private_numbers'):
            return self.private_numbers() == other.private_numbers()
        elif hasattr(self._wrapped, 'public_numbers'):
            return self.public_numbers() == other.public_numbers()
        else:
            return NotImplemented

    def __repr__(self) -> str:
        return '<{0}({1!r})>'.format(self.__class__.__name__, self._wrapped)

    def public_key(self) -> 'ComparableKey':
        """Get wrapped public key."""
        if not hasattr(self._wrapped, 'private_numbers'):
            return self
        return self.__class__(self._wrapped.public_key())


class ComparableRSAKey(ComparableKey):
    """Wrapper for ``cryptography`` RSA keys.

    Wraps around:

    - :class:`cryptography.hazmat.primitives.asymmetric.rsa.RSAPrivateKey`
    - :class:`cryptography.hazmat.primitives.asymmetric.rsa.RSAPublicKey`

    """

    def __hash__(self) -> int:
        if isinstance(self._wrapped, rsa.RSAPrivateKey):
            priv = self.private_numbers()
            pub = priv.public_numbers
            return hash((self.__class__, priv.p, priv.q, priv.dmp1,
                         priv.dmq1, priv.iqmp, pub.n, pub.e))
        pub = self.public_numbers()
        return hash((self.__class__, pub.n, pub.e))


class ComparableECKey(ComparableKey):
    """Wrapper for ``cryptography`` elliptic curve keys.

    Wraps around:

    - :class:`cryptography.hazmat.primitives.asymmetric.ec.EllipticCurvePrivateKey`
    - :class:`cryptography.hazmat.primitives.asymmetric.ec.EllipticCurvePublicKey`

    """

    def __hash__(self) -> int:
        if isinstance(self._wrapped, ec.EllipticCurvePrivateKey):
            priv = self.private_numbers()
            pub = priv.public_numbers
            return hash((self.__class__, pub.curve.name, pub.x, pub.y,
                         priv.private_value))
        pub = self.public_numbers()
        return hash((self.__class__, pub.curve.name, pub.x, pub.y))


class ComparableOKPKey(ComparableKey):
    """Wrapper for ``cryptography`` octet key pair keys.

    Wraps around the private and public keys of Ed25519, Ed448, X25519
    and X448, which have no ``*_numbers()`` and are compared by their
    raw encoding instead.

    """
    _private_key_types = (
        ed25519.Ed25519PrivateKey, ed448.Ed448PrivateKey,
        x25519.X25519PrivateKey, x448.X448PrivateKey,
    )

    def is_private(self) -> bool:
        """Does the wrapped key carry private material?"""
        return isinstance(self._wrapped, self._private_key_types)

    def raw_bytes(self) -> bytes:
        """Raw private key, or raw public key for public keys."""
        if self.is_private():
            return self._wrapped.private_bytes(
                serialization.Encoding.Raw, serialization.PrivateFormat.Raw,
                serialization.NoEncryption())
        return self._wrapped.public_bytes(
            serialization.Encoding.Raw, serialization.PublicFormat.Raw)

    def __eq__(self, other: Any) -> bool:
        # pylint: disable=protected-access
        if (not isinstance(other, self.__class__) or
                self._wrapped.__class__ is not other._wrapped.__class__):
            return NotImplemented
        return self.raw_bytes() == other.raw_bytes()

    def __hash__(self) -> int:
        return hash((self.__class__, self._wrapped.__class__, self.raw_bytes()))

    def public_key(self) -> 'ComparableOKPKey':
        if not self.is_private():
            return self
        return self.__class__(self._wrapped.public_key())


class ImmutableMap(Mapping, Hashable):
    """Immutable key to value mapping with attribute access."""

    __slots__: tuple = ()
    """Must be overridden in subclasses."""

    def __init__(self, **kwargs: Any) -> None:
        if set(kwargs) != set(self.__slots__):
            raise TypeError(
                '__init__() takes exactly the following arguments: {0} '
                '({1} given)'.format(', '.join(self.__slots__),
                                     ', '.join(kwargs) if kwargs else 'none'))
        for slot in self.__slots__:
            object.__setattr__(self, slot, kwargs.pop(slot))

    def update(self, **kwargs: Any) -> 'ImmutableMap':
        """Return updated map."""
        # not dict(self): subclasses may shadow Mapping.keys with a slot
        items = {slot: getattr(self, slot) for slot in self.__slots__}
        items.update(kwargs)
        return type(self)(**items)

    def __getitem__(self, key: str) -> Any:
        try:
            return getattr(self, key)
        except AttributeError:
            raise KeyError(key)

    def __iter__(self) -> Iterator[str]:
        return iter(self.__slots__)

    def __len__(self) -> int:
        return len(self.__slots__)

    def __hash__(self) -> int:
        return hash(tuple(getattr(self, slot) for slot in self.__slots__))

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("can't set attribute")

    def __repr__(self) -> str:
        return '{0}({1})'.format(self.__class__.__name__, ', '.join(
            '{0}={1!r}'.format(key, value) for key, value in self.items()))


class frozendict(Mapping, Hashable):  # pylint: disable=invalid-name
    """Frozen dictionary."""
    __slots__ = ('_items', '_keys')

    def __init__(self, *args: Any, **kwargs: Any) -> None:
        if kwargs and not args:
            items = dict(kwargs)
        elif len(args) == 1 and isinstance(args[0], Mapping):
            items = dict(args[0])
        elif not args:
            items = {}
        else:
            raise TypeError()

        object.__setattr__(self, '_items', items)
        object.__setattr__(self, '_keys', tuple(sorted(items)))

    def __getitem__(self, key: Any) -> Any:
        return self._items[key]

    def __iter__(self) -> Iterator[Any]:
        return iter(self._keys)

    def __len__(self) -> int:
        return len(self._items)

    def _sorted_items(self) -> tuple:
        return tuple((key, self[key]) for key in self._keys)

    def __hash__(self) -> int:
        return hash(self._sorted_items())

    def __getattr__(self, name: str) -> Any:
        try:
            return self._items[name]
        except KeyError:
            raise AttributeError(name)

    def __setattr__(self, name: str, value: Any) -> None:
        raise AttributeError("can't set attribute")

    def __repr__(self) -> str:
        return 'frozendict({0})'.format(', '.join('{0}={1!r}'.format(
            key, value) for key, value in self._sorted_items()))
