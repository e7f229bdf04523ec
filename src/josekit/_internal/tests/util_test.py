"""Tests for josekit.util."""
import functools
import sys
import unittest

import pytest

from josekit._internal.tests import test_util


class ComparableRSAKeyTest(unittest.TestCase):
    """Tests for josekit.util.ComparableRSAKey."""

    def setUp(self):
        from josekit.util import ComparableRSAKey
        self.key = ComparableRSAKey(test_util.load_private_key('rsa2048_key.pem'))
        self.key_same = ComparableRSAKey(test_util.load_private_key('rsa2048_key.pem'))
        self.key2 = ComparableRSAKey(test_util.load_private_key('rsa2048_other_key.pem'))

    def test_getattr_proxy(self):
        assert 2048 == self.key.key_size

    def test_eq(self):
        assert self.key == self.key_same

    def test_ne(self):
        assert self.key != self.key2

    def test_ne_different_types(self):
        assert self.key != 5

    def test_ne_not_wrapped(self):
        # pylint: disable=protected-access
        assert self.key != self.key_same._wrapped

    def test_ne_no_serialization(self):
        from josekit.util import ComparableRSAKey
        assert ComparableRSAKey(5) != ComparableRSAKey(5)

    def test_hash(self):
        assert isinstance(hash(self.key), int)
        assert hash(self.key) == hash(self.key_same)
        assert hash(self.key) != hash(self.key2)

    def test_repr(self):
        assert repr(self.key).startswith('<ComparableRSAKey(<')

    def test_public_key(self):
        from josekit.util import ComparableRSAKey
        public = self.key.public_key()
        assert isinstance(public, ComparableRSAKey)
        assert public.public_key() is public
        assert hash(public) == hash(self.key_same.public_key())


class ComparableECKeyTest(unittest.TestCase):
    """Tests for josekit.util.ComparableECKey."""

    def setUp(self):
        from josekit.util import ComparableECKey
        self.p256_key = ComparableECKey(test_util.load_private_key('ec_p256_key.pem'))
        self.p256_key_same = ComparableECKey(test_util.load_private_key('ec_p256_key.pem'))
        self.p384_key = ComparableECKey(test_util.load_private_key('ec_p384_key.pem'))

    def test_getattr_proxy(self):
        assert 256 == self.p256_key.key_size

    def test_eq(self):
        assert self.p256_key == self.p256_key_same

    def test_ne(self):
        assert self.p256_key != self.p384_key

    def test_hash(self):
        assert hash(self.p256_key) == hash(self.p256_key_same)
        assert hash(self.p256_key) != hash(self.p384_key)
        assert hash(self.p256_key.public_key()) == hash(self.p256_key_same.public_key())

    def test_public_key(self):
        from josekit.util import ComparableECKey
        assert isinstance(self.p256_key.public_key(), ComparableECKey)


class ImmutableMapTest(unittest.TestCase):
    """Tests for josekit.util.ImmutableMap."""

    def setUp(self):
        # pylint: disable=invalid-name,too-few-public-methods
        # pylint: disable=missing-docstring
        from josekit.util import ImmutableMap

        class A(ImmutableMap):
            __slots__ = ('x', 'y')

        class B(ImmutableMap):
            __slots__ = ('x', 'y')

        self.A = A
        self.B = B

        self.a1 = self.A(x=1, y=2)
        self.a1_swap = self.A(y=2, x=1)
        self.a2 = self.A(x=3, y=4)
        self.b = self.B(x=1, y=2)

    def test_update(self):
        assert self.A(x=2, y=2) == self.a1.update(x=2)
        assert self.a2 == self.a1.update(x=3, y=4)

    def test_get_missing_item_raises_key_error(self):
        with pytest.raises(KeyError):
            self.a1.__getitem__('z')

    def test_order_of_args_does_not_matter(self):
        assert self.a1 == self.a1_swap

    def test_type_error_on_missing(self):
        with pytest.raises(TypeError):
            self.A(x=1)
        with pytest.raises(TypeError):
            self.A(y=2)

    def test_type_error_on_unrecognized(self):
        with pytest.raises(TypeError):
            self.A(x=1, z=2)
        with pytest.raises(TypeError):
            self.A(x=1, y=2, z=3)

    def test_get_attr(self):
        assert 1 == self.a1.x
        assert 2 == self.a1.y
        assert 1 == self.a1_swap.x
        assert 2 == self.a1_swap.y

    def test_set_attr_raises_attribute_error(self):
        with pytest.raises(AttributeError):
            functools.partial(self.a1.__setattr__, 'x')(10)

    def test_equal(self):
        assert self.a1 == self.a1
        assert self.a2 == self.a2
        assert self.a1 != self.a2

    def test_hash(self):
        assert hash((1, 2)) == hash(self.a1)

    def test_unhashable(self):
        with pytest.raises(TypeError):
            self.A(x=1, y={}).__hash__()

    def test_repr(self):
        assert 'A(x=1, y=2)' == repr(self.a1)
        assert 'A(x=1, y=2)' == repr(self.a1_swap)
        assert 'B(x=1, y=2)' == repr(self.b)
        assert "B(x='foo', y='bar')" == repr(self.B(x='foo', y='bar'))


class frozendictTest(unittest.TestCase):  # pylint: disable=invalid-name
    """Tests for josekit.util.frozendict."""

    def setUp(self):
        from josekit.util import frozendict
        self.fdict = frozendict(x=1, y='2')

    def test_init_dict(self):
        from josekit.util import frozendict
        assert self.fdict == frozendict({'x': 1, 'y': '2'})

    def test_init_empty(self):
        from josekit.util import frozendict
        assert 0 == len(frozendict())

    def test_init_other_raises_type_error(self):
        from josekit.util import frozendict
        # specifically fail for generators...
        with pytest.raises(TypeError):
            frozendict({'a': 'b'}.items())

    def test_len(self):
        assert 2 == len(self.fdict)

    def test_hash(self):
        assert isinstance(hash(self.fdict), int)

    def test_getattr_proxy(self):
        assert 1 == self.fdict.x
        assert '2' == self.fdict.y

    def test_getattr_raises_attribute_error(self):
        with pytest.raises(AttributeError):
            self.fdict.__getattr__('z')

    def test_setattr_immutable(self):
        with pytest.raises(AttributeError):
            self.fdict.__setattr__('z', 3)

    def test_repr(self):
        assert "frozendict(x=1, y='2')" == repr(self.fdict)


if __name__ == '__main__':
    sys.exit(pytest.main(sys.argv[1:] + [__file__]))  # pragma: no cover
