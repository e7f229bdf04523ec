"""Tests for josekit.jwt."""
import json
import sys
import unittest
from unittest import mock

import pytest

from josekit import errors
from josekit import jwk
from josekit._internal.tests import test_util

NOW = 1723010455


class ClaimOptionsTest(unittest.TestCase):
    """Tests for josekit.jwt.ClaimOptions."""

    def test_value_and_values_exclusive(self):
        from josekit.jwt import ClaimOptions
        with pytest.raises(errors.InvalidParameterError):
            ClaimOptions(value='foo', values=['bar'])

    def test_values_tuple(self):
        from josekit.jwt import ClaimOptions
        assert ('foo', 'bar') == ClaimOptions(values=['foo', 'bar']).values

    def test_matches(self):
        from josekit.jwt import ClaimOptions
        assert ClaimOptions().matches('anything')
        assert ClaimOptions(value='foo').matches('foo')
        assert not ClaimOptions(value='foo').matches('bar')
        assert ClaimOptions(value='foo').matches(('bar', 'foo'))
        assert ClaimOptions(values=['foo', 'bar']).matches('bar')
        assert ClaimOptions(values=['foo']).matches(('baz', 'foo'))
        assert not ClaimOptions(values=['foo']).matches(('baz', 'qux'))


class JWTClaimsTest(unittest.TestCase):
    """Tests for josekit.jwt.JWTClaims."""

    def setUp(self):
        from josekit.jwt import JWTClaims
        self.claims = JWTClaims(
            iss='https://issuer.example', sub='user', aud=['a', 'b'],
            exp=NOW + 60, nbf=NOW - 60, iat=NOW - 60, jti='id', scope='read')
        self.jobj = {
            'iss': 'https://issuer.example',
            'sub': 'user',
            'aud': ['a', 'b'],
            'exp': NOW + 60,
            'nbf': NOW - 60,
            'iat': NOW - 60,
            'jti': 'id',
            'scope': 'read',
        }

    def test_to_json(self):
        assert self.jobj == json.loads(self.claims.json_dumps())

    def test_aud_tuple(self):
        assert ('a', 'b') == self.claims.aud

    def test_from_json(self):
        from josekit.jwt import JWTClaims
        assert self.claims == JWTClaims.from_json(self.jobj, now=NOW)

    def test_from_json_single_audience(self):
        from josekit.jwt import JWTClaims
        claims = JWTClaims.from_json({'aud': 'a'}, now=NOW)
        assert 'a' == claims.aud
        assert {'aud': 'a'} == claims.to_json()

    def test_zero_dates_not_omitted(self):
        from josekit.jwt import JWTClaims
        claims = JWTClaims(exp=0, nbf=0, iat=0)
        assert {'exp': 0, 'nbf': 0, 'iat': 0} == claims.to_json()
        assert claims == JWTClaims.from_json(claims.to_json(), ignore_expired=True)

    def test_claim(self):
        assert 'user' == self.claims.claim('sub')
        assert 'read' == self.claims.claim('scope')
        assert self.claims.claim('nonce') is None

    def test_invalid_types(self):
        from josekit.jwt import JWTClaims
        for jobj in ({'iss': 5},
                     {'sub': ['user']},
                     {'jti': {}},
                     {'aud': 5},
                     {'aud': ['a', 5]},
                     {'exp': '1'},
                     {'nbf': 1.5},
                     {'iat': True}):
            with pytest.raises(errors.InvalidClaimError):
                JWTClaims.from_json(jobj, now=NOW)

    def test_not_an_object(self):
        from josekit.jwt import JWTClaims
        with pytest.raises(errors.InvalidClaimError):
            JWTClaims.from_json(['iss'], now=NOW)

    def test_expired(self):
        from josekit.jwt import JWTClaims
        claims = JWTClaims(exp=NOW)
        claims.validate(now=NOW)
        with pytest.raises(errors.ExpiredTokenError):
            claims.validate(now=NOW + 1)
        claims.validate(now=NOW + 10, leeway=10)
        with pytest.raises(errors.ExpiredTokenError):
            claims.validate(now=NOW + 11, leeway=10)
        claims.validate(now=NOW + 1000, ignore_expired=True)

    def test_expired_is_invalid_claim(self):
        from josekit.jwt import JWTClaims
        with pytest.raises(errors.InvalidClaimError):
            JWTClaims.from_json({'exp': NOW}, now=NOW + 1)

    def test_not_yet_valid(self):
        from josekit.jwt import JWTClaims
        claims = JWTClaims(nbf=NOW)
        claims.validate(now=NOW)
        with pytest.raises(errors.TokenNotYetValidError):
            claims.validate(now=NOW - 1)
        claims.validate(now=NOW - 10, leeway=10)
        with pytest.raises(errors.TokenNotYetValidError):
            claims.validate(now=NOW - 11, leeway=10, ignore_expired=True)

    @mock.patch('josekit.jwt.time.time')
    def test_default_now(self, mock_time):
        from josekit.jwt import JWTClaims
        mock_time.return_value = NOW + 0.5
        JWTClaims(exp=NOW).validate()
        mock_time.return_value = NOW + 1
        with pytest.raises(errors.ExpiredTokenError):
            JWTClaims(exp=NOW).validate()

    def test_essential(self):
        from josekit.jwt import ClaimOptions
        self.claims.validate(now=NOW, options={'sub': ClaimOptions(essential=True)})
        with pytest.raises(errors.InvalidClaimError):
            self.claims.validate(now=NOW, options={'nonce': ClaimOptions(essential=True)})
        self.claims.validate(now=NOW, options={'nonce': ClaimOptions(value='x')})

    def test_value(self):
        from josekit.jwt import ClaimOptions
        self.claims.validate(now=NOW, options={
            'iss': ClaimOptions(value='https://issuer.example'),
            'aud': ClaimOptions(value='b'),
            'scope': ClaimOptions(values=['read', 'write']),
        })
        for options in ({'iss': ClaimOptions(value='https://evil.example')},
                        {'aud': ClaimOptions(value='c')},
                        {'scope': ClaimOptions(values=['write'])}):
            with pytest.raises(errors.InvalidClaimError):
                self.claims.validate(now=NOW, options=options)

    def test_options_mapping(self):
        from josekit.jwt import JWTClaims
        options = {'sub': {'essential': True, 'value': 'user'}}
        JWTClaims.from_json(self.jobj, now=NOW, options=options)
        with pytest.raises(errors.InvalidClaimError):
            JWTClaims.from_json(
                self.jobj, now=NOW, options={'sub': {'value': 'admin'}})

    def test_jws_payload(self):
        from josekit.jws import JWS
        from josekit.jwt import JWTClaims
        key = test_util.load_ec_jwk('ec_p256_key.pem')
        compact = JWS.sign(self.claims.json_dumps().encode('utf-8'), key, 'ES256',
                           typ='JWT').to_compact()
        payload = JWS.decode(compact, key.public_jwk()).payload
        claims = JWTClaims.from_json(json.loads(payload), now=NOW,
                                     options={'aud': {'value': 'a'}})
        assert self.claims == claims

    def test_jwe_payload(self):
        from josekit.jwe import JWE
        from josekit.jwt import JWTClaims
        key = jwk.JWKOct.generate()
        compact = JWE.encrypt(self.claims.json_dumps().encode('utf-8'), key,
                              'A256KW', 'A256GCM', typ='JWT').to_compact()
        plaintext = JWE.decode(compact, key)
        assert self.claims == JWTClaims.from_json(json.loads(plaintext), now=NOW)


if __name__ == '__main__':
    sys.exit(pytest.main(sys.argv[1:] + [__file__]))  # pragma: no cover
