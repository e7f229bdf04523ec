"""josekit constants and defaults.

Hosts pass their own allow-lists to the codec functions; the values
below are what is used when they don't.

"""

RSA_MIN_KEY_SIZE = 2048
"""Minimum RSA modulus size (in bits) accepted anywhere."""

RSA_DEFAULT_KEY_SIZE = 2048
"""RSA modulus size (in bits) used by :meth:`.JWKRSA.generate`."""

RSA_DEFAULT_PUBLIC_EXPONENT = 65537
"""Public exponent used by :meth:`.JWKRSA.generate`."""

OCT_MIN_KEY_SIZE = 32
"""Minimum octet key size (in bytes), i.e. 256 bits."""

OCT_SHORT_KEY_SIZE = 16
"""Minimum octet key size (in bytes) for keys pinned to an algorithm in
:const:`OCT_SHORT_KEY_ALGORITHMS`."""

OCT_SHORT_KEY_ALGORITHMS = frozenset([
    'dir', 'A128KW', 'A192KW', 'A128GCMKW', 'A192GCMKW',
])
"""Key management algorithms that mandate keys shorter than
:const:`OCT_MIN_KEY_SIZE`. The algorithm enforces its exact key size."""

EC_DEFAULT_CURVE = 'P-256'
"""Curve used by :meth:`.JWKEC.generate`."""

OKP_DEFAULT_CURVE = 'Ed25519'
"""Curve used by :meth:`.JWKOKP.generate`."""

KEY_USES = frozenset(['sig', 'enc'])
"""Allowed values of the JWK ``use`` parameter."""

KEY_OPS_BY_USE = {
    'sig': frozenset(['sign', 'verify']),
    'enc': frozenset(['encrypt', 'decrypt', 'wrapKey', 'unwrapKey',
                      'deriveKey', 'deriveBits']),
}
"""``key_ops`` values consistent with each ``use`` value."""

KEY_OPS = KEY_OPS_BY_USE['sig'] | KEY_OPS_BY_USE['enc']
"""Allowed values of the JWK ``key_ops`` parameter."""

DEFAULT_SIGNATURE_ALGORITHMS = (
    'HS256', 'HS384', 'HS512',
    'RS256', 'RS384', 'RS512',
    'PS256', 'PS384', 'PS512',
    'ES256', 'ES384', 'ES512',
    'EdDSA',
)
"""Signature algorithms accepted by :meth:`.JWS.verify` when the caller
does not provide an explicit list. ``none`` is never among them."""

COMPACT_SEPARATORS = (',', ':')
"""JSON separators used for protected headers and thumbprints."""

MEDIA_TYPE_PREFIX = 'application/'
"""MIME Media Type and Content Type prefix omitted in ``typ``/``cty``."""
