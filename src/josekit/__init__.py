"""Javascript Object Signing and Encryption (jose).

This package is a Python implementation of the standards developed by
IETF `Javascript Object Signing and Encryption (Active WG)`_, in
particular the following RFCs:

  - `JSON Web Algorithms (JWA)`_
  - `JSON Web Key (JWK)`_
  - `JSON Web Signature (JWS)`_
  - `JSON Web Encryption (JWE)`_
  - `JSON Web Token (JWT)`_ claims


.. _`Javascript Object Signing and Encryption (Active WG)`:
  https://datatracker.ietf.org/wg/jose/

.. _`JSON Web Algorithms (JWA)`:
  https://www.rfc-editor.org/rfc/rfc7518

.. _`JSON Web Key (JWK)`:
  https://www.rfc-editor.org/rfc/rfc7517

.. _`JSON Web Signature (JWS)`:
  https://www.rfc-editor.org/rfc/rfc7515

.. _`JSON Web Encryption (JWE)`:
  https://www.rfc-editor.org/rfc/rfc7516

.. _`JSON Web Token (JWT)`:
  https://www.rfc-editor.org/rfc/rfc7519

"""
from josekit.b64 import (
    b64decode,
    b64encode,
)

from josekit.crypto_util import Format

from josekit.errors import (
    DecodingError,
    DeserializationError,
    Error,
    ExpiredTokenError,
    InvalidClaimError,
    InvalidHeaderError,
    InvalidJsonWebEncryptionError,
    InvalidJsonWebSignatureError,
    InvalidKeyError,
    InvalidKeySetError,
    InvalidParameterError,
    InvalidSignatureError,
    KeyNotFoundError,
    ParseError,
    SerializationError,
    TokenNotYetValidError,
    UnrecognizedTypeError,
    UnsupportedAlgorithmError,
)

from josekit.interfaces import JSONDeSerializable

from josekit.json_util import (
    Field,
    JSONObjectWithExtraFields,
    JSONObjectWithFields,
    TypedJSONObjectWithFields,
    decode_b64jose,
    decode_cert,
    encode_b64jose,
    encode_cert,
)

from josekit.jwa import (
    ES256,
    ES384,
    ES512,
    EDDSA,
    HS256,
    HS384,
    HS512,
    JWA,
    JWASignature,
    NONE,
    PS256,
    PS384,
    PS512,
    RS256,
    RS384,
    RS512,
)

from josekit.jwe_alg import (
    A128GCMKW,
    A128KW,
    A192GCMKW,
    A192KW,
    A256GCMKW,
    A256KW,
    DIR,
    ECDH_ES,
    ECDH_ES_A128KW,
    ECDH_ES_A192KW,
    ECDH_ES_A256KW,
    JWAKeyManagement,
    RSA1_5,
    RSA_OAEP,
    RSA_OAEP_256,
    RSA_OAEP_384,
    RSA_OAEP_512,
    WrappedKey,
)

from josekit.jwe_enc import (
    A128CBC_HS256,
    A128GCM,
    A192CBC_HS384,
    A192GCM,
    A256CBC_HS512,
    A256GCM,
    JWAContentEncryption,
)

from josekit.jwk import (
    JWK,
    JWKEC,
    JWKOKP,
    JWKOct,
    JWKRSA,
)

from josekit.jwks import JWKSet

from josekit.jws import (
    JWS,
    Signature,
)

from josekit.jwe import JWE

from josekit.jwt import (
    ClaimOptions,
    JWTClaims,
)

from josekit.util import (
    ComparableECKey,
    ComparableKey,
    ComparableOKPKey,
    ComparableRSAKey,
    ImmutableMap,
    frozendict,
)
