"""JOSE errors."""
from typing import Any


class Error(Exception):
    """Generic JOSE Error."""


class DeserializationError(Error):
    """JSON deserialization error."""

    def __str__(self) -> str:
        return "Deserialization error: {0}".format(super().__str__())


class SerializationError(Error):
    """JSON serialization error."""


class UnrecognizedTypeError(DeserializationError):
    """Unrecognized type error.

    :ivar str typ: The unrecognized type of the JSON object.
    :ivar jobj: Full JSON object.

    """

    def __init__(self, typ: str, jobj: Any) -> None:
        self.typ = typ
        self.jobj = jobj
        super().__init__(str(self))

    def __str__(self) -> str:
        return '{0} was not recognized, full message: {1}'.format(
            self.typ, self.jobj)


class DecodingError(DeserializationError):
    """Malformed Base64URL or JSON input."""


class ParseError(DeserializationError):
    """Malformed PEM or DER key material."""


class InvalidKeyError(Error):
    """Key is malformed, undersized or unusable for the operation."""


class InvalidParameterError(Error):
    """Invalid argument, e.g. unsupported curve or export format."""


class UnsupportedAlgorithmError(Error):
    """Algorithm name is not supported."""


class InvalidKeySetError(Error):
    """JSON Web Key Set violates its invariants."""


class KeyNotFoundError(Error):
    """No key matched the lookup."""


class InvalidHeaderError(DeserializationError):
    """JOSE Header violates its invariants."""


class InvalidSignatureError(Error):
    """Signature verification failed."""


class InvalidJsonWebSignatureError(Error):
    """Malformed or unacceptable JSON Web Signature."""


class InvalidJsonWebEncryptionError(Error):
    """JSON Web Encryption could not be decrypted.

    The message is deliberately fixed: callers must not be able to tell
    which step of the decryption failed.

    """

    def __init__(self) -> None:
        super().__init__('Invalid JSON Web Encryption')


class InvalidClaimError(Error):
    """JSON Web Token claim is malformed or unexpected."""


class ExpiredTokenError(InvalidClaimError):
    """JSON Web Token is past its "exp" claim."""


class TokenNotYetValidError(InvalidClaimError):
    """JSON Web Token is before its "nbf" claim."""
