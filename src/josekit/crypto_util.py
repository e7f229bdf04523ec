"""Crypto utilities."""
import enum
import logging
from typing import Any

from cryptography.hazmat.primitives.serialization import Encoding
from OpenSSL import crypto

logger = logging.getLogger(__name__)


class Format(enum.IntEnum):
    """File format to be used when parsing or serializing keys.

    Backwards compatible with the `FILETYPE_ASN1` and `FILETYPE_PEM` constants
    from pyOpenSSL.
    """
    DER = crypto.FILETYPE_ASN1
    PEM = crypto.FILETYPE_PEM

    def to_cryptography_encoding(self) -> Encoding:
        """Converts the Format to the corresponding cryptography `Encoding`.
        """
        if self == Format.DER:
            return Encoding.DER
        else:
            return Encoding.PEM


def to_cryptography_key(key: Any) -> Any:
    """Unwrap a pyOpenSSL key into its ``cryptography`` counterpart.

    Keys that are not `OpenSSL.crypto.PKey` instances are returned as is.

    """
    if isinstance(key, crypto.PKey):
        logger.debug('Converting pyOpenSSL key of type %s', key.type())
        return key.to_cryptography_key()
    return key
