"""JOSE Base64.

`JOSE Base64`_ is defined as:

  - URL-safe Base64
  - padding stripped


.. _`JOSE Base64`:
    https://www.rfc-editor.org/rfc/rfc7515#appendix-C

.. Do NOT try to call this module "base64", as it will "shadow" the
   standard library.

"""
import base64
import binascii
import re
from typing import Union

from josekit import errors

_ALPHABET = re.compile(rb'\A[A-Za-z0-9_-]*\Z')


def b64encode(data: bytes) -> bytes:
    """JOSE Base64 encode.

    :param data: Data to be encoded.
    :type data: bytes

    :returns: JOSE Base64 string.
    :rtype: bytes

    :raises TypeError: if ``data`` is of incorrect type

    """
    if not isinstance(data, bytes):
        raise TypeError('argument should be bytes')
    return base64.urlsafe_b64encode(data).rstrip(b'=')


def b64decode(data: Union[bytes, str]) -> bytes:
    """JOSE Base64 decode.

    :param data: Base64 string to be decoded. If it's a ``str``, then
                 only ASCII characters are allowed.
    :type data: bytes or str

    :returns: Decoded data.
    :rtype: bytes

    :raises TypeError: if input is of incorrect type
    :raises josekit.errors.DecodingError: if input contains characters
        outside of the URL-safe alphabet, padding, or has an impossible
        length

    """
    if isinstance(data, str):
        try:
            data = data.encode('ascii')
        except UnicodeEncodeError:
            raise errors.DecodingError(
                'str argument should contain only ASCII characters')
    elif not isinstance(data, bytes):
        raise TypeError('argument should be a str or bytes')

    if not _ALPHABET.match(data) or len(data) % 4 == 1:
        raise errors.DecodingError('Invalid Base64URL input')

    try:
        return base64.urlsafe_b64decode(data + b'=' * (-len(data) % 4))
    except binascii.Error as error:  # pragma: no cover
        raise errors.DecodingError(error)
