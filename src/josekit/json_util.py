"""JSON (de)serialization framework.

The framework presented here is somewhat based on `Go's "json" package`_
(especially the ``omitempty`` functionality).

.. _`Go's "json" package`: http://golang.org/pkg/encoding/json/

"""
import abc
import base64
import binascii
import logging
from typing import Any, Callable, Dict, FrozenSet, Mapping, Optional, Type, TypeVar

from cryptography import x509
from cryptography.hazmat.primitives import serialization

from josekit import b64
from josekit import errors
from josekit import interfaces
from josekit import util

logger = logging.getLogger(__name__)

GenericTypedJSONObjectWithFields = TypeVar(
    'GenericTypedJSONObjectWithFields', bound='TypedJSONObjectWithFields')


class Field:
    """JSON object field.

    :class:`Field` is meant to be used together with
    :class:`JSONObjectWithFields`.

    ``encoder`` (``decoder``) is a callable that accepts a single
    parameter, i.e. a value to be encoded (decoded), and returns the
    serialized (deserialized) value. In case of errors it should raise
    :class:`~josekit.errors.SerializationError`
    (:class:`~josekit.errors.DeserializationError`).

    Note, that ``decoder`` should perform partial serialization only.

    :ivar str json_name: Name of the field when encoded to JSON.
    :ivar default: Default value (used when not present in JSON object).
    :ivar bool omitempty: If ``True`` and the field value is empty, then
        it will not be included in the serialized JSON object, and
        ``default`` will be used for deserialization. Otherwise, if ``False``,
        field is considered as required, value will always be included in the
        serialized JSON objected, and it must also be present when
        deserializing.

    """
    __slots__ = ('json_name', 'default', 'omitempty', 'fdec', 'fenc')

    def __init__(self, json_name: str, default: Any = None, omitempty: bool = False,
                 decoder: Optional[Callable[[Any], Any]] = None,
                 encoder: Optional[Callable[[Any], Any]] = None) -> None:
        self.json_name = json_name
        self.default = default
        self.omitempty = omitempty

        self.fdec = self.default_decoder if decoder is None else decoder
        self.fenc = self.default_encoder if encoder is None else encoder

    @classmethod
    def _empty(cls, value: Any) -> bool:
        """Is the provided value considered "empty" for this field?

        This is useful for subclasses that might want to override the
        definition of being empty, e.g. for some more exotic data types.

        """
        return not isinstance(value, bool) and not value

    def omit(self, value: Any) -> bool:
        """Omit the value in output?"""
        return self._empty(value) and self.omitempty

    def _update_params(self, **kwargs: Any) -> 'Field':
        current = dict(json_name=self.json_name, default=self.default,
                       omitempty=self.omitempty,
                       decoder=self.fdec, encoder=self.fenc)
        current.update(kwargs)
        return type(self)(**current)

    def decoder(self, fdec: Callable[[Any], Any]) -> 'Field':
        """Descriptor to change the decoder on JSON object field."""
        return self._update_params(decoder=fdec)

    def encoder(self, fenc: Callable[[Any], Any]) -> 'Field':
        """Descriptor to change the encoder on JSON object field."""
        return self._update_params(encoder=fenc)

    def decode(self, value: Any) -> Any:
        """Decode a value, optionally with context JSON object."""
        return self.fdec(value)

    def encode(self, value: Any) -> Any:
        """Encode a value, optionally with context JSON object."""
        return self.fenc(value)

    @classmethod
    def default_decoder(cls, value: Any) -> Any:
        """Default decoder.

        Recursively deserialize into immutable types (
        :class:`josekit.util.frozendict` instead of
        :func:`dict`, :func:`tuple` instead of :func:`list`).

        """
        # bases cases for different types returned by json.loads
        if isinstance(value, list):
            return tuple(cls.default_decoder(subvalue) for subvalue in value)
        elif isinstance(value, dict):
            return util.frozendict(
                {cls.default_decoder(key): cls.default_decoder(value)
                 for key, value in value.items()})
        else:  # integer or string
            return value

    @classmethod
    def default_encoder(cls, value: Any) -> Any:
        """Default (passthrough) encoder."""
        # field.to_partial_json() is no good as encoder has to do partial
        # serialization only
        return value


class JSONObjectWithFieldsMeta(abc.ABCMeta):
    """Metaclass for :class:`JSONObjectWithFields` and its subclasses.

    It makes sure that, for any class ``cls`` with ``metaclass``
    set to ``JSONObjectWithFieldsMeta``:

    1. All fields (attributes of type :class:`Field`) in the class
       definition are moved to the ``cls._fields`` dictionary, where
       keys are field attribute names and values are fields themselves.

    2. ``cls.__slots__`` is extended by all field attribute names
       (i.e. not :attr:`Field.json_name`). Original ``cls.__slots__``
       are stored in ``cls._orig_slots``.

    In a consequence, for a field attribute name ``some_field``,
    ``cls.some_field`` will be a slot descriptor and not an instance
    of :class:`Field`. For example::

      some_field = Field('someField', default=())

      class Foo(metaclass=JSONObjectWithFieldsMeta):
          __slots__ = ('baz',)
          some_field = some_field

      assert Foo.__slots__ == ('some_field', 'baz')
      assert Foo._orig_slots == ()
      assert Foo.some_field is not Field

      assert Foo._fields.keys() == ['some_field']
      assert Foo._fields['some_field'] is some_field

    As an implementation note, this metaclass inherits from
    :class:`abc.ABCMeta` (and not the usual :class:`type`) to mitigate
    the metaclass conflict (:class:`ImmutableMap` and
    :class:`JSONDeSerializable`, parents of :class:`JSONObjectWithFields`,
    use :class:`abc.ABCMeta` as its metaclass).

    """

    _fields: Dict[str, Field] = {}

    def __new__(mcs, name: str, bases: Any,
                namespace: Dict[str, Any]) -> 'JSONObjectWithFieldsMeta':
        fields = {}

        for base in bases:
            fields.update(getattr(base, '_fields', {}))
        # Do not reorder, this class might override fields from base classes!
        # We create a tuple based on namespace.items() here because the loop
        # modifies namespace.
        for key, value in tuple(namespace.items()):
            if isinstance(value, Field):
                fields[key] = namespace.pop(key)

        orig_slots = []
        for base in bases:
            orig_slots.extend(slot for slot in getattr(base, '_orig_slots', ())
                              if slot not in orig_slots)
        orig_slots.extend(slot for slot in namespace.get('__slots__', ())
                          if slot not in orig_slots)

        namespace['_orig_slots'] = tuple(orig_slots)
        namespace['__slots__'] = tuple(orig_slots + list(fields))
        namespace['_fields'] = fields

        return abc.ABCMeta.__new__(mcs, name, bases, namespace)


class JSONObjectWithFields(util.ImmutableMap, interfaces.JSONDeSerializable,
                           metaclass=JSONObjectWithFieldsMeta):
    """JSON object with fields.

    Example::

      class Foo(JSONObjectWithFields):
          bar = Field('Bar')
          empty = Field('Empty', omitempty=True)

          @bar.encoder
          def bar(value):
              return value + 'bar'

          @bar.decoder
          def bar(value):
              if not value.endswith('bar'):
                  raise errors.DeserializationError('No bar suffix!')
              return value[:-3]

      assert Foo(bar='baz').to_partial_json() == {'Bar': 'bazbar'}
      assert Foo.from_json({'Bar': 'bazbar'}) == Foo(bar='baz')
      assert (Foo.from_json({'Bar': 'bazbar', 'Empty': '!'})
              == Foo(bar='baz', empty='!'))
      assert Foo(bar='baz').bar == 'baz'

    """

    @classmethod
    def _defaults(cls) -> Dict[str, Any]:
        """Get default fields values."""
        return {slot: field.default for slot, field in cls._fields.items()}

    def __init__(self, **kwargs: Any) -> None:
        super().__init__(**(dict(self._defaults(), **kwargs)))

    def fields_to_partial_json(self) -> Dict[str, Any]:
        """Serialize fields to JSON."""
        jobj = {}
        omitted = set()
        for slot, field in self._fields.items():
            value = getattr(self, slot)

            if field.omit(value):
                omitted.add((slot, value))
            else:
                try:
                    jobj[field.json_name] = field.encode(value)
                except errors.SerializationError as error:
                    raise errors.SerializationError(
                        'Could not encode {0} ({1}): {2}'.format(
                            slot, value, error))
        if omitted:
            logger.debug('Omitted empty fields: %s', ', '.join(
                '{0!s}={1!r}'.format(*field) for field in omitted))
        return jobj

    def to_partial_json(self) -> Dict[str, Any]:
        return self.fields_to_partial_json()

    @classmethod
    def _check_required(cls, jobj: Mapping[str, Any]) -> None:
        if not isinstance(jobj, Mapping):
            raise errors.DeserializationError(
                '{0} is not a dictionary object'.format(jobj))
        missing = set()
        for _, field in cls._fields.items():
            if not field.omitempty and field.json_name not in jobj:
                missing.add(field.json_name)

        if missing:
            raise errors.DeserializationError(
                'The following fields are required: {0}'.format(
                    ','.join(sorted(missing))))

    @classmethod
    def fields_from_json(cls, jobj: Mapping[str, Any]) -> Dict[str, Any]:
        """Deserialize fields from JSON."""
        cls._check_required(jobj)
        fields = {}
        for slot, field in cls._fields.items():
            if field.json_name not in jobj and field.omitempty:
                fields[slot] = field.default
            else:
                value = jobj[field.json_name]
                try:
                    fields[slot] = field.decode(value)
                except errors.DeserializationError as error:
                    raise errors.DeserializationError(
                        'Could not decode {0!r} ({1!r}): {2}'.format(
                            slot, value, error))
        return fields

    @classmethod
    def from_json(cls, jobj: Mapping[str, Any]) -> 'JSONObjectWithFields':
        return cls(**cls.fields_from_json(jobj))


class JSONObjectWithExtraFields(JSONObjectWithFields):
    """JSON object with fields and arbitrary additional members.

    Members of the JSON object that are not fields are kept, decoded
    with :meth:`Field.default_decoder`, in the ``extra``
    :class:`~josekit.util.frozendict` and serialized back as they were.
    Keyword arguments that do not name a field end up in ``extra`` too::

      class Foo(JSONObjectWithExtraFields):
          bar = Field('Bar', omitempty=True)

      assert Foo(bar='baz', qux=1).extra == {'qux': 1}
      assert Foo.from_json({'qux': [1]}).extra['qux'] == (1,)

    """
    __slots__ = ('extra',)

    def __init__(self, **kwargs: Any) -> None:
        extra = dict(kwargs.pop('extra', None) or {})
        for name in [name for name in kwargs if name not in self._fields]:
            extra[name] = kwargs.pop(name)
        registered = self._json_names().intersection(extra)
        if registered:
            raise TypeError('Registered members cannot be extra: {0}'.format(
                ', '.join(sorted(registered))))
        super().__init__(extra=util.frozendict(extra), **kwargs)

    @classmethod
    def _json_names(cls) -> FrozenSet[str]:
        return frozenset(field.json_name for field in cls._fields.values())

    def fields_to_partial_json(self) -> Dict[str, Any]:
        jobj = super().fields_to_partial_json()
        jobj.update(self.extra)
        return jobj

    @classmethod
    def fields_from_json(cls, jobj: Mapping[str, Any]) -> Dict[str, Any]:
        fields = super().fields_from_json(jobj)
        json_names = cls._json_names()
        fields['extra'] = util.frozendict({
            name: Field.default_decoder(value)
            for name, value in jobj.items() if name not in json_names})
        return fields


def encode_b64jose(data: bytes) -> str:
    """Encode JOSE Base-64 field.

    :param bytes data:
    :rtype: str

    """
    # b64encode produces ASCII characters only
    return b64.b64encode(data).decode('ascii')


def decode_b64jose(data: str, size: Optional[int] = None, minimum: bool = False) -> bytes:
    """Decode JOSE Base-64 field.

    :param str data:
    :param int size: Required length (after decoding).
    :param bool minimum: If ``True``, then ``size`` will be treated as
        minimum required length, as opposed to exact equality.

    :rtype: bytes

    :raises josekit.errors.DecodingError: if ``data`` is not a valid
        JOSE Base-64 string
    :raises josekit.errors.DeserializationError: if the decoded value
        has the wrong length

    """
    if not isinstance(data, str):
        raise errors.DecodingError('Expected a string, got {0!r}'.format(data))
    decoded = b64.b64decode(data)

    if size is not None and ((not minimum and len(decoded) != size) or
                             (minimum and len(decoded) < size)):
        raise errors.DeserializationError(
            "Expected at least or exactly {0} bytes".format(size))

    return decoded


def encode_cert(cert: x509.Certificate) -> str:
    """Encode certificate as standard Base-64 DER.

    Used by the ``x5c`` parameter, which (unlike every other binary
    JOSE parameter) does NOT use JOSE Base-64.

    :type cert: `cryptography.x509.Certificate`
    :rtype: str

    """
    return base64.b64encode(cert.public_bytes(
        serialization.Encoding.DER)).decode('ascii')


def decode_cert(b64der: str) -> x509.Certificate:
    """Decode standard Base-64 DER-encoded certificate.

    :param str b64der:
    :rtype: `cryptography.x509.Certificate`

    """
    try:
        return x509.load_der_x509_certificate(
            base64.b64decode(b64der, validate=True))
    except (TypeError, ValueError, binascii.Error) as error:
        raise errors.DeserializationError(error)


class TypedJSONObjectWithFields(JSONObjectWithFields):
    """JSON object with type."""

    typ: str = NotImplemented
    """Type of the object. Subclasses must override."""

    type_field_name: str = "type"
    """Field name used to distinguish different object types.

    Subclasses will probably have to override this.

    """

    TYPES: Mapping[str, Type['TypedJSONObjectWithFields']] = NotImplemented
    """Types registered for JSON deserialization"""

    @classmethod
    def register(cls, type_cls: Type[GenericTypedJSONObjectWithFields],
                 typ: Optional[str] = None) -> Type[GenericTypedJSONObjectWithFields]:
        """Register class for JSON deserialization."""
        typ = type_cls.typ if typ is None else typ
        cls.TYPES[typ] = type_cls  # type: ignore
        return type_cls

    @classmethod
    def get_type_cls(cls, jobj: Mapping[str, Any]) -> Type['TypedJSONObjectWithFields']:
        """Get the registered class for ``jobj``."""
        if not isinstance(jobj, Mapping):
            raise errors.DeserializationError(
                "{0} is not a dictionary object".format(jobj))

        if cls in cls.TYPES.values():
            if jobj.get(cls.type_field_name) != cls.typ:
                raise errors.DeserializationError(
                    "Missing or mismatched type field ({0})".format(
                        cls.type_field_name))
            # cls is already registered type_cls, force to use it
            # so that, e.g JWKRSA.from_json(jobj) fails if
            # jobj["kty"] != "RSA".
            return cls

        try:
            typ = jobj[cls.type_field_name]
        except KeyError:
            raise errors.DeserializationError("missing type field")

        try:
            return cls.TYPES[typ]
        except (KeyError, TypeError):
            raise errors.UnrecognizedTypeError(typ, jobj)

    def to_partial_json(self) -> Dict[str, Any]:
        """Get JSON serializable object.

        :returns: Serializable JSON object representing the typed object.
        :rtype: dict

        """
        jobj = self.fields_to_partial_json()
        jobj[self.type_field_name] = self.typ
        return jobj

    @classmethod
    def from_json(cls, jobj: Mapping[str, Any]) -> 'TypedJSONObjectWithFields':
        """Deserialize typed object from valid JSON object.

        :raises josekit.errors.UnrecognizedTypeError: if type
            of the object has not been registered.

        """
        # make sure subclasses don't cause infinite recursive from_json calls
        type_cls = cls.get_type_cls(jobj)
        return type_cls(**type_cls.fields_from_json(jobj))
