"""JOSE interfaces."""
import abc
from collections.abc import Mapping, Sequence
import json
from typing import Any, Type, TypeVar

from josekit import errors

GenericJSONDeSerializable = TypeVar('GenericJSONDeSerializable',
                                    bound='JSONDeSerializable')


class JSONDeSerializable(metaclass=abc.ABCMeta):
    """Interface for (de)serializable JSON objects.

    Standard :mod:`json` translates JSON documents to and from the basic
    Python types only. :class:`JSONDeSerializable` adds two concepts on
    top of that:

      serialization
        Turning an arbitrary Python object into Python object that can
        be encoded into a JSON document. **Full serialization** produces
        a Python object composed of only basic types. **Partial
        serialization** (accomplished by :meth:`to_partial_json`)
        produces a Python object that might also be built from other
        :class:`JSONDeSerializable` objects.

      deserialization
        Turning a decoded Python object (necessarily one of the basic
        types) into an arbitrary Python object.

    :func:`json.dumps` applies ``default`` recursively, therefore
    ``default`` is required to perform only partial serialization. This
    is the idea behind :meth:`to_partial_json` producing only partial
    serialization, while :meth:`json_dumps` dumps with ``default`` set to
    :meth:`json_dump_default`.

    """

    @abc.abstractmethod
    def to_partial_json(self) -> Any:  # pragma: no cover
        """Partially serialize.

        :raises josekit.errors.SerializationError:
            in case of any serialization error.
        :returns: Partially serializable object.

        """
        raise NotImplementedError()

    def to_json(self) -> Any:
        """Fully serialize.

        :raises josekit.errors.SerializationError:
            in case of any serialization error.
        :returns: Fully serialized object.

        """
        def _serialize(obj: Any) -> Any:
            if isinstance(obj, JSONDeSerializable):
                return _serialize(obj.to_partial_json())
            if isinstance(obj, (str, bytes)):  # strings are Sequence
                return obj
            elif isinstance(obj, list):
                return [_serialize(subobj) for subobj in obj]
            elif isinstance(obj, Sequence):
                # default to tuple, otherwise Mapping could get
                # unhashable list
                return tuple(_serialize(subobj) for subobj in obj)
            elif isinstance(obj, Mapping):
                return {_serialize(key): _serialize(value)
                        for key, value in obj.items()}
            else:
                return obj

        return _serialize(self)

    @classmethod
    @abc.abstractmethod
    def from_json(cls: Type[GenericJSONDeSerializable],
                  jobj: Any) -> GenericJSONDeSerializable:
        """Deserialize a decoded JSON document.

        :param jobj: Python object, composed of only other basic data
            types, as decoded from JSON document. Not necessarily
            :class:`dict` (as decoded from "JSON object" document).

        :raises josekit.errors.DeserializationError:
            if decoding was unsuccessful, e.g. in case of unparseable
            X509 certificate, or wrong padding in JOSE base64 encoded
            string, etc.

        """
        # TypeError: Can't instantiate abstract class <cls> with
        # abstract methods from_json, to_partial_json
        return cls()  # type: ignore

    @classmethod
    def json_loads(cls: Type[GenericJSONDeSerializable],
                   json_string: Any) -> GenericJSONDeSerializable:
        """Deserialize from JSON document string.

        :raises josekit.errors.DecodingError: if ``json_string`` is not
            valid JSON, or nested too deeply to be parsed

        """
        try:
            loads = json.loads(json_string)
        except (ValueError, RecursionError) as error:
            raise errors.DecodingError(error)
        return cls.from_json(loads)

    def json_dumps(self, **kwargs: Any) -> str:
        """Dump to JSON string using proper serializer.

        :returns: JSON document string.
        :rtype: str

        """
        return json.dumps(self, default=self.json_dump_default, **kwargs)

    @classmethod
    def json_dump_default(cls, python_object: 'JSONDeSerializable') -> Any:
        """Serialize Python object.

        This function is meant to be passed as ``default`` to
        :func:`json.dump` or :func:`json.dumps`. They call
        ``default(python_object)`` only for non-basic Python types, so
        this function necessarily raises :class:`TypeError` if
        ``python_object`` is not an instance of
        :class:`JSONDeSerializable`.

        """
        if isinstance(python_object, JSONDeSerializable):
            return python_object.to_partial_json()
        elif isinstance(python_object, Mapping):  # e.g. util.frozendict
            return dict(python_object)
        else:  # this branch is necessary, cannot just "return"
            raise TypeError(repr(python_object) + ' is not JSON serializable')
