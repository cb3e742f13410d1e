"""Endpoint identifiers of the dtn and ipn URI schemes."""

import abc
import re
from dataclasses import dataclass

from .errors import SerializationError

_UINT_LIMIT = 1 << 64
_DECIMAL = re.compile(r"\+?[0-9]+")
_DTN_CODE = 1
_IPN_CODE = 2


def _uint(obj, field):
    if isinstance(obj, bool) or not isinstance(obj, int) or not 0 <= obj < _UINT_LIMIT:
        raise SerializationError(f"field '{field}' must be an unsigned integer, got {obj!r}")
    return obj


def _parse_uint(text):
    if not _DECIMAL.fullmatch(text):
        return None
    number = int(text)
    return number if number < _UINT_LIMIT else None


class Endpoint(abc.ABC):
    """An endpoint identifier; concrete endpoints are DTNEndpoint and IPNEndpoint."""

    @classmethod
    def parse(cls, uri):
        """Parse an endpoint URI, raising ValueError if it is not understood."""
        schema, sep, content = uri.partition(":")
        if not sep:
            raise ValueError(f"endpoint {uri!r} has no scheme")
        if schema == "dtn":
            if not content.startswith("//"):
                raise ValueError(f"dtn endpoint {uri!r} must start with 'dtn://'")
            return DTNEndpoint(content)
        if schema == "ipn":
            inner_schema, sep, hier = content.partition(":")
            if not sep or inner_schema != "ipn":
                raise ValueError(f"invalid ipn endpoint {uri!r}")
            node_text, sep, service_text = hier.partition(".")
            node = _parse_uint(node_text) if sep else None
            service = _parse_uint(service_text) if sep else None
            if node is None or service is None:
                raise ValueError(f"invalid ipn endpoint {uri!r}")
            return IPNEndpoint(node, service)
        raise ValueError(f"unknown endpoint scheme {schema!r}")

    @classmethod
    def from_cbor(cls, obj):
        """Decode an endpoint from its [type, value] CBOR array."""
        if not isinstance(obj, (list, tuple)):
            raise SerializationError("endpoint must be an array")
        if len(obj) != 2:
            raise SerializationError(f"endpoint must have 2 elements, got {len(obj)}")
        code, value = obj
        code = _uint(code, "endpoint_type")
        if code == _DTN_CODE:
            return DTNEndpoint._from_value(value)
        if code == _IPN_CODE:
            return IPNEndpoint._from_value(value)
        raise SerializationError(f"unknown endpoint type {code}")

    def to_cbor(self):
        """The endpoint as a [type, value] CBOR array."""
        return [self._type_code(), self._value()]

    @abc.abstractmethod
    def _type_code(self):
        """The scheme code written on the wire."""

    @abc.abstractmethod
    def _value(self):
        """The scheme-specific part written on the wire."""

    @abc.abstractmethod
    def validate(self):
        """Whether the endpoint is well formed."""

    def is_null_endpoint(self):
        """Whether this is the null endpoint dtn:none."""
        return False

    @abc.abstractmethod
    def matches_node(self, other):
        """Whether both endpoints belong to the same node."""

    @abc.abstractmethod
    def node_endpoint(self):
        """The endpoint identifying the node this endpoint belongs to."""


@dataclass(frozen=True, order=True)
class DTNEndpoint(Endpoint):
    """An endpoint of the dtn scheme; uri is the part after 'dtn:'."""

    uri: str

    def __str__(self):
        return f"dtn:{self.uri}"

    @classmethod
    def _from_value(cls, value):
        if isinstance(value, str):
            return cls(value)
        if isinstance(value, bool) or not isinstance(value, int):
            raise SerializationError(f"invalid dtn endpoint value {value!r}")
        if value != 0:
            raise SerializationError("dtn endpoints may only have 0 as a numeric value")
        return cls("none")

    def _type_code(self):
        return _DTN_CODE

    def _value(self):
        return 0 if self.is_null_endpoint() else self.uri

    def validate(self):
        return self.uri == "none" or self.uri.startswith("//")

    def is_null_endpoint(self):
        return self.uri == "none"

    def node_name(self):
        """The authority part of the URI, between '//' and the first '/'."""
        return self.uri[2:].split("/", 1)[0]

    def matches_node(self, other):
        return isinstance(other, DTNEndpoint) and self.node_name() == other.node_name()

    def node_endpoint(self):
        return DTNEndpoint("//" + self.node_name())


@dataclass(frozen=True, order=True)
class IPNEndpoint(Endpoint):
    """An endpoint of the ipn scheme made of a node and a service number."""

    node: int
    service: int

    def __str__(self):
        return f"ipn:{self.node}.{self.service}"

    @classmethod
    def _from_value(cls, value):
        if isinstance(value, dict):
            try:
                node, service = value["node"], value["service"]
            except KeyError as exc:
                raise SerializationError(f"ipn endpoint lacks field {exc.args[0]!r}") from None
        elif isinstance(value, (list, tuple)) and len(value) == 2:
            node, service = value
        else:
            raise SerializationError(f"invalid ipn endpoint value {value!r}")
        return cls(_uint(node, "node"), _uint(service, "service"))

    def _type_code(self):
        return _IPN_CODE

    def _value(self):
        return {"node": self.node, "service": self.service}

    def validate(self):
        return True

    def matches_node(self, other):
        return isinstance(other, IPNEndpoint) and self.node == other.node

    def node_endpoint(self):
        return IPNEndpoint(self.node, 0)