"""A small CBOR encoder and decoder covering the items bundles are made of."""

import struct

from .errors import SerializationError

_UINT_LIMIT = 1 << 64
_MAX_DEPTH = 128
_BREAK = object()


class IndefiniteArray(list):
    """A list that is encoded as an indefinite-length CBOR array."""

    def __repr__(self):
        return f"IndefiniteArray({list.__repr__(self)})"


def _head(major, argument):
    prefix = major << 5
    if argument < 24:
        return bytes([prefix | argument])
    for info, size in ((24, 1), (25, 2), (26, 4), (27, 8)):
        if argument < 1 << (8 * size):
            return bytes([prefix | info]) + argument.to_bytes(size, "big")
    raise SerializationError(f"argument {argument} does not fit in 64 bits")


def _chunks(value, depth):
    if depth > _MAX_DEPTH:
        raise SerializationError("nesting too deep")
    if value is None:
        yield b"\xf6"
    elif isinstance(value, bool):
        yield b"\xf5" if value else b"\xf4"
    elif isinstance(value, int):
        number = int(value)
        if 0 <= number < _UINT_LIMIT:
            yield _head(0, number)
        elif -_UINT_LIMIT <= number < 0:
            yield _head(1, -1 - number)
        else:
            raise SerializationError(f"integer {number} is out of range")
    elif isinstance(value, float):
        yield b"\xfb" + struct.pack(">d", value)
    elif isinstance(value, (bytes, bytearray, memoryview)):
        data = bytes(value)
        yield _head(2, len(data))
        yield data
    elif isinstance(value, str):
        data = value.encode("utf-8")
        yield _head(3, len(data))
        yield data
    elif isinstance(value, IndefiniteArray):
        yield b"\x9f"
        for item in value:
            yield from _chunks(item, depth + 1)
        yield b"\xff"
    elif isinstance(value, (list, tuple)):
        yield _head(4, len(value))
        for item in value:
            yield from _chunks(item, depth + 1)
    elif isinstance(value, dict):
        yield _head(5, len(value))
        for key, item in value.items():
            yield from _chunks(key, depth + 1)
            yield from _chunks(item, depth + 1)
    else:
        raise SerializationError(f"cannot encode {type(value).__name__}")


def encode(value):
    """Encode a Python value as CBOR bytes."""
    return b"".join(_chunks(value, 0))


class _Decoder:
    def __init__(self, data):
        self._data = data
        self.pos = 0

    def _take(self, count):
        end = self.pos + count
        if end > len(self._data):
            raise SerializationError("unexpected end of input")
        chunk = self._data[self.pos:end]
        self.pos = end
        return chunk

    def _argument(self, info):
        if info < 24:
            return info
        if info in (24, 25, 26, 27):
            return int.from_bytes(self._take(1 << (info - 24)), "big")
        raise SerializationError(f"invalid additional information {info}")

    def _indefinite_string(self, major):
        parts = []
        while True:
            initial = self._take(1)[0]
            if initial == 0xFF:
                return b"".join(parts)
            if initial >> 5 != major or initial & 0x1F == 31:
                raise SerializationError("invalid chunk in indefinite-length string")
            parts.append(self._take(self._argument(initial & 0x1F)))

    def item(self, depth, allow_break=False):
        if depth > _MAX_DEPTH:
            raise SerializationError("nesting too deep")
        initial = self._take(1)[0]
        if initial == 0xFF:
            if allow_break:
                return _BREAK
            raise SerializationError("unexpected break")
        major, info = initial >> 5, initial & 0x1F
        if major == 0:
            return self._argument(info)
        if major == 1:
            return -1 - self._argument(info)
        if major in (2, 3):
            if info == 31:
                raw = self._indefinite_string(major)
            else:
                raw = self._take(self._argument(info))
            if major == 2:
                return raw
            try:
                return raw.decode("utf-8")
            except UnicodeDecodeError as exc:
                raise SerializationError("invalid UTF-8 in text string") from exc
        if major == 4:
            if info == 31:
                items = IndefiniteArray()
                while (element := self.item(depth + 1, allow_break=True)) is not _BREAK:
                    items.append(element)
                return items
            return [self.item(depth + 1) for _ in range(self._argument(info))]
        if major == 5:
            return self._map(info, depth)
        if major == 6:
            self._argument(info)
            return self.item(depth + 1)
        return self._simple(info)

    def _map(self, info, depth):
        result = {}
        try:
            if info == 31:
                while (key := self.item(depth + 1, allow_break=True)) is not _BREAK:
                    result[key] = self.item(depth + 1)
            else:
                for _ in range(self._argument(info)):
                    key = self.item(depth + 1)
                    result[key] = self.item(depth + 1)
        except TypeError as exc:
            raise SerializationError("unhashable map key") from exc
        return result

    def _simple(self, info):
        if info == 20:
            return False
        if info == 21:
            return True
        if info in (22, 23):
            return None
        if info == 25:
            return struct.unpack(">e", self._take(2))[0]
        if info == 26:
            return struct.unpack(">f", self._take(4))[0]
        if info == 27:
            return struct.unpack(">d", self._take(8))[0]
        raise SerializationError(f"unsupported simple value {info}")


def decode(data):
    """Decode one CBOR item from bytes; trailing bytes are an error."""
    raw = bytes(data)
    decoder = _Decoder(raw)
    value = decoder.item(0)
    if decoder.pos != len(raw):
        raise SerializationError("trailing data after CBOR item")
    return value