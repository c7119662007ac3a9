"""Typed codec for smart-contract arguments and return values.

Contract values have two binary forms:

* **top-level** – a whole argument or return-data item. Integers are minimal
  big-endian (zero is the empty string), buffers are raw bytes.
* **nested** – a value embedded in a struct or an option. ``u64`` is eight
  bytes, ``BigUint`` and buffers carry a four-byte length prefix, ``bool`` and
  enum discriminants are a single byte.

Each :class:`AbiType` knows both forms. :class:`ContractCall` binds an endpoint
name to a list of :class:`TypedValue` arguments and renders the
``function@hex@hex`` payload used both by queries and by transactions.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Iterable, Mapping, Sequence

from xoxno.address import PUBKEY_LENGTH, address_to_pubkey, pubkey_to_address
from xoxno.exceptions import CodecError

U64_MAX = 2**64 - 1


def encode_unsigned(value: int) -> bytes:
    """Minimal big-endian encoding; zero encodes to ``b""``."""
    if value < 0:
        raise CodecError(f"Cannot encode negative integer {value}")
    return value.to_bytes((value.bit_length() + 7) // 8, "big")


class _Reader:
    def __init__(self, data: bytes) -> None:
        self._data = data
        self._pos = 0

    @property
    def at_end(self) -> bool:
        return self._pos >= len(self._data)

    def read(self, size: int) -> bytes:
        end = self._pos + size
        if end > len(self._data):
            raise CodecError(
                f"Unexpected end of data: wanted {size} bytes at offset {self._pos}, "
                f"only {len(self._data) - self._pos} left"
            )
        chunk = self._data[self._pos:end]
        self._pos = end
        return chunk

    def expect_end(self) -> None:
        if not self.at_end:
            raise CodecError(f"{len(self._data) - self._pos} trailing bytes after value")


class AbiType:
    """Base for all contract types."""

    name = "abstract"

    def encode_nested(self, value: Any) -> bytes:
        raise NotImplementedError

    def decode_nested(self, reader: _Reader) -> Any:
        raise NotImplementedError

    def encode_top(self, value: Any) -> bytes:
        return self.encode_nested(value)

    def decode_top(self, data: bytes) -> Any:
        reader = _Reader(data)
        value = self.decode_nested(reader)
        reader.expect_end()
        return value

    def __repr__(self) -> str:
        return f"<{self.name}>"


class U64Type(AbiType):
    name = "u64"

    def _check(self, value: int) -> int:
        value = int(value)
        if not 0 <= value <= U64_MAX:
            raise CodecError(f"Value {value} does not fit in u64")
        return value

    def encode_nested(self, value: int) -> bytes:
        return self._check(value).to_bytes(8, "big")

    def encode_top(self, value: int) -> bytes:
        return encode_unsigned(self._check(value))

    def decode_nested(self, reader: _Reader) -> int:
        return int.from_bytes(reader.read(8), "big")

    def decode_top(self, data: bytes) -> int:
        if len(data) > 8:
            raise CodecError(f"u64 top-level value is {len(data)} bytes long")
        return int.from_bytes(data, "big")


class BigUIntType(AbiType):
    name = "BigUint"

    def encode_nested(self, value: int) -> bytes:
        raw = encode_unsigned(int(value))
        return len(raw).to_bytes(4, "big") + raw

    def encode_top(self, value: int) -> bytes:
        return encode_unsigned(int(value))

    def decode_nested(self, reader: _Reader) -> int:
        size = int.from_bytes(reader.read(4), "big")
        return int.from_bytes(reader.read(size), "big")

    def decode_top(self, data: bytes) -> int:
        return int.from_bytes(data, "big")


class BytesType(AbiType):
    """Managed buffer: arbitrary bytes."""

    name = "bytes"

    def _to_bytes(self, value: Any) -> bytes:
        if isinstance(value, str):
            return value.encode("utf-8")
        return bytes(value)

    def _from_bytes(self, raw: bytes) -> Any:
        return raw

    def encode_nested(self, value: Any) -> bytes:
        raw = self._to_bytes(value)
        return len(raw).to_bytes(4, "big") + raw

    def encode_top(self, value: Any) -> bytes:
        return self._to_bytes(value)

    def decode_nested(self, reader: _Reader) -> Any:
        size = int.from_bytes(reader.read(4), "big")
        return self._from_bytes(reader.read(size))

    def decode_top(self, data: bytes) -> Any:
        return self._from_bytes(data)


class TokenIdentifierType(BytesType):
    name = "TokenIdentifier"

    def _from_bytes(self, raw: bytes) -> str:
        try:
            return raw.decode("ascii")
        except UnicodeDecodeError as exc:
            raise CodecError(f"Token identifier is not ASCII: {raw!r}") from exc


class EgldOrEsdtTokenIdentifierType(TokenIdentifierType):
    name = "EgldOrEsdtTokenIdentifier"


class BooleanType(AbiType):
    name = "bool"

    def encode_nested(self, value: bool) -> bytes:
        return b"\x01" if value else b"\x00"

    def encode_top(self, value: bool) -> bytes:
        return b"\x01" if value else b""

    def decode_nested(self, reader: _Reader) -> bool:
        return self._parse(reader.read(1))

    def decode_top(self, data: bytes) -> bool:
        if data == b"":
            return False
        return self._parse(data)

    @staticmethod
    def _parse(raw: bytes) -> bool:
        if raw == b"\x01":
            return True
        if raw == b"\x00":
            return False
        raise CodecError(f"Invalid boolean payload {raw.hex()}")


class AddressType(AbiType):
    """Account address; decoded to its bech32 form."""

    name = "Address"

    def encode_nested(self, value: str | bytes) -> bytes:
        if isinstance(value, str):
            return address_to_pubkey(value)
        if len(value) != PUBKEY_LENGTH:
            raise CodecError(f"Address must be {PUBKEY_LENGTH} bytes, got {len(value)}")
        return bytes(value)

    def decode_nested(self, reader: _Reader) -> str:
        return pubkey_to_address(reader.read(PUBKEY_LENGTH))


class OptionType(AbiType):
    """``Option<T>``: ``None`` or a flagged nested value."""

    def __init__(self, inner: AbiType) -> None:
        self.inner = inner
        self.name = f"Option<{inner.name}>"

    def encode_nested(self, value: Any) -> bytes:
        if value is None:
            return b"\x00"
        return b"\x01" + self.inner.encode_nested(value)

    def encode_top(self, value: Any) -> bytes:
        if value is None:
            return b""
        return b"\x01" + self.inner.encode_nested(value)

    def decode_nested(self, reader: _Reader) -> Any:
        flag = reader.read(1)
        if flag == b"\x00":
            return None
        if flag != b"\x01":
            raise CodecError(f"Invalid option flag {flag.hex()} for {self.name}")
        return self.inner.decode_nested(reader)

    def decode_top(self, data: bytes) -> Any:
        if data == b"":
            return None
        return super().decode_top(data)


class OptionalValueType(AbiType):
    """Trailing optional argument: omitted from the call when ``None``."""

    def __init__(self, inner: AbiType) -> None:
        self.inner = inner
        self.name = f"optional<{inner.name}>"

    def encode_nested(self, value: Any) -> bytes:
        return self.inner.encode_nested(value)

    def encode_top(self, value: Any) -> bytes:
        return self.inner.encode_top(value)

    def decode_nested(self, reader: _Reader) -> Any:
        return self.inner.decode_nested(reader)

    def decode_top(self, data: bytes) -> Any:
        return self.inner.decode_top(data)


class EnumType(AbiType):
    """Simple (field-less) enum, decoded to the variant name."""

    def __init__(self, name: str, variants: Sequence[str]) -> None:
        self.name = name
        self.variants = tuple(variants)

    def _discriminant(self, value: Any) -> int:
        if isinstance(value, str):
            try:
                return self.variants.index(value)
            except ValueError:
                raise CodecError(f"Unknown {self.name} variant {value!r}") from None
        index = int(value)
        if not 0 <= index < len(self.variants):
            raise CodecError(f"Unknown {self.name} discriminant {index}")
        return index

    def _variant(self, index: int) -> str:
        if index >= len(self.variants):
            raise CodecError(f"Unknown {self.name} discriminant {index}")
        return self.variants[index]

    def encode_nested(self, value: Any) -> bytes:
        return bytes([self._discriminant(value)])

    def encode_top(self, value: Any) -> bytes:
        return encode_unsigned(self._discriminant(value))

    def decode_nested(self, reader: _Reader) -> str:
        return self._variant(reader.read(1)[0])

    def decode_top(self, data: bytes) -> str:
        return self._variant(int.from_bytes(data, "big"))


_REQUIRED = object()


@dataclass(frozen=True)
class FieldDefinition:
    name: str
    type: AbiType
    # Used when the payload ends before this field (records written by older
    # contract versions).
    default: Any = _REQUIRED


class StructType(AbiType):
    """Struct: nested field encodings concatenated in declaration order."""

    def __init__(self, name: str, fields: Sequence[FieldDefinition]) -> None:
        self.name = name
        self.fields = tuple(fields)

    @property
    def field_names(self) -> tuple[str, ...]:
        return tuple(f.name for f in self.fields)

    def encode_nested(self, value: Mapping[str, Any]) -> bytes:
        missing = [f.name for f in self.fields if f.name not in value]
        if missing:
            raise CodecError(f"{self.name} is missing fields: {', '.join(missing)}")
        return b"".join(f.type.encode_nested(value[f.name]) for f in self.fields)

    def decode_nested(self, reader: _Reader) -> dict[str, Any]:
        decoded: dict[str, Any] = {}
        for f in self.fields:
            if reader.at_end and f.default is not _REQUIRED:
                decoded[f.name] = f.default
                continue
            decoded[f.name] = f.type.decode_nested(reader)
        return decoded


U64 = U64Type()
BIG_UINT = BigUIntType()
BYTES = BytesType()
TOKEN_IDENTIFIER = TokenIdentifierType()
EGLD_OR_ESDT_TOKEN_IDENTIFIER = EgldOrEsdtTokenIdentifierType()
BOOL = BooleanType()
ADDRESS = AddressType()


def decode_variadic(item_type: AbiType, return_data: Iterable[bytes]) -> list[Any]:
    """Decode a variadic result where each return-data item is one element."""
    return [item_type.decode_top(item) for item in return_data]


@dataclass(frozen=True)
class TypedValue:
    type: AbiType
    value: Any

    @property
    def omitted(self) -> bool:
        return isinstance(self.type, OptionalValueType) and self.value is None

    def encode(self) -> bytes:
        return self.type.encode_top(self.value)


@dataclass(frozen=True)
class ContractCall:
    """An endpoint name and its typed arguments."""

    function: str
    args: tuple[TypedValue, ...] = field(default_factory=tuple)

    def encoded_args(self) -> list[bytes]:
        return [arg.encode() for arg in self.args if not arg.omitted]

    def hex_args(self) -> list[str]:
        return [raw.hex() for raw in self.encoded_args()]

    @property
    def data(self) -> str:
        return "@".join([self.function, *self.hex_args()])
