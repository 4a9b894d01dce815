"""Binary, text and JSON encodings of a HyperLogLog sketch.

Binary format (self-describing, every field framed):
    4 bytes: magic b"HLL" + format version (1)
    then three fields in this exact order, each encoded as
        1 byte:  tag
        4 bytes: payload length (big-endian uint32)
        N bytes: payload

    tag 1: registers, one byte per register
    tag 2: m, register count (big-endian uint32)
    tag 3: p, precision (uint8)

All three values are stored, so decoding does not have to derive
anything, but it still checks that they agree with each other. The
uninitialized sketch (no registers, m = 0, p = 0) is a valid payload.

Text format:
    standard padded base64 of the raw register bytes, nothing else.

p and m are not stored in the text form. They come back from the
decoded length, which goes through the same validation as
HyperLogLog.from_registers, so text that decodes to 100 bytes is an
error rather than a silently padded sketch. An uninitialized sketch
has no text form: its empty string could never decode back.

JSON emits the text form as a quoted string. SketchJSONEncoder lets
sketches sit inside larger documents passed to json.dumps.
"""

from __future__ import annotations

import base64
import binascii
import json
import struct

from hll_lite.sketch.hyperloglog import (
    MAX_PRECISION,
    MIN_PRECISION,
    EmptySketchError,
    HyperLogLog,
    RegisterCountError,
)

MAGIC = b"HLL"
FORMAT_VERSION = 1

TAG_REGISTERS = 1
TAG_M = 2
TAG_P = 3

_FIELD_HEADER = struct.Struct("!BI")


class MalformedBinaryError(ValueError):
    """Raised when a binary payload cannot be decoded into a sketch."""


class MalformedTextError(ValueError):
    """Raised when text is not valid base64 or decodes to a bad register count."""


def _field(tag: int, payload: bytes) -> bytes:
    return _FIELD_HEADER.pack(tag, len(payload)) + payload


def encode_binary(sketch: HyperLogLog) -> bytes:
    """Serialize registers, m and p, in that order."""
    return b"".join([
        MAGIC,
        bytes([FORMAT_VERSION]),
        _field(TAG_REGISTERS, sketch.registers),
        _field(TAG_M, struct.pack("!I", sketch.num_registers)),
        _field(TAG_P, struct.pack("!B", sketch.precision)),
    ])


class _Reader:
    """Cursor over a binary payload that raises on truncation."""

    def __init__(self, data: bytes) -> None:
        self._data = memoryview(data)
        self._pos = 0

    def take(self, n: int) -> bytes:
        end = self._pos + n
        if end > len(self._data):
            raise MalformedBinaryError(
                f"truncated payload: wanted {n} bytes at offset {self._pos}, "
                f"only {len(self._data) - self._pos} left"
            )
        chunk = self._data[self._pos:end].tobytes()
        self._pos = end
        return chunk

    def field(self, expected_tag: int) -> bytes:
        tag, length = _FIELD_HEADER.unpack(self.take(_FIELD_HEADER.size))
        if tag != expected_tag:
            raise MalformedBinaryError(
                f"expected field tag {expected_tag}, found {tag}"
            )
        return self.take(length)

    def remaining(self) -> int:
        return len(self._data) - self._pos


def _fixed(payload: bytes, fmt: str, name: str) -> int:
    size = struct.calcsize(fmt)
    if len(payload) != size:
        raise MalformedBinaryError(
            f"field {name} must be {size} byte(s), got {len(payload)}"
        )
    (value,) = struct.unpack(fmt, payload)
    return value


def decode_binary(data: bytes) -> HyperLogLog:
    """Rebuild a sketch from encode_binary output."""
    reader = _Reader(bytes(data))
    header = reader.take(len(MAGIC) + 1)
    if header[:len(MAGIC)] != MAGIC:
        raise MalformedBinaryError("not a HyperLogLog payload (bad magic)")
    if header[-1] != FORMAT_VERSION:
        raise MalformedBinaryError(f"unsupported format version {header[-1]}")

    registers = reader.field(TAG_REGISTERS)
    m = _fixed(reader.field(TAG_M), "!I", "m")
    p = _fixed(reader.field(TAG_P), "!B", "p")
    if reader.remaining():
        raise MalformedBinaryError(f"{reader.remaining()} trailing byte(s)")

    if m == 0 and p == 0 and not registers:
        return HyperLogLog.uninitialized()
    if not (MIN_PRECISION <= p <= MAX_PRECISION):
        raise MalformedBinaryError(f"stored precision {p} out of range")
    if m != 1 << p:
        raise MalformedBinaryError(f"stored m={m} does not match p={p}")
    if len(registers) != m:
        raise MalformedBinaryError(
            f"stored m={m} but payload has {len(registers)} registers"
        )
    return HyperLogLog.from_registers(registers)


def encode_text(sketch: HyperLogLog) -> str:
    """Base64 of the raw registers."""
    if not sketch.is_initialized():
        raise EmptySketchError("an uninitialized sketch has no text form")
    return base64.b64encode(sketch.registers).decode("ascii")


def decode_text(text: str | bytes) -> HyperLogLog:
    """Rebuild a sketch from encode_text output, deriving p from the length."""
    if isinstance(text, str):
        try:
            text = text.encode("ascii")
        except UnicodeEncodeError as exc:
            raise MalformedTextError(f"invalid base64 text: {exc}") from exc
    try:
        registers = base64.b64decode(text, validate=True)
    except binascii.Error as exc:
        raise MalformedTextError(f"invalid base64 text: {exc}") from exc
    try:
        return HyperLogLog.from_registers(registers)
    except RegisterCountError as exc:
        raise MalformedTextError(str(exc)) from exc


def encode_json(sketch: HyperLogLog) -> str:
    return json.dumps(encode_text(sketch))


def sketch_from_json_value(value: object) -> HyperLogLog:
    """Decode a sketch from an already-parsed JSON value (a string)."""
    if not isinstance(value, str):
        raise MalformedTextError(
            f"expected a JSON string holding a sketch, got {type(value).__name__}"
        )
    return decode_text(value)


def decode_json(document: str | bytes) -> HyperLogLog:
    try:
        value = json.loads(document)
    except json.JSONDecodeError as exc:
        raise MalformedTextError(f"invalid JSON: {exc}") from exc
    return sketch_from_json_value(value)


class SketchJSONEncoder(json.JSONEncoder):
    """json.JSONEncoder that writes sketches in their text form.

        json.dumps({"visitors": sketch}, cls=SketchJSONEncoder)
    """

    def default(self, o):
        if isinstance(o, HyperLogLog):
            return encode_text(o)
        return super().default(o)
