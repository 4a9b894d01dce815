"""HyperLogLog sketch: registers, update rule, estimator, merge and codecs.

Public API:
    HyperLogLog: the estimator (~2 KB at the default precision)
    encode_binary / decode_binary: framed binary form (registers, m, p)
    encode_text / decode_text: base64 of the registers
    encode_json / decode_json / SketchJSONEncoder: JSON string form
    Errors: InvalidPrecisionError, RegisterCountError (and its two
        causes), PrecisionMismatchError, EmptySketchError,
        MalformedTextError, MalformedBinaryError
"""

from hll_lite.sketch.codec import (
    MalformedBinaryError,
    MalformedTextError,
    SketchJSONEncoder,
    decode_binary,
    decode_json,
    decode_text,
    encode_binary,
    encode_json,
    encode_text,
    sketch_from_json_value,
)
from hll_lite.sketch.hyperloglog import (
    MAX_PRECISION,
    MIN_PRECISION,
    EmptySketchError,
    HyperLogLog,
    InvalidPrecisionError,
    PrecisionMismatchError,
    RegisterCountError,
    RegisterCountNotPowerOfTwoError,
    RegisterCountOutOfRangeError,
)

__all__ = [
    "MAX_PRECISION",
    "MIN_PRECISION",
    "EmptySketchError",
    "HyperLogLog",
    "InvalidPrecisionError",
    "MalformedBinaryError",
    "MalformedTextError",
    "PrecisionMismatchError",
    "RegisterCountError",
    "RegisterCountNotPowerOfTwoError",
    "RegisterCountOutOfRangeError",
    "SketchJSONEncoder",
    "decode_binary",
    "decode_json",
    "decode_text",
    "encode_binary",
    "encode_json",
    "encode_text",
    "sketch_from_json_value",
]
