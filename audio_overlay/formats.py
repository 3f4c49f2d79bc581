"""
Sample representations and their numeric capabilities.

Every supported representation exposes the same small capability set used
by the mixing rules:
    - zero:       additive zero value
    - widen:      move to a representation that cannot overflow on a + b
    - narrow:     convert a clamped value back to the representation
    - mix_bounds: headroom bounds applied by the default mixing rule
    - type_bounds: the representation's own limits

Integer headroom bounds are those of the representation one step narrower
(int16 samples clamp to the int8 range). int8 has nothing narrower and
clamps to its own range. Float samples are assumed normalised and clamp
to [-1.0, 1.0].
"""

from __future__ import annotations

import array
from enum import Enum
from typing import Any, Sequence

import numpy as np

from audio_overlay.errors import UnsupportedSampleFormatError


class SampleFormat(Enum):
    """Supported sample representations."""
    INT8 = "int8"
    INT16 = "int16"
    INT32 = "int32"
    INT64 = "int64"
    FLOAT32 = "float32"
    FLOAT64 = "float64"
    
    @property
    def dtype(self) -> np.dtype:
        """numpy dtype of the representation."""
        return np.dtype(self.value)
    
    @property
    def is_float(self) -> bool:
        return self.dtype.kind == "f"
    
    @property
    def bits(self) -> int:
        return self.dtype.itemsize * 8
    
    @property
    def zero(self) -> int | float:
        """Additive zero, as a native Python scalar."""
        return 0.0 if self.is_float else 0
    
    @property
    def wide_dtype(self) -> np.dtype:
        """
        Representation with strictly greater range.
        
        int64 widens to numpy object arrays holding Python ints, which
        have arbitrary precision. Floats are not widened.
        """
        return _WIDE_DTYPES[self]
    
    @property
    def type_bounds(self) -> tuple[int | float, int | float]:
        """The representation's own (min, max)."""
        if self.is_float:
            return (-1.0, 1.0)
        info = np.iinfo(self.dtype)
        return (int(info.min), int(info.max))
    
    @property
    def mix_bounds(self) -> tuple[int | float, int | float]:
        """(min, max) used by the headroom mixing rule."""
        return _HEADROOM_FORMATS[self].type_bounds
    
    def widen(self, value: Any) -> Any:
        """Widen a single sample so that adding two of them cannot overflow."""
        if self.is_float:
            return self.dtype.type(value)
        if self is SampleFormat.INT64:
            return int(value)
        return self.wide_dtype.type(value)
    
    def narrow(self, value: Any) -> int | float:
        """Narrow an in-range value back to this representation (native scalar)."""
        return self.dtype.type(value).item()
    
    @classmethod
    def from_dtype(cls, dtype: Any) -> "SampleFormat":
        """
        Get format from a numpy dtype.
        
        Args:
            dtype: Anything np.dtype() accepts
            
        Returns:
            Matching SampleFormat
            
        Raises:
            UnsupportedSampleFormatError: For unsigned, complex and
                other non-sample dtypes
        """
        try:
            resolved = np.dtype(dtype)
        except TypeError as e:
            raise UnsupportedSampleFormatError(dtype) from e
        
        for fmt in cls:
            if fmt.dtype == resolved:
                return fmt
        raise UnsupportedSampleFormatError(resolved)
    
    @classmethod
    def from_typecode(cls, typecode: str) -> "SampleFormat":
        """Get format from an array.array typecode."""
        if typecode in ("f", "d"):
            return cls.FLOAT32 if typecode == "f" else cls.FLOAT64
        if typecode not in _SIGNED_TYPECODES:
            raise UnsupportedSampleFormatError(f"array typecode {typecode!r}")
        itemsize = array.array(typecode).itemsize
        return cls.from_dtype(f"int{itemsize * 8}")
    
    @classmethod
    def infer(cls, *buffers: Sequence[Any]) -> "SampleFormat":
        """
        Infer the representation from the first buffer that reveals one.
        
        numpy arrays are identified by dtype, array.array by typecode and
        plain sequences by their first element. Typed evidence from any
        buffer wins over plain Python scalars. Python ints carry no width,
        so they map to INT16, which is also the fallback for empty buffers.
        """
        scalars = []
        for buffer in buffers:
            if isinstance(buffer, np.ndarray):
                return cls.from_dtype(buffer.dtype)
            if isinstance(buffer, array.array):
                return cls.from_typecode(buffer.typecode)
            if len(buffer) == 0:
                continue
            first = buffer[0]
            if isinstance(first, np.generic):
                return cls.from_dtype(first.dtype)
            scalars.append(first)
        
        for first in scalars:
            if isinstance(first, float):
                return cls.FLOAT64
            if isinstance(first, int):
                return cls.INT16
            raise UnsupportedSampleFormatError(type(first).__name__)
        return cls.INT16


_SIGNED_TYPECODES = ("b", "h", "i", "l", "q")

_WIDE_DTYPES = {
    SampleFormat.INT8: np.dtype(np.int16),
    SampleFormat.INT16: np.dtype(np.int32),
    SampleFormat.INT32: np.dtype(np.int64),
    SampleFormat.INT64: np.dtype(object),
    SampleFormat.FLOAT32: np.dtype(np.float32),
    SampleFormat.FLOAT64: np.dtype(np.float64),
}

# Representation whose limits act as headroom bounds for each format
_HEADROOM_FORMATS = {
    SampleFormat.INT8: SampleFormat.INT8,
    SampleFormat.INT16: SampleFormat.INT8,
    SampleFormat.INT32: SampleFormat.INT16,
    SampleFormat.INT64: SampleFormat.INT32,
    SampleFormat.FLOAT32: SampleFormat.FLOAT32,
    SampleFormat.FLOAT64: SampleFormat.FLOAT64,
}


def clamp(value: Any, low: Any, high: Any) -> Any:
    """Saturating clamp. No rounding, no soft knee."""
    if value > high:
        return high
    if value < low:
        return low
    return value
