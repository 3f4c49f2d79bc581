"""
Mixing rules - Combine two samples of the same representation.

Modes:
    HEADROOM   Widen, add, clamp to the next-narrower representation's
               bounds, narrow. Floats add and clamp to [-1.0, 1.0].
               This is the default rule used by overlay().
    SATURATE   Widen, add, clamp to the representation's own limits.
    NONLINEAR  Sign-dependent blend: when both samples share a sign the
               cross term a*b/limit is subtracted from the sum, so the
               result approaches but never passes the limit.

Every mode is symmetric in its two operands.

Example:
    from audio_overlay.formats import SampleFormat
    from audio_overlay.mixing import MixMode, mix_samples
    
    mix_samples(50, 100, SampleFormat.INT16)                    # 127
    mix_samples(50, 100, SampleFormat.INT16, MixMode.SATURATE)  # 150
"""

from __future__ import annotations

from enum import Enum
from typing import Any

import numpy as np

from audio_overlay.formats import SampleFormat, clamp


class MixMode(Enum):
    """How two overlapping samples are combined."""
    HEADROOM = "headroom"
    SATURATE = "saturate"
    NONLINEAR = "nonlinear"


def _trunc_div(numerator: int, denominator: int) -> int:
    """Integer division rounding toward zero."""
    quotient = abs(numerator) // abs(denominator)
    if (numerator < 0) != (denominator < 0):
        return -quotient
    return quotient


def _trunc_div_array(numerator: np.ndarray, denominator: int) -> np.ndarray:
    quotient = np.abs(numerator) // abs(denominator)
    return np.where((numerator < 0) != (denominator < 0), -quotient, quotient)


def mix_samples(
    a: Any,
    b: Any,
    sample_format: SampleFormat,
    mode: MixMode = MixMode.HEADROOM,
) -> int | float:
    """
    Mix two samples.
    
    Args:
        a: First sample (typically the existing destination value)
        b: Second sample (typically the incoming source value)
        sample_format: Representation of both samples
        mode: Mixing rule
        
    Returns:
        Mixed sample as a native Python scalar of the representation
    """
    if mode is MixMode.NONLINEAR:
        return _mix_nonlinear(a, b, sample_format)
    
    if mode is MixMode.HEADROOM:
        low, high = sample_format.mix_bounds
    else:
        low, high = sample_format.type_bounds
    
    total = sample_format.widen(a) + sample_format.widen(b)
    return sample_format.narrow(clamp(total, low, high))


def _mix_nonlinear(a: Any, b: Any, sample_format: SampleFormat) -> int | float:
    low, high = sample_format.type_bounds
    
    if sample_format.is_float:
        a, b = sample_format.widen(a), sample_format.widen(b)
        low, high = sample_format.widen(low), sample_format.widen(high)
        total = a + b
        if a < 0 and b < 0:
            total = total - (a * b) / low
        elif a > 0 and b > 0:
            total = total - (a * b) / high
    else:
        # Python ints cannot overflow the cross term
        a, b = int(a), int(b)
        total = a + b
        if a < 0 and b < 0:
            total -= _trunc_div(a * b, low)
        elif a > 0 and b > 0:
            total -= _trunc_div(a * b, high)
    
    return sample_format.narrow(clamp(total, low, high))


def mix_arrays(
    a: np.ndarray,
    b: np.ndarray,
    sample_format: SampleFormat,
    mode: MixMode = MixMode.HEADROOM,
) -> np.ndarray:
    """
    Vectorised mix_samples() over two equal-length arrays.
    
    Args:
        a: First samples
        b: Second samples
        sample_format: Representation of both arrays
        mode: Mixing rule
        
    Returns:
        New array of sample_format.dtype, element-wise equal to
        mix_samples(a[i], b[i], sample_format, mode)
        
    Raises:
        ValueError: If the arrays differ in shape
    """
    a = np.asarray(a)
    b = np.asarray(b)
    if a.shape != b.shape:
        raise ValueError(f"Cannot mix arrays of shape {a.shape} and {b.shape}")
    
    wide_a = a.astype(sample_format.wide_dtype)
    wide_b = b.astype(sample_format.wide_dtype)
    total = wide_a + wide_b
    
    if mode is MixMode.NONLINEAR:
        low, high = sample_format.type_bounds
        product = wide_a * wide_b
        if sample_format.is_float:
            negative_term = product / low
            positive_term = product / high
        else:
            negative_term = _trunc_div_array(product, low)
            positive_term = _trunc_div_array(product, high)
        both_negative = (wide_a < 0) & (wide_b < 0)
        both_positive = (wide_a > 0) & (wide_b > 0)
        total = np.where(
            both_negative,
            total - negative_term,
            np.where(both_positive, total - positive_term, total),
        )
    elif mode is MixMode.HEADROOM:
        low, high = sample_format.mix_bounds
    else:
        low, high = sample_format.type_bounds
    
    clipped = np.minimum(np.maximum(total, low), high)
    return clipped.astype(sample_format.dtype)
