"""
Overlay Engine - Mix one channel of samples onto another at a time offset.

Semantics:
    - The start index is floor(time * framerate); no interpolation
    - Samples overlapping the destination are combined with a mixing rule
    - A silent (zero) destination sample is simply replaced
    - With grow=True, source samples past the end of the destination are
      appended verbatim; with grow=False they are discarded
    - The source is never modified

Both buffers must be a single channel at the same framerate and in the same
representation. For multi-channel audio, call overlay() once per channel.

Example:
    dst = [50]
    overlay([100, 100, 100], dst, time=0.0, framerate=1, grow=True)
    # dst == [127, 100, 100]
"""

from __future__ import annotations

import logging
import math
from numbers import Integral
from dataclasses import dataclass, replace
from typing import Any, MutableSequence, Sequence

import numpy as np

from audio_overlay.errors import NonGrowableDestinationError, SampleFormatMismatchError
from audio_overlay.formats import SampleFormat
from audio_overlay.mixing import MixMode, mix_arrays, mix_samples

logger = logging.getLogger(__name__)


def sample_index(time: float, framerate: int) -> int:
    """
    Convert a start time to a sample index.
    
    Args:
        time: Start time in seconds (>= 0)
        framerate: Samples per second (> 0)
        
    Returns:
        floor(time * framerate)
        
    Raises:
        ValueError: If time is negative or not finite, or framerate is not positive
    """
    if isinstance(framerate, bool) or not isinstance(framerate, Integral) or framerate <= 0:
        raise ValueError(f"framerate must be a positive integer, got {framerate}")
    if not math.isfinite(time) or time < 0:
        raise ValueError(f"time must be a finite value >= 0, got {time}")
    return math.floor(time * framerate)


def overlay(
    src: Sequence[Any],
    dst: MutableSequence[Any],
    time: float,
    framerate: int,
    grow: bool = False,
    *,
    sample_format: SampleFormat | None = None,
    mode: MixMode = MixMode.HEADROOM,
) -> None:
    """
    Overlay src onto dst in place.
    
    Args:
        src: Samples to overlay. Never modified.
        dst: Growable destination (list, array.array). Modified in place.
            A numpy array is accepted only when no growth is needed.
        time: Start time of src within dst, in seconds
        framerate: Framerate of both buffers, e.g. 44100
        grow: Append source samples that run past the end of dst
        sample_format: Representation of the samples (inferred if omitted)
        mode: Mixing rule for overlapping non-silent samples
        
    Raises:
        ValueError: On negative time or non-positive framerate
        NonGrowableDestinationError: If dst must grow but has no extend()
    """
    index = sample_index(time, framerate)
    length = len(dst)
    fmt = sample_format or SampleFormat.infer(dst, src)
    
    required = max(length, index + len(src))
    if grow and required > length and not hasattr(dst, "extend"):
        raise NonGrowableDestinationError(required, length)
    
    if index >= length:
        if grow:
            logger.debug(
                f"Start index {index} at or past destination end {length}; "
                f"padding {index - length} samples and appending {len(src)}"
            )
            dst.extend([fmt.zero] * (index - length))
            dst.extend(src)
        else:
            logger.debug(f"Start index {index} past destination end {length}; nothing to do")
        return
    
    zero = fmt.zero
    for i, value in enumerate(src):
        if index >= length:
            if grow:
                logger.debug(f"Appending {len(src) - i} samples past destination end")
                dst.extend(src[i:])
            return
        current = dst[index]
        if current == zero:
            dst[index] = value
        else:
            dst[index] = mix_samples(current, value, fmt, mode)
        index += 1


def overlay_array(
    src: np.ndarray,
    dst: np.ndarray,
    time: float,
    framerate: int,
    grow: bool = False,
    *,
    mode: MixMode = MixMode.HEADROOM,
) -> np.ndarray:
    """
    Vectorised overlay for numpy buffers.
    
    The overlapping region of dst is mixed in place. numpy arrays cannot
    grow, so when growth is required a new array is returned instead.
    
    Args:
        src: 1-D source samples. Never modified.
        dst: 1-D destination samples. Modified in place.
        time: Start time of src within dst, in seconds
        framerate: Framerate of both buffers
        grow: Append source samples that run past the end of dst
        mode: Mixing rule for overlapping non-silent samples
        
    Returns:
        dst itself, or a new longer array if it had to grow
        
    Raises:
        ValueError: On bad time/framerate or non 1-D input
        UnsupportedSampleFormatError: If dst has an unsupported dtype
        SampleFormatMismatchError: If src cannot be safely cast to dst's dtype
    """
    index = sample_index(time, framerate)
    src = np.asarray(src)
    if not isinstance(dst, np.ndarray):
        raise ValueError(f"overlay_array() expects a numpy destination, got {type(dst).__name__}")
    if src.ndim != 1 or dst.ndim != 1:
        raise ValueError("overlay_array() expects single-channel 1-D arrays")
    
    fmt = SampleFormat.from_dtype(dst.dtype)
    if src.dtype != dst.dtype:
        if not np.can_cast(src.dtype, dst.dtype, casting="safe"):
            raise SampleFormatMismatchError(src.dtype, dst.dtype)
        src = src.astype(dst.dtype)
    
    length = len(dst)
    if index >= length:
        if not grow:
            logger.debug(f"Start index {index} past destination end {length}; nothing to do")
            return dst
        logger.debug(f"Padding {index - length} samples and appending {len(src)}")
        padding = np.zeros(index - length, dtype=dst.dtype)
        return np.concatenate([dst, padding, src])
    
    overlap = min(len(src), length - index)
    region = dst[index:index + overlap]
    incoming = src[:overlap]
    mixed = mix_arrays(region, incoming, fmt, mode)
    region[...] = np.where(region == 0, incoming, mixed)
    
    if grow and overlap < len(src):
        logger.debug(f"Appending {len(src) - overlap} samples past destination end")
        return np.concatenate([dst, src[overlap:]])
    return dst


@dataclass
class OverlayConfig:
    """
    Configuration for overlaying.
    
    Attributes:
        framerate: Framerate shared by source and destination
        grow: Append source samples running past the destination end
        sample_format: Sample representation (inferred when None)
        mode: Mixing rule
    """
    framerate: int = 44100
    grow: bool = False
    sample_format: SampleFormat | None = None
    mode: MixMode = MixMode.HEADROOM
    
    def __post_init__(self):
        if isinstance(self.framerate, bool) or not isinstance(self.framerate, Integral):
            raise ValueError(f"framerate must be an integer, got {self.framerate!r}")
        if self.framerate <= 0:
            raise ValueError(f"framerate must be > 0, got {self.framerate}")


class Overlayer:
    """
    Overlay with a bound configuration.
    
    Example:
        overlayer = Overlayer(OverlayConfig(framerate=44100, grow=True))
        overlayer.overlay(voice, music, time=1.0)
        
        # Or override single settings
        overlayer = Overlayer(framerate=22050, grow=True)
    """
    
    def __init__(self, config: OverlayConfig | None = None, **overrides: Any):
        base = config or OverlayConfig()
        self.config = replace(base, **overrides) if overrides else base
    
    def overlay(self, src: Sequence[Any], dst: MutableSequence[Any], time: float) -> None:
        overlay(
            src,
            dst,
            time,
            self.config.framerate,
            self.config.grow,
            sample_format=self.config.sample_format,
            mode=self.config.mode,
        )
    
    def overlay_array(self, src: np.ndarray, dst: np.ndarray, time: float) -> np.ndarray:
        if self.config.sample_format is not None and dst.dtype != self.config.sample_format.dtype:
            raise SampleFormatMismatchError(dst.dtype, self.config.sample_format.dtype)
        return overlay_array(
            src,
            dst,
            time,
            self.config.framerate,
            self.config.grow,
            mode=self.config.mode,
        )
