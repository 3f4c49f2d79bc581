"""
Audio Overlay - Mix one channel of audio samples onto another.

Public API:
    overlay         - Overlay samples onto a growable sequence in place
    overlay_array   - Vectorised overlay for numpy arrays
    sample_index    - Convert a start time to a sample index
    Overlayer       - Overlay with a bound OverlayConfig
    SampleFormat    - Supported sample representations
    MixMode         - Mixing rules (HEADROOM, SATURATE, NONLINEAR)
    mix_samples     - Mix a single pair of samples
    mix_arrays      - Mix two arrays element-wise

Supported representations: int8, int16, int32, int64, float32, float64.
Both buffers are assumed to hold a single channel at the same framerate.
For multi-channel audio, overlay each channel separately.

Example:
    import soundfile as sf
    from audio_overlay import overlay_array
    
    voice, rate = sf.read("voice.wav", dtype="int16")
    music, _ = sf.read("music.wav", dtype="int16")
    
    # Voice starts 1.0 seconds into the music
    mixed = overlay_array(voice, music, time=1.0, framerate=rate, grow=True)
"""

from audio_overlay.errors import (
    OverlayError,
    UnsupportedSampleFormatError,
    SampleFormatMismatchError,
    NonGrowableDestinationError,
)
from audio_overlay.formats import SampleFormat, clamp
from audio_overlay.mixing import MixMode, mix_samples, mix_arrays
from audio_overlay.overlay import (
    overlay,
    overlay_array,
    sample_index,
    OverlayConfig,
    Overlayer,
)

__version__ = "1.0.0"

__all__ = [
    # Engine
    "overlay",
    "overlay_array",
    "sample_index",
    "OverlayConfig",
    "Overlayer",
    # Representations
    "SampleFormat",
    "clamp",
    # Mixing
    "MixMode",
    "mix_samples",
    "mix_arrays",
    # Errors
    "OverlayError",
    "UnsupportedSampleFormatError",
    "SampleFormatMismatchError",
    "NonGrowableDestinationError",
    "__version__",
]
