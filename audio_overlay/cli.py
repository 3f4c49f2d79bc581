"""
CLI Adapter - Overlay one audio file onto another.

Thin wrapper over overlay_array(): decodes both files with soundfile,
overlays channel by channel, writes the result and optionally plays it.
"""

from __future__ import annotations

import argparse
import logging
import sys
from pathlib import Path

import numpy as np
import soundfile as sf

from audio_overlay.errors import OverlayError
from audio_overlay.mixing import MixMode
from audio_overlay.overlay import overlay_array

logger = logging.getLogger(__name__)

# soundfile read dtypes and the subtype each is written back as
SUBTYPES = {
    "int16": "PCM_16",
    "int32": "PCM_32",
    "float32": "FLOAT",
    "float64": "DOUBLE",
}


def main(args: list[str] | None = None) -> int:
    """CLI entry point."""
    parser = argparse.ArgumentParser(
        prog="audio-overlay",
        description="Overlay audio samples from one file onto another",
    )
    
    subparsers = parser.add_subparsers(dest="command", help="Commands")
    
    # mix command
    mix_parser = subparsers.add_parser("mix", help="Overlay SRC onto DST")
    mix_parser.add_argument("src", type=Path, help="Audio to overlay")
    mix_parser.add_argument("dst", type=Path, help="Audio to overlay onto")
    mix_parser.add_argument("-o", "--output", type=Path, help="Output filename")
    mix_parser.add_argument(
        "-t", "--time",
        type=float,
        default=0.0,
        help="Start time of SRC within DST in seconds (default: 0.0)",
    )
    mix_parser.add_argument(
        "--no-grow",
        action="store_true",
        help="Cut SRC at the end of DST instead of lengthening the output",
    )
    mix_parser.add_argument(
        "--mode",
        choices=[m.value for m in MixMode],
        default=MixMode.HEADROOM.value,
        help="Mixing rule (default: headroom)",
    )
    mix_parser.add_argument(
        "--dtype",
        choices=sorted(SUBTYPES),
        default="int16",
        help="Sample representation to mix in (default: int16)",
    )
    mix_parser.add_argument("--play", action="store_true", help="Play audio after mixing")
    mix_parser.add_argument("-v", "--verbose", action="store_true", help="Debug logging")
    
    # version command
    subparsers.add_parser("version", help="Show version")
    
    parsed = parser.parse_args(args)
    
    if parsed.command is None:
        parser.print_help()
        return 0
    
    if parsed.command == "version":
        from audio_overlay import __version__
        print(f"audio-overlay {__version__}")
        return 0
    
    if parsed.command == "mix":
        return _cmd_mix(parsed)
    
    return 1


def _cmd_mix(args: argparse.Namespace) -> int:
    """Handle mix command."""
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG, format="%(levelname)s %(name)s: %(message)s")
    
    if args.output is None and not args.play:
        print("Error: nothing to do, pass --output and/or --play", file=sys.stderr)
        return 1
    
    try:
        src, src_rate = sf.read(args.src, dtype=args.dtype, always_2d=True)
        dst, dst_rate = sf.read(args.dst, dtype=args.dtype, always_2d=True)
    except (sf.SoundFileError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    
    if src_rate != dst_rate:
        print(f"Error: sample rates differ ({src_rate} Hz vs {dst_rate} Hz)", file=sys.stderr)
        return 1
    if src.shape[1] != dst.shape[1]:
        print(
            f"Error: channel counts differ ({src.shape[1]} vs {dst.shape[1]})",
            file=sys.stderr,
        )
        return 1
    
    try:
        mixed = mix_channels(
            src,
            dst,
            time=args.time,
            framerate=dst_rate,
            grow=not args.no_grow,
            mode=MixMode(args.mode),
        )
    except (OverlayError, ValueError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1
    
    if args.output is not None:
        try:
            sf.write(args.output, mixed, dst_rate, subtype=SUBTYPES[args.dtype])
        except (sf.SoundFileError, OSError, TypeError, ValueError) as e:
            print(f"Error: {e}", file=sys.stderr)
            return 1
        print(f"Audio saved to: {args.output}")
    print(f"Duration: {len(mixed) / dst_rate:.2f}s")
    
    if args.play:
        _play_audio(mixed, dst_rate)
    
    return 0


def mix_channels(
    src: np.ndarray,
    dst: np.ndarray,
    time: float,
    framerate: int,
    grow: bool,
    mode: MixMode = MixMode.HEADROOM,
) -> np.ndarray:
    """
    Overlay each channel of a (frames, channels) array separately.
    
    Every channel receives the same source length, so all results share
    one length and can be stacked back into frames.
    """
    channels = []
    for ch in range(dst.shape[1]):
        logger.debug(f"Overlaying channel {ch}")
        channels.append(
            overlay_array(
                np.ascontiguousarray(src[:, ch]),
                np.ascontiguousarray(dst[:, ch]),
                time,
                framerate,
                grow,
                mode=mode,
            )
        )
    return np.column_stack(channels)


def _play_audio(data: np.ndarray, sample_rate: int) -> None:
    """Play audio (best effort)."""
    try:
        import sounddevice as sd
        
        sd.play(data, sample_rate)
        sd.wait()
    except ImportError:
        print("(Install sounddevice to enable playback)")
    except Exception as e:
        print(f"(Playback failed: {e})")


if __name__ == "__main__":
    sys.exit(main())
