"""
Tests for the overlay engine.
"""

import array
import logging

import pytest
import numpy as np

from audio_overlay import (
    overlay,
    overlay_array,
    sample_index,
    OverlayConfig,
    Overlayer,
    SampleFormat,
    MixMode,
    NonGrowableDestinationError,
    SampleFormatMismatchError,
    UnsupportedSampleFormatError,
)


class TestSampleIndex:
    """Tests for time to index conversion."""
    
    def test_zero(self):
        assert sample_index(0.0, 44100) == 0
        
    def test_whole_seconds(self):
        assert sample_index(1.0, 44100) == 44100
        
    def test_floors_fractional_samples(self):
        assert sample_index(0.99, 2) == 1
        assert sample_index(0.5, 3) == 1
        
    def test_negative_time_rejected(self):
        with pytest.raises(ValueError, match="time must be"):
            sample_index(-0.5, 44100)
            
    def test_non_finite_time_rejected(self):
        with pytest.raises(ValueError, match="time must be"):
            sample_index(float("inf"), 44100)
        with pytest.raises(ValueError, match="time must be"):
            sample_index(float("nan"), 44100)
            
    @pytest.mark.parametrize("framerate", [0, -44100, 44100.0, True])
    def test_bad_framerate_rejected(self, framerate):
        with pytest.raises(ValueError, match="framerate"):
            sample_index(1.0, framerate)
            
    def test_numpy_framerate(self):
        assert sample_index(2.0, np.int32(8000)) == 16000


class TestOverlayBoundaries:
    """Boundary scenarios at the end of the destination."""
    
    def test_grow_appends_remaining_source(self):
        dst = [50]
        overlay([100, 100, 100], dst, 0.0, 1, grow=True)
        
        assert dst == [127, 100, 100]
        
    def test_no_grow_discards_remaining_source(self):
        dst = [50]
        overlay([100, 100, 100], dst, 0.0, 1, grow=False)
        
        assert dst == [127]
        
    def test_start_past_end_without_grow_is_noop(self):
        dst = [1, 2, 3]
        overlay([7, 8], dst, 5.0, 1, grow=False)
        
        assert dst == [1, 2, 3]
        
    def test_start_past_end_with_grow_pads_with_zeros(self):
        dst = [1, 2]
        overlay([7, 8], dst, 4.0, 1, grow=True)
        
        assert dst == [1, 2, 0, 0, 7, 8]
        
    def test_start_at_end_with_grow_appends(self):
        dst = [1, 2]
        overlay([7, 8], dst, 2.0, 1, grow=True)
        
        assert dst == [1, 2, 7, 8]
        
    def test_empty_destination_grows(self):
        dst = []
        overlay([1, 2], dst, 1.0, 2, grow=True)
        
        assert dst == [0, 0, 1, 2]
        
    def test_float_padding_uses_float_zero(self):
        dst = [0.5]
        overlay([0.25], dst, 3.0, 1, grow=True)
        
        assert dst == [0.5, 0.0, 0.0, 0.25]
        assert all(type(v) is float for v in dst)


class TestOverlayMixing:
    """Tests for the in-place overlay region."""
    
    def test_silence_is_overwritten(self):
        dst = [0, 0]
        overlay([42, 0], dst, 0.0, 1)
        
        assert dst == [42, 0]
        
    def test_silence_overwrite_skips_headroom_clamp(self):
        """Values written over silence are copied, not clamped."""
        dst = [0]
        overlay([1000], dst, 0.0, 1)
        
        assert dst == [1000]
        
    def test_overlay_in_middle(self):
        dst = [10, 10, 10, 10]
        overlay([5, 5], dst, 1.0, 1)
        
        assert dst == [10, 15, 15, 10]
        
    def test_zero_source_leaves_destination(self):
        dst = [10, -20, 30]
        overlay([0, 0, 0], dst, 0.0, 1)
        
        assert dst == [10, -20, 30]
        
    def test_empty_source(self):
        dst = [1, 2, 3]
        overlay([], dst, 0.0, 1, grow=True)
        
        assert dst == [1, 2, 3]
        
    def test_source_not_modified(self):
        src = [100, 100, 100]
        overlay(src, [50], 0.0, 1, grow=True)
        
        assert src == [100, 100, 100]
        
    def test_explicit_sample_format(self):
        dst = [50]
        overlay([100], dst, 0.0, 1, sample_format=SampleFormat.INT32)
        
        assert dst == [150]
        
    def test_mode(self):
        dst = [50]
        overlay([100], dst, 0.0, 1, mode=MixMode.SATURATE)
        
        assert dst == [150]
        
    def test_floats(self):
        dst = [0.5, 0.0]
        overlay([0.75, 0.25], dst, 0.0, 1)
        
        assert dst == [1.0, 0.25]
        
    def test_time_scaled_by_framerate(self):
        dst = [0] * 10
        overlay([9], dst, 0.5, 8)
        
        assert dst.index(9) == 4


class TestOverlayContainers:
    """Tests for the destination types overlay() accepts."""
    
    def test_array_array_grows(self):
        dst = array.array("h", [50])
        overlay(array.array("h", [100, 100, 100]), dst, 0.0, 1, grow=True)
        
        assert dst == array.array("h", [127, 100, 100])
        
    def test_array_array_float(self):
        dst = array.array("f", [0.5])
        overlay(array.array("f", [0.75]), dst, 0.0, 1)
        
        assert dst[0] == 1.0
        
    def test_numpy_destination_without_growth(self):
        dst = np.array([50, 0], dtype=np.int16)
        overlay([100], dst, 0.0, 1, grow=True)
        
        np.testing.assert_array_equal(dst, [127, 0])
        
    def test_numpy_destination_needing_growth(self):
        dst = np.array([50], dtype=np.int16)
        
        with pytest.raises(NonGrowableDestinationError) as exc_info:
            overlay([100, 100, 100], dst, 0.0, 1, grow=True)
        
        assert exc_info.value.required_length == 3
        assert exc_info.value.current_length == 1
        np.testing.assert_array_equal(dst, [50])
        
    def test_numpy_destination_padding_needs_growth(self):
        dst = np.array([50], dtype=np.int16)
        
        with pytest.raises(NonGrowableDestinationError) as exc_info:
            overlay([], dst, 3.0, 1, grow=True)
        
        assert exc_info.value.required_length == 3
        
    def test_non_growable_is_type_error(self):
        with pytest.raises(TypeError):
            overlay([1, 2], np.zeros(1, dtype=np.int16), 0.0, 1, grow=True)


class TestOverlayArray:
    """Tests for the vectorised numpy path."""
    
    def test_grow_returns_new_array(self):
        dst = np.array([50], dtype=np.int16)
        result = overlay_array(np.array([100, 100, 100], dtype=np.int16), dst, 0.0, 1, grow=True)
        
        np.testing.assert_array_equal(result, [127, 100, 100])
        assert result.dtype == np.int16
        
    def test_no_grow_returns_same_array(self):
        dst = np.array([50], dtype=np.int16)
        result = overlay_array(np.array([100, 100, 100], dtype=np.int16), dst, 0.0, 1)
        
        assert result is dst
        np.testing.assert_array_equal(dst, [127])
        
    def test_fits_inside_returns_same_array(self):
        dst = np.array([10, 10, 10, 10], dtype=np.int16)
        result = overlay_array(np.array([5, 5], dtype=np.int16), dst, 1.0, 1, grow=True)
        
        assert result is dst
        np.testing.assert_array_equal(dst, [10, 15, 15, 10])
        
    def test_padding(self):
        dst = np.array([1, 2], dtype=np.int32)
        result = overlay_array(np.array([7, 8], dtype=np.int32), dst, 4.0, 1, grow=True)
        
        np.testing.assert_array_equal(result, [1, 2, 0, 0, 7, 8])
        
    def test_past_end_without_grow(self):
        dst = np.array([1, 2], dtype=np.int32)
        result = overlay_array(np.array([7, 8], dtype=np.int32), dst, 4.0, 1)
        
        assert result is dst
        np.testing.assert_array_equal(dst, [1, 2])
        
    def test_silence_overwrite(self):
        dst = np.zeros(2, dtype=np.int16)
        overlay_array(np.array([42, 0], dtype=np.int16), dst, 0.0, 1)
        
        np.testing.assert_array_equal(dst, [42, 0])
        
    def test_source_not_modified(self):
        src = np.array([100, 100], dtype=np.int16)
        overlay_array(src, np.array([50, 50], dtype=np.int16), 0.0, 1)
        
        np.testing.assert_array_equal(src, [100, 100])
        
    def test_safe_cast_of_source(self):
        dst = np.array([50], dtype=np.int16)
        overlay_array(np.array([100], dtype=np.int8), dst, 0.0, 1)
        
        np.testing.assert_array_equal(dst, [127])
        
    def test_unsafe_cast_rejected(self):
        with pytest.raises(SampleFormatMismatchError):
            overlay_array(
                np.array([100], dtype=np.int32),
                np.array([50], dtype=np.int16),
                0.0,
                1,
            )
            
    def test_unsupported_destination(self):
        with pytest.raises(UnsupportedSampleFormatError):
            overlay_array(
                np.array([1], dtype=np.uint8),
                np.array([1], dtype=np.uint8),
                0.0,
                1,
            )
            
    def test_multichannel_rejected(self):
        with pytest.raises(ValueError, match="1-D"):
            overlay_array(
                np.zeros((2, 2), dtype=np.int16),
                np.zeros((2, 2), dtype=np.int16),
                0.0,
                1,
            )
            
    def test_list_destination_rejected(self):
        with pytest.raises(ValueError, match="numpy destination"):
            overlay_array(np.array([1], dtype=np.int16), [50], 0.0, 1)
            
    def test_float32(self):
        dst = np.array([0.5, -0.5], dtype=np.float32)
        overlay_array(np.array([0.75, 0.25], dtype=np.float32), dst, 0.0, 1)
        
        np.testing.assert_allclose(dst, [1.0, -0.25])
        
    @pytest.mark.parametrize("grow", [True, False])
    @pytest.mark.parametrize("time", [0.0, 1.0, 2.5, 6.0, 9.0])
    def test_matches_sequence_overlay(self, time, grow):
        src = [300, -200, 0, 40, 32767, -32768]
        dst = [0, 100, -100, 32000, -32000, 5]
        
        expected = list(dst)
        overlay(src, expected, time, 2, grow)
        
        result = overlay_array(
            np.array(src, dtype=np.int16),
            np.array(dst, dtype=np.int16),
            time,
            2,
            grow,
        )
        
        assert result.tolist() == expected


class TestOverlayConfig:
    """Tests for OverlayConfig and Overlayer."""
    
    def test_defaults(self):
        config = OverlayConfig()
        
        assert config.framerate == 44100
        assert config.grow is False
        assert config.sample_format is None
        assert config.mode is MixMode.HEADROOM
        
    def test_framerate_validation(self):
        with pytest.raises(ValueError, match="framerate must be > 0"):
            OverlayConfig(framerate=0)
            
    def test_framerate_must_be_integer(self):
        with pytest.raises(ValueError, match="framerate must be an integer"):
            OverlayConfig(framerate=44100.5)
            
    def test_overlayer(self):
        overlayer = Overlayer(OverlayConfig(framerate=1, grow=True))
        dst = [50]
        overlayer.overlay([100, 100], dst, time=0.0)
        
        assert dst == [127, 100]
        
    def test_keyword_overrides(self):
        overlayer = Overlayer(framerate=1, mode=MixMode.SATURATE)
        dst = [50]
        overlayer.overlay([100, 100], dst, time=0.0)
        
        assert dst == [150]
        
    def test_overrides_keep_base_config(self):
        base = OverlayConfig(framerate=1, grow=True)
        overlayer = Overlayer(base, mode=MixMode.NONLINEAR)
        
        assert overlayer.config.grow is True
        assert overlayer.config.mode is MixMode.NONLINEAR
        assert base.mode is MixMode.HEADROOM
        
    def test_keyword_config_grows(self):
        overlayer = Overlayer(framerate=1, grow=True)
        dst = [50]
        overlayer.overlay([100, 100, 100], dst, time=0.0)
        
        assert dst == [127, 100, 100]
        
    def test_default_config(self):
        assert Overlayer().config == OverlayConfig()
        
    def test_invalid_override_rejected(self):
        with pytest.raises(ValueError, match="framerate must be > 0"):
            Overlayer(framerate=0)
        
    def test_overlayer_array(self):
        overlayer = Overlayer(OverlayConfig(framerate=1, grow=True))
        result = overlayer.overlay_array(
            np.array([100, 100], dtype=np.int16),
            np.array([50], dtype=np.int16),
            time=0.0,
        )
        
        np.testing.assert_array_equal(result, [127, 100])
        
    def test_overlayer_array_checks_format(self):
        overlayer = Overlayer(OverlayConfig(framerate=1, sample_format=SampleFormat.INT32))
        
        with pytest.raises(SampleFormatMismatchError):
            overlayer.overlay_array(
                np.array([1], dtype=np.int16),
                np.array([1], dtype=np.int16),
                time=0.0,
            )


class TestOverlayLogging:
    """Growth decisions are logged at debug level."""
    
    def test_noop_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="audio_overlay.overlay"):
            overlay([1], [1], 5.0, 1)
        
        assert "nothing to do" in caplog.text
        
    def test_append_logged(self, caplog):
        with caplog.at_level(logging.DEBUG, logger="audio_overlay.overlay"):
            overlay([1, 2, 3], [1], 0.0, 1, grow=True)
        
        assert "Appending 2 samples" in caplog.text
