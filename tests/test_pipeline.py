"""
Tests for the whole-buffer pipeline.
"""

import numpy as np
import pytest

from negative_viewer.core.buffer import PixelBuffer
from negative_viewer.core.errors import NoImageLoaded
from negative_viewer.core.params import (
    BaseColor,
    ChannelTriple,
    GlobalTone,
    Parameters,
    ToneParameters,
)
from negative_viewer.core.pipeline import run_pipeline, run_pipeline_array


def _params_a():
    return Parameters(
        tone=ToneParameters(
            shadows=ChannelTriple(3, -7, 12),
            midtones=ChannelTriple(15, 0, -9),
            highlights=ChannelTriple(-4, 22, 6),
        ),
        global_tone=GlobalTone(brightness=1.05, contrast=1.2),
    )


def _params_b():
    return Parameters(
        base_color=BaseColor(200, 140, 120),
        exposure=1.6,
        tone=ToneParameters(midtones=ChannelTriple(40, 40, 40)),
        global_tone=GlobalTone(brightness=0.8, contrast=0.9),
    )


def test_neutral_pipeline_is_inversion(random_buffer, neutral_params):
    out = run_pipeline(random_buffer, neutral_params)
    src = random_buffer.data

    assert out.shape == random_buffer.shape
    np.testing.assert_array_equal(out.data[..., :3], 255 - src[..., :3])
    np.testing.assert_array_equal(out.data[..., 3], src[..., 3])


def test_worked_example_pixel(make_solid):
    src = make_solid(2, 2, (200, 120, 90, 255))
    params = Parameters(
        base_color=BaseColor(240, 170, 140),
        exposure=1.1,
        global_tone=GlobalTone(brightness=1.0, contrast=1.0),
    )
    out = run_pipeline(src, params)
    assert tuple(out.data[0, 0]) == (21, 57, 75, 255)


def test_source_is_not_mutated(random_buffer):
    before = random_buffer.data.copy()
    run_pipeline(random_buffer, _params_a())
    np.testing.assert_array_equal(random_buffer.data, before)


def test_read_only_source_is_accepted(random_buffer):
    frozen = random_buffer.frozen()
    assert frozen.readonly
    out = run_pipeline(frozen, _params_a())
    assert not out.readonly


def test_rerun_is_byte_identical(random_buffer):
    first = run_pipeline(random_buffer, _params_a())
    second = run_pipeline(random_buffer, _params_a())
    assert first.tobytes() == second.tobytes()


def test_no_drift_between_parameter_sets(random_buffer):
    fresh_a = run_pipeline(random_buffer, _params_a())

    run_pipeline(random_buffer, _params_a())
    run_pipeline(random_buffer, _params_b())
    again_a = run_pipeline(random_buffer, _params_a())

    assert again_a.tobytes() == fresh_a.tobytes()


def test_brightness_clamps_at_final_write(make_solid):
    # invert(55) = 200, brightness 2 -> 400 -> 255
    src = make_solid(3, 3, (55, 55, 55, 255))
    params = Parameters(
        base_color=BaseColor(0, 0, 0),
        exposure=1.0,
        global_tone=GlobalTone(brightness=2.0, contrast=1.0),
    )
    out = run_pipeline(src, params)
    assert tuple(out.data[1, 1]) == (255, 255, 255, 255)


def test_negative_values_clamp_to_zero(make_solid):
    src = make_solid(1, 1, (250, 250, 250, 128))
    params = Parameters(
        base_color=BaseColor(0, 0, 0),
        exposure=1.0,
        tone=ToneParameters(shadows=ChannelTriple(-100, -100, -100)),
        global_tone=GlobalTone(contrast=1.0),
    )
    out = run_pipeline(src, params)
    assert tuple(out.data[0, 0]) == (0, 0, 0, 128)


def test_fills_caller_buffer(random_buffer, neutral_params):
    target = PixelBuffer.blank(random_buffer.width, random_buffer.height)
    result = run_pipeline(random_buffer, neutral_params, out=target)

    assert result is target
    np.testing.assert_array_equal(target.data[..., :3], 255 - random_buffer.data[..., :3])


def test_rejects_overlapping_output(random_buffer, neutral_params):
    with pytest.raises(ValueError):
        run_pipeline_array(random_buffer.data, neutral_params, out=random_buffer.data)


def test_rejects_mismatched_output(random_buffer, neutral_params):
    with pytest.raises(ValueError):
        run_pipeline(random_buffer, neutral_params, out=PixelBuffer.blank(3, 3))


def test_missing_source_raises():
    with pytest.raises(NoImageLoaded):
        run_pipeline(None, Parameters())


@pytest.mark.parametrize(
    "mid,expected",
    [
        (-50, (0, 0, 255)),
        (-75, (255, 255, 255)),
        (-100, (255, 255, 255)),
    ],
)
def test_strong_negative_midtones_clamp_at_write(mid, expected):
    # inverted values 0, 100, 255 in R, G, B
    arr = np.empty((2, 2, 4), dtype=np.uint8)
    arr[...] = (255, 155, 0, 255)
    params = Parameters(
        base_color=BaseColor(0, 0, 0),
        exposure=1.0,
        tone=ToneParameters(midtones=ChannelTriple(mid, mid, mid)),
        global_tone=GlobalTone(brightness=1.0, contrast=1.0),
    )
    out = run_pipeline(PixelBuffer(arr), params)
    assert tuple(out.data[1, 1]) == expected + (255,)
