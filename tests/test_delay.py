import pytest

from mimicry.delay import DelayLine, MultiHeadDelayLine


def _filled_line(values, size=8, heads=2):
    line = MultiHeadDelayLine(heads)
    line.resize(size)
    for value in values:
        line.push_sample(value)
    return line


def test_num_heads_matches_constructor():
    assert MultiHeadDelayLine(5).num_heads() == 5


def test_negative_head_count_rejected():
    with pytest.raises(ValueError):
        MultiHeadDelayLine(-1)


def test_zero_delay_head_returns_last_sample_times_gain():
    line = _filled_line([1.0, 3.0])
    line.set_gain(0, 2.0)
    assert line.next_delayed_sample(0) == 6.0


def test_gain_defaults_to_silence():
    line = _filled_line([1.0, 3.0])
    assert line.next_delayed_sample(1) == 0.0


def test_first_delay_setting_leaves_read_head_at_start():
    line = _filled_line([10.0, 20.0, 30.0, 40.0, 50.0])
    line.set_gain(0, 1.0)
    line.set_delay_samples(0, 3, 4)
    assert line.next_delayed_sample(0) == 20.0
    assert line.next_delayed_sample(0) == 30.0


def test_repeated_delay_setting_glides_to_target():
    line = _filled_line([10.0, 20.0, 30.0, 40.0, 50.0])
    line.set_gain(0, 1.0)
    line.set_delay_samples(0, 3, 4)
    line.set_delay_samples(0, 3, 4)
    assert line.next_delayed_sample(0) == 40.0
    assert line.next_delayed_sample(0) == 50.0


def test_push_without_storage_raises():
    line = MultiHeadDelayLine(1)
    with pytest.raises(RuntimeError):
        line.push_sample(1.0)


def test_head_index_out_of_range():
    line = _filled_line([1.0])
    with pytest.raises(IndexError):
        line.next_delayed_sample(2)
    with pytest.raises(IndexError):
        line.set_gain(-1, 1.0)


def test_clear_silences_buffer():
    line = _filled_line([4.0, 5.0])
    line.set_gain(0, 1.0)
    line.clear()
    assert line.next_delayed_sample(0) == 0.0
    assert line.size == 8


def test_resize_keeps_existing_samples():
    line = _filled_line([7.0], size=4)
    line.set_gain(0, 1.0)
    line.resize(16)
    assert line.size == 16
    assert line.next_delayed_sample(0) == 7.0


def test_negative_delay_rejected():
    line = _filled_line([1.0])
    with pytest.raises(ValueError):
        line.set_delay_samples(0, -1, 48000)


def test_delay_line_zero_delay_passes_through():
    line = DelayLine(10)
    outputs = []
    for value in [1.0, 2.0, 3.0]:
        line.push_sample(value)
        outputs.append(line.pop_sample())
    assert outputs == [1.0, 2.0, 3.0]


def test_delay_line_integer_delay_shifts_signal():
    line = DelayLine(10)
    line.set_delay(3)
    inputs = [float(v) for v in range(1, 11)]
    outputs = []
    for value in inputs:
        line.push_sample(value)
        outputs.append(line.pop_sample())
    assert outputs == [0.0, 0.0, 0.0] + inputs[:-3]


def test_delay_line_half_sample_delay_averages_neighbours():
    line = DelayLine(10)
    line.set_delay(1.5)
    inputs = [0.0, 2.0, 4.0, 6.0, 8.0, 10.0]
    outputs = []
    for value in inputs:
        line.push_sample(value)
        outputs.append(line.pop_sample())
    for n in range(2, len(inputs)):
        assert outputs[n] == pytest.approx((inputs[n - 1] + inputs[n - 2]) / 2)


def test_delay_is_limited_to_maximum():
    line = DelayLine()
    line.set_maximum_delay(5)
    assert line.maximum_delay == 5
    line.set_delay(100)
    assert line.delay == 5.0
    line.set_delay(-3)
    assert line.delay == 0.0


def test_negative_maximum_delay_rejected():
    with pytest.raises(ValueError):
        DelayLine(-2)


def test_reset_silences_line():
    line = DelayLine(10)
    line.set_delay(2)
    for value in [5.0, 6.0, 7.0]:
        line.push_sample(value)
    line.reset()
    assert [line.pop_sample() for _ in range(4)] == [0.0, 0.0, 0.0, 0.0]