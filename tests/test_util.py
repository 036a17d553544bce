import pytest

from mimicry.util import samples_per_subdivision


def test_one_beat_at_sixty_bpm_is_one_second():
    assert samples_per_subdivision(60, 44100, 1.0) == 44100


def test_eighth_note_at_120_bpm():
    assert samples_per_subdivision(120, 48000, 1.0 / 8.0) == 3000


def test_doubling_tempo_halves_length():
    slow = samples_per_subdivision(60, 48000, 1.0)
    fast = samples_per_subdivision(120, 48000, 1.0)
    assert fast * 2 == slow


def test_halving_divider_halves_length():
    whole = samples_per_subdivision(100, 48000, 1.0)
    half = samples_per_subdivision(100, 48000, 0.5)
    assert half * 2 == whole


@pytest.mark.parametrize("bpm", [30.0, 97.3, 133.0, 200.0])
def test_result_is_truncated_integer(bpm):
    result = samples_per_subdivision(bpm, 44100, 1.0 / 3.0)
    exact = 44100 / (bpm / 60.0) * (1.0 / 3.0)
    assert isinstance(result, int)
    assert result <= exact < result + 1


@pytest.mark.parametrize("bpm", [0, -10])
def test_non_positive_tempo_rejected(bpm):
    with pytest.raises(ValueError):
        samples_per_subdivision(bpm, 44100, 1.0)


def test_negative_sample_rate_rejected():
    with pytest.raises(ValueError):
        samples_per_subdivision(120, -1, 1.0)