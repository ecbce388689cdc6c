import pytest

from vocab_core import EngineSettings, InvalidWeightsError, load_settings
from vocab_core.fsrs import DEFAULT_WEIGHTS


def test_defaults_when_environment_is_empty():
    settings = load_settings({})

    assert settings == EngineSettings()
    assert settings.max_review_words == 30
    assert settings.daily_new_words == 10
    assert settings.mastery_streak == 3
    assert settings.easy_reinsert_window == (3, 5)
    assert settings.fail_reinsert_window == (1, 2)
    assert settings.weights == DEFAULT_WEIGHTS


def test_values_read_from_environment():
    weights = ",".join(["1.5"] * 17)
    settings = load_settings({
        "SRS_MAX_REVIEW_WORDS": "20",
        "SRS_DAILY_NEW_WORDS": "5",
        "SRS_MASTERY_STREAK": "2",
        "SRS_EASY_REINSERT_WINDOW": "4,6",
        "SRS_FAIL_REINSERT_WINDOW": " 1, 1 ",
        "SRS_STATS_CACHE_TTL": "60.5",
        "SRS_WEIGHTS": weights,
    })

    assert settings.max_review_words == 20
    assert settings.daily_new_words == 5
    assert settings.mastery_streak == 2
    assert settings.easy_reinsert_window == (4, 6)
    assert settings.fail_reinsert_window == (1, 1)
    assert settings.stats_cache_ttl == 60.5
    assert settings.weights == (1.5,) * 17


def test_reads_process_environment(monkeypatch):
    monkeypatch.setenv("SRS_DAILY_NEW_WORDS", "7")

    assert load_settings(use_dotenv=False).daily_new_words == 7


@pytest.mark.parametrize("name,value", [
    ("SRS_MAX_REVIEW_WORDS", "many"),
    ("SRS_EASY_REINSERT_WINDOW", "3"),
    ("SRS_STATS_CACHE_TTL", "soon"),
    ("SRS_WEIGHTS", "1,2,x"),
])
def test_unparseable_values_name_the_variable(name, value):
    with pytest.raises(ValueError, match=name):
        load_settings({name: value})


def test_wrong_weight_count_rejected():
    with pytest.raises(InvalidWeightsError):
        load_settings({"SRS_WEIGHTS": "1,2,3"})


@pytest.mark.parametrize("overrides", [
    {"max_review_words": -1},
    {"mastery_streak": 0},
    {"easy_reinsert_window": (5, 3)},
    {"fail_reinsert_window": (-1, 2)},
])
def test_invalid_settings_rejected(overrides):
    with pytest.raises(ValueError):
        EngineSettings(**overrides)
