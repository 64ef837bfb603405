import random
from collections import Counter

import pytest

from chat_core.domain.exceptions import ConfigurationError
from chat_core.knowledge.fallback import FallbackSelector


TEMPLATES = ["no answer for {query}", "good question: {query}", "{query} is interesting"]


def test_empty_template_set_is_configuration_error():
    with pytest.raises(ConfigurationError) as exc:
        FallbackSelector([])
    assert exc.value.code == "FALLBACK_EMPTY"


def test_template_without_placeholder_is_rejected():
    with pytest.raises(ConfigurationError):
        FallbackSelector(["sorry"])


def test_pick_substitutes_query():
    fs = FallbackSelector(TEMPLATES, rng=random.Random(1))
    answer = fs.pick("xyzzy {weird}")
    assert "xyzzy {weird}" in answer
    assert answer in {t.replace("{query}", "xyzzy {weird}") for t in TEMPLATES}


def test_seeded_selection_is_reproducible():
    a = FallbackSelector(TEMPLATES, rng=random.Random(7))
    b = FallbackSelector(TEMPLATES, rng=random.Random(7))
    assert [a.pick("q") for _ in range(30)] == [b.pick("q") for _ in range(30)]


def test_selection_is_roughly_uniform():
    fs = FallbackSelector(TEMPLATES, rng=random.Random(42))
    counts = Counter(fs.pick("q") for _ in range(3000))
    assert len(counts) == 3
    for n in counts.values():
        assert 850 < n < 1150
