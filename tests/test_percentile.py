import pytest

from processor.stats import (
    METRICS,
    CategoryRanker,
    raw_tag_scores,
    category_percentile,
    category_percentiles,
    blend_percentile,
)


def test_raw_tag_scores_without_reviews_are_neutral():
    assert raw_tag_scores([]) == {metric: 50.0 for metric in METRICS}


def test_raw_tag_scores_count_reviews_not_tags():
    tags = [
        ["Friendly", "Friendly", "On Time"],
        ["Friendly"],
        ["Unknown tag"],
        [],
    ]
    scores = raw_tag_scores(tags)
    assert scores["friendliness"] == 50.0
    assert scores["punctuality"] == 25.0
    assert scores["trustworthiness"] == 0.0
    assert scores["cost_effectiveness"] == 0.0


def test_equal_ratios_produce_identical_scores():
    one_of_three = raw_tag_scores([["Good Value"], [], []])
    two_of_six = raw_tag_scores([["Good Value"], ["Good Value"], [], [], [], []])
    assert one_of_three["cost_effectiveness"] == two_of_six["cost_effectiveness"]


def test_category_percentile_edge_cases():
    assert category_percentile(60.0, []) == 50
    assert category_percentile(60.0, [40.0]) == 100
    assert category_percentile(40.0, [60.0]) == 0
    # Ties are not strictly lower
    assert category_percentile(50.0, [50.0, 50.0, 50.0]) == 0
    assert category_percentile(50.0, [10.0, 50.0, 90.0]) == 33


def test_category_percentiles_need_at_least_one_peer():
    own = {metric: 80.0 for metric in METRICS}
    assert category_percentiles(own, []) == {metric: 50 for metric in METRICS}


def test_blend_matches_documented_example():
    # 60% of raw 60 plus 40% of category 100
    assert blend_percentile(60.0, 100) == 76


def test_blend_rounds_halves_up():
    # 12.5 * 0.6 + 50 * 0.4 = 27.5
    assert blend_percentile(12.5, 50) == 28


@pytest.mark.parametrize("raw,category", [(0.0, 0), (100.0, 100), (33.333333333333336, 67)])
def test_blend_stays_in_range(raw, category):
    assert 0 <= blend_percentile(raw, category) <= 100


def test_category_ranker_matches_pairwise_comparison():
    members = {
        "a": raw_tag_scores([["Friendly"], ["Friendly"], []]),
        "b": raw_tag_scores([["Friendly", "On Time"], []]),
        "c": raw_tag_scores([["Trustworthy"]]),
        "d": raw_tag_scores([["Friendly"], ["Good Value"], ["On Time"]]),
    }
    ranker = CategoryRanker(members)

    for business_id, own in members.items():
        peers = [scores for other, scores in members.items() if other != business_id]
        assert ranker.percentiles(own, business_id) == category_percentiles(own, peers)


def test_category_ranker_non_member_compares_against_everyone():
    members = {"a": raw_tag_scores([["Friendly"]]), "b": raw_tag_scores([[]])}
    ranker = CategoryRanker(members)
    outsider = raw_tag_scores([["Friendly"], []])

    assert ranker.percentile("friendliness", outsider["friendliness"]) == 50
    assert ranker.percentiles(outsider) == category_percentiles(outsider, list(members.values()))


def test_category_ranker_single_member_is_neutral():
    ranker = CategoryRanker({"a": raw_tag_scores([["Friendly"]])})
    assert ranker.percentile("friendliness", 100.0, "a") == 50
