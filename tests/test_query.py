import pytest

from features.activity import query
from features.activity.models import ActivityLevel, ActivityType


@pytest.fixture
def records(make_record):
    return (
        make_record(agent="Privacy Agent", message="✅ Privacy Agent: 60% privacy score",
                    type=ActivityType.PRIVACY_ASSESSMENT, level=ActivityLevel.SUCCESS),
        make_record(agent="Quality Agent", message="🔍 validating generated data",
                    type=ActivityType.QUALITY_VALIDATION),
        make_record(agent="System", message="Reticulating splines"),
        make_record(agent="Privacy Agent", message="🔒 assessing sensitivity",
                    type=ActivityType.PRIVACY_ASSESSMENT),
    )


def test_search_is_case_insensitive_over_message_and_agent(records):
    assert query.search(records, "PRIVACY") == [records[0], records[3]]
    assert query.search(records, "splines") == [records[2]]


def test_empty_search_passes_everything(records):
    assert query.search(records, "") == list(records)


def test_filter_by_agent(records):
    assert query.filter_by_agent(records, "Quality Agent") == [records[1]]
    assert query.filter_by_agent(records, query.ALL_AGENTS) == list(records)
    assert query.filter_by_agent(records, "quality agent") == []


def test_filters_combine_with_and(records):
    assert query.apply_filters(records, "assessing", "Privacy Agent") == [records[3]]
    assert query.apply_filters(records, "assessing", "Quality Agent") == []


def test_empty_result_is_not_an_empty_store(records):
    assert query.apply_filters(records, "nothing matches") == []
    assert len(records) == 4


def test_filters_do_not_mutate(records):
    before = tuple(records)
    query.apply_filters(records, "privacy", "Privacy Agent")
    assert records == before


def test_agent_names_first_seen_order(records):
    assert query.agent_names(records) == ["Privacy Agent", "Quality Agent", "System"]


def test_stage_label():
    assert query.stage_label(ActivityType.BIAS_DETECTION) == "Bias Detection"
    assert query.stage_label("completion") == "Generation Complete"
    assert query.stage_label("custom_stage") == "CUSTOM STAGE"


def test_summarize(records):
    summary = query.summarize(records)
    assert summary["total_records"] == 4
    assert summary["levels"] == {"success": 1, "info": 3}
    assert summary["types"]["privacy_assessment"] == 2
