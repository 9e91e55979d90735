import pytest

from features.activity.extract import (
    coerce_count,
    coerce_percent,
    coerce_progress,
    extract,
    extract_job_id,
    extract_latency,
    extract_progress,
    normalize_frame,
)
from features.activity.rules import classify


def _extract(raw):
    frame = normalize_frame(raw)
    return extract(frame, classify(frame.text.strip()))


# ── Text tokens ───────────────────────────────────────────────────────

def test_extract_progress():
    assert extract_progress("🔄 [45%] bias_detection: analyzing") == 45
    assert extract_progress("[0%] start") == 0
    assert extract_progress("[100%] done") == 100


def test_extract_progress_rejects_out_of_range_and_loose_percentages():
    assert extract_progress("[150%] overflow") is None
    assert extract_progress("50% done") is None
    assert extract_progress("nothing here") is None


def test_extract_job_id():
    assert extract_job_id("🚀 Starting Multi-Agent Orchestration for job abc123") == "abc123"
    assert extract_job_id("Job 7f3c-91ab queued") == "7f3c-91ab"
    assert extract_job_id("the job failed") is None
    assert extract_job_id("no identifier") is None


def test_extract_latency():
    assert extract_latency("✅ Domain Expert: done (1200ms)") == 1200.0
    assert extract_latency("responded in 35.5 ms") == 35.5
    assert extract_latency("100 msgs sent") is None


# ── Coercion ──────────────────────────────────────────────────────────

@pytest.mark.parametrize("value,expected", [
    ("60", 60),
    (60, 60),
    ("60.5", 60.5),
    ("94%", 94),
    ("101", None),
    (-1, None),
    ("abc", None),
    (True, None),
    (None, None),
    (float("nan"), None),
])
def test_coerce_percent(value, expected):
    assert coerce_percent(value) == expected


def test_coerce_count():
    assert coerce_count("3") == 3
    assert coerce_count(12.0) == 12
    assert coerce_count("3.5") is None
    assert coerce_count(-2) is None
    assert coerce_count({}) is None


def test_coerce_progress_truncates_to_int():
    assert coerce_progress(42.9) == 42
    assert coerce_progress("101") is None


# ── Frames ────────────────────────────────────────────────────────────

def test_normalize_text_frame():
    frame = normalize_frame("  hello  ")
    assert frame.text == "  hello  "
    assert frame.kind is None
    assert not frame.structured


def test_normalize_bytes_frame():
    assert normalize_frame("✅ ok".encode()).text == "✅ ok"


def test_normalize_structured_frame():
    frame = normalize_frame({
        "type": "generation_update",
        "data": {"step": "privacy_assessment", "progress": 30, "message": "Assessing"},
    })
    assert frame.kind == "generation_update"
    assert frame.text == "Assessing"
    assert frame.fields["step"] == "privacy_assessment"
    assert frame.structured


def test_normalize_string_data():
    frame = normalize_frame({"type": "log", "data": "✅ Privacy Agent: 60% privacy score"})
    assert frame.kind == "log"
    assert frame.text == "✅ Privacy Agent: 60% privacy score"
    assert dict(frame.fields) == {}


def test_normalize_mapping_without_data_is_its_own_payload():
    frame = normalize_frame({"type": "agent_activity", "agent": "Quality Agent", "message": "hi"})
    assert frame.fields == {"agent": "Quality Agent", "message": "hi"}
    assert frame.text == "hi"


@pytest.mark.parametrize("raw", [[1, 2], 42, None, {"type": "log", "data": [1, 2]}])
def test_normalize_rejects_unusable_frames(raw):
    with pytest.raises(TypeError):
        normalize_frame(raw)


# ── Extraction ────────────────────────────────────────────────────────

def test_rule_declared_score_is_extracted():
    result = _extract("✅ Privacy Agent: 60% privacy score")
    assert result.metadata == {"privacyScore": 60}
    assert result.progress is None


def test_out_of_range_score_is_left_out():
    result = _extract("✅ Privacy Agent: 160% privacy score")
    assert "privacyScore" not in result.metadata


def test_progress_rule_captures_step():
    result = _extract("🔄 [45%] bias_detection: ⚖️ Bias Detection Agent analyzing for fairness...")
    assert result.progress == 45
    assert result.step == "bias_detection"
    assert result.metadata == {"step": "bias_detection"}


@pytest.mark.parametrize("text", [
    "x[45%] bias_detection: running",
    "[[45%] bias_detection: running",
    "[45%]x bias_detection: running",
])
def test_glued_progress_token_is_not_a_progress_line(text):
    assert classify(text).rule.name != "progress_update"
    result = _extract(text)
    assert result.progress is None
    assert "step" not in result.metadata


def test_agent_class_capture_is_not_metadata():
    result = _extract("✅ BiasDetectionAgent initialized")
    assert result.agent == "Bias Detector"
    assert "agent" not in result.metadata


def test_structured_progress_overrides_text():
    result = _extract({
        "type": "generation_update",
        "data": {"progress": 70, "message": "🔄 [45%] bias_detection: checking"},
    })
    assert result.progress == 70


def test_invalid_structured_progress_keeps_text_value():
    result = _extract({"type": "log", "data": {"progress": "lots", "message": "[45%] x: y"}})
    assert result.progress == 45


def test_progress_failure_sentinel():
    result = _extract({"type": "generation_update", "data": {"step": "data_generation", "progress": -1}})
    assert result.failed
    assert result.progress is None


def test_payload_metadata_is_coerced():
    result = _extract({
        "type": "agent_activity",
        "data": {
            "message": "scored",
            "latency": "250",
            "job_id": "deadbeef",
            "metadata": {
                "privacyScore": "abc",
                "biasScore": 130,
                "recordCount": "12",
                "model": "gemini-2.0-flash-exp",
            },
        },
    })
    assert result.metadata == {
        "durationMs": 250.0,
        "jobId": "deadbeef",
        "recordCount": 12,
        "model": "gemini-2.0-flash-exp",
    }


def test_odd_payload_metadata_shape_is_ignored():
    result = _extract({"type": "agent_activity", "data": {"message": "x", "metadata": ["nope"]}})
    assert result.metadata == {}
