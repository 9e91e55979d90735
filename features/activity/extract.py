"""
Field extraction — progress, identifiers, latency and domain scores.

Every coercion here degrades to ``None`` (field absent) on bad input. Nothing
in this module raises for malformed numbers or odd payload shapes; the only
error it signals is a frame whose top-level shape is unusable, which
``normalize_frame`` reports with TypeError.
"""

from __future__ import annotations

import math
import re
from collections.abc import Mapping
from dataclasses import dataclass, field
from typing import Any

from features.activity.rules import AGENT_CLASS_NAMES, Match

_PROGRESS_RE = re.compile(r"(?<![\w\[])\[(\d{1,3})%\](?!\w)")
_JOB_RE = re.compile(r"\bjob\s+([a-f0-9][a-f0-9-]*)\b", re.IGNORECASE)
_LATENCY_RE = re.compile(r"(?<![\w.])(\d+(?:\.\d+)?)\s?ms\b")

# Structured payload keys that carry a latency in milliseconds
_LATENCY_KEYS = ("durationMs", "duration_ms", "latency", "duration")
_JOB_KEYS = ("jobId", "job_id")

# Error sentinel some producers send as progress
PROGRESS_FAILED = -1


# ── Coercion ──────────────────────────────────────────────────────────

def _to_number(value: Any) -> float | None:
    if isinstance(value, bool):
        return None
    if isinstance(value, (int, float)):
        number = float(value)
    elif isinstance(value, str):
        try:
            number = float(value.strip().rstrip("%"))
        except ValueError:
            return None
    else:
        return None
    if math.isnan(number) or math.isinf(number):
        return None
    return number


def _compact(number: float) -> int | float:
    return int(number) if number.is_integer() else number


def coerce_percent(value: Any) -> int | float | None:
    """A score in [0, 100], or None."""
    number = _to_number(value)
    if number is None or not 0 <= number <= 100:
        return None
    return _compact(number)


def coerce_count(value: Any) -> int | None:
    """A non-negative whole count, or None."""
    number = _to_number(value)
    if number is None or number < 0 or not number.is_integer():
        return None
    return int(number)


def coerce_progress(value: Any) -> int | None:
    """Integer progress in [0, 100], or None."""
    number = _to_number(value)
    if number is None or not 0 <= number <= 100:
        return None
    return int(number)


def coerce_ms(value: Any) -> float | None:
    number = _to_number(value)
    if number is None or number < 0:
        return None
    return number


def coerce_str(value: Any) -> str | None:
    if value is None or isinstance(value, (Mapping, list, tuple, set)):
        return None
    text = str(value).strip()
    return text or None


COERCERS = {
    "str": coerce_str,
    "percent": coerce_percent,
    "count": coerce_count,
    "step": lambda v: (coerce_str(v) or "").lower() or None,
    "agent_class": lambda v: AGENT_CLASS_NAMES.get(v or ""),
}

# Known numeric metadata keys and the coercion they must pass
METADATA_COERCION = {
    "privacyScore": coerce_percent,
    "biasScore": coerce_percent,
    "qualityScore": coerce_percent,
    "relationshipCount": coerce_count,
    "recordCount": coerce_count,
    "durationMs": coerce_ms,
    "domain": coerce_str,
    "jobId": coerce_str,
    "error": coerce_str,
}


# ── Text extraction ───────────────────────────────────────────────────

def extract_progress(text: str) -> int | None:
    m = _PROGRESS_RE.search(text)
    return coerce_progress(m.group(1)) if m else None


def extract_job_id(text: str) -> str | None:
    m = _JOB_RE.search(text)
    return m.group(1) if m else None


def extract_latency(text: str) -> float | None:
    m = _LATENCY_RE.search(text)
    return coerce_ms(m.group(1)) if m else None


def apply_captures(match: Match) -> dict[str, Any]:
    """Coerce the groups a rule declared; failures are simply left out."""
    fields: dict[str, Any] = {}
    for capture in match.rule.captures:
        if capture.group > len(match.groups):
            continue
        value = COERCERS[capture.kind](match.groups[capture.group - 1])
        if value is not None:
            fields[capture.field] = value
    return fields


# ── Frames ────────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Frame:
    """A raw frame reduced to its text and any explicit structured fields."""
    text: str
    kind: str | None = None
    fields: Mapping[str, Any] = field(default_factory=dict)

    @property
    def structured(self) -> bool:
        return self.kind is not None or bool(self.fields)


def normalize_frame(raw: Any) -> Frame:
    """Turn a transport frame into a Frame.

    Accepts a bare text line, bytes, or ``{"type": ..., "data": ...}`` where
    data is an object or a string. A mapping without ``data`` is treated as
    its own payload.
    """
    if isinstance(raw, str):
        return Frame(raw)
    if isinstance(raw, (bytes, bytearray)):
        return Frame(bytes(raw).decode("utf-8", errors="replace"))
    if not isinstance(raw, Mapping):
        raise TypeError(f"unsupported frame: {type(raw).__name__}")

    kind = raw.get("type")
    kind = kind if isinstance(kind, str) else None
    if "data" in raw:
        data = raw["data"]
    else:
        data = {k: v for k, v in raw.items() if k != "type"}

    if data is None:
        return Frame("", kind)
    if isinstance(data, str):
        return Frame(data, kind)
    if not isinstance(data, Mapping):
        raise TypeError(f"unsupported frame data: {type(data).__name__}")

    message = data.get("message")
    text = message if isinstance(message, str) else ""
    return Frame(text, kind, dict(data))


# ── Structured payloads ───────────────────────────────────────────────

@dataclass
class Extraction:
    """Everything the extractor pulled from one frame."""
    progress: int | None = None
    failed: bool = False  # producer sent the error progress sentinel
    agent: str | None = None  # agent named by a rule capture
    step: str | None = None
    metadata: dict[str, Any] = field(default_factory=dict)


def merge_metadata(target: dict[str, Any], payload: Any) -> None:
    """Merge a payload ``metadata`` map, coercing the keys we know."""
    if not isinstance(payload, Mapping):
        return
    for key, value in payload.items():
        if not isinstance(key, str):
            continue
        coerce = METADATA_COERCION.get(key)
        if coerce is None:
            if value is not None:
                target[key] = value
            continue
        value = coerce(value)
        if value is not None:
            target[key] = value


def extract(frame: Frame, match: Match) -> Extraction:
    """Pull progress, ids, latency and rule-declared fields from a frame."""
    text = frame.text
    fields = frame.fields
    result = Extraction()

    captured = apply_captures(match)
    result.agent = captured.pop("agent", None)
    result.step = captured.pop("step", None)
    result.metadata.update(captured)
    if result.step:
        result.metadata["step"] = result.step

    result.progress = extract_progress(text)
    job_id = extract_job_id(text)
    if job_id:
        result.metadata["jobId"] = job_id
    latency = extract_latency(text)
    if latency is not None:
        result.metadata["durationMs"] = latency

    if not fields:
        return result

    # Explicit payload fields override anything derived from text
    if "progress" in fields:
        raw_progress = fields["progress"]
        if _to_number(raw_progress) == PROGRESS_FAILED:
            result.failed = True
            result.progress = None
        else:
            progress = coerce_progress(raw_progress)
            if progress is not None:
                result.progress = progress

    step = coerce_str(fields.get("step"))
    if step:
        result.step = step.lower()

    for key in _JOB_KEYS:
        job_id = coerce_str(fields.get(key))
        if job_id:
            result.metadata["jobId"] = job_id
            break

    for key in _LATENCY_KEYS:
        latency = coerce_ms(fields.get(key))
        if latency is not None:
            result.metadata["durationMs"] = latency
            break

    merge_metadata(result.metadata, fields.get("metadata"))

    error = coerce_str(fields.get("error"))
    if error:
        result.metadata["error"] = error
    stack = coerce_str(fields.get("stack"))
    if stack:
        result.metadata["stack"] = stack

    if result.step:
        result.metadata["step"] = result.step
    return result
