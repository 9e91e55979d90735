"""
Pattern classifier — the ordered rule table for pipeline log lines.

Each rule pairs a compiled matcher with the stage, status, level and agent it
implies, plus a mapping from capture groups to metadata fields. The first rule
that matches wins, so rules naming a specific agent and stage sit above the
generic error/warning markers. Anything unmatched falls through to
FALLBACK_RULE.

Coercion of captured text happens in features.activity.extract; this module
only decides which rule applies and what it captured.
"""

from __future__ import annotations

import re
from dataclasses import dataclass

from features.activity.models import ActivityLevel, ActivityStatus, ActivityType

# ── Agents ────────────────────────────────────────────────────────────

DEFAULT_AGENT = "System"

# Pipeline agents shown at idle before any activity arrives
SEED_AGENTS = (
    "Domain Expert",
    "Privacy Agent",
    "Quality Agent",
    "Bias Detector",
    "Relationship Agent",
)

# Display name → substrings that identify it in a message. Checked in order.
AGENT_ALIASES: tuple[tuple[str, tuple[str, ...]], ...] = (
    ("Domain Expert", ("Domain Expert", "DomainExpertAgent")),
    ("Privacy Agent", ("Privacy Agent", "PrivacyAgent")),
    ("Bias Detector", ("Bias Detection", "Bias Detector", "BiasDetectionAgent")),
    ("Relationship Agent", ("Relationship Agent", "RelationshipAgent")),
    ("Quality Agent", ("Quality Agent", "QualityAgent")),
    ("Gemini AI", ("GEMINI", "Gemini")),
    ("Ollama", ("Ollama",)),
    ("Orchestrator", ("Orchestrator",)),
    ("WebSocket", ("WebSocket",)),
    ("Health Monitor", ("/api/health",)),
)

# Agent class names as they appear in "XAgent initialized" lines
AGENT_CLASS_NAMES = {
    "Privacy": "Privacy Agent",
    "Quality": "Quality Agent",
    "DomainExpert": "Domain Expert",
    "BiasDetection": "Bias Detector",
    "Relationship": "Relationship Agent",
}

# ── Stages ────────────────────────────────────────────────────────────

PIPELINE_STAGES = (
    ActivityType.INITIALIZATION,
    ActivityType.DOMAIN_ANALYSIS,
    ActivityType.PRIVACY_ASSESSMENT,
    ActivityType.BIAS_DETECTION,
    ActivityType.RELATIONSHIP_MAPPING,
    ActivityType.QUALITY_PLANNING,
    ActivityType.DATA_GENERATION,
    ActivityType.QUALITY_VALIDATION,
    ActivityType.FINAL_ASSEMBLY,
    ActivityType.COMPLETION,
)

STAGE_TYPES = {stage.value: stage for stage in PIPELINE_STAGES}

STEP_AGENTS = {
    "initialization": "System",
    "domain_analysis": "Domain Expert",
    "privacy_assessment": "Privacy Agent",
    "bias_detection": "Bias Detector",
    "relationship_mapping": "Relationship Agent",
    "quality_planning": "Quality Agent",
    "data_generation": "Gemini AI",
    "quality_validation": "Quality Agent",
    "final_assembly": "System",
    "completion": "System",
}

# Keyword inference for steps that are not one of the named stages.
# (step keyword, message keyword, type), first hit wins.
_TYPE_KEYWORDS = (
    ("initialization", "initializing", ActivityType.INITIALIZATION),
    ("domain", "domain", ActivityType.DOMAIN_ANALYSIS),
    ("privacy", "privacy", ActivityType.PRIVACY_ASSESSMENT),
    ("bias", "bias", ActivityType.BIAS_DETECTION),
    ("relationship", "relationship", ActivityType.RELATIONSHIP_MAPPING),
    ("validation", "validating", ActivityType.QUALITY_VALIDATION),
    ("quality", "quality", ActivityType.QUALITY_PLANNING),
    ("generation", "generating", ActivityType.DATA_GENERATION),
    ("assembly", "assembling", ActivityType.FINAL_ASSEMBLY),
    ("completion", "completed", ActivityType.COMPLETION),
)


def infer_type(step: str, message: str = "") -> ActivityType:
    """Best-effort stage for a free-form step name."""
    step = step.lower()
    message = message.lower()
    for step_kw, message_kw, activity_type in _TYPE_KEYWORDS:
        if step_kw in step or message_kw in message:
            return activity_type
    return ActivityType.SYSTEM


def find_agent(message: str) -> str | None:
    """Return the first known agent whose alias appears in the message."""
    for name, aliases in AGENT_ALIASES:
        if any(alias in message for alias in aliases):
            return name
    return None


# ── Markers ───────────────────────────────────────────────────────────

# Same case policy as the generic error/warning rules: words match in any case
_ERROR_MARKER = re.compile(r"❌|\berror\b", re.IGNORECASE)
_WARNING_MARKER = re.compile(r"⚠|\bwarning\b", re.IGNORECASE)
_SUCCESS_MARKER = re.compile(r"✅|\bsuccess\b", re.IGNORECASE)


def marker_level(text: str) -> ActivityLevel | None:
    """Level signalled by an explicit success/warning/error marker, if any."""
    if _ERROR_MARKER.search(text):
        return ActivityLevel.ERROR
    if _WARNING_MARKER.search(text):
        return ActivityLevel.WARNING
    if _SUCCESS_MARKER.search(text):
        return ActivityLevel.SUCCESS
    return None


# ── Rule table ────────────────────────────────────────────────────────

@dataclass(frozen=True)
class Capture:
    """Maps one regex group to a metadata field and its coercion."""
    group: int
    field: str
    kind: str  # "str", "percent", "count", "step", "agent_class"


@dataclass(frozen=True)
class Rule:
    """One classification rule.

    ``type=None`` means the stage comes from a captured ``step`` field.
    ``status=None`` means the status is derived from generic markers.
    """
    name: str
    pattern: re.Pattern
    type: ActivityType | None
    status: ActivityStatus | None = ActivityStatus.IN_PROGRESS
    level: ActivityLevel | None = None
    agent: str | None = None
    captures: tuple[Capture, ...] = ()

    def match(self, text: str) -> re.Match | None:
        return self.pattern.search(text)


@dataclass(frozen=True)
class Match:
    """The rule a frame hit and the raw text of its capture groups."""
    rule: Rule
    groups: tuple[str | None, ...] = ()

    @property
    def is_fallback(self) -> bool:
        return self.rule is FALLBACK_RULE


def _rx(pattern: str, flags: int = re.IGNORECASE) -> re.Pattern:
    return re.compile(pattern, flags)


# Percent value not glued to a preceding digit or decimal point
_PCT = r"(?<![\d.])(\d{1,3}(?:\.\d+)?)%"

T = ActivityType
S = ActivityStatus
L = ActivityLevel

RULES: tuple[Rule, ...] = (
    # Progress updates: "🔄 [45%] bias_detection: ..." / "GEMINI: [80%] data_generation: ..."
    Rule("progress_update", _rx(r"(?<![\w\[])\[(\d{1,3})%\](?!\w)\s*([A-Za-z_]+):\s*(.*)"), None,
         captures=(Capture(2, "step", "step"),)),

    # Connectivity
    Rule("websocket_connect", _rx(r"🔌\s*WebSocket connected:\s*(\w+)"), T.WEBSOCKET,
         S.CONNECTED, L.SUCCESS, "WebSocket", (Capture(1, "clientId", "str"),)),
    Rule("websocket_disconnect", _rx(r"🔌\s*WebSocket disconnected:\s*(\w+)"), T.WEBSOCKET,
         S.IN_PROGRESS, L.WARNING, "WebSocket", (Capture(1, "clientId", "str"),)),

    # Orchestrator start-up
    Rule("orchestrator_init", _rx(r"🤖\s*Initializing Multi-Agent Orchestrator"),
         T.INITIALIZATION, S.STARTED, agent="Orchestrator"),
    Rule("gemini_init", _rx(r"✅\s*Gemini.*initialized successfully"),
         T.INITIALIZATION, S.READY, L.SUCCESS, "Gemini AI"),
    Rule("agent_init", _rx(r"✅\s*(Privacy|Quality|DomainExpert|BiasDetection|Relationship)Agent initialized"),
         T.INITIALIZATION, S.READY, L.SUCCESS,
         captures=(Capture(1, "agent", "agent_class"),)),
    Rule("orchestrator_ready", _rx(r"🎯\s*Multi-Agent Orchestrator ready"),
         T.INITIALIZATION, S.READY, L.SUCCESS, "Orchestrator"),
    Rule("orchestration_start", _rx(r"🚀\s*Starting Multi-Agent Orchestration"),
         T.INITIALIZATION, S.STARTED, agent="Orchestrator"),

    # Domain expert
    Rule("domain_analyzing", _rx(r"🧠\s*Domain Expert analyzing"), T.DOMAIN_ANALYSIS),
    Rule("domain_complete", _rx(r"✅\s*Domain Expert.*?detected\s+(\w+)\s+domain"),
         T.DOMAIN_ANALYSIS, S.COMPLETED, L.SUCCESS, captures=(Capture(1, "domain", "str"),)),

    # Privacy
    Rule("privacy_analyzing", _rx(r"🔒\s*Privacy Agent (?:analyzing|assessing)"),
         T.PRIVACY_ASSESSMENT),
    Rule("privacy_complete", _rx(r"✅\s*Privacy Agent\b.*?" + _PCT + r"\s+privacy"),
         T.PRIVACY_ASSESSMENT, S.COMPLETED, L.SUCCESS,
         captures=(Capture(1, "privacyScore", "percent"),)),

    # Bias
    Rule("bias_analyzing", _rx(r"⚖️?\s*Bias Detection Agent"), T.BIAS_DETECTION),
    Rule("bias_complete", _rx(r"✅\s*Bias Detector\b.*?" + _PCT + r"\s+bias"),
         T.BIAS_DETECTION, S.COMPLETED, L.SUCCESS,
         captures=(Capture(1, "biasScore", "percent"),)),

    # Relationships
    Rule("relationship_analyzing", _rx(r"🔗\s*Relationship Agent"), T.RELATIONSHIP_MAPPING),
    Rule("relationship_complete", _rx(r"✅\s*Relationship Agent\b.*?mapped\s+(\d+)\s+relationships?"),
         T.RELATIONSHIP_MAPPING, S.COMPLETED, L.SUCCESS,
         captures=(Capture(1, "relationshipCount", "count"),)),

    # Quality planning
    Rule("quality_planning", _rx(r"🎯\s*Quality Agent.*?planning"), T.QUALITY_PLANNING),
    Rule("quality_planned", _rx(r"✅\s*Quality Agent.*?optimi[sz]ed"),
         T.QUALITY_PLANNING, S.COMPLETED, L.SUCCESS),

    # Generation
    Rule("gemini_generating", _rx(r"🤖\s*GEMINI.*?generating"), T.DATA_GENERATION,
         agent="Gemini AI"),
    Rule("gemini_processing", _rx(r"🔮\s*Gemini.*?processing"), T.DATA_GENERATION,
         agent="Gemini AI"),
    Rule("generation_context", _rx(r"🎨\s*Generating synthetic data"), T.DATA_GENERATION),
    Rule("records_generated", _rx(r"✅\s*Generated\s+(\d+)\s+records"),
         T.DATA_GENERATION, S.COMPLETED, L.SUCCESS,
         captures=(Capture(1, "recordCount", "count"),)),
    Rule("gemini_generated", _rx(r"✅\s*Gemini.*?generated\s+(\d+).*?records"),
         T.DATA_GENERATION, S.COMPLETED, L.SUCCESS, "Gemini AI",
         (Capture(1, "recordCount", "count"),)),

    # Validation
    Rule("validation_start", _rx(r"🔍\s*Quality Agent validating"), T.QUALITY_VALIDATION),
    Rule("validation_complete", _rx(r"✅\s*Quality validation\b.*?" + _PCT),
         T.QUALITY_VALIDATION, S.COMPLETED, L.SUCCESS, "Quality Agent",
         (Capture(1, "qualityScore", "percent"),)),

    # Assembly and completion
    Rule("final_assembly", _rx(r"📦\s*Assembling final results"), T.FINAL_ASSEMBLY),
    Rule("completion", _rx(r"🎉.*?(?:generation|orchestration).*?completed"),
         T.COMPLETION, S.COMPLETED, L.SUCCESS),

    # Server access log lines
    Rule("health_check", _rx(r"GET\s+\S*/api/health\S*.*HTTP"), T.HEALTH,
         S.READY, agent="Health Monitor"),
    Rule("generation_request", _rx(r"POST\s+\S*/api/generat\S*"), T.HEALTH, S.STARTED),

    # Generic markers, last so they never shadow a specific rule
    Rule("error", _rx(r"❌|\bERROR\b|\bfailed\b|\bexception\b"), T.ERROR, S.ERROR, L.ERROR),
    Rule("warning", _rx(r"⚠|\bWARNING\b|\bwarn"), T.SYSTEM, S.FALLBACK, L.WARNING),
)

FALLBACK_RULE = Rule("fallback", _rx(r""), T.SYSTEM, status=None)

del T, S, L


def classify(text: str, rules: tuple[Rule, ...] = RULES) -> Match:
    """Return the first rule matching ``text``, or the fallback rule."""
    for rule in rules:
        m = rule.match(text)
        if m:
            return Match(rule, m.groups())
    return Match(FALLBACK_RULE)
