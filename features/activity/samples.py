"""
Sample orchestrator log — one full multi-agent generation run, in the order
the backend emits it. Used by replay.py when no log file is given.
"""

SAMPLE_PIPELINE_LOG = (
    "🤖 Initializing Multi-Agent Orchestrator...",
    "✅ Gemini 2.0 Flash-Lite initialized successfully",
    "✅ PrivacyAgent initialized",
    "✅ QualityAgent initialized",
    "✅ DomainExpertAgent initialized",
    "✅ BiasDetectionAgent initialized",
    "✅ RelationshipAgent initialized",
    "🎯 Multi-Agent Orchestrator ready!",
    "🚀 Starting Multi-Agent Orchestration for job abc123",
    "🔄 [5%] initialization: 🤖 Initializing AI agents...",
    "🔄 [10%] domain_analysis: 🧠 Domain Expert analyzing data structure...",
    "🧠 Domain Expert analyzing data structure...",
    "✅ Domain Expert: Detected healthcare domain",
    "🔄 [25%] domain_analysis: ✅ Domain Expert: Detected healthcare domain",
    "🔄 [30%] privacy_assessment: 🔒 Privacy Agent assessing data sensitivity...",
    "🔒 Privacy Agent analyzing data sensitivity...",
    "✅ Privacy Agent: 60% privacy score",
    "🔄 [40%] privacy_assessment: ✅ Privacy Agent: 60% privacy score",
    "🔄 [45%] bias_detection: ⚖️ Bias Detection Agent analyzing for fairness...",
    "⚖️ Bias Detection Agent analyzing for fairness...",
    "✅ Bias Detector: 25% bias score",
    "🔄 [55%] bias_detection: ✅ Bias Detector: 25% bias score",
    "🔄 [60%] relationship_mapping: 🔗 Relationship Agent mapping data connections...",
    "🔗 Relationship Agent mapping data connections...",
    "✅ Relationship Agent: Mapped 3 relationships",
    "🔄 [70%] relationship_mapping: ✅ Relationship Agent: Mapped 3 relationships",
    "🔄 [72%] quality_planning: 🎯 Quality Agent planning generation strategy...",
    "🎯 Quality Agent planning generation strategy...",
    "✅ Quality Agent: Generation strategy optimized",
    "🔄 [75%] quality_planning: ✅ Quality Agent: Generation strategy optimized",
    "🤖 GEMINI: [80%] data_generation: 🤖 Generating synthetic data with Gemini 2.0 Flash...",
    "🤖 GEMINI: [85%] data_generation: 🔮 Gemini 2.0 Flash processing schema and constraints...",
    "🎨 Generating synthetic data with multi-agent context...",
    "✅ Generated 100 records using Gemini",
    "🤖 GEMINI: [90%] data_generation: ✅ Gemini 2.0 Flash generated 100 high-quality records",
    "🔄 [92%] quality_validation: 🔍 Quality Agent validating generated data...",
    "🔍 Quality Agent validating generated data...",
    "✅ Quality validation: 94% overall quality",
    "🔄 [95%] quality_validation: ✅ Quality validation: 94% quality",
    "🔄 [98%] final_assembly: 📦 Assembling final results...",
    "🔄 [100%] completion: 🎉 Multi-agent generation completed successfully!",
    "🎉 Multi-Agent Orchestration completed successfully!",
)
