"""Deep research, extraction, per-source adapters and the research job pipeline."""
from hvac_research.research.database import ResearchJobBusinessModel, ResearchJobModel
from hvac_research.research.deep_research import (
    DeepResearchClient,
    ResearchResult,
    ResearchStatus,
    ResearchUsage,
    build_hvac_discovery_prompt,
)
from hvac_research.research.extraction import (
    BusinessExtractor,
    ExtractedBusiness,
    ValidationReport,
    extract_business_data,
    rewrite_prompt,
    validate_business_data,
)
from hvac_research.research.prompts import TEXAS_COUNTIES, get_prompt
from hvac_research.research.workflow import (
    PipelineProgress,
    PipelineResult,
    PipelineStage,
    ResearchJobNotFoundError,
    cancel_research_job,
    create_research_job,
    get_research_job,
    list_research_jobs,
    run_region_discovery_pipeline,
    run_research_job,
    start_research_job,
)

__all__ = [
    "ResearchJobModel",
    "ResearchJobBusinessModel",
    "DeepResearchClient",
    "ResearchResult",
    "ResearchStatus",
    "ResearchUsage",
    "build_hvac_discovery_prompt",
    "BusinessExtractor",
    "ExtractedBusiness",
    "ValidationReport",
    "extract_business_data",
    "rewrite_prompt",
    "validate_business_data",
    "TEXAS_COUNTIES",
    "get_prompt",
    "PipelineProgress",
    "PipelineResult",
    "PipelineStage",
    "ResearchJobNotFoundError",
    "cancel_research_job",
    "create_research_job",
    "get_research_job",
    "list_research_jobs",
    "run_region_discovery_pipeline",
    "run_research_job",
    "start_research_job",
]
