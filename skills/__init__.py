"""Resume Builder skills - stateless tools for each generation phase."""

from .base_skill import BaseSkill, SkillContext, SkillResult
from .company_signal_analyzer import CompanySignalAnalyzerSkill, CompanySignals
from .competency_extractor import CompetencyExtractorSkill
from .deliverables_generator import Deliverables, DeliverablesGeneratorSkill
from .proofreader import ProofreaderSkill
from .resume_optimizer import ResumeOptimizerSkill, ResumePolishSkill, ResumeReviewSkill

__all__ = [
    # Base
    "BaseSkill",
    "SkillContext",
    "SkillResult",
    # Skills
    "CompetencyExtractorSkill",
    "CompanySignalAnalyzerSkill",
    "CompanySignals",
    "ResumeOptimizerSkill",
    "ResumeReviewSkill",
    "ResumePolishSkill",
    "DeliverablesGeneratorSkill",
    "Deliverables",
    "ProofreaderSkill",
]
