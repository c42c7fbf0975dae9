from enum import Enum
from typing import Dict, Optional

from app.features.fix.schemas.fix import FixSource, FixSuggestion
from app.features.fix.services.providers import (
    SYSTEM_PROMPT,
    ChatCompletionProvider,
    Outcome,
    ProviderResult,
    build_fix_prompt,
)
from app.features.fix.services.templates import (
    NO_PROVIDER_REASON,
    PROVIDER_ERROR_REASON,
    RATE_LIMITED_REASON,
    generic_advisory,
    match_rule_template,
)
from app.features.scan.schemas.scan import Issue
from app.platform.ai_clients import ProviderPool
from app.platform.config import settings
from app.platform.errors import FixSuggestionFailed, InvalidInput
from app.platform.logger import get_logger

logger = get_logger(__name__)


class Stage(str, Enum):
    primary = "primary-ai"
    rate_limit_rules = "rule-based-after-rate-limit"
    secondary = "secondary-ai"
    rules = "rule-based"
    generic = "generic"


# Where the chain goes after a stage ends without text. Stages run strictly
# one after another; a success at any stage ends the chain.
TRANSITIONS: Dict[Stage, Dict[Outcome, Stage]] = {
    Stage.primary: {
        Outcome.rate_limited: Stage.rate_limit_rules,
        Outcome.failed: Stage.secondary,
        Outcome.unavailable: Stage.secondary,
    },
    Stage.rate_limit_rules: {
        Outcome.unavailable: Stage.secondary,
    },
    Stage.secondary: {
        Outcome.rate_limited: Stage.rules,
        Outcome.failed: Stage.rules,
        Outcome.unavailable: Stage.rules,
    },
    Stage.rules: {
        Outcome.unavailable: Stage.generic,
    },
}

STAGE_SOURCES: Dict[Stage, FixSource] = {
    Stage.primary: FixSource.primary_ai,
    Stage.rate_limit_rules: FixSource.rule_based,
    Stage.secondary: FixSource.secondary_ai,
    Stage.rules: FixSource.rule_based,
    Stage.generic: FixSource.generic,
}


class FixSuggestionEngine:
    """
    Suggest a remediation for one issue.

    Primary AI -> (on rate limit) rule template -> secondary AI -> rule
    template -> generic advisory. The generic stage always answers, so
    callers never see a provider failure.
    """

    def __init__(self, primary: ChatCompletionProvider, secondary: ChatCompletionProvider):
        self.primary = primary
        self.secondary = secondary

    @classmethod
    def from_pool(cls, pool: ProviderPool) -> "FixSuggestionEngine":
        return cls(
            primary=ChatCompletionProvider("Gemini", pool.gemini, settings.GEMINI_MODEL),
            secondary=ChatCompletionProvider(
                "OpenAI",
                pool.openai,
                settings.OPENAI_MODEL,
                system_prompt=SYSTEM_PROMPT,
                max_tokens=800,
                temperature=0.2,
            ),
        )

    def suggest(self, html: Optional[str], issue: Optional[Issue]) -> FixSuggestion:
        if not html or issue is None:
            raise InvalidInput("Missing html or issue")

        prompt = build_fix_prompt(html, issue)
        results: Dict[Stage, ProviderResult] = {}
        stage: Optional[Stage] = Stage.primary

        while stage is not None:
            result = self._attempt(stage, prompt, issue, results)
            results[stage] = result

            if result.ok:
                logger.info(f"Fix for {issue.code or issue.type.value} produced by {stage.value}")
                return FixSuggestion(text=result.text, source_provider=STAGE_SOURCES[stage])

            next_stage = TRANSITIONS.get(stage, {}).get(result.outcome)
            logger.info(
                f"Fix stage {stage.value} for {issue.code or issue.type.value}: "
                f"{result.outcome.value} ({result.reason}); "
                f"next: {next_stage.value if next_stage else 'none'}"
            )
            stage = next_stage

        # Unreachable while the generic stage always succeeds
        raise FixSuggestionFailed(details={"issue_code": issue.code})

    def _attempt(
        self, stage: Stage, prompt: str, issue: Issue, results: Dict[Stage, ProviderResult]
    ) -> ProviderResult:
        if stage is Stage.primary:
            return self.primary.generate(prompt)
        if stage is Stage.secondary:
            return self.secondary.generate(prompt)
        if stage in (Stage.rate_limit_rules, Stage.rules):
            template = match_rule_template(issue)
            if template is None:
                return ProviderResult.unavailable("no rule template matched")
            return ProviderResult.success(template.text)
        return ProviderResult.success(generic_advisory(issue, self._fallback_reason(results)))

    @staticmethod
    def _fallback_reason(results: Dict[Stage, ProviderResult]) -> str:
        primary = results.get(Stage.primary)
        secondary = results.get(Stage.secondary)

        if secondary and secondary.outcome in (Outcome.failed, Outcome.rate_limited):
            return PROVIDER_ERROR_REASON
        if primary and primary.outcome is Outcome.rate_limited:
            return RATE_LIMITED_REASON
        if primary and primary.outcome is Outcome.failed:
            return PROVIDER_ERROR_REASON
        return NO_PROVIDER_REASON
