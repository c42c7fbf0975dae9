from fastapi import Request

from app.features.fix.services.fix_engine import FixSuggestionEngine
from app.platform.ai_clients import ProviderPool


def get_fix_engine(request: Request) -> FixSuggestionEngine:
    """Build a fix engine over the process-wide AI client pool."""
    providers: ProviderPool = request.app.state.providers
    return FixSuggestionEngine.from_pool(providers)
