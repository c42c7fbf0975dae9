from app.features.scan.services.scan.orchestrator import ScanOrchestrator


def get_scan_orchestrator() -> ScanOrchestrator:
    """
    Dependency providing a fresh orchestrator per request.

    Orchestrators hold per-scan state and own one browser each, so they are
    never shared between requests.
    """
    return ScanOrchestrator()
