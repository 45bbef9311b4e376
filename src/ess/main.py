# main.py
import uvicorn
from ess.adapters.aiohttp_client_adapter import AioHttpClientAdapter
from ess.adapters.clado_search_adapter import CladoSearchAdapter
from ess.adapters.expert_store_inmemory import InMemoryExpertStore
from ess.adapters.supabase_store_adapter import SupabaseExpertStore
from ess.adapters.web.fastapi import create_app
from ess.core.config import PollerConfig
from ess.core.interfaces.expert_store import ExpertStorePort
from ess.core.interfaces.http_client import HttpClientPort
from ess.core.logging_config import configure_logging
from ess.core.managers.orchestrator import Orchestrator
from ess.core.settings import app_settings, logger


# main lives at the outermost layer (not in core)
# Instantiates all the concrete adapters
# Wires dependencies together
# Starts the application

def build_store(client: HttpClientPort) -> ExpertStorePort:
    rest_url = app_settings.SUPABASE_REST_URL
    key = app_settings.SUPABASE_SERVICE_ROLE_KEY
    if rest_url and key:
        return SupabaseExpertStore(client, rest_url, key.get_secret_value())
    logger.warning("Supabase is not configured; project status and experts are kept in memory only")
    return InMemoryExpertStore()


def build_app():
    http_client = AioHttpClientAdapter()
    config = PollerConfig.from_app_settings(app_settings)
    api_key = app_settings.CLADO_API_KEY

    # Factory passed to the web adapter keeps composition here
    def orchestrator_factory(client: HttpClientPort) -> Orchestrator:
        search_api = CladoSearchAdapter(
            client,
            str(app_settings.CLADO_API_URL),
            api_key.get_secret_value() if api_key else None,
        )
        return Orchestrator(search_api, build_store(client), config)

    return create_app(
        orchestrator_factory=orchestrator_factory,
        http_client=http_client,
        cors_origins=app_settings.ESS_CORS_ORIGINS,
    )


def main():
    # Central logging configuration BEFORE building the app so uvicorn adopts level/format
    configure_logging(app_settings.ESS_LOG_LEVEL)
    app_settings.print_settings(logger)

    app = build_app()
    logger.info(f"Expert search service starting on port {app_settings.ESS_PORT}")

    # Let uvicorn inherit existing logging (separate sinks & correlation ids)
    uvicorn.run(
        app,
        host=app_settings.ESS_HOST,
        port=app_settings.ESS_PORT,
        log_config=None,
        log_level=str(app_settings.ESS_LOG_LEVEL).lower(),
    )


if __name__ == "__main__":
    main()
