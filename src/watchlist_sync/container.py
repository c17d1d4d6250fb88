"""DI container. Build with init_container(); the app lifespan resolves singletons onto app.state."""
from dependency_injector import containers, providers

from watchlist_sync.config import get_settings
from watchlist_sync.db.sessions import create_db_engine
from watchlist_sync.providers import create_provider
from watchlist_sync.services import (AggregationEngine, AlertManager,
                                     OrphanAlertPolicy)
from watchlist_sync.stores import AlertStore, WatchlistStore


class Container(containers.DeclarativeContainer):
    settings = providers.Singleton(get_settings)

    engine = providers.Singleton(
        create_db_engine,
        settings.provided.database_url,
        echo=settings.provided.sql_echo,
    )

    market_data_provider = providers.Singleton(
        create_provider,
        settings.provided.market_data_provider,
        api_key=settings.provided.finnhub_api_key,
    )

    watchlist_store = providers.Singleton(WatchlistStore, engine)
    alert_store = providers.Singleton(AlertStore, engine)

    aggregation_engine = providers.Singleton(
        AggregationEngine,
        watchlist_store,
        market_data_provider,
        lookup_timeout=settings.provided.overview_timeout_seconds,
        max_concurrency=settings.provided.overview_max_concurrency,
    )
    alert_manager = providers.Singleton(
        AlertManager,
        alert_store,
        market_data_provider,
        snapshot_timeout=settings.provided.overview_timeout_seconds,
    )

    orphan_policy = providers.Singleton(
        OrphanAlertPolicy,
        settings.provided.orphan_alert_policy,
    )


def init_container() -> Container:
    """Create the container (tests override providers before the app starts)."""
    return Container()
