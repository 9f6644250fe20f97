"""DI container. Wire via init_container(); endpoints use Depends(Provide[Container.*])."""
from dependency_injector import containers, providers

from crypto_dashboard.db.sessions import create_db_engine
from crypto_dashboard.services.repositories import (AlertRepository,
                                                    SessionRepository,
                                                    WatchlistRepository)


class Container(containers.DeclarativeContainer):
    wiring_config = containers.WiringConfiguration(
        modules=[
            "crypto_dashboard.deps",
            "crypto_dashboard.routers.watchlist",
            "crypto_dashboard.routers.alerts",
        ]
    )

    config = providers.Configuration()

    engine = providers.Singleton(create_db_engine, config.database_url)

    watchlist_repository = providers.Singleton(WatchlistRepository, engine)
    alert_repository = providers.Singleton(AlertRepository, engine)
    session_repository = providers.Singleton(SessionRepository, engine)


def init_container(database_url: str | None = None) -> Container:
    """Create container, configure the database URL and wire to router modules."""
    container = Container()
    container.config.database_url.from_value(database_url)
    container.wire()
    return container
