"""Dependency container wiring for the application."""

from collections.abc import Awaitable, Callable
from dataclasses import dataclass

from pymongo import MongoClient
from pymongo.server_api import ServerApi

from expiry_tracker.adapters.mongo_food_repository import MongoFoodRepository
from expiry_tracker.config import Settings, build_mongodb_uri
from expiry_tracker.services.foods import FoodService


@dataclass
class AppContainer:
    """Holds application-wide dependencies."""

    settings: Settings
    food_service: FoodService
    ping_storage: Callable[[], None]
    close_resources: Callable[[], Awaitable[None]]


def build_mongo_client(settings: Settings) -> MongoClient:
    """Create a MongoClient pinned to the Stable API.

    The client connects lazily; call ``ping_storage`` on the container to
    verify the deployment is reachable.
    """
    return MongoClient(
        build_mongodb_uri(settings),
        server_api=ServerApi("1", strict=True, deprecation_errors=True),
        serverSelectionTimeoutMS=settings.mongodb_timeout_ms,
        tz_aware=True,
    )


def build_container(settings: Settings | None = None) -> AppContainer:
    """Create the default dependency container."""
    resolved_settings = settings or Settings()
    mongo_client = build_mongo_client(resolved_settings)
    collection = mongo_client[resolved_settings.mongodb_database][
        resolved_settings.mongodb_collection
    ]
    food_service = FoodService(MongoFoodRepository(collection))

    def ping_storage() -> None:
        mongo_client.admin.command("ping")

    async def close_resources() -> None:
        mongo_client.close()

    return AppContainer(
        settings=resolved_settings,
        food_service=food_service,
        ping_storage=ping_storage,
        close_resources=close_resources,
    )
