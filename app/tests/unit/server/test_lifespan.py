import asyncio
from unittest.mock import MagicMock, patch

import pytest
from fastapi import FastAPI

from infrastructure.configuration import Settings
from infrastructure.configuration.infrastructure import (
    LeaseStoreSettings,
    SweeperSettings,
)
from server import lifespan as lifespan_module


def _settings(sweeper_enabled=True, backend="memory"):
    return Settings(
        sweeper=SweeperSettings(SWEEPER_ENABLED=sweeper_enabled),
        lease_store=LeaseStoreSettings(LEASE_STORE_BACKEND=backend),
    )


async def _run(app):
    async with lifespan_module.lifespan(app):
        pass


@pytest.fixture
def patched():
    with patch.object(lifespan_module, "get_settings") as get_settings, patch.object(
        lifespan_module, "configure_logging"
    ) as configure_logging, patch.object(
        lifespan_module, "get_broker"
    ) as get_broker, patch.object(
        lifespan_module, "get_sweeper"
    ) as get_sweeper, patch.object(
        lifespan_module, "get_postgres_client"
    ) as get_postgres_client, patch.object(
        lifespan_module, "get_dynamodb_client"
    ) as get_dynamodb_client, patch.object(
        lifespan_module, "scheduled_tasks"
    ) as scheduled_tasks:
        configure_logging.return_value = MagicMock()
        yield {
            "get_settings": get_settings,
            "get_broker": get_broker,
            "get_sweeper": get_sweeper,
            "get_postgres_client": get_postgres_client,
            "get_dynamodb_client": get_dynamodb_client,
            "scheduled_tasks": scheduled_tasks,
            "logger": configure_logging.return_value,
        }


@pytest.mark.unit
class TestLifespan:
    def test_starts_and_stops_scheduler(self, patched):
        settings = _settings()
        patched["get_settings"].return_value = settings
        stop_event = patched["scheduled_tasks"].run_continuously.return_value
        app = FastAPI()

        asyncio.run(_run(app))

        patched["get_broker"].assert_called_once()
        patched["scheduled_tasks"].init.assert_called_once_with(
            patched["get_sweeper"].return_value,
            settings.sweeper,
            postgres=patched["get_postgres_client"].return_value,
            dynamodb=None,
        )
        patched["get_dynamodb_client"].assert_not_called()
        stop_event.set.assert_called_once()
        patched["scheduled_tasks"].stop.assert_called_once()
        assert app.state.settings is settings

    def test_dynamodb_healthcheck_when_store_uses_dynamodb(self, patched):
        patched["get_settings"].return_value = _settings(backend="dynamodb")

        asyncio.run(_run(FastAPI()))

        _, kwargs = patched["scheduled_tasks"].init.call_args
        assert kwargs["dynamodb"] is patched["get_dynamodb_client"].return_value

    def test_sweeper_disabled(self, patched):
        patched["get_settings"].return_value = _settings(sweeper_enabled=False)

        asyncio.run(_run(FastAPI()))

        patched["scheduled_tasks"].init.assert_not_called()
        patched["scheduled_tasks"].stop.assert_not_called()

    def test_broker_errors_abort_startup(self, patched):
        patched["get_settings"].return_value = _settings()
        patched["get_broker"].side_effect = ValueError("Unknown lease store backend")

        with pytest.raises(ValueError):
            asyncio.run(_run(FastAPI()))

        patched["scheduled_tasks"].init.assert_not_called()

    def test_config_logging_lists_section_keys_only(self, patched):
        settings = Settings()
        logger = MagicMock()

        lifespan_module._list_configs(settings, logger)

        loaded = {
            c.kwargs["config_setting"]: c.kwargs["keys"]
            for c in logger.info.call_args_list
            if c.args[0] == "configuration_loaded"
        }
        assert loaded["postgres"] == ["CONNECTIONS", "CONNECT_TIMEOUT"]
