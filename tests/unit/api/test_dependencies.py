"""Unit tests for service wiring and lifecycle."""

import logging
from unittest.mock import MagicMock, patch

import pytest

from src.api import dependencies
from src.api.dependencies import (
    build_pipeline_services,
    get_pipeline_services,
    init_services,
    shutdown_services,
)
from src.application.services.run_scheduler import PipelineRunScheduler
from src.commons.settings.models import Settings
from src.infrastructure.factory import InfrastructureFactory, reset_factory


@pytest.fixture
def memory_settings() -> Settings:
    return Settings(
        document_db={"provider": "memory"},
        cache={"provider": "memory"},
        moderation={"provider": "disabled"},
    )


@pytest.fixture(autouse=True)
def clean_singletons():
    reset_factory()
    dependencies._ServicesHolder.instance = None
    yield
    reset_factory()
    dependencies._ServicesHolder.instance = None


class TestBuildPipelineServices:
    """Tests for build_pipeline_services."""

    async def test_shares_one_record_store(self, memory_settings):
        services = build_pipeline_services(InfrastructureFactory(memory_settings))

        assert isinstance(services.scheduler, PipelineRunScheduler)
        assert services.orchestrator._records is services.record_store
        assert services.scheduler._records is services.record_store

    async def test_no_moderation_client_when_disabled(self, memory_settings):
        services = build_pipeline_services(InfrastructureFactory(memory_settings))

        assert services.orchestrator._moderation is None

    async def test_services_are_cached(self, memory_settings):
        factory = InfrastructureFactory(memory_settings)

        assert get_pipeline_services(factory) is get_pipeline_services(factory)


class TestLifecycle:
    """Tests for init_services and shutdown_services."""

    async def test_init_then_shutdown(self, memory_settings):
        await init_services(memory_settings)
        assert dependencies._ServicesHolder.instance is not None

        await shutdown_services()

        assert dependencies._ServicesHolder.instance is None

    async def test_shutdown_without_init(self):
        await shutdown_services()

    async def test_init_failure_is_logged_and_raised(self, memory_settings):
        factory = MagicMock()
        factory.get_document_db.side_effect = ConnectionError("mongo down")
        logger = logging.getLogger("src.api.dependencies")

        with (
            patch("src.api.dependencies.get_factory", return_value=factory),
            patch.object(logger, "log") as mock_log,
            pytest.raises(ConnectionError),
        ):
            await init_services(memory_settings)

        level, message = mock_log.call_args.args
        assert level == logging.ERROR
        assert message == "Service initialization failed"
