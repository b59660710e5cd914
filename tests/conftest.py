import logging

import pytest

from translation_sync.app_config import Credentials, SyncConfig


@pytest.fixture
def sync_config(tmp_path):
    """Configuration writing into a temporary directory, with fast pacing for tests."""
    return SyncConfig(
        credentials=Credentials(user='api', password='secret'),
        out_directory=str(tmp_path / 'dist'),
        organization_id='openstreetmap',
        project_id='id-editor',
        resource_ids=['core', 'presets'],
        reviewed_only=False,
        source_locale='en',
        dispatch_interval=0.01,
    )


@pytest.fixture(autouse=True)
def reset_package_logger():
    """Drop handlers a test may have attached to the package logger."""
    yield
    logger = logging.getLogger('translation_sync')
    for handler in list(logger.handlers):
        logger.removeHandler(handler)
        handler.close()
    logger.propagate = True
