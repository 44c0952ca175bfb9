"""RDF Transformer Repository Factory

Factory function to create the appropriate repository implementation
based on configuration settings.
"""

import logging
from typing import Optional

from .repository_inf import RepositoryInterface
from .http_repository import HTTPRepository
from .memory_repository import MemoryRepository
from ..config.config_loader import TransformerConfig

logger = logging.getLogger(__name__)


def create_repository(server_url: str, repository_id: str,
                      config: Optional[TransformerConfig] = None) -> RepositoryInterface:
    """
    Create a repository based on configuration settings.

    Returns an in-memory repository when ``server.use_mock_repository`` is
    set, otherwise an HTTP repository for ``server_url``. The repository is
    not initialized.

    Args:
        server_url: Server URL for the HTTP repository
        repository_id: Repository identifier
        config: Optional configuration supplying credentials and timeout

    Returns:
        RepositoryInterface: Either HTTPRepository or MemoryRepository
    """
    if config is not None and config.use_mock_repository():
        logger.info(f"Creating MemoryRepository '{repository_id}' based on configuration setting")
        return MemoryRepository(repository_id)

    username, password = (None, None)
    timeout = 30
    if config is not None:
        username, password = config.get_credentials()
        timeout = config.get_timeout()

    logger.info(f"Creating HTTPRepository '{repository_id}' at {server_url}")
    return HTTPRepository(server_url, repository_id, username=username,
                          password=password, timeout=timeout)
