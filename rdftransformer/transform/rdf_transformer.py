"""
RDF Transformer Stage

Pipeline stage that performs an action against a Sesame/RDF4J repository
and answers with an XML document.

Lifecycle, driven by the hosting pipeline:

1. ``configure(config)``: configuration-time defaults (server URL, base URI,
   contexts)
2. ``setup(parameters)``: per-instance parameters override those defaults;
   the repository connection is opened and contexts and action resolved
3. ``transform(document)``: one action per input document
4. ``recycle()``: the connection is released

An instance owns one connection and must not serve concurrent requests.
"""

import logging
from typing import Any, Mapping, Optional

from lxml import etree

from ..config.config_loader import (
    TransformerConfig, TransformParameters, ConfigurationError, resolve_parameters
)
from ..dom.dom_utils import Document
from ..model.action_model import Action
from ..model.context_model import ContextSet, resolve_contexts
from ..repository.repository_errors import RepositoryError
from ..repository.repository_factory import create_repository
from ..repository.repository_inf import RepositoryInterface, RepositoryConnectionInterface
from .action_dispatcher import ActionDispatcher


class RDFTransformer:
    """
    Transformer stage mediating between XML documents and a triple store.
    """

    def __init__(self, config: Optional[TransformerConfig] = None,
                 repository: Optional[RepositoryInterface] = None):
        """
        Initialize the transformer.

        Args:
            config: Configuration defaults; built-in defaults when None
            repository: Repository to use instead of one created from configuration
        """
        self.logger = logging.getLogger(f"{__name__}.{self.__class__.__name__}")
        self.config: Optional[TransformerConfig] = None
        self._repository_override = repository

        self.parameters: Optional[TransformParameters] = None
        self.repository: Optional[RepositoryInterface] = None
        self.connection: Optional[RepositoryConnectionInterface] = None
        self.contexts: ContextSet = ContextSet.unspecified()
        self.action: Action = Action.UNRECOGNIZED
        self.dispatcher: Optional[ActionDispatcher] = None

        if config is not None:
            self.configure(config)

    def configure(self, config: TransformerConfig) -> None:
        """
        Apply configuration-time defaults.

        Raises:
            ConfigurationError: If the configuration is invalid
        """
        config.validate_config()
        self.config = config
        self.dispatcher = ActionDispatcher(
            require_clear_confirmation=config.require_clear_confirmation()
        )
        self.logger.debug(f"Configured with {config}")

    def setup(self, parameters: Optional[Mapping[str, Any]] = None) -> None:
        """
        Resolve parameters and open the repository connection.

        Args:
            parameters: Stage parameters (``url``, ``repository``, ``base-uri``, ``contexts``, ``action``)

        Raises:
            ConfigurationError: If a required parameter is missing
            RepositoryError: If the repository cannot be reached
        """
        if self.config is None:
            self.configure(TransformerConfig.from_dict({}))

        self.recycle()
        try:
            self.parameters = resolve_parameters(self.config, parameters)

            repository = self._repository_override or create_repository(
                self.parameters.server_url, self.parameters.repository_id, self.config
            )
            repository.initialize()
            self.repository = repository

            self.contexts = resolve_contexts(self.parameters.contexts, repository.get_value_factory())
            self.logger.debug(f"Contexts: {self.parameters.contexts!r} -> {self.contexts}")
            self.action = Action.from_name(self.parameters.action)

            self.connection = repository.get_connection()
        except (ConfigurationError, RepositoryError) as e:
            self.logger.error(f"Transformer setup failed: {e}", exc_info=True)
            self.recycle()
            raise

        self.logger.info(
            f"Transformer set up: action='{self.parameters.action}', "
            f"repository='{self.parameters.repository_id}' at {self.parameters.server_url}"
        )

    def transform(self, document: Document) -> etree._ElementTree:
        """
        Perform the configured action for one input document.

        Args:
            document: Input document

        Returns:
            Response document; never raises for action failures

        Raises:
            RepositoryError: If ``setup`` has not completed
        """
        if self.connection is None or self.dispatcher is None:
            raise RepositoryError("Transformer has not been set up")

        return self.dispatcher.dispatch(
            self.action,
            document,
            self.parameters.base_uri,
            self.contexts,
            self.connection,
            action_name=self.parameters.action,
        )

    def recycle(self) -> None:
        """Release the connection and repository."""
        if self.connection is not None:
            try:
                self.connection.close()
            except RepositoryError as e:
                self.logger.warning(f"Error closing connection: {e}")
            finally:
                self.connection = None

        if self.repository is not None:
            try:
                self.repository.shut_down()
            except RepositoryError as e:
                self.logger.warning(f"Error shutting down repository: {e}")
            finally:
                self.repository = None

    def __enter__(self) -> "RDFTransformer":
        return self

    def __exit__(self, exc_type, exc_val, exc_tb) -> None:
        self.recycle()
