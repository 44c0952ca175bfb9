from .config_loader import (
    TransformerConfig, TransformParameters, ConfigurationError,
    resolve_parameters, configure_logging, DEFAULT_SERVER_URL
)

__all__ = [
    'TransformerConfig',
    'TransformParameters',
    'ConfigurationError',
    'resolve_parameters',
    'configure_logging',
    'DEFAULT_SERVER_URL',
]
