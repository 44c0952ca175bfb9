from .action_dispatcher import ActionDispatcher
from .rdf_transformer import RDFTransformer
from .response_builder import success_response, error_response

__all__ = [
    'ActionDispatcher',
    'RDFTransformer',
    'success_response',
    'error_response',
]
