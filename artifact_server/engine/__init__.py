"""Generation engine -- validate, render, store and sign artifacts.

Public API::

    from artifact_server.engine import GenerationPipeline, GenerationResult
"""

from artifact_server.engine.pipeline import GenerationPipeline, GenerationResult

__all__ = [
    "GenerationPipeline",
    "GenerationResult",
]
