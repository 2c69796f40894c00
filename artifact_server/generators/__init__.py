"""Document generators for the supported artifact kinds."""

from .base import BaseGenerator, CamelModel, RenderConfig, merge_config
from .docx_generator import DOCXGenerator
from .pptx_generator import PPTXGenerator
from .xlsx_generator import XLSXGenerator

# One generator per downloadable document kind, in route registration order.
GENERATORS: list[BaseGenerator] = [
    XLSXGenerator(),
    PPTXGenerator(),
    DOCXGenerator(),
]

__all__ = [
    # Base classes
    "BaseGenerator",
    "CamelModel",
    "RenderConfig",
    "merge_config",
    # Generators
    "DOCXGenerator",
    "PPTXGenerator",
    "XLSXGenerator",
    "GENERATORS",
]
