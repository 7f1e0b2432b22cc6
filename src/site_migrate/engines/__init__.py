"""Built-in migration engines, one per source generator."""

from .gatsby import GatsbyEngine
from .eleventy import EleventyEngine
from .metalsmith import MetalsmithEngine
from .bridgetown import BridgetownEngine
from .jigsaw import JigsawEngine
from .octopress import OctopressEngine
from .slate import SlateEngine
from .middleman import MiddlemanEngine
from .pelican import PelicanEngine
from .nikola import NikolaEngine
from .mkdocs import MkDocsEngine
from .hugo import HugoEngine
from .zola import ZolaEngine
from .nanoc import NanocEngine

# Detection order: specific marker files first, generic heuristics last
ENGINE_CLASSES = [
    GatsbyEngine,
    EleventyEngine,
    MetalsmithEngine,
    BridgetownEngine,
    JigsawEngine,
    OctopressEngine,
    SlateEngine,
    MiddlemanEngine,
    PelicanEngine,
    NikolaEngine,
    MkDocsEngine,
    HugoEngine,
    ZolaEngine,
    NanocEngine,
]

__all__ = [cls.__name__ for cls in ENGINE_CLASSES] + ['ENGINE_CLASSES']
