"""
=============================================================================
REQUEST HANDLERS
=============================================================================

    ┌─────────────────────────────────────────────────────────────────────┐
    │ StaticFileHandler   Pages and assets from the asset root            │
    │ JsonServiceHandler  /api/shipping/characters from the dataset root  │
    │ NotFoundHandler     The fixed 404 page                              │
    │                                                                      │
    │ FileLoader          Reads files for the handlers (injected)         │
    │ CharacterDataset    Loads and validates characters.json             │
    └─────────────────────────────────────────────────────────────────────┘

Wiring:

    loader = FileLoader(config.public_dir)
    not_found = NotFoundHandler(loader)
    static = StaticFileHandler(loader, not_found)
    api = JsonServiceHandler(CharacterDataset(config.data_dir), not_found)

=============================================================================
"""

from .base import Handler
from .files import FileLoader, ResourceNotFound
from .not_found import NotFoundHandler
from .static import StaticFileHandler
from .dataset import Character, CharacterDataset, DatasetError
from .json_service import JsonServiceHandler

__all__ = [
    "Handler",
    "FileLoader",
    "ResourceNotFound",
    "NotFoundHandler",
    "StaticFileHandler",
    "Character",
    "CharacterDataset",
    "DatasetError",
    "JsonServiceHandler",
]
