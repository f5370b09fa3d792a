# Story registry package
from .story_registry import StoryRegistry
from .models import Currency, Milestone, RegistrySettings, Royalty, Token, TransferIntent
from .errors import ErrorCategory, ErrorKind, ErrorResponse, registry_error
from .owner_index import OwnerIndex
from .logger import EventLogger
from .host import RegistryHost
from .checkpoint import save_checkpoint, load_checkpoint, restore_registry

__all__ = [
    "StoryRegistry",
    "Currency", "Milestone", "RegistrySettings", "Royalty", "Token", "TransferIntent",
    "ErrorCategory", "ErrorKind", "ErrorResponse", "registry_error",
    "OwnerIndex",
    "EventLogger",
    "RegistryHost",
    "save_checkpoint", "load_checkpoint", "restore_registry",
]
