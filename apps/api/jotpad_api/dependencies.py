from functools import lru_cache

from jotpad_api.config import load_settings
from jotpad_api.storage.sql import SqlNoteRepository

@lru_cache()
def get_settings():
    return load_settings()

@lru_cache()
def get_repository():
    settings = get_settings()
    return SqlNoteRepository.from_url(settings.database_url)
