from __future__ import annotations

from dataclasses import dataclass

from .emotions.service import EmotionService
from .storage.factory import StorageSettings, create_store
from .storage.repository import EmotionStore


@dataclass(frozen=True)
class Container:
    """Process-wide dependencies, built once at startup and passed explicitly."""

    store: EmotionStore
    emotion_service: EmotionService


def build_container(*, settings: StorageSettings, store: EmotionStore | None = None) -> Container:
    store = store or create_store(settings)
    return Container(store=store, emotion_service=EmotionService(store))
