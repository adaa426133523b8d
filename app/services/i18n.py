"""Locale bundle loader.

Bundles are JSON files under ``<locales_dir>/<lang>/<namespace>.json``.
They are read on first use and merged into an in-memory resource table
keyed by ``(lang, namespace)``. The same directory is mounted at
``/locales`` for browsers.
"""
from __future__ import annotations

import copy
import json
import logging
import os
import threading
from typing import Any, Dict, List, Optional

from app.core.settings import settings

logger = logging.getLogger("app.i18n")

SUPPORTED_LANGUAGES = ("en", "np")
FALLBACK_LANGUAGE = "en"
COMMON_NAMESPACE = "common"


def _deep_merge(target: dict, source: dict, overwrite: bool) -> dict:
    for key, value in source.items():
        if isinstance(value, dict) and isinstance(target.get(key), dict):
            _deep_merge(target[key], value, overwrite)
        elif overwrite or key not in target:
            target[key] = copy.deepcopy(value)
    return target


class TranslationStore:
    def __init__(self, locales_dir: str, supported_languages=SUPPORTED_LANGUAGES,
                 fallback_language: str = FALLBACK_LANGUAGE):
        self.locales_dir = locales_dir
        self.supported_languages = tuple(supported_languages)
        self.fallback_language = fallback_language
        self._resources: Dict[str, Dict[str, dict]] = {lang: {} for lang in self.supported_languages}
        self._loaded: set[tuple[str, str]] = set()
        self._lock = threading.Lock()

    def resolve_language(self, lang: Optional[str]) -> str:
        if lang and lang in self.supported_languages:
            return lang
        return self.fallback_language

    def _read_json(self, *parts: str) -> Optional[Any]:
        path = os.path.join(self.locales_dir, *parts)
        real = os.path.realpath(path)
        if not real.startswith(os.path.realpath(self.locales_dir) + os.sep):
            logger.warning(f"Refusing to read locale file outside locales dir: {path}")
            return None
        try:
            with open(real, "r", encoding="utf-8") as f:
                return json.load(f)
        except FileNotFoundError:
            logger.debug(f"Locale file not found: {path}")
        except (OSError, json.JSONDecodeError) as e:
            logger.error(f"Failed to load locale file {path}: {e}")
        return None

    def add_resource_bundle(self, lang: str, namespace: str, data: dict,
                            deep: bool = True, overwrite: bool = True) -> None:
        with self._lock:
            bundle = self._resources.setdefault(lang, {}).setdefault(namespace, {})
            if deep:
                _deep_merge(bundle, data, overwrite)
            else:
                for key, value in data.items():
                    if overwrite or key not in bundle:
                        bundle[key] = value

    def get_resource_bundle(self, lang: str, namespace: str) -> dict:
        return self._resources.get(lang, {}).get(namespace, {})

    def has_loaded(self, lang: str, namespace: str) -> bool:
        return (lang, namespace) in self._loaded

    def load_namespace(self, lang: str, namespace: str, *path_parts: str) -> Optional[Any]:
        """Read a bundle once and register it under ``namespace``; returns the raw JSON."""
        lang = self.resolve_language(lang)
        parts = path_parts or (f"{namespace}.json",)
        data = self._read_json(lang, *parts)
        if data is None:
            return None
        bundle = data if isinstance(data, dict) else {"items": data}
        self.add_resource_bundle(lang, namespace, bundle)
        self._loaded.add((lang, namespace))
        return data

    def load_common_translations(self, lang: str) -> dict:
        lang = self.resolve_language(lang)
        if not self.has_loaded(lang, COMMON_NAMESPACE):
            self.load_namespace(lang, COMMON_NAMESPACE)
        return self.get_resource_bundle(lang, COMMON_NAMESPACE)

    def load_manifesto_summary(self, lang: str) -> List[dict]:
        """Catalog items for ``lang``; ``manifesto.json`` backs up a missing summary."""
        lang = self.resolve_language(lang)
        for namespace, filename in (("manifesto-summary", "summary.json"), ("manifesto", "manifesto.json")):
            if self.has_loaded(lang, namespace):
                items = self._items(self.get_resource_bundle(lang, namespace))
            else:
                items = self._items(self.load_namespace(lang, namespace, filename))
            if items:
                return items
        return []

    def load_agenda_detail(self, lang: str, agenda_id: str) -> Optional[dict]:
        lang = self.resolve_language(lang)
        namespace = f"agenda-{agenda_id}"
        if self.has_loaded(lang, namespace):
            return self.get_resource_bundle(lang, namespace)
        data = self.load_namespace(lang, namespace, "agenda", f"{agenda_id}.json")
        return data if isinstance(data, dict) else None

    def translate(self, lang: str, key: str, namespace: str = COMMON_NAMESPACE, **params: Any) -> str:
        lang = self.resolve_language(lang)
        for candidate in (lang, self.fallback_language):
            if namespace == COMMON_NAMESPACE:
                self.load_common_translations(candidate)
            value: Any = self.get_resource_bundle(candidate, namespace)
            for part in key.split("."):
                value = value.get(part) if isinstance(value, dict) else None
            if isinstance(value, str):
                for name, param in params.items():
                    value = value.replace("{{" + name + "}}", str(param))
                return value
        return key

    def clear(self) -> None:
        with self._lock:
            self._resources = {lang: {} for lang in self.supported_languages}
            self._loaded.clear()

    @staticmethod
    def _items(data: Any) -> List[dict]:
        if isinstance(data, list):
            return data
        if isinstance(data, dict):
            for key in ("manifestoData", "items"):
                if isinstance(data.get(key), list):
                    return data[key]
        return []


_store: Optional[TranslationStore] = None


def get_translation_store() -> TranslationStore:
    global _store
    if _store is None:
        _store = TranslationStore(settings.locales_dir)
    return _store
