from __future__ import annotations
import json
import os
import uuid
from datetime import datetime, timezone
from typing import Dict, Optional

from loguru import logger

from .errors import StoreError
from .genome import canonical_json


def _ensure_parent(path: str) -> None:
    os.makedirs(os.path.dirname(path) or ".", exist_ok=True)


def save_recipe_json(recipe: str, path: str, meta: Optional[Dict] = None) -> None:
    """Save a serialized genome + optional metadata as readable JSON."""
    payload = {"recipe": json.loads(recipe), "meta": meta or {}}
    _ensure_parent(path)
    with open(path, "w", encoding="utf-8") as f:
        json.dump(payload, f, ensure_ascii=False, indent=2, sort_keys=True)
    logger.info(f"Saved recipe to {path}")


def load_recipe_json(path: str) -> str:
    """
    Load a recipe saved by ``save_recipe_json`` (or a bare recipe object)
    and return it in serialized form, ignoring any metadata.
    """
    with open(path, "r", encoding="utf-8") as f:
        payload = json.load(f)
    if isinstance(payload, dict) and isinstance(payload.get("recipe"), dict):
        payload = payload["recipe"]
    return canonical_json(payload)


class ScoreLog:
    """Append-only JSON-lines log: one line per improving generation."""

    def __init__(self, path: str):
        self.path = path

    def append(self, generation: int, score: float, recipe: str) -> None:
        _ensure_parent(self.path)
        line = {
            "generation": generation,
            "score": score,
            "recipe": json.loads(recipe),
            "created_utc": datetime.now(timezone.utc).isoformat(),
        }
        with open(self.path, "a", encoding="utf-8") as f:
            f.write(json.dumps(line, sort_keys=True) + "\n")

    def read(self):
        if not os.path.exists(self.path):
            return []
        with open(self.path, "r", encoding="utf-8") as f:
            return [json.loads(line) for line in f if line.strip()]


class RecipeStore:
    """
    Key/value store of winning recipes in a single JSON file. Entries are
    ``{name, recipe, score}`` keyed by an opaque id.
    """

    def __init__(self, path: str):
        self.path = path

    def _read(self) -> Dict[str, Dict]:
        if not os.path.exists(self.path):
            return {}
        try:
            with open(self.path, "r", encoding="utf-8") as f:
                return json.load(f)
        except json.JSONDecodeError as e:
            raise StoreError(f"Recipe store {self.path} is corrupt: {e}") from e

    def save(self, name: str, recipe: str, score: float) -> str:
        entries = self._read()
        bot_id = uuid.uuid4().hex
        entries[bot_id] = {"name": name, "recipe": json.loads(recipe), "score": score}
        _ensure_parent(self.path)
        tmp_path = self.path + ".tmp"
        with open(tmp_path, "w", encoding="utf-8") as f:
            json.dump(entries, f, ensure_ascii=False, indent=2, sort_keys=True)
        os.replace(tmp_path, self.path)
        logger.debug(f"Stored {name} recipe as {bot_id} (score={score:.3f})")
        return bot_id

    def load(self, bot_id: str) -> str:
        entry = self._read().get(bot_id)
        if entry is None:
            raise StoreError(f"Bot not found: {bot_id}")
        return canonical_json(entry["recipe"])
