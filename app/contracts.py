"""JSON Schema contracts for the manifest, icon models and theme descriptors.

Schemas live in ``contracts/schemas/`` at the project root and are loaded
once per process.
"""

import json
from functools import lru_cache
from pathlib import Path

import jsonschema

_CONTRACTS_DIR = Path(__file__).resolve().parent.parent / "contracts" / "schemas"

ASSET_MANIFEST_SCHEMA = "AssetManifest.v1.json"
ICON_MODEL_SCHEMA = "IconModel.v1.json"
ICON_THEME_SCHEMA = "IconTheme.v1.json"
COLOR_THEME_SCHEMA = "ColorTheme.v1.json"


@lru_cache(maxsize=None)
def load_schema(name: str) -> dict:
    """Return the parsed schema file *name* from the contracts directory."""
    return json.loads((_CONTRACTS_DIR / name).read_text(encoding="utf-8"))


def validate_contract(instance: object, name: str) -> None:
    """Validate *instance* against schema *name*.

    Raises:
        jsonschema.ValidationError: On the first violation found.
    """
    jsonschema.validate(instance=instance, schema=load_schema(name))


def contract_errors(instance: object, name: str) -> list[str]:
    """Return every violation of schema *name* as a readable message.

    Messages are ordered by the JSON path of the offending value so output is
    stable across runs.
    """
    validator = jsonschema.Draft202012Validator(load_schema(name))
    errors = sorted(validator.iter_errors(instance), key=lambda e: list(map(str, e.absolute_path)))
    messages = []
    for err in errors:
        location = "/".join(str(p) for p in err.absolute_path)
        messages.append(f"{location}: {err.message}" if location else err.message)
    return messages
