"""Export JSON schemas for the HTTP contract models."""

import json
from pathlib import Path

from pydantic import BaseModel

from askdocs.models import ChatRequest, ChatResponse, StoredDocument, UploadedBlob

CONTRACT_MODELS: list[type[BaseModel]] = [ChatRequest, ChatResponse, StoredDocument, UploadedBlob]


def main() -> None:
    """Export schemas to docs/schemas/."""
    schemas_dir = Path("docs/schemas")
    schemas_dir.mkdir(parents=True, exist_ok=True)

    for model in CONTRACT_MODELS:
        # Wire names are camelCase
        schema = model.model_json_schema(by_alias=True)
        path = schemas_dir / f"{model.__name__}.schema.json"
        with open(path, "w") as f:
            json.dump(schema, f, indent=2)
        print(f"Exported {model.__name__} schema to {path}")


if __name__ == "__main__":
    main()
