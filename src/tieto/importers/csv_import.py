"""
CSV importer - turn each CSV row into a markdown document with frontmatter.

Each row becomes `{uuid}.md` in the output directory:

    ---
    strain: "Northern Lights"
    type: "indica"
    rating: 4.5
    flavors: ["Earthy", "Pine"]
    ---

    # Northern Lights

    ## Description
    ...

A readable symlink such as `northern_lights:~:indica:~:4.5.md` points at
the generated file. The output is ready for `tieto ingest`.
"""

import csv
import json
import logging
import os
import re
import uuid
from dataclasses import dataclass, field
from pathlib import Path
from typing import Dict, List, Optional, Sequence


logger = logging.getLogger(__name__)

DEFAULT_COLUMNS = ("Strain", "Type", "Rating", "Effects", "Flavor", "Description")
SYMLINK_SEPARATOR = ":~:"


@dataclass
class CsvImportConfig:
    """
    Column mapping for the importer.

    Attributes:
        columns: Column names, in file order
        title_column: Column used as document title and symlink name
        type_column: Column used as second symlink segment
        rating_column: Numeric column (stored as float)
        list_columns: Comma-separated columns -> frontmatter key
        description_column: Column written to the markdown body
        create_symlinks: Whether to create readable symlinks
    """
    columns: Sequence[str] = DEFAULT_COLUMNS
    title_column: str = "Strain"
    type_column: str = "Type"
    rating_column: str = "Rating"
    list_columns: Dict[str, str] = field(
        default_factory=lambda: {"Flavor": "flavors", "Effects": "effects"}
    )
    description_column: str = "Description"
    create_symlinks: bool = True


@dataclass
class CsvImportResult:
    """Files written by one import."""
    documents: List[Path] = field(default_factory=list)
    symlinks: List[Path] = field(default_factory=list)
    symlink_failures: List[str] = field(default_factory=list)

    @property
    def count(self) -> int:
        return len(self.documents)


def slugify(text: Optional[str]) -> str:
    """Lowercase, underscores for whitespace, drop non-word characters."""
    if not text:
        return "unknown"
    slug = str(text).lower().strip()
    slug = re.sub(r"\s+", "_", slug)
    slug = re.sub(r"[^\w\-]+", "", slug)
    slug = re.sub(r"\-\-+", "_", slug)
    return slug or "unknown"


def symlink_name(row: Dict[str, str], config: CsvImportConfig) -> str:
    """Readable name, e.g. `northern_lights:~:indica:~:5.md`."""
    parts = [
        slugify(row.get(config.title_column)),
        slugify(row.get(config.type_column)),
        slugify(row.get(config.rating_column)),
    ]
    return SYMLINK_SEPARATOR.join(parts) + ".md"


def _to_float(value: Optional[str]) -> float:
    try:
        return float(value)
    except (TypeError, ValueError):
        return 0.0


def _split_list(value: Optional[str]) -> List[str]:
    if not value:
        return []
    return [item.strip() for item in value.split(",") if item.strip()]


def build_frontmatter(row: Dict[str, str], config: CsvImportConfig) -> Dict[str, object]:
    """Structured, filterable fields of a row."""
    frontmatter = {
        slugify(config.title_column): row.get(config.title_column) or "",
        slugify(config.type_column): row.get(config.type_column) or "",
        slugify(config.rating_column): _to_float(row.get(config.rating_column)),
    }
    for column, key in config.list_columns.items():
        frontmatter[key] = _split_list(row.get(column))
    return frontmatter


def render_document(row: Dict[str, str], config: CsvImportConfig) -> str:
    """Markdown document with frontmatter for one row."""
    frontmatter = build_frontmatter(row, config)
    # JSON scalars and arrays are valid YAML flow values
    header = "\n".join(f"{key}: {json.dumps(value, ensure_ascii=False)}" for key, value in frontmatter.items())
    title = row.get(config.title_column) or "Untitled"
    description = row.get(config.description_column) or "No description available."
    return f"---\n{header}\n---\n\n# {title}\n\n## Description\n{description}\n"


def process_csv(
    csv_path,
    output_dir,
    config: Optional[CsvImportConfig] = None,
) -> CsvImportResult:
    """
    Write one markdown document per CSV row.

    The first row is treated as a header and skipped; columns are taken
    from the config in order.

    Args:
        csv_path: Input CSV file
        output_dir: Directory for generated documents (created if missing)
        config: Column mapping

    Returns:
        CsvImportResult listing the files written
    """
    config = config or CsvImportConfig()
    output = Path(output_dir)
    output.mkdir(parents=True, exist_ok=True)
    result = CsvImportResult()

    logger.info(f"Starting processing of {csv_path}...")

    with open(csv_path, "r", encoding="utf-8", newline="") as f:
        reader = csv.reader(f)
        next(reader, None)
        for values in reader:
            if not any(v.strip() for v in values):
                continue
            row = dict(zip(config.columns, values))

            filename = f"{uuid.uuid4()}.md"
            document_path = output / filename
            document_path.write_text(render_document(row, config), encoding="utf-8")
            result.documents.append(document_path)

            if config.create_symlinks:
                link_path = output / symlink_name(row, config)
                try:
                    os.symlink(filename, link_path)
                    result.symlinks.append(link_path)
                except OSError as e:
                    logger.error(
                        f"Could not create symlink {link_path.name}. "
                        f"It might already exist or the system restricts it: {e}"
                    )
                    result.symlink_failures.append(link_path.name)

    logger.info(f"Processed {result.count} rows into {output}")
    return result
