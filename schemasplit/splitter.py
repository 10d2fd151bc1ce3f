"""Split consolidated contract schema documents into per-message files.

A contract schema generator writes one consolidated JSON document per
contract, shaped roughly like::

    {
      "contract_name": "eris-hub",
      "instantiate": {...},
      "execute": {...},
      "query": {...},
      "migrate": {...},
      "responses": {"config": {...}, "state": {...}}
    }

:func:`process` turns that into ``eris_hub_instantiate.json``,
``eris_hub_execute.json``, ..., ``eris_hub_config.json``,
``eris_hub_state.json`` next to the original and then deletes the original.

Reading is forgiving and writing is not: anything that fails while reading,
parsing or recognising a document just means "not a schema document" and the
file is left alone, while a failed write or delete raises
:class:`SplitWriteError` so the caller can abort the run.
"""

from __future__ import annotations

import json
from dataclasses import dataclass, field
from pathlib import Path
from typing import Any, Callable, Optional

from pydantic import BaseModel, ConfigDict, Field, ValidationError

from .utils.logging import get_logger

logger = get_logger(__name__)

MESSAGE_KINDS: tuple[str, ...] = ("instantiate", "execute", "query", "migrate")


# ---------------------------------------------------------------------------
# Errors
# ---------------------------------------------------------------------------


class SplitError(Exception):
    """Base class for schema split failures."""


class SplitWriteError(SplitError):
    """Writing a split file or deleting the consolidated original failed."""

    def __init__(self, path: Path, reason: str) -> None:
        self.path = Path(path)
        self.reason = reason
        super().__init__(f"{self.path}: {reason}")


# ---------------------------------------------------------------------------
# Models
# ---------------------------------------------------------------------------


class ConsolidatedSchema(BaseModel):
    """The fields of a consolidated schema document that the splitter reads.

    Every other field is kept as an extra and ignored.
    """

    model_config = ConfigDict(extra="allow")

    contract_name: str = Field(min_length=1)
    instantiate: Any = None
    execute: Any = None
    query: Any = None
    migrate: Any = None
    responses: Any = None

    def fragments(self) -> list[tuple[str, Any]]:
        """(field name, schema fragment) pairs to write, in output order."""
        out: list[tuple[str, Any]] = []
        for kind in MESSAGE_KINDS:
            value = getattr(self, kind)
            if value is not None:
                out.append((kind, value))
        if isinstance(self.responses, dict):
            for name, value in self.responses.items():
                if value is not None:
                    out.append((name, value))
        return out


@dataclass
class SplitResult:
    """Outcome of splitting one consolidated document."""

    source: Path
    contract_name: str
    written: list[Path] = field(default_factory=list)


# ---------------------------------------------------------------------------
# Operations
# ---------------------------------------------------------------------------


def output_name(contract_name: str, field_name: str) -> str:
    """File name for one fragment: hyphens in the contract name become underscores."""
    return f"{contract_name.replace('-', '_')}_{field_name}.json"


def _reject_constant(token: str) -> Any:
    # NaN and Infinity are accepted by json.loads but are not JSON.
    raise ValueError(f"invalid JSON constant {token!r}")


def load_schema(path: Path) -> Optional[ConsolidatedSchema]:
    """Read *path* as a consolidated schema document, or return None.

    Never raises for a bad input file: unreadable files, invalid JSON,
    non-object JSON, JSON nested too deeply to decode and objects
    without ``contract_name`` all return None.
    """
    path = Path(path)
    try:
        data = json.loads(path.read_bytes(), parse_constant=_reject_constant)
    except (OSError, ValueError, RecursionError) as exc:
        logger.debug(f"Skipping {path}: {type(exc).__name__}: {exc}")
        return None

    if not isinstance(data, dict) or "contract_name" not in data:
        logger.debug(f"Skipping {path}: not a consolidated schema document")
        return None

    try:
        return ConsolidatedSchema.model_validate(data)
    except ValidationError as exc:
        logger.debug(f"Skipping {path}: invalid contract_name ({exc.error_count()} error(s))")
        return None


def emit(directory: Path, contract_name: str, field_name: str, value: Any) -> Path:
    """Write *value* as compact JSON to its split file and return the path.

    An existing file at that path is overwritten.
    """
    out_path = Path(directory) / output_name(contract_name, field_name)
    data = json.dumps(value, separators=(",", ":"), ensure_ascii=False)
    try:
        out_path.write_text(data, encoding="utf-8")
    except OSError as exc:
        logger.error(f"Failed to write {out_path}: {exc}")
        raise SplitWriteError(out_path, f"write failed: {exc}") from exc
    logger.info(f"Wrote {out_path}")
    return out_path


def process(
    path: Path,
    on_emit: Optional[Callable[[Path], None]] = None,
    dry_run: bool = False,
) -> Optional[SplitResult]:
    """Split one ``.json`` file if it is a consolidated schema document.

    Args:
        path: A file whose name ends in ``.json``.
        on_emit: Called with each split file path after it is written.
        dry_run: Report the files that would be written without writing
            them or deleting the original.

    Returns:
        None when the file is not a consolidated schema document (it is left
        untouched), otherwise a :class:`SplitResult`.

    Raises:
        SplitWriteError: a split file could not be written or the original
            could not be deleted.
    """
    path = Path(path)
    schema = load_schema(path)
    if schema is None:
        return None

    result = SplitResult(source=path, contract_name=schema.contract_name)
    for field_name, value in schema.fragments():
        if dry_run:
            out_path = path.parent / output_name(schema.contract_name, field_name)
        else:
            out_path = emit(path.parent, schema.contract_name, field_name, value)
        result.written.append(out_path)
        if on_emit is not None:
            on_emit(out_path)

    if dry_run:
        return result

    try:
        path.unlink()
    except OSError as exc:
        logger.error(f"Failed to delete {path}: {exc}")
        raise SplitWriteError(path, f"delete failed: {exc}") from exc
    logger.info(f"Split {path} ({schema.contract_name}) into {len(result.written)} file(s)")
    return result
