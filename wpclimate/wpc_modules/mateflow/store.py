"""File-backed workflow store.

One <flowName>.json file per workflow in a single directory. The
store keeps a name -> path index built from the file stems when it
is opened, and updates it on save and delete.
"""
from __future__ import annotations

import logging
import threading
from pathlib import Path

from pydantic import ValidationError
from returns.io import IOFailure, IOResult, IOSuccess
from returns.unsafe import unsafe_perform_io

from wpclimate.wpc_modules import io_ops
from wpclimate.wpc_modules.errors import ClimateError, ErrorType
from wpclimate.wpc_modules.mateflow.types import Workflow

logger = logging.getLogger(__name__)

FLOW_SUFFIX = ".json"


def _invalid_name(name: str) -> IOFailure:
    return IOFailure(
        ClimateError(
            source="mateflow.store",
            error_type=ErrorType.INVALID_FLOW_NAME,
            message=f"Invalid flow name: {name!r}",
            context={"name": name},
        ),
    )


def _not_found(name: str) -> IOFailure:
    return IOFailure(
        ClimateError(
            source="mateflow.store",
            error_type=ErrorType.FLOW_NOT_FOUND,
            message=f"There is no flow named {name}",
            context={"name": name},
        ),
    )


def validate_flow_name(name: str) -> IOResult[str, ClimateError]:
    """Reject names that are blank, padded or would escape the directory.

    The name is used unchanged as both the file stem and the index
    key, so it must already be in its final form.
    """
    if (
        not isinstance(name, str)
        or not name.strip()
        or name != name.strip()
        or name in {".", ".."}
        or "/" in name
        or "\\" in name
        or "\x00" in name
    ):
        return _invalid_name(name)
    return IOSuccess(name)


class MateFlowStore:
    """Persists workflows as JSON records."""

    def __init__(self, directory: Path, index: dict[str, Path]) -> None:
        self.directory = directory
        self._index = dict(index)
        self._lock = threading.RLock()

    @classmethod
    def open(cls, directory: Path) -> IOResult[MateFlowStore, ClimateError]:
        """Create the directory if needed and index the existing records."""
        return (
            io_ops.ensure_directory(directory)
            .bind(lambda d: io_ops.list_files(d, FLOW_SUFFIX))
            .map(lambda paths: cls(directory, {p.stem: p for p in paths}))
        )

    def list_names(self) -> list[str]:
        with self._lock:
            return sorted(self._index)

    def __contains__(self, name: object) -> bool:
        with self._lock:
            return name in self._index

    def save(self, workflow: Workflow) -> IOResult[Workflow, ClimateError]:
        """Write the workflow and index it under its name."""
        def _write(name: str) -> IOResult[Workflow, ClimateError]:
            path = self.directory / f"{name}{FLOW_SUFFIX}"
            with self._lock:
                result = io_ops.write_file(path, workflow.to_json())
                if isinstance(result, IOFailure):
                    return result
                self._index[name] = path
            logger.info("Saved flow %s to %s", name, path)
            return IOSuccess(workflow)

        return validate_flow_name(workflow.name).bind(_write)

    def load(self, name: str) -> IOResult[Workflow, ClimateError]:
        """Load a fresh Workflow instance from its record."""
        with self._lock:
            path = self._index.get(name)
        if path is None:
            return _not_found(name)

        def _parse(text: str) -> IOResult[Workflow, ClimateError]:
            try:
                return IOSuccess(Workflow.from_json(text))
            except ValidationError as exc:
                return IOFailure(
                    ClimateError(
                        source="mateflow.store",
                        error_type=ErrorType.FLOW_PARSE,
                        message=f"Cannot parse flow {name}: {exc.error_count()} error(s)",
                        context={"name": name, "path": str(path)},
                    ),
                )

        return io_ops.read_file(path).bind(_parse)

    def delete(self, name: str) -> IOResult[None, ClimateError]:
        """Remove the record and its index entry."""
        with self._lock:
            path = self._index.get(name)
            if path is None:
                return _not_found(name)
            result = io_ops.delete_file(path)
            if isinstance(result, IOFailure):
                error = unsafe_perform_io(result.failure())
                if error.error_type != "FileNotFoundError":
                    return result
            del self._index[name]
        logger.info("Deleted flow %s", name)
        return IOSuccess(None)

    def load_all(self) -> list[Workflow]:
        """Load every indexed flow, logging and skipping broken ones."""
        flows = []
        for name in self.list_names():
            result = self.load(name)
            if isinstance(result, IOFailure):
                logger.warning(
                    "Skipping flow %s: %s",
                    name, unsafe_perform_io(result.failure()),
                )
                continue
            flows.append(unsafe_perform_io(result.unwrap()))
        return flows
