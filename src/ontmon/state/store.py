"""Durable per-device state store.

This is the only component allowed to read or write the state file. The
whole mapping is loaded once at startup and rewritten after every cycle.
"""

from __future__ import annotations

import json
import logging
import os
import stat
import tempfile
from collections.abc import Mapping
from pathlib import Path
from typing import Any

from pydantic import ValidationError

from ontmon.models.state import DeviceState

_logger = logging.getLogger(__name__)


def _dump_states(states: Mapping[str, DeviceState]) -> str:
    document = {device_id: state.model_dump(mode="json", by_alias=True) for device_id, state in states.items()}
    return json.dumps(document, indent=2, ensure_ascii=False) + "\n"


def _existing_mode(path: Path) -> int:
    """Permission bits to give the rewritten file: the current file's, else umask default."""
    try:
        return stat.S_IMODE(path.stat().st_mode)
    except FileNotFoundError:
        umask = os.umask(0)
        os.umask(umask)
        return 0o666 & ~umask


def _parse_states(document: Any) -> dict[str, DeviceState]:
    if not isinstance(document, dict):
        raise ValueError(f"state document must be an object, got {type(document).__name__}")

    states: dict[str, DeviceState] = {}
    for device_id, entry in document.items():
        try:
            states[str(device_id)] = DeviceState.model_validate(entry)
        except ValidationError as exc:
            _logger.warning("Skipping invalid state entry for %s: %s", device_id, exc.errors()[:1])
    return states


class StateStore:
    """In-memory mapping of device id to :class:`DeviceState`, backed by a JSON file.

    Load and save failures are logged and never raised: an unreadable file
    behaves like an empty one, and an unwritable one leaves the in-memory
    mapping authoritative until the next successful save.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)
        self._states: dict[str, DeviceState] = {}

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> dict[str, DeviceState]:
        """Replace the in-memory mapping with the file contents and return a copy."""
        self._states = {}
        if not self._path.exists():
            _logger.info("No state file at %s; starting with empty state", self._path)
            return self.snapshot()

        try:
            document = json.loads(self._path.read_text(encoding="utf-8"))
            self._states = _parse_states(document)
        except (OSError, ValueError) as exc:
            _logger.error("Failed to load device state from %s: %s", self._path, exc)
            self._states = {}
        else:
            _logger.info("Loaded state for %d devices from %s", len(self._states), self._path)
        return self.snapshot()

    def save(self, states: Mapping[str, DeviceState] | None = None) -> bool:
        """Write the entire mapping to disk, replacing the file.

        When *states* is given it first replaces the in-memory mapping.
        Returns ``False`` if the write failed.
        """
        if states is not None:
            self._states = dict(states)

        text = _dump_states(self._states)
        tmp_name: str | None = None
        try:
            self._path.parent.mkdir(parents=True, exist_ok=True)
            mode = _existing_mode(self._path)
            with tempfile.NamedTemporaryFile(
                "w",
                encoding="utf-8",
                dir=self._path.parent,
                prefix=f".{self._path.name}.",
                suffix=".tmp",
                delete=False,
            ) as handle:
                tmp_name = handle.name
                handle.write(text)
            os.chmod(tmp_name, mode)
            os.replace(tmp_name, self._path)
        except OSError as exc:
            _logger.error("Failed to save device state to %s: %s", self._path, exc)
            if tmp_name is not None:
                Path(tmp_name).unlink(missing_ok=True)
            return False
        return True

    def get(self, device_id: str) -> DeviceState | None:
        return self._states.get(device_id)

    def put(self, device_id: str, state: DeviceState) -> None:
        self._states[device_id] = state

    def snapshot(self) -> dict[str, DeviceState]:
        # DeviceState is frozen, so a shallow copy of the mapping is enough.
        return dict(self._states)

    def __len__(self) -> int:
        return len(self._states)

    def __contains__(self, device_id: object) -> bool:
        return device_id in self._states
