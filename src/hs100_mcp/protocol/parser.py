"""Response decoding and leaf extraction."""

from __future__ import annotations

import json
import logging
from typing import Any

from ..errors import AbsentError, DeviceError, ProtocolError
from ..models.response import LEAF_TYPES, MODULES, ResponseDocument
from ..models.status import Status

logger = logging.getLogger(__name__)


def _decode_leaf(module: str, action: str, data: Any, leaf_cls: type[Status]) -> Status:
    if not isinstance(data, dict):
        raise ProtocolError(
            f"'{module}.{action}' is {type(data).__name__}, expected an object"
        )
    try:
        return leaf_cls.from_dict(data)
    except (TypeError, ValueError) as e:
        raise ProtocolError(f"Malformed '{module}.{action}' entry: {e}") from e


def decode_response(text: str | bytes) -> ResponseDocument:
    """Parse reply text into a :class:`ResponseDocument`.

    Raises:
        ProtocolError: If the text is not UTF-8 JSON shaped as
            ``{module: {action: {...}}}``.
    """
    if isinstance(text, bytes):
        try:
            text = text.decode("utf-8")
        except UnicodeDecodeError as e:
            raise ProtocolError(f"Response is not valid UTF-8: {e}") from e

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ProtocolError(f"Response is not valid JSON: {e}") from e

    if not isinstance(data, dict):
        raise ProtocolError(
            f"Response document is {type(data).__name__}, expected an object"
        )

    document = ResponseDocument(raw=data)
    for module, actions in data.items():
        if not isinstance(actions, dict):
            raise ProtocolError(
                f"Module '{module}' is {type(actions).__name__}, expected an object"
            )
        if module not in MODULES:
            logger.debug("Keeping unmodelled module %r as raw data", module)
            continue

        attr, branch_cls = MODULES[module]
        branch = getattr(document, attr) or branch_cls()
        for action, leaf in actions.items():
            leaf_cls = LEAF_TYPES[attr].get(action)
            if leaf_cls is None:
                continue
            setattr(branch, action, _decode_leaf(module, action, leaf, leaf_cls))
        setattr(document, attr, branch)

    return document


def extract_leaf(document: ResponseDocument, module: str, action: str) -> Status:
    """Return the ``module.action`` leaf or raise :class:`AbsentError`."""
    leaf = document.leaf(module, action)
    if leaf is None:
        raise AbsentError(module, action)
    return leaf


def check_leaf(document: ResponseDocument, module: str, action: str) -> Status:
    """Extract a leaf and raise :class:`DeviceError` if its err_code is nonzero."""
    leaf = extract_leaf(document, module, action)
    if not leaf.ok:
        raise DeviceError(leaf.err_code, leaf.err_msg, module, action)
    return leaf
