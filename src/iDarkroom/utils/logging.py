"""Logging helpers shared by the iDarkroom modules."""

from __future__ import annotations

import logging

_ROOT_NAME = "iDarkroom"


def get_logger(name: str | None = None) -> logging.Logger:
    """Return the package logger, or a child of it when *name* is given.

    Library code never configures handlers; a :class:`logging.NullHandler` is
    attached to the root package logger so that applications embedding the
    engine stay silent until they opt in.
    """

    root = logging.getLogger(_ROOT_NAME)
    if not root.handlers:
        root.addHandler(logging.NullHandler())
    if not name:
        return root
    if name == _ROOT_NAME or name.startswith(_ROOT_NAME + "."):
        return logging.getLogger(name)
    return root.getChild(name)


__all__ = ["get_logger"]
