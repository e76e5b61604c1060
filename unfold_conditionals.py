#!/usr/bin/env python3
"""Command-line entry point for unfolding conditionals in JavaScript sources."""

from __future__ import annotations

import sys

from unternary.cli import main


if __name__ == "__main__":  # pragma: no cover
    sys.exit(main())
