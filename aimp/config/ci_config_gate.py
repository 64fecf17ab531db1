#!/usr/bin/env python3
# =============================================================================
# AIMP v1.0.0 -- CONFIG CI GATE
# File:   aimp/config/ci_config_gate.py
# =============================================================================
#
# PURPOSE
# -------
# CI enforcement script. Loads the shipped TRUST_MANIFEST.json, validates it,
# and checks that it is value-identical to the built-in defaults in
# aimp.utils.constants. Exits with code 0 (PASS) or 1 (FAIL / ERROR).
#
# Intended for CI integration:
#   python -m aimp.config.ci_config_gate [path/to/manifest.json]
#
# No I/O beyond reading the manifest and writing stdout/stderr.
# =============================================================================

from __future__ import annotations

import sys
from typing import List, Optional

from aimp.config.exceptions import ConfigError
from aimp.config.loader import DEFAULT_MANIFEST_PATH, load_engine_config
from aimp.config.settings import DEFAULT_ENGINE_CONFIG


def main(argv: Optional[List[str]] = None) -> int:
    """
    Validate a manifest and compare it with the built-in defaults.

    Returns:
        0 if the manifest loads and equals the defaults.
        1 on any ConfigError or mismatch.
    """
    args = sys.argv[1:] if argv is None else argv
    path = args[0] if args else str(DEFAULT_MANIFEST_PATH)

    try:
        loaded = load_engine_config(path)
    except ConfigError as exc:
        print(f"CI-CONFIG-GATE ERROR: {exc.message}", file=sys.stderr)
        return 1

    if loaded.config != DEFAULT_ENGINE_CONFIG:
        print(
            f"CI-CONFIG-GATE: manifest {loaded.source} diverges from "
            f"aimp.utils.constants. Merge BLOCKED.",
            file=sys.stderr,
        )
        return 1

    print(f"CI-CONFIG-GATE: manifest valid (sha256={loaded.content_hash}). Merge permitted.")
    return 0


if __name__ == "__main__":
    sys.exit(main())
