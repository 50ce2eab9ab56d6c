"""Shared constants."""

from __future__ import annotations

# Prefix for synthetic array-item keys.  Kept out of plausible user input.
DEFAULT_ID_PREFIX = "fs_"

# Number of random bytes per synthetic key (hex encoded, so twice as many chars).
ID_TOKEN_BYTES = 8

ENV_MODE = "FORMSYNC_MODE"
ENV_REVALIDATE_MODE = "FORMSYNC_REVALIDATE_MODE"
ENV_SHOULD_UNREGISTER = "FORMSYNC_SHOULD_UNREGISTER"
ENV_ID_PREFIX = "FORMSYNC_ID_PREFIX"
