# -*- coding: utf-8 -*-
"""Defaults shared by the command-line tools (overridable via environment)."""

import os

DEFAULT_CURVE = os.environ.get("KUIBE_CURVE", "SS512")
KEYS_DIR = os.environ.get("KUIBE_KEYS_DIR", "keys")
DEFAULT_ETA = os.environ.get("KUIBE_ETA", "kuibe/v1")

PARAMS_FILE = os.path.join(KEYS_DIR, "params.json")
MSK_FILE = os.path.join(KEYS_DIR, "msk.json")
STORE_DIR = os.path.join(KEYS_DIR, "store")
