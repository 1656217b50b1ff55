from __future__ import annotations

OK = 0
ERR_RESOLUTION = 1
ERR_USAGE = 2
ERR_CONFIG = 10
ERR_STRUCTURE = 11
ERR_STATIC = 12
ERR_EXECUTION = 13
ERR_OUTPUT = 14
ERR_TIMEOUT = 124
ERR_INTERNAL = 99
