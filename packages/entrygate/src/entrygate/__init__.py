__version__ = "0.1.0"

__all__ = [
    "__version__",
    "checks",
    "cli",
    "config",
    "core",
    "dispatcher",
    "errors",
    "execution",
    "exit_codes",
    "rules",
    "scanner",
    "verifier",
]
