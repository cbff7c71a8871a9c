"""Video contact sheet generator."""


from typing import TYPE_CHECKING, Any

__all__ = ["AppConfig", "load_config", "process_file", "process_paths"]

if TYPE_CHECKING:  # pragma: no cover - for static type checkers only
    from .config import AppConfig, load_config
    from .pipeline import process_file, process_paths


def __getattr__(name: str) -> Any:
    if name in ("AppConfig", "load_config"):
        from .config import AppConfig as _AppConfig, load_config as _load_config

        globals().update({"AppConfig": _AppConfig, "load_config": _load_config})
        return globals()[name]
    if name in ("process_file", "process_paths"):
        from .pipeline import process_file as _process_file, process_paths as _process_paths

        globals().update({"process_file": _process_file, "process_paths": _process_paths})
        return globals()[name]
    raise AttributeError(f"module {__name__!r} has no attribute {name!r}")
