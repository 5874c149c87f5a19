"""Runtime composition and listener host."""

from scionsim.runtime.compose import compile_config, compose, start_runtime
from scionsim.runtime.runtime import RuntimeSpec, ScionSimRuntime

__all__ = [
    "RuntimeSpec",
    "ScionSimRuntime",
    "compile_config",
    "compose",
    "start_runtime",
]
