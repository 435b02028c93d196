"""Store configuration.

Reads VIZSTORE_* variables from the environment, after loading a .env file when
one exists. Constructor arguments to the storages stay the primary interface;
this only covers building a `Vizstore` for a deployment.
"""

import os
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv

BACKENDS = ("sqlite", "memory")


class StoreConfig:
    def __init__(self, env_file: Optional[Union[str, Path]] = None) -> None:
        path = Path(env_file) if env_file else Path.cwd() / ".env"
        if path.exists():
            # real environment variables win over the file
            load_dotenv(dotenv_path=path, override=False)

    @property
    def backend(self) -> str:
        backend = os.getenv("VIZSTORE_BACKEND", "sqlite").strip().lower()
        if backend not in BACKENDS:
            raise ValueError(
                f"VIZSTORE_BACKEND must be one of {', '.join(BACKENDS)}, got '{backend}'"
            )
        return backend

    @property
    def sqlite_path(self) -> str:
        return os.getenv("VIZSTORE_SQLITE_PATH", "vizstore.db")

    @property
    def timeout(self) -> Optional[float]:
        """Default per-operation timeout in seconds; unset means none."""
        value = os.getenv("VIZSTORE_TIMEOUT", "").strip()
        if not value:
            return None
        try:
            timeout = float(value)
        except ValueError:
            raise ValueError(f"VIZSTORE_TIMEOUT must be a number, got '{value}'")
        if timeout <= 0:
            raise ValueError("VIZSTORE_TIMEOUT must be positive")
        return timeout
