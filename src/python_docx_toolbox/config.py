"""
Runtime configuration threaded through every operation.

There is no process-wide state: the working directory, scratch location and
output mode travel in a ``ToolboxConfig`` value handed to each component.
"""

import os
import tempfile
from dataclasses import dataclass, field
from pathlib import Path

from .errors import InputError

# Environment variable overriding where scratch extractions are created
SCRATCH_DIR_ENV = "DOCX_TOOLBOX_SCRATCH_DIR"

# Environment variable seeding the lorem ipsum generator
LOREM_SEED_ENV = "DOCX_TOOLBOX_LOREM_SEED"


@dataclass
class ToolboxConfig:
    """Settings for a single invocation.

    Attributes:
        working_directory: Base for relative paths and user-visible extractions
        scratch_root: Directory receiving disposable working extractions
        as_json: Render structured output as JSON instead of plain text
        lorem_seed: Seed for filler text generation (None for random)
    """

    working_directory: Path = field(default_factory=Path.cwd)
    scratch_root: Path = field(default_factory=lambda: Path(tempfile.gettempdir()))
    as_json: bool = False
    lorem_seed: int | None = None

    @classmethod
    def from_env(cls, **overrides) -> "ToolboxConfig":
        """Build a configuration from environment variables.

        Keyword arguments take precedence over the environment.

        Raises:
            InputError: If ``DOCX_TOOLBOX_LOREM_SEED`` is set but is not an integer
        """
        config = cls()

        scratch = os.environ.get(SCRATCH_DIR_ENV)
        if scratch:
            config.scratch_root = Path(scratch)

        seed = os.environ.get(LOREM_SEED_ENV)
        if seed:
            try:
                config.lorem_seed = int(seed)
            except ValueError:
                raise InputError(f"{LOREM_SEED_ENV} must be an integer, got {seed!r}") from None

        for key, value in overrides.items():
            setattr(config, key, value)

        return config

    def resolve_path(self, value: str | Path) -> Path:
        """Resolve a path relative to the working directory."""
        path = Path(value).expanduser()
        if not path.is_absolute():
            path = self.working_directory / path
        return path
