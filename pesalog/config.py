"""YAML configuration loader for pesalog.

Loads the seed config files from the config/ directory:
  sources.yaml   which inbox senders to read and how many messages
  failures.yaml  extra phrases that mark a failed transaction
"""

from pathlib import Path

import yaml

DEFAULT_SENDERS = ["MPESA"]
DEFAULT_MAX_COUNT = 100


class Config:
    """Loads and provides access to all YAML configuration files."""

    def __init__(self, config_dir: Path | str = "config"):
        self.config_dir = Path(config_dir)
        if not self.config_dir.is_dir():
            raise FileNotFoundError(f"Config directory not found: {self.config_dir}")

        self._sources: dict | None = None
        self._failures: dict | None = None

    def _load(self, filename: str) -> dict | list:
        path = self.config_dir / filename
        if not path.exists():
            raise FileNotFoundError(f"Config file not found: {path}")
        with open(path) as f:
            try:
                data = yaml.safe_load(f)
            except yaml.YAMLError as e:
                raise ValueError(f"Invalid YAML in {path}: {e}") from e
        if data is None:
            raise ValueError(f"Empty config file: {path}")
        return data

    @property
    def sources(self) -> dict:
        if self._sources is None:
            data = self._load("sources.yaml")
            if not isinstance(data, dict):
                raise ValueError("sources.yaml must be a mapping")
            self._sources = data
        return self._sources

    @property
    def failures(self) -> dict:
        if self._failures is None:
            data = self._load("failures.yaml")
            # A bare list of phrases is accepted as shorthand
            self._failures = data if isinstance(data, dict) else {"phrases": data}
        return self._failures

    @property
    def senders(self) -> list[str]:
        """Inbox sender addresses whose messages are parsed. Default: ['MPESA']."""
        senders = self.sources.get("senders") or DEFAULT_SENDERS
        return [str(s) for s in senders if s]

    @property
    def max_count(self) -> int:
        """Maximum messages read from one export. Default: 100."""
        value = self.sources.get("max_count", DEFAULT_MAX_COUNT)
        try:
            value = int(value)
        except (TypeError, ValueError) as e:
            raise ValueError(f"max_count must be an integer, got {value!r}") from e
        if value < 1:
            raise ValueError(f"max_count must be positive, got {value}")
        return value

    @property
    def failure_phrases(self) -> list[str]:
        """Extra failed-transaction phrases, on top of the built-in patterns."""
        phrases = self.failures.get("phrases") or []
        return [str(p) for p in phrases if p]
