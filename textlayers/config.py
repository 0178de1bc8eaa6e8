# License: BSD3

"""
Configuration for the textlayers pipeline.

There are two layers here:

* environment-level `Settings` (pydantic-settings, `TEXTLAYERS_` prefix):
  where to find the model configuration file, which directories to search
  for model resources, where the WordNet dictionary lives, how chatty the
  logs should be;
* the model `Configuration` itself, a flat key/value YAML file naming a
  locator for each model (see the `*_KEY` constants below).  It is read
  once and frozen.
"""

from __future__ import annotations

import logging
import os
from functools import lru_cache
from pathlib import Path
from typing import Optional

import yaml
from frozendict import frozendict
from pydantic import AliasChoices, Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from textlayers.errors import ConfigurationError

logger = logging.getLogger(__name__)

# --- Configuration keys ---

SENTENCE_KEY = "sentence.model"
TOKENIZER_KEY = "tokenizer.model"
POS_KEY = "pos.model"
NAME_FORMAT_KEY = "namefinder.format"
NAME_TYPES_KEY = "namefinder.types"
PARSER_KEY = "parser.model"
COREF_KEY = "coref.dir"

DEFAULT_CONFIG_FILE = Path(__file__).parent / "models.yaml"


class Settings(BaseSettings):
    """
    Environment-level settings.

    Attributes:
        config_file (str | None): Model configuration file; the one shipped
            with the package is used when unset.
        model_path (str): `os.pathsep` separated directories searched (in
            order) for model resources, before falling back on the NLTK
            data path.
        wordnet_dir (str | None): WordNet dictionary used by the coreference
            linker. Also read from the `WNSEARCHDIR` variable.
        log_level (str): Logging level for the command line tools.
        charset (str): Default encoding of line-oriented input files.
    """

    config_file: Optional[str] = Field(None, description="Path to the model configuration YAML file.")
    model_path: str = Field(".", description="Model resource search path.")
    wordnet_dir: Optional[str] = Field(
        None,
        validation_alias=AliasChoices("TEXTLAYERS_WORDNET_DIR", "WNSEARCHDIR"),
        description="Directory holding the WordNet dictionary files.",
    )
    log_level: str = Field("INFO", description="The logging level (e.g., DEBUG, INFO, WARNING).")
    charset: str = Field("utf-8", description="Encoding of line-oriented input files.")

    model_config = SettingsConfigDict(
        env_prefix="TEXTLAYERS_",
        env_file=None,
        extra="ignore",
        populate_by_name=True,
    )

    def search_path(self) -> list[str]:
        """
        Return the model search path as a list of directories.
        """
        return [x for x in self.model_path.split(os.pathsep) if x]

    @field_validator("log_level")
    @classmethod
    def check_log_level(cls, v: str) -> str:
        """
        Normalise the log level and make sure `logging` knows it.
        """
        level = v.upper()
        if not isinstance(logging.getLevelName(level), int):
            msg = f"Unknown log level '{v}'"
            raise ValueError(msg)
        return level


@lru_cache(maxsize=1)
def get_settings() -> Settings:
    """
    Load the environment-level settings (once per process).
    """
    settings = Settings()
    logger.debug(f"Settings: {settings.model_dump_json()}")
    return settings


class Configuration(object):
    """
    Read-only model configuration: a mapping from keys to string values
    (or lists of strings, for the named entity types).
    """

    def __init__(self, values, source=None):
        self.source = source
        self._values = frozendict(values)

    def __contains__(self, key):
        return key in self._values

    def get(self, key):
        """
        Return the value configured for `key` as a string, or None if
        there is none
        """
        value = self._values.get(key)
        if value is None:
            return None
        if isinstance(value, (list, tuple)):
            return ",".join(str(x) for x in value)
        return str(value)

    def get_list(self, key):
        """
        Return the value configured for `key` as a list of strings
        (comma separated strings are split), or None
        """
        value = self._values.get(key)
        if value is None:
            return None
        if isinstance(value, (list, tuple)):
            items = [str(x) for x in value]
        else:
            items = str(value).split(",")
        return [x.strip() for x in items if x.strip()]

    @classmethod
    def from_yaml(cls, stream, source=None):
        """
        Read a configuration from a YAML stream (or string).

        The document must be a flat mapping; an empty document gives an
        empty configuration.
        """
        try:
            loaded = yaml.safe_load(stream)
        except yaml.YAMLError as err:
            raise ConfigurationError(None, "Could not parse the configuration %s: %s"
                                     % (source or "", err)) from err
        if loaded is None:
            loaded = {}
        if not isinstance(loaded, dict):
            raise ConfigurationError(None, "The configuration %s does not contain a mapping"
                                     % (source or ""))
        return cls(loaded, source=source)


def load_configuration(path=None, settings=None) -> Configuration:
    """
    Load the model configuration.

    Args:
        path (str | Path | None): Configuration file; defaults to the
            `config_file` setting, then to the file shipped with the package.
        settings (Settings | None): Settings to use instead of the process-wide ones.

    Returns:
        Configuration: The frozen configuration.
    """
    if path is None:
        settings = settings or get_settings()
        path = settings.config_file or DEFAULT_CONFIG_FILE
    path = Path(path)
    if not path.is_file():
        raise ConfigurationError(None, f"Configuration file not found: {path}")
    with path.open("r", encoding="utf-8") as stream:
        config = Configuration.from_yaml(stream, source=str(path))
    logger.info(f"Loaded model configuration from: {path}")
    return config
