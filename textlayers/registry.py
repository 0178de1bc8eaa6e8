"""
Lazy acquisition of the models behind each annotation stage.

A `ModelRegistry` loads at most one model per stage (and, for named
entity recognition, per entity type) and keeps it for as long as the
registry lives.  Loading a model goes through three collaborators:

* the `Configuration`, which maps the stage's key to a locator,
* the `ResourceLoader`, which turns the locator into bytes (or a path),
* the stage's factory, which turns those into a model object.

Each of these can fail, and each failure has its own exception (see
`textlayers.errors`).  Failures are not cached, so a later call retries
once the configuration has been fixed; successes are never reloaded.
"""

# License: BSD3

from collections import Counter, namedtuple
import logging

from textlayers.config import (SENTENCE_KEY, TOKENIZER_KEY, POS_KEY,
                               NAME_FORMAT_KEY, PARSER_KEY, COREF_KEY)
from textlayers.errors import (ConfigurationError, ModelLoadError,
                               ResourceNotFoundError)

logger = logging.getLogger(__name__)

SENTENCE = 'sentence'
TOKENIZER = 'tokenizer'
POS = 'pos'
NAME = 'name'
PARSER = 'parser'
COREF = 'coref'


class StageSpec(namedtuple('StageSpec', 'stage key kind')):
    """
    How to find the model for a stage

    * stage: stage identifier
    * key: configuration key for the model locator (for parameterised
      stages, a template with a `{}` placeholder for the variant)
    * kind: 'stream' if the factory reads a binary stream, 'path' if it
      wants a filesystem path (eg. a directory of resources)
    """
    pass


STAGES = {
    SENTENCE: StageSpec(SENTENCE, SENTENCE_KEY, 'stream'),
    TOKENIZER: StageSpec(TOKENIZER, TOKENIZER_KEY, 'stream'),
    POS: StageSpec(POS, POS_KEY, 'stream'),
    NAME: StageSpec(NAME, NAME_FORMAT_KEY, 'stream'),
    PARSER: StageSpec(PARSER, PARSER_KEY, 'stream'),
    COREF: StageSpec(COREF, COREF_KEY, 'path'),
}


class ModelRegistry(object):
    """
    Cache of loaded models, keyed by `(stage, variant)`.

    Parameters
    ----------
    config : Configuration
        Where locators come from.
    loader : ResourceLoader
        Where bytes come from.
    factories : dict from stage to callable
        `factory(resource)` builds the model for a stage from an open
        binary stream or a path (see `StageSpec.kind`).
    stages : dict from stage to StageSpec, optional
    """
    def __init__(self, config, loader, factories, stages=None):
        self.config = config
        self.loader = loader
        self.factories = dict(factories)
        self.stages = dict(stages or STAGES)
        self.load_attempts = Counter()
        self._models = {}

    def get(self, stage, variant=None):
        """
        Return the model for the stage (and variant), loading it on
        first use
        """
        key = (stage, variant)
        if key not in self._models:
            self._models[key] = self._load(stage, variant)
        return self._models[key]

    def is_loaded(self, stage, variant=None):
        "True if the model is already in the cache"
        return (stage, variant) in self._models

    def cached(self, stage=None):
        """
        Return the `((stage, variant), model)` pairs already loaded
        (for the given stage only, if any), in loading order.

        This never loads anything.
        """
        return [(k, m) for k, m in self._models.items()
                if stage is None or k[0] == stage]

    def locator(self, stage, variant=None):
        """
        Return the configuration key and the locator for a model,
        raising `ConfigurationError` if the key has no (or a blank) value
        """
        spec = self.stages[stage]
        value = self.config.get(spec.key)
        if value is None or not value.strip():
            raise ConfigurationError(spec.key)
        if variant is not None:
            value = value.format(variant)
        return spec.key, value

    def _load(self, stage, variant):
        self.load_attempts[(stage, variant)] += 1
        spec = self.stages[stage]
        what = stage if variant is None else '%s (%s)' % (stage, variant)
        key, locator = self.locator(stage, variant)
        factory = self.factories.get(stage)
        if factory is None:
            logger.error(f"No factory for the {what} model")
            raise ModelLoadError(what, key, locator,
                                 "no model factory for this stage")
        logger.info(f"Loading {what} model from '{locator}'")
        if spec.kind == 'path':
            resource = self.loader.locate(locator)
            if resource is None:
                logger.error(f"No {what} resource at '{locator}'")
                raise ResourceNotFoundError(key, locator)
            model = self._build(factory, resource, what, key, locator)
        else:
            resource = self.loader.open(locator)
            if resource is None:
                logger.error(f"No {what} resource at '{locator}'")
                raise ResourceNotFoundError(key, locator)
            with resource:
                model = self._build(factory, resource, what, key, locator)
        logger.info(f"Loaded {what} model")
        return model

    # pylint: disable=broad-except
    @staticmethod
    def _build(factory, resource, what, key, locator):
        try:
            return factory(resource)
        except Exception as err:
            logger.error(f"Could not build the {what} model from '{locator}': {err}")
            raise ModelLoadError(what, key, locator, err) from err
    # pylint: enable=broad-except
