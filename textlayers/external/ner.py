# License: BSD3

"""
Named entity recognition with one recognizer per entity type.

Recognizers are adaptive: they remember what they found earlier in a
document to be more consistent later in that document.  This memory must
be cleared between documents (`NamedEntityEnsemble.reset_adaptive_state`),
otherwise decisions on one document leak into the next.  Forgetting to do
so degrades recognition rather than crashing anything.
"""

from collections import namedtuple
import logging

from textlayers.annotation import Span
from textlayers.config import NAME_TYPES_KEY
from textlayers.registry import NAME

logger = logging.getLogger(__name__)

DEFAULT_NAME_TYPES = ('person', 'organization', 'location')
"""
Entity types used when the configuration does not list any
"""


class NamedEntity(namedtuple('NamedEntity', 'entity_type span')):
    """
    A token-index span found by the recognizer for `entity_type`
    """
    def words(self, tokens):
        "the tokens covered by this entity"
        return tokens[self.span.start:self.span.end]


class NamedEntityEnsemble(object):
    """
    Run every configured recognizer over a token sequence.

    Parameters
    ----------
    registry : ModelRegistry
    name_types : sequence of str, optional
        Entity types to recognize; read from the configuration (then
        `DEFAULT_NAME_TYPES`) if not given
    """
    def __init__(self, registry, name_types=None):
        self.registry = registry
        if name_types is None:
            name_types = registry.config.get_list(NAME_TYPES_KEY)
        self.name_types = tuple(name_types or DEFAULT_NAME_TYPES)

    def find_typed(self, tokens):
        """
        Return the entities found in the tokens, recognizer by recognizer
        (in configuration order), each in the order its recognizer
        returns them.

        Spans from different recognizers may overlap; we keep them all.
        """
        tokens = list(tokens)
        entities = []
        for name_type in self.name_types:
            finder = self.registry.get(NAME, name_type)
            for span in finder.find(tokens):
                entities.append(NamedEntity(name_type, Span.coerce(span)))
        return entities

    def find_all(self, tokens):
        """
        Return the token-index spans of the entities in the tokens
        (see `find_typed`)
        """
        return [x.span for x in self.find_typed(tokens)]

    def reset_adaptive_state(self):
        """
        Clear the document-local memory of every recognizer created so
        far. Must be called between documents.

        Recognizers that have not been loaded yet are left alone (we
        never load one just to reset it).

        Returns
        -------
        name_types : list of str
            The entity types whose recognizer was reset
        """
        reset = []
        for (_, name_type), finder in self.registry.cached(NAME):
            finder.clear_adaptive_state()
            reset.append(name_type)
        logger.debug(f"Cleared adaptive data for {reset}")
        return reset
