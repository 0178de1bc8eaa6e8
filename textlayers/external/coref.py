#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# License: BSD3

"""
Mentions and the coreference chains (discourse entities) built over them.

A mention finder proposes mentions for each parsed sentence, some of
which have no matching constituent in the parse.  The linker needs a
constituent for every mention, so `MentionReconciler` grafts a new node
into the parse tree for each of those before the mentions of the whole
document are handed over to the `CoreferenceLinker`.
"""

import logging

from textlayers.errors import LinkerUnavailableError
from textlayers.external.parser import ParseNode
from textlayers.registry import COREF

logger = logging.getLogger(__name__)

# pylint: disable=too-few-public-methods

SYNTHETIC_LABEL = 'NML'
"label of the constituents we create for mentions that have none"

SYNTHETIC_SCORE = 1.0

SYNTHETIC_HEAD_INDEX = 1
"""
placeholder head for created constituents: the linker never looks at it,
so we do not attempt to find the real head
"""


class MentionCandidate(object):
    """
    A mention as proposed by a mention finder.

    Attributes
    ----------
    span : Span
        Character span within the sentence
    parse : ParseNode or None
        The constituent for this mention, if the finder found one
    entity_type : str or None
        Named entity type, if known
    """
    def __init__(self, span, parse=None, entity_type=None):
        self.span = span
        self.parse = parse
        self.entity_type = entity_type

    def __repr__(self):
        return 'MentionCandidate(%r, %s)' % (
            self.span, 'None' if self.parse is None else self.parse.label())


class Mention(object):
    """
    A mention whose constituent is known.

    Attributes
    ----------
    span : Span
        Character span within its sentence
    parse : ParseNode
        Constituent for the mention (never None)
    sentence_index : int
        Position of its sentence in the document
    entity_type : str or None
    """
    def __init__(self, span, parse, sentence_index=0, entity_type=None):
        if parse is None:
            raise ValueError("A mention needs a constituent")
        self.span = span
        self.parse = parse
        self.sentence_index = sentence_index
        self.entity_type = entity_type

    @property
    def text(self):
        "the mention text"
        return self.parse.text[self.span.start:self.span.end]

    def tokens(self):
        "the words of the mention"
        return [x.covered_text() for x in self.parse.tokens()]

    def __str__(self):
        return self.text

    def __repr__(self):
        return 'Mention(%r, %d, %r)' % (self.text, self.sentence_index,
                                        self.span)


class DiscourseEntity(object):
    """
    A coreference chain: mentions believed to refer to the same thing,
    in the order they were found
    """
    def __init__(self, mentions=None):
        self.mentions = list(mentions or [])

    def add(self, mention):
        "append a mention to the chain"
        self.mentions.append(mention)

    def __len__(self):
        return len(self.mentions)

    def __iter__(self):
        return iter(self.mentions)

    def __repr__(self):
        return 'DiscourseEntity(%r)' % [m.text for m in self.mentions]


class MentionReconciler(object):
    """
    Make sure every mention of a sentence has a constituent in the
    sentence parse
    """
    def __init__(self, label=SYNTHETIC_LABEL):
        self.label = label

    def reconcile(self, parse, candidates, sentence_index=0):
        """
        Return one `Mention` per candidate.

        Candidates lacking a constituent get a new node, spanning exactly
        the candidate span, inserted into `parse` (so the parse is
        modified in place). A span that does not nest in the parse raises
        `MalformedSpanError` (see `ParseNode.insert_constituent`).
        """
        mentions = []
        for candidate in candidates:
            constituent = candidate.parse
            if constituent is None:
                constituent = ParseNode(self.label, span=candidate.span,
                                        text=parse.text,
                                        score=SYNTHETIC_SCORE,
                                        head_index=SYNTHETIC_HEAD_INDEX)
                parse.insert_constituent(constituent)
                logger.debug(f"Setting new parse for {candidate!r} to "
                             f"{constituent.show()}")
                candidate.parse = constituent
            mentions.append(Mention(candidate.span, constituent,
                                    sentence_index=sentence_index,
                                    entity_type=candidate.entity_type))
        return mentions


class CoreferenceLinker(object):
    """
    Find mentions in parses and group the mentions of a document into
    discourse entities.

    The linker model provides both a `mention_finder` (with a
    `find_mentions(parse)` method) and `resolve(mentions)`.

    Parameters
    ----------
    registry : ModelRegistry
    wordnet_dir : str, optional
        Only used to report where the linker's dictionary was expected
    """
    def __init__(self, registry, wordnet_dir=None):
        self.registry = registry
        self.wordnet_dir = wordnet_dir

    def find_mentions(self, parse):
        """
        Return the mention candidates for a sentence parse
        """
        finder = self.registry.get(COREF).mention_finder
        return list(finder.find_mentions(parse))

    def link(self, mentions):
        """
        Group the mentions of a document (all sentences, in order) into
        discourse entities
        """
        mentions = list(mentions)
        if not mentions:
            return []
        model = self.registry.get(COREF)
        try:
            entities = model.resolve(mentions)
        except (LookupError, OSError) as err:
            logger.error("The coreference linker could not find one of its "
                         "resources; is the WordNet dictionary installed "
                         f"(wordnet dir: {self.wordnet_dir})?")
            raise LinkerUnavailableError(self.wordnet_dir,
                                         "Coreference linker resource "
                                         "missing: %s" % err) from err
        if entities is None:
            logger.error("The coreference linker returned nothing; this usually "
                         "means the WordNet dictionary is missing "
                         f"(wordnet dir: {self.wordnet_dir})")
            raise LinkerUnavailableError(self.wordnet_dir)
        return list(entities)
