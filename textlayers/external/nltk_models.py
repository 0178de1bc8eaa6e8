#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# License: BSD3

"""
Default model kit: NLTK-backed implementations of the model capabilities
the pipeline relies on, and the factories that build them from resources.

=========  ==========================  =================================
stage      resource                    model
=========  ==========================  =================================
sentence   pickle                      `NltkSentenceModel` (Punkt)
tokenizer  pickle                      `NltkTokenizerModel` (Treebank)
pos        pickle                      `NltkPosModel` (perceptron)
name       pickle (one per type)       `NltkNameModel`
parser     chunk grammar (text)        `ChunkParserModel`
coref      directory with linker.yaml  `HeadMatchResolver`
=========  ==========================  =================================

Pickled resources may also hold the raw NLTK objects (anything with
`span_tokenize`, or an NLTK tagger); they are wrapped on load.  Only load
pickles you trust: unpickling runs code.

`write_model_dir` creates a directory with all of the above (plus a
matching configuration file) from the NLTK data installed locally.
"""

from functools import partial
import logging
import os
import pickle

import nltk
from nltk.corpus.reader.wordnet import WordNetCorpusReader
from nltk.tag.api import TaggerI
import yaml

from textlayers.annotation import Span
from textlayers.config import (SENTENCE_KEY, TOKENIZER_KEY, POS_KEY,
                               NAME_FORMAT_KEY, NAME_TYPES_KEY,
                               PARSER_KEY, COREF_KEY)
from textlayers.external.coref import DiscourseEntity, MentionCandidate
from textlayers.external.ner import DEFAULT_NAME_TYPES
from textlayers.external.parser import ParseNode, TOP_LABEL
from textlayers.external.postag import generic_token_spans
from textlayers.registry import (SENTENCE, TOKENIZER, POS, NAME, PARSER,
                                 COREF)

logger = logging.getLogger(__name__)

# pylint: disable=too-few-public-methods

# ---------------------------------------------------------------------
# sentences, tokens, tags
# ---------------------------------------------------------------------


class NltkSentenceModel(object):
    """
    Sentence boundaries from an NLTK sentence tokenizer (eg. Punkt)
    """
    def __init__(self, tokenizer):
        self.tokenizer = tokenizer

    def detect(self, text):
        "character spans of the sentences in the text"
        return [Span(s, e) for s, e in self.tokenizer.span_tokenize(text)]


class NltkTokenizerModel(object):
    """
    Token spans from an NLTK word tokenizer.

    Tokenizers without `span_tokenize` are realigned against the text,
    which only works if they do not rewrite the tokens.
    """
    def __init__(self, tokenizer):
        self.tokenizer = tokenizer

    def tokenize(self, text):
        "character spans of the tokens in the text"
        if hasattr(self.tokenizer, 'span_tokenize'):
            return [Span(s, e) for s, e in self.tokenizer.span_tokenize(text)]
        return list(generic_token_spans(text, self.tokenizer.tokenize(text)))


class NltkPosModel(object):
    """
    Tags from an NLTK tagger (which return `(word, tag)` pairs)
    """
    def __init__(self, tagger):
        self.tagger = tagger

    def tag(self, tokens):
        "one tag per token"
        return [tag for _, tag in self.tagger.tag(tokens)]


# ---------------------------------------------------------------------
# names
# ---------------------------------------------------------------------

NE_LABELS = {
    'person': ('PERSON',),
    'organization': ('ORGANIZATION',),
    'location': ('GPE', 'LOCATION', 'FACILITY'),
}
"""
Labels of the NLTK named entity chunker corresponding to each of our
entity types (other types are looked up in upper case)
"""


class NltkNameModel(object):
    """
    Recognizer for one entity type, using `nltk.ne_chunk`.

    It is adaptive: every name it finds is remembered, and later
    occurrences of the same words in the document are reported as well,
    even where the chunker misses them. Call `clear_adaptive_state`
    between documents.
    """
    def __init__(self, entity_type, labels=None):
        self.entity_type = entity_type
        self.labels = tuple(labels or
                            NE_LABELS.get(entity_type,
                                          (entity_type.upper(),)))
        self._memory = set()

    def _chunked_spans(self, tokens):
        tree = nltk.ne_chunk(nltk.pos_tag(tokens))
        spans = []
        idx = 0
        for node in tree:
            if isinstance(node, nltk.Tree):
                width = len(node)
                if node.label() in self.labels:
                    spans.append(Span(idx, idx + width))
                idx += width
            else:
                idx += 1
        return spans

    def _recalled_spans(self, tokens, spans):
        taken = [False] * len(tokens)
        for span in spans:
            taken[span.start:span.end] = [True] * span.length()
        recalled = []
        for name in sorted(self._memory, key=len, reverse=True):
            width = len(name)
            for i in range(len(tokens) - width + 1):
                if tuple(tokens[i:i + width]) == name and\
                        not any(taken[i:i + width]):
                    recalled.append(Span(i, i + width))
                    taken[i:i + width] = [True] * width
        return recalled

    def find(self, tokens):
        "token-index spans of the names of our type"
        tokens = list(tokens)
        if not tokens:
            return []
        spans = self._chunked_spans(tokens)
        for span in spans:
            self._memory.add(tuple(tokens[span.start:span.end]))
        return sorted(spans + self._recalled_spans(tokens, spans))

    def clear_adaptive_state(self):
        "forget the names seen so far"
        self._memory.clear()


# ---------------------------------------------------------------------
# parser
# ---------------------------------------------------------------------

DEFAULT_GRAMMAR = r"""
NP: {<DT|PRP\$|CD>?<JJ.*|VBN|VBG|CD>*<NN.*>+}
    {<PRP>}
PP: {<IN|TO><NP>}
NP: {<NP><PP>}
VP: {<MD>?<VB.*><NP|PP|RB.*>*}
"""
"""
Cascaded chunk grammar used by `write_model_dir`
"""


def _with_preterminals(tree):
    """
    Turn the `(word, tag)` leaves of a chunked tree into `(tag word)`
    subtrees
    """
    if isinstance(tree, nltk.Tree):
        return nltk.Tree(tree.label(), [_with_preterminals(x) for x in tree])
    word, tag = tree
    return nltk.Tree(tag, [word])


class ChunkParserModel(object):
    """
    Shallow constituency parser: a cascade of regular expression
    chunkers over part of speech tags (`nltk.RegexpParser`).

    The tree it returns has a `TOP` root over a single `S` node.
    """
    def __init__(self, grammar, tagger=None):
        self.grammar = grammar
        self._chunker = nltk.RegexpParser(grammar, root_label='S')
        self._tagger = tagger or nltk.pos_tag

    def parse(self, skeleton):
        """
        Return a parse over the token leaves of the skeleton
        """
        leaves = skeleton.tokens()
        if not leaves:
            return ParseNode(TOP_LABEL, span=skeleton.span,
                             text=skeleton.text)
        words = [x.covered_text() for x in leaves]
        chunked = self._chunker.parse(self._tagger(words))
        tree = nltk.Tree(TOP_LABEL, [_with_preterminals(chunked)])
        return ParseNode.build(tree, leaves, span=skeleton.span)


# ---------------------------------------------------------------------
# coreference
# ---------------------------------------------------------------------

PRONOUN_TAGS = ('PRP', 'PRP$')
PROPER_NOUN_TAGS = ('NNP', 'NNPS')


class NounPhraseMentionFinder(object):
    """
    Propose as mentions:

    * every noun phrase,
    * every personal or possessive pronoun,
    * every run of proper nouns inside a larger constituent (these have no
      constituent of their own; see `MentionReconciler`)

    Mentions are returned left to right, longer ones first.
    """
    def __init__(self, labels=('NP', 'NML')):
        self.labels = tuple(labels)

    def _proper_noun_runs(self, node):
        run = []
        for kid in list(node) + [None]:
            if kid is not None and kid.is_pos_tag() and\
                    kid.label() in PROPER_NOUN_TAGS:
                run.append(kid)
                continue
            if run and len(run) < len(node):
                yield Span(run[0].span.start, run[-1].span.end)
            run = []

    def find_mentions(self, parse):
        "mention candidates for a sentence parse"
        found = {}
        for node in parse.depth_first_iterator():
            if node.is_token():
                continue
            if node.label() in self.labels or\
                    (node.is_pos_tag() and node.label() in PRONOUN_TAGS):
                found.setdefault(node.span, MentionCandidate(node.span, node))
            for span in self._proper_noun_runs(node):
                found.setdefault(span, MentionCandidate(span))
        return sorted(found.values(),
                      key=lambda x: (x.span.start, -x.span.end))


DEFAULT_LINKER_PARAMS = {
    'max_distance': 3,
    'determiners': ['a', 'an', 'the', 'this', 'that', 'these', 'those'],
    'pronouns': ['he', 'him', 'his', 'himself',
                 'she', 'her', 'hers', 'herself',
                 'it', 'its', 'itself',
                 'they', 'them', 'their', 'theirs', 'themselves'],
}


class HeadMatchResolver(object):
    """
    Deterministic coreference: a mention joins the most recent entity
    (within `max_distance` sentences) that has a mention

    * with the same words, modulo case and leading determiners, or
    * with the same head word, if both are proper names, or
    * whose head shares a WordNet noun synset with its own, if both are
      common nouns;

    pronouns join the most recent entity in range.

    WordNet is read from `wordnet_dir` if given, from the NLTK data path
    otherwise; it is only opened on the first call to `resolve`.
    """
    def __init__(self, wordnet_dir=None, max_distance=3,
                 determiners=None, pronouns=None):
        self.wordnet_dir = wordnet_dir
        self.max_distance = max_distance
        self.determiners = frozenset(determiners or
                                     DEFAULT_LINKER_PARAMS['determiners'])
        self.pronouns = frozenset(pronouns or
                                  DEFAULT_LINKER_PARAMS['pronouns'])
        self.mention_finder = NounPhraseMentionFinder()
        self._wordnet = None

    def wordnet(self):
        """
        The WordNet reader (raises `OSError` or `LookupError` if the
        dictionary cannot be found)
        """
        if self._wordnet is None:
            if self.wordnet_dir:
                # NLTK only reads corpora from directories on its data path
                if self.wordnet_dir not in nltk.data.path:
                    nltk.data.path.append(self.wordnet_dir)
                reader = WordNetCorpusReader(self.wordnet_dir, None)
            else:
                reader = nltk.corpus.wordnet
            reader.get_version()
            self._wordnet = reader
        return self._wordnet

    def _words(self, mention):
        words = [w.lower() for w in mention.tokens()]
        while words and words[0] in self.determiners:
            words = words[1:]
        return words

    def _is_pronoun(self, mention):
        words = mention.tokens()
        return len(words) == 1 and words[0].lower() in self.pronouns

    @staticmethod
    def _is_proper(mention):
        tags = [x.label() for x in mention.parse.pos_tags()]
        return any(t in PROPER_NOUN_TAGS for t in tags)

    def _synonyms(self, head1, head2):
        if head1 == head2:
            return True
        wordnet = self.wordnet()
        return bool(set(wordnet.synsets(head1, pos='n')) &
                    set(wordnet.synsets(head2, pos='n')))

    def _matches(self, mention, other):
        words = self._words(mention)
        other_words = self._words(other)
        if not words or not other_words or self._is_pronoun(other):
            return False
        if words == other_words:
            return True
        proper = self._is_proper(mention)
        if proper != self._is_proper(other):
            return False
        if proper:
            return words[-1] == other_words[-1]
        return self._synonyms(words[-1], other_words[-1])

    def _antecedent(self, mention, entities):
        for entity in reversed(entities):
            last = entity.mentions[-1]
            if mention.sentence_index - last.sentence_index > self.max_distance:
                continue
            if self._is_pronoun(mention):
                return entity
            if any(self._matches(mention, x) for x in entity):
                return entity
        return None

    def resolve(self, mentions):
        "group mentions (in document order) into discourse entities"
        self.wordnet()
        entities = []
        for mention in mentions:
            entity = self._antecedent(mention, entities)
            if entity is None:
                entity = DiscourseEntity()
                entities.append(entity)
            entity.add(mention)
        return entities


# ---------------------------------------------------------------------
# factories
# ---------------------------------------------------------------------

LINKER_FILE = 'linker.yaml'


def _unpickle(stream, wrapper, is_native, method):
    """
    Load a pickled model: either one of our adapters (or any object
    providing `method`), or a native NLTK object to wrap
    """
    obj = pickle.load(stream)
    if isinstance(obj, wrapper):
        return obj
    elif is_native(obj):
        return wrapper(obj)
    elif callable(getattr(obj, method, None)):
        return obj
    raise TypeError("a %s object is not a usable model (no %s method)"
                    % (type(obj).__name__, method))


def _has_span_tokenize(obj):
    return callable(getattr(obj, 'span_tokenize', None))


def sentence_model(stream):
    "factory for the sentence stage"
    return _unpickle(stream, NltkSentenceModel, _has_span_tokenize, 'detect')


def tokenizer_model(stream):
    "factory for the tokenizer stage"
    return _unpickle(stream, NltkTokenizerModel, _has_span_tokenize,
                     'tokenize')


def pos_model(stream):
    "factory for the part of speech stage"
    return _unpickle(stream, NltkPosModel,
                     lambda x: isinstance(x, TaggerI), 'tag')


def name_model(stream):
    "factory for the named entity stage"
    obj = pickle.load(stream)
    for method in ('find', 'clear_adaptive_state'):
        if not callable(getattr(obj, method, None)):
            raise TypeError("a %s object is not a usable name finder "
                            "(no %s method)" % (type(obj).__name__, method))
    return obj


def chunk_parser_model(stream):
    "factory for the parser stage: a chunk grammar in UTF-8"
    return ChunkParserModel(stream.read().decode('utf-8'))


def head_match_linker(path, wordnet_dir=None):
    "factory for the coreference stage: a directory holding linker.yaml"
    fname = os.path.join(path, LINKER_FILE)
    with open(fname, 'r', encoding='utf-8') as stream:
        params = yaml.safe_load(stream) or {}
    if not isinstance(params, dict):
        raise TypeError("%s does not contain a mapping" % fname)
    return HeadMatchResolver(wordnet_dir=wordnet_dir, **params)


def default_factories(wordnet_dir=None):
    """
    Stage factories for the NLTK model kit
    """
    return {
        SENTENCE: sentence_model,
        TOKENIZER: tokenizer_model,
        POS: pos_model,
        NAME: name_model,
        PARSER: chunk_parser_model,
        COREF: partial(head_match_linker, wordnet_dir=wordnet_dir),
    }


DEFAULT_FACTORIES = default_factories()


# ---------------------------------------------------------------------
# building a model directory
# ---------------------------------------------------------------------

MODEL_FILES = {
    SENTENCE_KEY: 'en-sent.pickle',
    TOKENIZER_KEY: 'en-token.pickle',
    POS_KEY: 'en-pos-perceptron.pickle',
    NAME_FORMAT_KEY: 'en-ner-{}.pickle',
    PARSER_KEY: 'en-parser-chunking.txt',
    COREF_KEY: 'coref',
}


def _dump(obj, fname):
    with open(fname, 'wb') as stream:
        pickle.dump(obj, stream)
    logger.info(f"Wrote {fname}")


def write_model_dir(odir, name_types=DEFAULT_NAME_TYPES,
                    grammar=DEFAULT_GRAMMAR):
    """
    Write the NLTK model kit to a directory, along with a `models.yaml`
    configuration pointing at it.

    Needs the NLTK `punkt_tab` and `averaged_perceptron_tagger_eng` data;
    named entity recognition and coreference will also need
    `maxent_ne_chunker_tab`, `words` and `wordnet` at run time.

    Returns
    -------
    config_file : str
        Path to the configuration file written
    """
    # imported here: loading these needs NLTK data
    from nltk.tag.perceptron import PerceptronTagger
    from nltk.tokenize.punkt import PunktTokenizer

    if not os.path.exists(odir):
        os.makedirs(odir)

    def path(key):
        "absolute path for a configuration key"
        return os.path.abspath(os.path.join(odir, MODEL_FILES[key]))

    _dump(NltkSentenceModel(PunktTokenizer()), path(SENTENCE_KEY))
    _dump(NltkTokenizerModel(nltk.tokenize.TreebankWordTokenizer()),
          path(TOKENIZER_KEY))
    _dump(NltkPosModel(PerceptronTagger()), path(POS_KEY))
    for name_type in name_types:
        _dump(NltkNameModel(name_type),
              path(NAME_FORMAT_KEY).format(name_type))
    with open(path(PARSER_KEY), 'w', encoding='utf-8') as stream:
        stream.write(grammar.strip() + '\n')
    coref_dir = path(COREF_KEY)
    if not os.path.exists(coref_dir):
        os.makedirs(coref_dir)
    with open(os.path.join(coref_dir, LINKER_FILE), 'w',
              encoding='utf-8') as stream:
        yaml.safe_dump(DEFAULT_LINKER_PARAMS, stream, default_flow_style=False)

    config = dict((k, path(k)) for k in MODEL_FILES)
    config[NAME_TYPES_KEY] = list(name_types)
    config_file = os.path.join(odir, 'models.yaml')
    with open(config_file, 'w', encoding='utf-8') as stream:
        yaml.safe_dump(config, stream, default_flow_style=False)
    logger.info(f"Wrote {config_file}")
    return config_file
