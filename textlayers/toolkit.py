# License: BSD3

"""
The annotation pipeline as a whole.

A `Toolkit` owns a model registry and one instance of each stage.  It
handles one document at a time: once all the sentences of a document have
gone through named entity recognition, call
`clear_named_entity_adaptive_data` (or work inside `with
toolkit.document():`) before moving on to the next document.

Typical use ::

    toolkit = Toolkit.from_settings()
    with toolkit.document():
        sentences = toolkit.detect_sentences(text)
        for sentence in sentences:
            tokens = toolkit.tokenize(sentence)
            tags = toolkit.tag_part_of_speech(tokens)
            names = toolkit.find_named_entities(tokens)
        entities = toolkit.find_entity_mentions(sentences)

Toolkits are not meant to be shared between threads; use one per thread
if you need to process documents in parallel.
"""

from contextlib import contextmanager
import logging

from textlayers.config import get_settings, load_configuration
from textlayers.external.coref import CoreferenceLinker, MentionReconciler
from textlayers.external.ner import NamedEntityEnsemble
from textlayers.external.nltk_models import default_factories
from textlayers.external.parser import ConstituencyParser
from textlayers.external.postag import PosTagger, Tokenizer
from textlayers.external.sentences import SentenceSegmenter
from textlayers.registry import ModelRegistry
from textlayers.resources import ResourceLoader, read_lines

logger = logging.getLogger(__name__)

# pylint: disable=too-few-public-methods, too-many-instance-attributes


class AnnotatedSentence(object):
    """
    All of the sentence-level annotations for one sentence

    Attributes
    ----------
    text : str
    tokens : list of str
    token_spans : list of Span
        character spans of the tokens in `text`
    tags : list of str
        one part of speech tag per token
    names : list of NamedEntity
        token-index spans
    parse : ParseNode
    """
    def __init__(self, text, tokens, token_spans, tags, names, parse):
        self.text = text
        self.tokens = tokens
        self.token_spans = token_spans
        self.tags = tags
        self.names = names
        self.parse = parse


class AnnotatedDocument(object):
    """
    The annotations for a whole document: its sentences, and the
    discourse entities linking mentions across them
    """
    def __init__(self, sentences, entities):
        self.sentences = sentences
        self.entities = entities

    def mentions(self):
        "all the mentions of the document, in order"
        return sorted((m for e in self.entities for m in e),
                      key=lambda m: (m.sentence_index, m.span))


class Toolkit(object):
    """
    Layered annotation of text: sentences, tokens, part of speech tags,
    named entities, constituency parses and coreference.

    Every model is loaded lazily, on first use, and kept for the lifetime
    of the toolkit.

    Parameters
    ----------
    registry : ModelRegistry
    wordnet_dir : str, optional
        Reported in errors about the coreference linker
    charset : str
        Default encoding of the files read by `detect_sentences_in_file`
    """
    def __init__(self, registry, wordnet_dir=None, charset='utf-8'):
        self.registry = registry
        self.charset = charset
        self.segmenter = SentenceSegmenter(registry)
        self.tokenizer = Tokenizer(registry)
        self.tagger = PosTagger(registry)
        self.names = NamedEntityEnsemble(registry)
        self.parser = ConstituencyParser(registry, self.tokenizer)
        self.reconciler = MentionReconciler()
        self.linker = CoreferenceLinker(registry, wordnet_dir=wordnet_dir)

    @classmethod
    def from_settings(cls, settings=None, config=None, factories=None):
        """
        Build a toolkit from the environment-level settings: model
        configuration file, model search path and WordNet directory
        """
        settings = settings or get_settings()
        if config is None:
            config = load_configuration(settings=settings)
        if factories is None:
            factories = default_factories(wordnet_dir=settings.wordnet_dir)
        loader = ResourceLoader(settings.search_path())
        registry = ModelRegistry(config, loader, factories)
        return cls(registry, wordnet_dir=settings.wordnet_dir,
                   charset=settings.charset)

    # -----------------------------------------------------------------
    # sentences and tokens
    # -----------------------------------------------------------------

    def detect_sentences(self, content):
        """
        Break the given content into sentences
        """
        return self.segmenter.segment(content)

    def detect_sentences_in_file(self, fname, charset=None):
        """
        Read a file and return its sentences.

        Lines are segmented independently (we read news stories, where
        headings and such do not end in punctuation), and sentences
        lacking final punctuation get a period.  The file is read in
        the toolkit charset unless another one is given.
        """
        lines = read_lines(fname, charset or self.charset)
        return self.segmenter.segment_lines(lines)

    def tokenize(self, sentence):
        """
        Tokenize the given sentence
        """
        return self.tokenizer.tokenize(sentence)

    def tokenize_pos(self, sentence):
        """
        Return the character spans of the tokens of the sentence
        """
        return self.tokenizer.tokenize_pos(sentence)

    def tag_part_of_speech(self, tokens):
        """
        Detect the part of speech tags for the given tokens in a sentence
        """
        return self.tagger.tag(tokens)

    # -----------------------------------------------------------------
    # names
    # -----------------------------------------------------------------

    def find_named_entities(self, tokens):
        """
        Find named entities in a tokenized sentence (as token-index
        spans).

        Call `clear_named_entity_adaptive_data` after finding all
        named entities in a single document.
        """
        return self.names.find_all(tokens)

    def find_typed_entities(self, tokens):
        """
        Like `find_named_entities`, but keep the entity types
        """
        return self.names.find_typed(tokens)

    def clear_named_entity_adaptive_data(self):
        """
        Must be called between documents or can negatively impact
        detection rate
        """
        return self.names.reset_adaptive_state()

    @contextmanager
    def document(self):
        """
        Scope for the processing of one document: the adaptive data of
        the named entity recognizers is cleared on the way out (even if
        processing failed)
        """
        try:
            yield self
        finally:
            self.clear_named_entity_adaptive_data()

    # -----------------------------------------------------------------
    # parsing and coreference
    # -----------------------------------------------------------------

    def parse_sentence(self, text):
        """
        Convert the provided sentence into a parse tree
        """
        return self.parser.parse(text)

    def _sentence_mentions(self, parse, sentence_index):
        candidates = self.linker.find_mentions(parse)
        return self.reconciler.reconcile(parse, candidates,
                                         sentence_index=sentence_index)

    def find_entity_mentions(self, sentences):
        """
        Find the discourse entities (coreferring entity mentions) of a
        document, given its sentences
        """
        document = []
        for idx, sentence in enumerate(sentences):
            parse = self.parse_sentence(sentence)
            document.extend(self._sentence_mentions(parse, idx))
        return self.linker.link(document)

    def annotate(self, text):
        """
        Run every stage over one document

        Returns
        -------
        doc : AnnotatedDocument
        """
        with self.document():
            sentences = []
            mentions = []
            for idx, sentence in enumerate(self.detect_sentences(text)):
                spans = self.tokenize_pos(sentence)
                tokens = [sentence[s.start:s.end] for s in spans]
                tags = self.tag_part_of_speech(tokens)
                names = self.find_typed_entities(tokens)
                parse = self.parse_sentence(sentence)
                mentions.extend(self._sentence_mentions(parse, idx))
                sentences.append(AnnotatedSentence(sentence, tokens, spans,
                                                   tags, names, parse))
            entities = self.linker.link(mentions)
        logger.info(f"Annotated {len(sentences)} sentences, "
                    f"{len(mentions)} mentions, {len(entities)} entities")
        return AnnotatedDocument(sentences, entities)
