# -*- coding: utf-8 -*-
#
# License: BSD3

# pylint: disable=R0904, invalid-name

"""
Tests for textlayers.external
"""

import io
import os
import pickle
import re
import shutil
import tempfile
import unittest

import nltk
from nltk.tokenize import TreebankWordTokenizer
import yaml

from textlayers.annotation import Span
from textlayers.config import (Configuration, Settings,
                               SENTENCE_KEY, TOKENIZER_KEY, POS_KEY,
                               NAME_FORMAT_KEY, NAME_TYPES_KEY,
                               PARSER_KEY, COREF_KEY)
from textlayers.errors import (ConfigurationError, LinkerUnavailableError,
                               MalformedSpanError, ModelLoadError,
                               TaggingError)
from textlayers.registry import (ModelRegistry, SENTENCE, TOKENIZER, POS,
                                 NAME, PARSER, COREF)
from textlayers.toolkit import Toolkit

from .coref import (CoreferenceLinker, DiscourseEntity, Mention,
                    MentionCandidate, MentionReconciler)
from .ner import NamedEntity, NamedEntityEnsemble
from .nltk_models import (ChunkParserModel, HeadMatchResolver,
                          NltkNameModel, NltkPosModel, NltkTokenizerModel,
                          NounPhraseMentionFinder, DEFAULT_GRAMMAR,
                          LINKER_FILE,
                          chunk_parser_model, head_match_linker, name_model,
                          pos_model, tokenizer_model)
from .parser import (ConstituencyParser, ParseNode,
                     INCOMPLETE_LABEL, TOKEN_LABEL)
from .postag import (PosTagger, Tokenizer, check_token_spans,
                     generic_token_spans)
from .sentences import SentenceSegmenter, ends_with_punctuation

# ---------------------------------------------------------------------
# fake models
# ---------------------------------------------------------------------


class MemoryLoader(object):
    """
    Serves model objects held in memory: the resource for a locator is
    just the locator itself, which the factories below look up
    """
    def __init__(self, models):
        self.models = models
        self.requests = []

    def open(self, locator):
        "stream holding the locator"
        self.requests.append(locator)
        if locator not in self.models:
            return None
        return io.BytesIO(locator.encode('utf-8'))

    def locate(self, locator):
        "the locator, if we have a model for it"
        self.requests.append(locator)
        return locator if locator in self.models else None


def fake_registry(models, name_types=('person', 'location')):
    """
    Registry over the given models, keyed by locator: `sentence`,
    `tokenizer`, `pos`, `parser`, `coref` and `name-TYPE`
    """
    config = Configuration({SENTENCE_KEY: 'sentence',
                            TOKENIZER_KEY: 'tokenizer',
                            POS_KEY: 'pos',
                            NAME_FORMAT_KEY: 'name-{}',
                            NAME_TYPES_KEY: list(name_types),
                            PARSER_KEY: 'parser',
                            COREF_KEY: 'coref'})

    def from_stream(stream):
        "the model named in the stream"
        return models[stream.read().decode('utf-8')]

    factories = dict((s, from_stream)
                     for s in [SENTENCE, TOKENIZER, POS, NAME, PARSER])
    factories[COREF] = lambda path: models[path]
    return ModelRegistry(config, MemoryLoader(models), factories)


class RegexSentenceModel(object):
    "sentences end at runs of .!?"
    def detect(self, text):
        "character offsets (as pairs)"
        return [m.span() for m in re.finditer(r'[^.!?]+[.!?]*', text)]


class LexiconTagger(object):
    "looks words up in a dictionary"
    def __init__(self, lexicon, default='NN'):
        self.lexicon = lexicon
        self.default = default

    def tag(self, tokens):
        "one tag per token"
        return [self.lexicon.get(t, self.default) for t in tokens]

    def pairs(self, tokens):
        "(word, tag) pairs, as NLTK taggers return them"
        return list(zip(tokens, self.tag(tokens)))


class SplitTokenizer(object):
    "no spans, just strings"
    def tokenize(self, text):
        "whitespace separated words"
        return text.split()


class ShortTagger(object):
    "forgets to tag the last token"
    def tag(self, tokens):
        "one tag per token but the last"
        return ['NN'] * (len(tokens) - 1)


class FakeNameModel(object):
    """
    Finds the given word sequences; counts the times its adaptive state
    was cleared
    """
    def __init__(self, names):
        self.names = [tuple(x.split()) for x in names]
        self.clears = 0

    def find(self, tokens):
        "token spans (as pairs)"
        found = []
        for name in self.names:
            for i in range(len(tokens) - len(name) + 1):
                if tuple(tokens[i:i + len(name)]) == name:
                    found.append((i, i + len(name)))
        return found

    def clear_adaptive_state(self):
        "count the call"
        self.clears += 1


class ReferenceParser(object):
    "always returns the same tree (over the skeleton leaves)"
    def __init__(self, bracketed):
        self.tree = nltk.Tree.fromstring(bracketed)

    def parse(self, skeleton):
        "the reference tree"
        return ParseNode.build(self.tree, skeleton.tokens(),
                               span=skeleton.span)


class FakeWordNet(object):
    "a handful of synonym sets"
    def __init__(self, synsets):
        self._synsets = synsets

    def get_version(self):
        "as WordNetCorpusReader"
        return '3.0'

    def synsets(self, word, pos=None):
        "the synonym sets for a word"
        return self._synsets.get(word, [])


class FakeLinker(object):
    "resolves to a fixed answer, or fails"
    def __init__(self, answer=None, error=None):
        self.mention_finder = NounPhraseMentionFinder()
        self.answer = answer
        self.error = error

    def resolve(self, mentions):
        "the fixed answer"
        if self.error is not None:
            raise self.error
        return self.answer


def treebank():
    "tokenizer model needing no NLTK data"
    return NltkTokenizerModel(TreebankWordTokenizer())


# ---------------------------------------------------------------------
# sentences
# ---------------------------------------------------------------------


class SentencesTest(unittest.TestCase):
    """Sentence segmentation"""

    def setUp(self):
        self.registry = fake_registry({'sentence': RegexSentenceModel()})
        self.segmenter = SentenceSegmenter(self.registry)

    def test_segment(self):
        "sentences are trimmed, empty ones dropped"
        text = "  First one. Second one!   And a third?\n  "
        self.assertEqual(["First one.", "Second one!", "And a third?"],
                         self.segmenter.segment(text))
        self.assertEqual([], self.segmenter.segment("   "))

    def test_segment_lines(self):
        "sentences without final punctuation get a period"
        lines = ["OpenNLP doesn't naturally treat end-of-lines as "
                 "sentence boundaries",
                 "OpenNLP is poorly documented"]
        with self.assertLogs('textlayers.external.sentences',
                             level='WARNING') as logs:
            sentences = self.segmenter.segment_lines(lines)
        self.assertEqual([x + '.' for x in lines], sentences)
        self.assertEqual(2, self.segmenter.corrections)
        self.assertEqual(2, len(logs.records))

    def test_lines_are_boundaries(self):
        "sentences never cross lines"
        lines = ["A heading", "", "Some text. More text", "Done!"]
        with self.assertLogs('textlayers.external.sentences',
                             level='WARNING') as logs:
            sentences = self.segmenter.segment_lines(lines)
        self.assertEqual(["A heading.", "Some text.", "More text.",
                          "Done!"], sentences)
        # sentences are numbered across lines
        self.assertEqual(2, len(logs.records))
        self.assertIn("#0", logs.records[0].getMessage())
        self.assertIn("#2", logs.records[1].getMessage())

    def test_missing_model(self):
        "no sentence model configured: error before any resource access"
        loader = MemoryLoader({'sentence': RegexSentenceModel()})
        registry = ModelRegistry(Configuration({}), loader,
                                 {SENTENCE: lambda _: None})
        segmenter = SentenceSegmenter(registry)
        with self.assertRaises(ConfigurationError) as cm:
            segmenter.segment("Some text.")
        self.assertEqual(SENTENCE_KEY, cm.exception.key)
        self.assertEqual([], loader.requests)

    def test_punctuation(self):
        "any Unicode punctuation counts"
        self.assertTrue(ends_with_punctuation("Really?"))
        self.assertTrue(ends_with_punctuation("«Vraiment»"))
        self.assertTrue(ends_with_punctuation("so-called)"))
        self.assertFalse(ends_with_punctuation("no"))
        self.assertFalse(ends_with_punctuation("50$"))
        self.assertFalse(ends_with_punctuation(""))

# ---------------------------------------------------------------------
# tokens and tags
# ---------------------------------------------------------------------


class PosTag(unittest.TestCase):
    """Working with tokenizers and part of speech taggers"""

    def test_simple_align(self):
        "trivial token realignment"

        tokens = ["a", "bb", "ccc"]
        text = "a bb    ccc"
        spans = list(generic_token_spans(text, tokens))
        expected = [Span(0, 1),
                    Span(2, 4),
                    Span(8, 11)]
        self.assertEqual(expected, spans)

    def test_messy_align(self):
        "ignore whitespace in token"

        tokens = ["a", "b b", "c c c"]
        text = "a bb    ccc"
        spans = list(generic_token_spans(text, tokens))
        expected = [Span(0, 1),
                    Span(2, 4),
                    Span(8, 11)]
        self.assertEqual(expected, spans)

    def test_bad_align(self):
        "tokens that are not in the text"
        self.assertRaises(MalformedSpanError, list,
                          generic_token_spans("a bb", ["a", "bc"]))
        self.assertRaises(MalformedSpanError, list,
                          generic_token_spans("a bb", ["a", "bb", "c"]))

    def test_check_spans(self):
        "token spans must be ordered, disjoint and in the text"
        text = "abc def"
        self.assertEqual([Span(0, 3), Span(4, 7)],
                         check_token_spans(text, [(0, 3), (4, 7)]))
        self.assertRaises(MalformedSpanError,
                          check_token_spans, text, [(0, 3), (2, 7)])
        self.assertRaises(MalformedSpanError,
                          check_token_spans, text, [(4, 7), (0, 3)])
        self.assertRaises(MalformedSpanError,
                          check_token_spans, text, [(4, 8)])

    def test_tokenize(self):
        "tokens and token spans agree"
        tokenizer = Tokenizer(fake_registry({'tokenizer': treebank()}))
        sentence = "Mr. Vinken is chairman of Elsevier N.V., "\
            "the Dutch publishing group."
        expected = ["Mr.", "Vinken", "is", "chairman", "of", "Elsevier",
                    "N.V.", ",", "the", "Dutch", "publishing", "group", "."]
        tokens = tokenizer.tokenize(sentence)
        self.assertEqual(expected, tokens)
        spans = tokenizer.tokenize_pos(sentence)
        self.assertEqual(len(tokens), len(spans))
        for token, span in zip(tokens, spans):
            self.assertEqual(token, sentence[span.start:span.end])

    def test_string_tokenizer(self):
        "tokenizers that only return strings are realigned"
        model = NltkTokenizerModel(SplitTokenizer())
        self.assertEqual([Span(0, 3), Span(6, 9)],
                         model.tokenize("one   two"))
        model = NltkTokenizerModel(nltk.tokenize.WhitespaceTokenizer())
        self.assertEqual([Span(0, 3), Span(6, 9)],
                         model.tokenize("one   two"))

    def test_tag(self):
        "one tag per token, in order"
        registry = fake_registry({'pos': LexiconTagger({'the': 'DT'})})
        tagger = PosTagger(registry)
        self.assertEqual(['DT', 'NN'], tagger.tag(['the', 'dog']))
        self.assertEqual([('the', 'DT'), ('dog', 'NN')],
                         tagger.tag_tokens(['the', 'dog']))

    def test_tag_nothing(self):
        "no tokens, no tags, no model"
        registry = fake_registry({})
        self.assertEqual([], PosTagger(registry).tag([]))
        self.assertEqual(0, sum(registry.load_attempts.values()))

    def test_tag_errors(self):
        "model failures surface as tagging errors"
        registry = fake_registry({})
        with self.assertRaises(TaggingError) as cm:
            PosTagger(registry).tag(['dog'])
        self.assertIsNotNone(cm.exception.__cause__)
        registry = fake_registry({'pos': ShortTagger()})
        self.assertRaises(TaggingError, PosTagger(registry).tag,
                          ['the', 'dog'])

    def test_nltk_tagger(self):
        "NLTK taggers return pairs"
        model = NltkPosModel(nltk.tag.DefaultTagger('NN'))
        self.assertEqual(['NN', 'NN'], model.tag(['big', 'dog']))

# ---------------------------------------------------------------------
# names
# ---------------------------------------------------------------------


class NamesTest(unittest.TestCase):
    """Named entity recognition"""

    def setUp(self):
        self.people = FakeNameModel(["John Smith", "Smith"])
        self.places = FakeNameModel(["Paris"])
        self.registry = fake_registry({'name-person': self.people,
                                       'name-location': self.places})
        self.tokens = ["John", "Smith", "lives", "in", "Paris", "."]

    def test_find(self):
        "spans in type order, then recognizer order; overlaps kept"
        names = NamedEntityEnsemble(self.registry)
        self.assertEqual(('person', 'location'), names.name_types)
        self.assertEqual([Span(0, 2), Span(1, 2), Span(4, 5)],
                         names.find_all(self.tokens))
        typed = names.find_typed(self.tokens)
        self.assertEqual(NamedEntity('location', Span(4, 5)), typed[-1])
        self.assertEqual(["Paris"], typed[-1].words(self.tokens))

    def test_reset_nothing_loaded(self):
        "resetting never loads a recognizer"
        names = NamedEntityEnsemble(self.registry)
        self.assertEqual([], names.reset_adaptive_state())
        self.assertEqual(0, sum(self.registry.load_attempts.values()))

    def test_reset_loaded_only(self):
        "only the recognizers created so far are reset"
        self.registry.get(NAME, 'person')
        names = NamedEntityEnsemble(self.registry)
        self.assertEqual(['person'], names.reset_adaptive_state())
        self.assertEqual(1, self.people.clears)
        self.assertEqual(0, self.places.clears)
        self.assertFalse(self.registry.is_loaded(NAME, 'location'))
        names.find_all(self.tokens)
        self.assertEqual(['person', 'location'],
                         names.reset_adaptive_state())
        self.assertEqual(2, self.people.clears)
        self.assertEqual(1, self.places.clears)

    def test_nltk_labels(self):
        "NLTK chunk labels for each entity type"
        self.assertEqual(('PERSON',), NltkNameModel('person').labels)
        self.assertEqual(('GPE', 'LOCATION', 'FACILITY'),
                         NltkNameModel('location').labels)
        self.assertEqual(('MONEY',), NltkNameModel('money').labels)

    def test_nltk_memory(self):
        "names seen earlier in the document are found again"
        model = NltkNameModel('person')
        model._memory.add(('John', 'Smith'))
        tokens = ["Yesterday", "John", "Smith", "met", "Mary", "Smith"]
        self.assertEqual([Span(1, 3)], model._recalled_spans(tokens, []))
        self.assertEqual([], model._recalled_spans(tokens, [Span(1, 2)]))
        model.clear_adaptive_state()
        self.assertEqual([], model._recalled_spans(tokens, []))

# ---------------------------------------------------------------------
# parses
# ---------------------------------------------------------------------

FOX = "The quick brown fox jumps over the lazy dog."
FOX_TREE = "(TOP (NP (NP (DT The) (JJ quick) (JJ brown) (NN fox) (NNS jumps))"\
    " (PP (IN over) (NP (DT the) (JJ lazy) (NN dog))) (. .)))"

CHAIRMAN = "Chairman John Smith went home."
CHAIRMAN_TREE = "(TOP (S (NP (NN Chairman) (NNP John) (NNP Smith))"\
    " (VP (VBD went) (NP (NN home))) (. .)))"


def reference_parse(text, bracketed):
    "parse of the text with the given tree"
    registry = fake_registry({'tokenizer': treebank(),
                              'parser': ReferenceParser(bracketed)})
    return ConstituencyParser(registry, Tokenizer(registry)).parse(text)


class ParserTest(unittest.TestCase):
    """Constituency parses"""

    def test_skeleton(self):
        "the tree a parser starts from"
        registry = fake_registry({'tokenizer': treebank()})
        parser = ConstituencyParser(registry, Tokenizer(registry))
        skeleton = parser.skeleton("The fox.")
        self.assertEqual(INCOMPLETE_LABEL, skeleton.label())
        self.assertEqual(Span(0, 8), skeleton.span)
        self.assertEqual(1, skeleton.score)
        self.assertEqual(0, skeleton.head_index)
        leaves = list(skeleton)
        self.assertEqual([Span(0, 3), Span(4, 7), Span(7, 8)],
                         [x.span for x in leaves])
        self.assertEqual([TOKEN_LABEL] * 3, [x.label() for x in leaves])
        self.assertEqual([0, 0, 0], [x.score for x in leaves])
        self.assertEqual([0, 1, 2], [x.head_index for x in leaves])
        self.assertEqual("(INC The fox .)", skeleton.show())

    def test_parse(self):
        "the model's tree over the sentence tokens"
        parse = reference_parse(FOX, FOX_TREE)
        self.assertEqual(FOX_TREE, parse.show())
        self.assertEqual(Span(0, len(FOX)), parse.span)
        self.assertEqual(10, len(parse.tokens()))
        self.assertEqual(9, parse.head_index)
        self.assertEqual("over the lazy dog", parse[0][1].covered_text())

    def test_build_mismatch(self):
        "trees and leaves must agree"
        registry = fake_registry({'tokenizer': treebank()})
        leaves = ConstituencyParser(registry, Tokenizer(registry))\
            .skeleton("The fox.").tokens()
        tree = nltk.Tree.fromstring("(TOP (DT The) (NN fox))")
        self.assertRaises(ValueError, ParseNode.build, tree, leaves)

    def test_identity(self):
        "nodes with the same label and span are still different nodes"
        node1 = ParseNode('NP', span=Span(0, 3), text="The")
        node2 = ParseNode('NP', span=Span(0, 3), text="The")
        self.assertNotEqual(node1, node2)
        self.assertEqual(1, len(set([node1, node1])))

    def test_insert(self):
        "new constituents go below the deepest enclosing node"
        parse = reference_parse(CHAIRMAN, CHAIRMAN_TREE)
        node = ParseNode('NML', span=Span(9, 19))
        parent = parse.insert_constituent(node)
        self.assertEqual('NP', parent.label())
        self.assertEqual("(TOP (S (NP (NN Chairman) (NML (NNP John) "
                         "(NNP Smith))) (VP (VBD went) (NP (NN home))) "
                         "(. .)))", parse.show())
        self.assertEqual("John Smith", node.covered_text())

    def test_insert_same_span(self):
        "a node with the span of an existing one goes above it"
        parse = reference_parse(CHAIRMAN, CHAIRMAN_TREE)
        node = ParseNode('NML', span=Span(25, 29))
        parent = parse.insert_constituent(node)
        self.assertEqual('VP', parent.label())
        self.assertIn("(VP (VBD went) (NML (NP (NN home))))", parse.show())

    def test_insert_malformed(self):
        "spans that do not nest are refused, the tree left untouched"
        parse = reference_parse(CHAIRMAN, CHAIRMAN_TREE)
        before = parse.show()
        for span in [Span(9, 9),    # empty
                     Span(0, 40),   # outside
                     Span(10, 12),  # splits a token
                     Span(14, 24),  # crosses NP and VP
                     Span(19, 20)]:  # no token
            node = ParseNode('NML', span=span)
            self.assertRaises(MalformedSpanError,
                              parse.insert_constituent, node)
        self.assertEqual(before, parse.show())

    def test_chunk_parser(self):
        "cascaded chunking over the skeleton"
        tagger = LexiconTagger({'John': 'NNP', 'Smith': 'NNP', 'met': 'VBD',
                                'the': 'DT', 'in': 'IN', '.': '.'})
        registry = fake_registry({'tokenizer': treebank(),
                                  'parser': ChunkParserModel(DEFAULT_GRAMMAR,
                                                             tagger.pairs)})
        parse = ConstituencyParser(registry, Tokenizer(registry))\
            .parse("John Smith met the chairman in London.")
        self.assertEqual("(TOP (S (NP (NNP John) (NNP Smith)) "
                         "(VP (VBD met) (NP (NP (DT the) (NN chairman)) "
                         "(PP (IN in) (NP (NN London))))) (. .)))",
                         parse.show())

# ---------------------------------------------------------------------
# coreference
# ---------------------------------------------------------------------


class CorefTest(unittest.TestCase):
    """Mentions and coreference"""

    def test_mention_finder(self):
        "noun phrases, and proper noun runs without a constituent"
        parse = reference_parse(CHAIRMAN, CHAIRMAN_TREE)
        candidates = NounPhraseMentionFinder().find_mentions(parse)
        self.assertEqual([Span(0, 19), Span(9, 19), Span(25, 29)],
                         [x.span for x in candidates])
        self.assertEqual([False, True, False],
                         [x.parse is None for x in candidates])

    def test_reconcile(self):
        "every mention ends up with a constituent of its own"
        parse = reference_parse(CHAIRMAN, CHAIRMAN_TREE)
        candidates = NounPhraseMentionFinder().find_mentions(parse)
        mentions = MentionReconciler().reconcile(parse, candidates,
                                                 sentence_index=3)
        self.assertEqual(3, len(mentions))
        for candidate, mention in zip(candidates, mentions):
            self.assertIsNotNone(mention.parse)
            self.assertEqual(candidate.span, mention.span)
            self.assertEqual(mention.span, mention.parse.span)
            self.assertEqual(3, mention.sentence_index)
        self.assertEqual(["Chairman John Smith", "John Smith", "home"],
                         [x.text for x in mentions])
        created = mentions[1].parse
        self.assertEqual('NML', created.label())
        self.assertEqual(1.0, created.score)
        self.assertEqual(1, created.head_index)
        self.assertEqual(["John", "Smith"], mentions[1].tokens())
        self.assertIn("(NML (NNP John) (NNP Smith))", parse.show())

    def test_reconcile_malformed(self):
        "candidates that do not nest"
        parse = reference_parse(CHAIRMAN, CHAIRMAN_TREE)
        self.assertRaises(MalformedSpanError,
                          MentionReconciler().reconcile, parse,
                          [MentionCandidate(Span(14, 24))])

    def test_mention_needs_parse(self):
        "mentions always have a constituent"
        self.assertRaises(ValueError, Mention, Span(0, 3), None)

    def test_link_nothing(self):
        "no mentions, no entities, no model"
        registry = fake_registry({})
        self.assertEqual([], CoreferenceLinker(registry).link([]))
        self.assertEqual(0, sum(registry.load_attempts.values()))

    def test_link_unavailable(self):
        "missing lexical resources"
        parse = reference_parse(CHAIRMAN, CHAIRMAN_TREE)
        mentions = [Mention(Span(25, 29), parse[0][1][1])]
        linker = CoreferenceLinker(fake_registry({'coref': FakeLinker()}),
                                   wordnet_dir='/nowhere')
        with self.assertRaises(LinkerUnavailableError) as cm:
            linker.link(mentions)
        self.assertEqual('/nowhere', cm.exception.wordnet_dir)
        broken = FakeLinker(error=LookupError("Resource wordnet not found"))
        linker = CoreferenceLinker(fake_registry({'coref': broken}))
        with self.assertRaises(LinkerUnavailableError) as cm:
            linker.link(mentions)
        self.assertIsInstance(cm.exception.__cause__, LookupError)

    def test_link(self):
        "entities come from the linker model"
        parse = reference_parse(CHAIRMAN, CHAIRMAN_TREE)
        mention = Mention(Span(25, 29), parse[0][1][1])
        entity = DiscourseEntity([mention])
        linker = CoreferenceLinker(
            fake_registry({'coref': FakeLinker(answer=[entity])}))
        self.assertEqual([entity], linker.link([mention]))
        self.assertEqual(["home"], [m.text for m in entity])


# ---------------------------------------------------------------------
# factories
# ---------------------------------------------------------------------


class FactoriesTest(unittest.TestCase):
    """Building models from resources"""

    def test_native_objects(self):
        "raw NLTK objects are wrapped"
        tokenizer = tokenizer_model(
            io.BytesIO(pickle.dumps(TreebankWordTokenizer())))
        self.assertIsInstance(tokenizer, NltkTokenizerModel)
        self.assertEqual([Span(0, 2), Span(3, 6), Span(6, 7)],
                         tokenizer.tokenize("Hi you."))
        tagger = pos_model(
            io.BytesIO(pickle.dumps(nltk.tag.DefaultTagger('NN'))))
        self.assertIsInstance(tagger, NltkPosModel)

    def test_adapters(self):
        "our own adapters are used as they are"
        names = name_model(io.BytesIO(pickle.dumps(NltkNameModel('person'))))
        self.assertEqual('person', names.entity_type)
        parser = chunk_parser_model(io.BytesIO(DEFAULT_GRAMMAR
                                               .encode('utf-8')))
        self.assertEqual(DEFAULT_GRAMMAR, parser.grammar)

    def test_unusable(self):
        "objects without the expected methods"
        self.assertRaises(TypeError, pos_model,
                          io.BytesIO(pickle.dumps({'not': 'a tagger'})))
        self.assertRaises(TypeError, name_model,
                          io.BytesIO(pickle.dumps(['no', 'names'])))

    def test_registry_wraps(self):
        "unusable resources are reported as load errors"
        config = Configuration({POS_KEY: 'pos'})
        registry = ModelRegistry(config,
                                 MemoryLoader({'pos': None}),
                                 {POS: pos_model})
        with self.assertRaises(ModelLoadError) as cm:
            registry.get(POS)
        self.assertEqual('pos', cm.exception.locator)

    def test_linker(self):
        "linker parameters are read from its directory"
        tdir = tempfile.mkdtemp()
        try:
            with open(os.path.join(tdir, LINKER_FILE), 'w',
                      encoding='utf-8') as stream:
                yaml.safe_dump({'max_distance': 1}, stream)
            linker = head_match_linker(tdir, wordnet_dir='/wn')
            self.assertEqual(1, linker.max_distance)
            self.assertEqual('/wn', linker.wordnet_dir)
            self.assertIn('he', linker.pronouns)
        finally:
            shutil.rmtree(tdir)

    def test_wordnet_dir(self):
        "a WordNet directory is read (not refused) wherever it is"
        wndir = tempfile.mkdtemp()
        try:
            resolver = HeadMatchResolver(wordnet_dir=wndir)
            with self.assertRaises(OSError) as cm:
                resolver.wordnet()
            self.assertNotIsInstance(cm.exception, PermissionError)
            self.assertIn('lexnames', str(cm.exception))

            parse = reference_parse(CHAIRMAN, CHAIRMAN_TREE)
            mentions = [Mention(Span(25, 29), parse[0][1][1])]
            linker = CoreferenceLinker(fake_registry({'coref': resolver}),
                                       wordnet_dir=wndir)
            with self.assertRaises(LinkerUnavailableError) as cm:
                linker.link(mentions)
            self.assertIn('lexnames', str(cm.exception))
            self.assertEqual(wndir, cm.exception.wordnet_dir)
        finally:
            if wndir in nltk.data.path:
                nltk.data.path.remove(wndir)
            shutil.rmtree(wndir)

# ---------------------------------------------------------------------
# the whole pipeline
# ---------------------------------------------------------------------


LEXICON = {'John': 'NNP', 'Smith': 'NNP', 'met': 'VBD', 'the': 'DT',
           'He': 'PRP', 'liked': 'VBD', '.': '.'}

STORY = "John Smith met the chairman. He liked the man."


class ToolkitTest(unittest.TestCase):
    """All stages together"""

    def setUp(self):
        tagger = LexiconTagger(LEXICON)
        resolver = HeadMatchResolver()
        resolver._wordnet = FakeWordNet({'man': ['person.n.01'],
                                         'chairman': ['person.n.01']})
        self.people = FakeNameModel(["John Smith"])
        self.registry = fake_registry({
            'sentence': RegexSentenceModel(),
            'tokenizer': treebank(),
            'pos': tagger,
            'name-person': self.people,
            'name-location': FakeNameModel([]),
            'parser': ChunkParserModel(DEFAULT_GRAMMAR, tagger.pairs),
            'coref': resolver,
        })
        self.toolkit = Toolkit(self.registry)

    def test_stages(self):
        "one stage at a time"
        toolkit = self.toolkit
        sentences = toolkit.detect_sentences(STORY)
        self.assertEqual(["John Smith met the chairman.",
                          "He liked the man."], sentences)
        tokens = toolkit.tokenize(sentences[0])
        self.assertEqual(['NNP', 'NNP', 'VBD', 'DT', 'NN', '.'],
                         toolkit.tag_part_of_speech(tokens))
        with toolkit.document():
            self.assertEqual([Span(0, 2)],
                             toolkit.find_named_entities(tokens))
        self.assertEqual(1, self.people.clears)
        self.assertEqual("(TOP (S (NP (PRP He)) (VP (VBD liked) "
                         "(NP (DT the) (NN man))) (. .)))",
                         toolkit.parse_sentence(sentences[1]).show())

    def test_entity_mentions(self):
        "pronouns and synonyms join earlier entities"
        entities = self.toolkit.find_entity_mentions(
            self.toolkit.detect_sentences(STORY))
        self.assertEqual([["John Smith"],
                          ["the chairman", "He", "the man"]],
                         [[m.text for m in e] for e in entities])
        self.assertEqual([0, 1, 1],
                         [m.sentence_index for m in entities[1]])

    def test_annotate(self):
        "a whole document"
        doc = self.toolkit.annotate(STORY)
        self.assertEqual(2, len(doc.sentences))
        first = doc.sentences[0]
        self.assertEqual(["John", "Smith", "met", "the", "chairman", "."],
                         first.tokens)
        self.assertEqual([NamedEntity('person', Span(0, 2))], first.names)
        self.assertEqual(2, len(doc.entities))
        self.assertEqual(["John Smith", "the chairman", "He", "the man"],
                         [m.text for m in doc.mentions()])
        self.assertEqual(1, self.people.clears)

    def test_file(self):
        "line oriented input"
        tdir = tempfile.mkdtemp()
        try:
            fname = os.path.join(tdir, 'story.txt')
            with open(fname, 'w', encoding='utf-8') as stream:
                stream.write("A headline\n" + STORY + "\n")
            self.assertEqual(["A headline.",
                              "John Smith met the chairman.",
                              "He liked the man."],
                             self.toolkit.detect_sentences_in_file(fname))
        finally:
            shutil.rmtree(tdir)

    def test_file_charset(self):
        "files are read in the charset the toolkit was built with"
        toolkit = Toolkit(self.registry, charset='latin-1')
        tdir = tempfile.mkdtemp()
        try:
            fname = os.path.join(tdir, 'story.txt')
            with open(fname, 'w', encoding='latin-1') as stream:
                stream.write("Premi\u00e8re ligne\n")
            self.assertEqual(["Premi\u00e8re ligne."],
                             toolkit.detect_sentences_in_file(fname))
            self.assertRaises(UnicodeDecodeError,
                              toolkit.detect_sentences_in_file,
                              fname, charset='utf-8')
        finally:
            shutil.rmtree(tdir)
        settings = Settings(charset='latin-1')
        toolkit = Toolkit.from_settings(settings=settings,
                                        config=Configuration({}))
        self.assertEqual('latin-1', toolkit.charset)


if __name__ == '__main__':
    unittest.main()
