# -*- coding: utf-8 -*-
#
# License: BSD3
# pylint: disable=too-many-public-methods, invalid-name

"""
Tests for textlayers
"""

import io
import os
import shutil
import tempfile
import unittest

from textlayers.annotation import Span
from textlayers.config import (Configuration, Settings, load_configuration,
                               DEFAULT_CONFIG_FILE,
                               SENTENCE_KEY, POS_KEY, NAME_FORMAT_KEY,
                               NAME_TYPES_KEY, COREF_KEY)
from textlayers.errors import (ConfigurationError, ModelLoadError,
                               ResourceNotFoundError)
from textlayers.registry import (ModelRegistry, SENTENCE, POS, NAME, COREF)
from textlayers.resources import ResourceLoader, read_lines

# ---------------------------------------------------------------------
# spans
# ---------------------------------------------------------------------


class SpanTest(unittest.TestCase):
    "tests for textlayers.annotation.Span"

    def __init__(self, *args, **kwargs):
        super(SpanTest, self).__init__(*args, **kwargs)
        self.addTypeEqualityFunc(Span, self.assertEqualStrFail)

    def assertEqualStrFail(self, a, b, msg):
        """
        just like assertEqual but display both sides with str on failure
        """
        if a != b:
            msg = msg or "{0} != {1}".format(a, b)
            raise self.failureException(msg)

    def assertOverlap(self, expected, pair1, pair2, **kwargs):
        "true if `pair1.overlaps(pair2) == expected` (modulo boxing)"
        (x1, y1) = pair1
        (x2, y2) = pair2
        (rx, ry) = expected
        o = Span(x1, y1).overlaps(Span(x2, y2), **kwargs)
        self.assertTrue(o)
        self.assertEqual(Span(rx, ry), o)

    def assertNotOverlap(self, pair1, pair2, **kwargs):
        "true if `pair1` and `pair2` do not overlap (modulo boxing)"
        (x1, y1) = pair1
        (x2, y2) = pair2
        self.assertFalse(Span(x1, y1).overlaps(Span(x2, y2), **kwargs))

    def test_invalid(self):
        "negative or reversed spans are refused"
        self.assertRaises(ValueError, Span, -1, 3)
        self.assertRaises(ValueError, Span, 4, 3)
        self.assertTrue(Span(3, 3).is_empty())

    def test_overlap(self):
        "Span.overlaps() function"

        self.assertNotOverlap((5, 10), (11, 12))
        self.assertNotOverlap((11, 12), (5, 10))

        # should not overlap at edges
        self.assertNotOverlap((5, 10), (10, 15))
        self.assertOverlap((10, 10), (5, 10), (10, 15), inclusive=True)

        self.assertOverlap((6, 9), (5, 10), (6, 9))
        self.assertOverlap((6, 9), (6, 9), (5, 10))
        self.assertOverlap((7, 10), (5, 10), (7, 12))
        self.assertOverlap((7, 10), (7, 12), (5, 10))

    def test_crosses(self):
        "spans that could not both be tree nodes"
        self.assertTrue(Span(0, 5).crosses(Span(3, 8)))
        self.assertTrue(Span(3, 8).crosses(Span(0, 5)))
        self.assertFalse(Span(0, 5).crosses(Span(1, 3)))
        self.assertFalse(Span(1, 3).crosses(Span(0, 5)))
        self.assertFalse(Span(0, 5).crosses(Span(5, 8)))
        self.assertFalse(Span(0, 5).crosses(Span(0, 5)))

    def test_merge(self):
        "Span.merge_all()"
        self.assertEqual(Span(1, 9),
                         Span.merge_all([Span(2, 4), Span(1, 3), Span(6, 9)]))
        self.assertRaises(ValueError, Span.merge_all, [])

    def test_coerce(self):
        "pairs are accepted where spans are expected"
        self.assertEqual(Span(1, 4), Span.coerce((1, 4)))
        span = Span(2, 3)
        self.assertIs(span, Span.coerce(span))

    def test_ordering(self):
        "spans sort by start, then end"
        spans = [Span(3, 4), Span(0, 5), Span(0, 2)]
        self.assertEqual([Span(0, 2), Span(0, 5), Span(3, 4)], sorted(spans))
        self.assertEqual(1, len(set([Span(1, 2), Span(1, 2)])))

# ---------------------------------------------------------------------
# configuration
# ---------------------------------------------------------------------


class ConfigurationTest(unittest.TestCase):
    "tests for textlayers.config"

    def test_get(self):
        "values come back as strings, lists joined with commas"
        config = Configuration.from_yaml(
            "sentence.model: en-sent.pickle\n"
            "namefinder.types: [person, location]\n"
            "other: 3\n")
        self.assertEqual('en-sent.pickle', config.get(SENTENCE_KEY))
        self.assertEqual('person,location', config.get(NAME_TYPES_KEY))
        self.assertEqual('3', config.get('other'))
        self.assertIsNone(config.get(POS_KEY))
        self.assertIn(SENTENCE_KEY, config)
        self.assertNotIn(POS_KEY, config)

    def test_get_list(self):
        "lists, and comma separated strings"
        config = Configuration({NAME_TYPES_KEY: 'person, date,,money',
                                'types2': ['a', 'b']})
        self.assertEqual(['person', 'date', 'money'],
                         config.get_list(NAME_TYPES_KEY))
        self.assertEqual(['a', 'b'], config.get_list('types2'))
        self.assertIsNone(config.get_list('nope'))

    def test_frozen(self):
        "the configuration does not follow changes to its source"
        values = {SENTENCE_KEY: 'a'}
        config = Configuration(values)
        values[SENTENCE_KEY] = 'b'
        self.assertEqual('a', config.get(SENTENCE_KEY))

    def test_bad_yaml(self):
        "unusable configuration documents"
        self.assertRaises(ConfigurationError,
                          Configuration.from_yaml, "- just\n- a list\n")
        self.assertRaises(ConfigurationError,
                          Configuration.from_yaml, "key: [unclosed\n")
        self.assertEqual(None, Configuration.from_yaml("").get(SENTENCE_KEY))

    def test_default_file(self):
        "the configuration shipped with the package"
        config = load_configuration(DEFAULT_CONFIG_FILE)
        self.assertEqual('en-sent.pickle', config.get(SENTENCE_KEY))
        self.assertEqual('en-ner-{}.pickle', config.get(NAME_FORMAT_KEY))
        self.assertEqual(['person', 'organization', 'location'],
                         config.get_list(NAME_TYPES_KEY))

    def test_settings_file(self):
        "the configuration file named by the settings"
        tdir = tempfile.mkdtemp()
        try:
            fname = os.path.join(tdir, 'models.yaml')
            with open(fname, 'w', encoding='utf-8') as stream:
                stream.write("pos.model: /models/pos.bin\n")
            settings = Settings(config_file=fname)
            config = load_configuration(settings=settings)
            self.assertEqual('/models/pos.bin', config.get(POS_KEY))
            self.assertEqual(fname, config.source)
            missing = Settings(config_file=os.path.join(tdir, 'nope.yaml'))
            self.assertRaises(ConfigurationError,
                              load_configuration, settings=missing)
        finally:
            shutil.rmtree(tdir)

    def test_settings(self):
        "search path and log level"
        settings = Settings(model_path=os.pathsep.join(['a', '', 'b']),
                            log_level='debug')
        self.assertEqual(['a', 'b'], settings.search_path())
        self.assertEqual('DEBUG', settings.log_level)
        self.assertRaises(ValueError, Settings, log_level='chatty')

# ---------------------------------------------------------------------
# resources
# ---------------------------------------------------------------------


class ResourcesTest(unittest.TestCase):
    "tests for textlayers.resources"

    def setUp(self):
        self.tdir = tempfile.mkdtemp()
        self.fname = os.path.join(self.tdir, 'model.bin')
        with open(self.fname, 'wb') as stream:
            stream.write(b'abc')
        os.makedirs(os.path.join(self.tdir, 'coref'))

    def tearDown(self):
        shutil.rmtree(self.tdir)

    def test_search_path(self):
        "locators are resolved against the search path"
        loader = ResourceLoader(['/nonexistent', self.tdir],
                                use_nltk_data=False)
        with loader.open('model.bin') as stream:
            self.assertEqual(b'abc', stream.read())
        with loader.open(self.fname) as stream:
            self.assertEqual(b'abc', stream.read())
        self.assertIsNone(loader.open('missing.bin'))
        self.assertIsNone(loader.open('coref'))
        self.assertEqual(os.path.join(self.tdir, 'coref'),
                         loader.locate('coref'))
        self.assertIsNone(loader.locate('missing'))

    def test_nltk_fallback(self):
        "unknown NLTK resources are not found (rather than an error)"
        loader = ResourceLoader([self.tdir])
        self.assertIsNone(loader.open('textlayers-no-such-resource.pickle'))
        self.assertIsNone(loader.open('/no/such/absolute/path.pickle'))

    def test_blank_locator(self):
        "blank locators lead nowhere (not to the search directories)"
        loader = ResourceLoader([self.tdir])
        self.assertIsNone(loader.locate(''))
        self.assertIsNone(loader.locate('  '))
        self.assertIsNone(loader.open(''))

    def test_read_lines(self):
        "line terminators are dropped"
        fname = os.path.join(self.tdir, 'text.txt')
        with open(fname, 'wb') as stream:
            stream.write('Première ligne\r\nSecond line\n\nlast'
                         .encode('latin-1'))
        self.assertEqual(['Première ligne', 'Second line', '', 'last'],
                         read_lines(fname, 'latin-1'))

# ---------------------------------------------------------------------
# registry
# ---------------------------------------------------------------------


class FakeLoader(object):
    """
    Resources held in memory; remembers which locators were asked for
    """
    def __init__(self, resources, paths=()):
        self.resources = resources
        self.paths = set(paths)
        self.requests = []

    def open(self, locator):
        "binary stream on the resource"
        self.requests.append(locator)
        if locator not in self.resources:
            return None
        return io.BytesIO(self.resources[locator])

    def locate(self, locator):
        "the locator itself, if it is a known path"
        self.requests.append(locator)
        return locator if locator in self.paths else None


class FakeModel(object):
    "records the resource it was built from"
    def __init__(self, data):
        self.data = data


def read_model(stream):
    "factory building a FakeModel from a stream"
    return FakeModel(stream.read())


def broken_model(_):
    "factory that always fails"
    raise ValueError("not a model")


class RegistryTest(unittest.TestCase):
    "tests for textlayers.registry.ModelRegistry"

    def setUp(self):
        self.config = Configuration({
            SENTENCE_KEY: 'sent.bin',
            NAME_FORMAT_KEY: 'ner-{}.bin',
            POS_KEY: 'pos.bin',
            COREF_KEY: '/models/coref',
        })
        self.loader = FakeLoader({'sent.bin': b'sentences',
                                  'ner-person.bin': b'persons',
                                  'pos.bin': b'junk'},
                                 paths=['/models/coref'])
        self.factories = {SENTENCE: read_model,
                          NAME: read_model,
                          POS: broken_model,
                          COREF: FakeModel}
        self.registry = ModelRegistry(self.config, self.loader,
                                      self.factories)

    def test_load_once(self):
        "models are loaded on first use and then reused"
        self.assertFalse(self.registry.is_loaded(SENTENCE))
        model = self.registry.get(SENTENCE)
        self.assertEqual(b'sentences', model.data)
        self.assertIs(model, self.registry.get(SENTENCE))
        self.assertEqual(1, self.registry.load_attempts[(SENTENCE, None)])
        self.assertEqual(['sent.bin'], self.loader.requests)
        self.assertTrue(self.registry.is_loaded(SENTENCE))

    def test_variant(self):
        "the entity type is substituted into the locator template"
        model = self.registry.get(NAME, 'person')
        self.assertEqual(b'persons', model.data)
        self.assertEqual(['ner-person.bin'], self.loader.requests)
        self.assertEqual([((NAME, 'person'), model)],
                         self.registry.cached(NAME))
        self.assertEqual([], self.registry.cached(SENTENCE))

    def test_missing_key(self):
        "no configured locator: error before any resource access"
        registry = ModelRegistry(Configuration({}), self.loader,
                                 self.factories)
        with self.assertRaises(ConfigurationError) as cm:
            registry.get(SENTENCE)
        self.assertEqual(SENTENCE_KEY, cm.exception.key)
        self.assertEqual([], self.loader.requests)

    def test_missing_resource(self):
        "failures are not cached"
        with self.assertRaises(ResourceNotFoundError) as cm:
            self.registry.get(NAME, 'location')
        self.assertEqual(NAME_FORMAT_KEY, cm.exception.key)
        self.assertEqual('ner-location.bin', cm.exception.locator)
        self.assertRaises(ResourceNotFoundError,
                          self.registry.get, NAME, 'location')
        self.assertEqual(2, self.registry.load_attempts[(NAME, 'location')])
        self.assertEqual([], self.registry.cached())

    def test_broken_model(self):
        "factory failures are wrapped, with their cause"
        with self.assertRaises(ModelLoadError) as cm:
            self.registry.get(POS)
        self.assertEqual(POS_KEY, cm.exception.key)
        self.assertEqual('pos.bin', cm.exception.locator)
        self.assertIsInstance(cm.exception.__cause__, ValueError)

    def test_path_resource(self):
        "directory resources are handed over as paths"
        model = self.registry.get(COREF)
        self.assertEqual('/models/coref', model.data)

    def test_blank_key(self):
        "a blank locator counts as a missing one"
        for value in ['', '   ']:
            config = Configuration({COREF_KEY: value})
            registry = ModelRegistry(config, self.loader, self.factories)
            with self.assertRaises(ConfigurationError) as cm:
                registry.get(COREF)
            self.assertEqual(COREF_KEY, cm.exception.key)
        self.assertEqual([], self.loader.requests)

    def test_no_factory(self):
        "stages without a factory fail before any resource access"
        registry = ModelRegistry(self.config, self.loader, {})
        with self.assertRaises(ModelLoadError) as cm:
            registry.get(SENTENCE)
        self.assertEqual(SENTENCE_KEY, cm.exception.key)
        self.assertEqual('sent.bin', cm.exception.locator)
        self.assertEqual([], self.loader.requests)


if __name__ == '__main__':
    unittest.main()
