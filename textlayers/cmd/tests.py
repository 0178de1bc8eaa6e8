# -*- coding: utf-8 -*-
#
# License: BSD3

# pylint: disable=R0904, invalid-name

"""
Tests for the textlayers command line
"""

from contextlib import redirect_stdout
import io
import os
import pickle
import shutil
import tempfile
import unittest

import nltk
from nltk.tokenize.punkt import PunktSentenceTokenizer
import yaml

from textlayers.annotation import Span
from textlayers.config import SENTENCE_KEY, TOKENIZER_KEY, POS_KEY
from textlayers.external.coref import DiscourseEntity, Mention
from textlayers.external.nltk_models import (NltkPosModel,
                                             NltkSentenceModel,
                                             NltkTokenizerModel)
from textlayers.external.parser import ParseNode, TOKEN_LABEL

from . import SUBCOMMANDS, main
from . import coref as coref_cmd
from .args import Subcommands, get_settings_from_args


def _dump(obj, fname):
    with open(fname, 'wb') as stream:
        pickle.dump(obj, stream)


class CommandTest(unittest.TestCase):
    """Running the subcommands"""

    def setUp(self):
        self.tdir = tempfile.mkdtemp()
        _dump(NltkSentenceModel(PunktSentenceTokenizer()),
              os.path.join(self.tdir, 'sent.pickle'))
        _dump(NltkTokenizerModel(nltk.tokenize.TreebankWordTokenizer()),
              os.path.join(self.tdir, 'token.pickle'))
        _dump(NltkPosModel(nltk.tag.DefaultTagger('NN')),
              os.path.join(self.tdir, 'pos.pickle'))
        self.config = os.path.join(self.tdir, 'models.yaml')
        with open(self.config, 'w', encoding='utf-8') as stream:
            yaml.safe_dump({SENTENCE_KEY: 'sent.pickle',
                            TOKENIZER_KEY: 'token.pickle',
                            POS_KEY: 'pos.pickle'}, stream)
        self.input = os.path.join(self.tdir, 'input.txt')
        with open(self.input, 'w', encoding='utf-8') as stream:
            stream.write("Pierre Vinken will join the board\n")

    def tearDown(self):
        shutil.rmtree(self.tdir)

    def run_main(self, *argv):
        "exit code and standard output"
        out = io.StringIO()
        with redirect_stdout(out):
            code = main(list(argv))
        return code, out.getvalue()

    def test_parser(self):
        "every subcommand is available"
        parser = Subcommands(SUBCOMMANDS).parser()
        for module in SUBCOMMANDS:
            args = parser.parse_args([module.NAME, 'x'])
            self.assertEqual(module.NAME, args.subcommand)
            self.assertIs(module.main, args.func)

    def test_overrides(self):
        "command line flags win over the settings"
        parser = Subcommands(SUBCOMMANDS).parser()
        args = parser.parse_args(['tokens', '--config', self.config,
                                  '--model-path', self.tdir,
                                  '--wordnet-dir', '/wn'])
        settings = get_settings_from_args(args)
        self.assertEqual(self.config, settings.config_file)
        self.assertEqual([self.tdir], settings.search_path())
        self.assertEqual('/wn', settings.wordnet_dir)

    def test_sentences(self):
        "one sentence per line, with final punctuation"
        code, out = self.run_main('sentences', self.input, '--lines',
                                  '--config', self.config,
                                  '--model-path', self.tdir)
        self.assertEqual(0, code)
        self.assertEqual("Pierre Vinken will join the board.\n", out)

    def test_tokens(self):
        "a table of tokens"
        code, out = self.run_main('tokens', self.input,
                                  '--config', self.config,
                                  '--model-path', self.tdir,
                                  '--format', 'tsv')
        self.assertEqual(0, code)
        self.assertIn("Vinken", out)
        self.assertIn("NN", out)

    def test_missing_model(self):
        "pipeline errors give an exit code, not a traceback"
        os.remove(os.path.join(self.tdir, 'sent.pickle'))
        code, _ = self.run_main('sentences', self.input,
                                '--config', self.config,
                                '--model-path', self.tdir)
        self.assertEqual(1, code)
        code, _ = self.run_main('sentences', self.input,
                                '--config', os.path.join(self.tdir, 'no.yaml'))
        self.assertEqual(1, code)

    def test_coref_rows(self):
        "singleton entities are left out unless asked for"
        text = "Pierre Vinken"
        leaves = [ParseNode(TOKEN_LABEL, span=Span(0, 6), text=text),
                  ParseNode(TOKEN_LABEL, span=Span(7, 13), text=text)]
        node = ParseNode('NP', leaves, text=text)
        entities = [DiscourseEntity([Mention(Span(0, 13), node),
                                     Mention(Span(7, 13), node[1],
                                             sentence_index=2)]),
                    DiscourseEntity([Mention(Span(0, 6), node[0])])]
        self.assertEqual([[0, 2, 'Pierre Vinken [0] | Vinken [2]']],
                         coref_cmd.entity_rows(entities))
        self.assertEqual(2, len(coref_cmd.entity_rows(entities,
                                                       singletons=True)))


if __name__ == '__main__':
    unittest.main()
