# License: BSD3

"""
Sentence segmentation.

Boundary detection itself belongs to the sentence model; this module
trims what the model finds and normalises line-oriented input.
"""

import logging
import unicodedata

from textlayers.annotation import Span
from textlayers.registry import SENTENCE

logger = logging.getLogger(__name__)


def ends_with_punctuation(sentence):
    """
    True if the last character of the sentence is punctuation
    (in the Unicode sense: any `P*` category)
    """
    return bool(sentence) and\
        unicodedata.category(sentence[-1]).startswith('P')


class SentenceSegmenter(object):
    """
    Break text into sentences.

    Attributes
    ----------
    corrections : int
        Number of sentences `segment_lines` had to terminate with a
        period so far
    """
    def __init__(self, registry):
        self.registry = registry
        self.corrections = 0

    def segment(self, text):
        """
        Return the sentences of the text as (trimmed) substrings
        """
        model = self.registry.get(SENTENCE)
        sentences = []
        for span in model.detect(text):
            span = Span.coerce(span)
            sentence = text[span.start:span.end].strip()
            if sentence:
                sentences.append(sentence)
        return sentences

    def segment_lines(self, lines):
        """
        Segment each line on its own, so sentences never cross a line
        boundary.

        Lines from news stories and the like include headings and titles
        that do not end in punctuation; these would be indistinguishable
        from truncated sentences, so we append a period to any sentence
        without final punctuation. Sentences are numbered across the
        whole input in the warnings.
        """
        sentences = []
        for line in lines:
            for sentence in self.segment(line):
                idx = len(sentences)
                if ends_with_punctuation(sentence):
                    sentences.append(sentence)
                else:
                    logger.warning(f"Sentence #{idx} does not end with "
                                   f"punctuation: [{sentence}]; appending a period")
                    self.corrections += 1
                    sentences.append(sentence + '.')
        return sentences
