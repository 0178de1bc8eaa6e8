#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# License: BSD3

"""
Tokenization and part of speech tagging.

Both stages delegate the actual work to their model (see
`textlayers.registry`); what we add is the bookkeeping that keeps token
strings, token spans and tags aligned with each other.
"""

from itertools import filterfalse, islice

from textlayers.annotation import Span
from textlayers.errors import (ConfigurationError, MalformedSpanError,
                               ModelLoadError, ResourceNotFoundError,
                               TaggingError)
from textlayers.registry import POS, TOKENIZER

# I don't yet see how "too few public methods" is helpful
# pylint: disable=R0903


# ---------------------------------------------------------------------
# token spans
# ---------------------------------------------------------------------


def generic_token_spans(text, tokens, offset=0, txtfn=None):
    """
    Given a string and a sequence of substrings within than string,
    infer a span for each of the substrings.

    We do this spans by walking the text and the tokens we consume
    substrings and skipping over any whitespace (including that
    which is within the tokens). For this to work, the substring
    sequence must be identical to the text modulo whitespace.

    Spans are relative to the start of the string itself, but can be
    shifted by passing an offset (the start of the original string's
    span). Empty tokens are accepted but have a zero-length span.

    Note: this function is lazy so you can use it incrementally
    provided you can generate the tokens lazily too

    :param txtfn: function to extract text from a token (default None,
                  treated as identity function)
    """
    txt_iter = filterfalse(lambda x: x[1].isspace(),
                           enumerate(text))
    txtfn = txtfn or (lambda x: x)
    last = offset  # for corner case of empty tokens
    for token in tokens:
        tok_chars = list(filterfalse(lambda x: x.isspace(),
                                     txtfn(token)))
        if not tok_chars:
            yield Span(last, last)
            continue
        prefix = list(islice(txt_iter, len(tok_chars)))
        if not prefix:
            msg = "Too many tokens (current: %s)" % txtfn(token)
            raise MalformedSpanError(Span(last, last), msg)
        last = prefix[-1][0] + 1 + offset
        span = Span(prefix[0][0] + offset, last)
        pretty_prefix = text[span.start - offset:span.end - offset]
        # check the text prefix to make sure we have the same
        # non-whitespace characters
        for txt_pair, tok_char in zip(prefix, tok_chars):
            idx, txt_char = txt_pair
            if txt_char != tok_char:
                msg = "token mismatch at char %d (%s vs %s)\n"\
                    % (idx, txt_char, tok_char)\
                    + " token: [%s]\n" % token\
                    + " text:  [%s]" % pretty_prefix
                raise MalformedSpanError(span, msg)
        yield span


def check_token_spans(text, spans):
    """
    Make sure the token spans are ordered, non-overlapping and within
    the text; return them as a list of `Span`
    """
    res = []
    last_end = 0
    for span in spans:
        span = Span.coerce(span)
        if span.end > len(text):
            raise MalformedSpanError(span, "token goes past the end of the "
                                     "text (length %d)" % len(text))
        if span.start < last_end:
            raise MalformedSpanError(span, "token overlaps or precedes the "
                                     "previous one (ending at %d)" % last_end)
        last_end = span.end
        res.append(span)
    return res


# ---------------------------------------------------------------------
# stages
# ---------------------------------------------------------------------


class Tokenizer(object):
    """
    Split a sentence into tokens, given as strings or as character
    spans into the sentence. The two views are always consistent:
    `tokenize(s)[i] == s[span.start:span.end]` for
    `span = tokenize_pos(s)[i]`
    """
    def __init__(self, registry):
        self.registry = registry

    def tokenize_pos(self, sentence):
        """
        Return the character spans of the tokens in the sentence
        """
        model = self.registry.get(TOKENIZER)
        return check_token_spans(sentence, model.tokenize(sentence))

    def tokenize(self, sentence):
        """
        Return the tokens of the sentence as strings
        """
        return [sentence[s.start:s.end] for s in self.tokenize_pos(sentence)]


class PosTagger(object):
    """
    Assign one part of speech tag to every token of a sentence
    """
    def __init__(self, registry):
        self.registry = registry

    def _model(self):
        try:
            return self.registry.get(POS)
        except (ConfigurationError, ResourceNotFoundError,
                ModelLoadError) as err:
            raise TaggingError("Part of speech model unavailable: %s"
                               % err) from err

    def tag(self, tokens):
        """
        Return the tags for the tokens, in the same order
        """
        tokens = list(tokens)
        if not tokens:
            return []
        tags = list(self._model().tag(tokens))
        if len(tags) != len(tokens):
            raise TaggingError("Tagger returned %d tags for %d tokens"
                               % (len(tags), len(tokens)))
        return tags

    def tag_tokens(self, tokens):
        """
        Return `(word, tag)` pairs for the tokens
        """
        tokens = list(tokens)
        return list(zip(tokens, self.tag(tokens)))
