#!/usr/bin/env python
# -*- coding: utf-8 -*-
#
# License: BSD3

"""
Constituency parse trees over sentence text, and the parsing stage that
produces them.

Parse nodes build off the NLTK Tree class, with character spans into the
sentence text attached to every node.  Token leaves are nodes too (with
the `TK` label and no children), so that each token can be pointed to,
and so that new constituents can be grafted onto an existing tree (see
`ParseNode.insert_constituent`).
"""

from collections import deque

import nltk.tree

from textlayers.annotation import Span
from textlayers.errors import MalformedSpanError
from textlayers.registry import PARSER
from textlayers.util import concat

TOKEN_LABEL = 'TK'
"label of token leaves"

INCOMPLETE_LABEL = 'INC'
"label of the root of a tree that has not been parsed yet"

TOP_LABEL = 'TOP'
"label of the root of a parsed tree"


class SearchableTree(nltk.Tree):
    """
    A tree with helper search functions
    """
    def __init__(self, node, children):
        nltk.Tree.__init__(self, node, children)

    def topdown(self, pred, prunable=None):
        """
        Searching from the top down, return the biggest subtrees for which the
        predicate is True (or empty list if none are found).

        The optional prunable function can be used to throw out subtrees for
        more efficient search (note that pred always overrides prunable
        though).
        """
        if pred(self):
            return [self]
        elif prunable and prunable(self):
            return []
        else:
            return list(concat(x.topdown(pred, prunable) for x in self
                               if isinstance(x, SearchableTree)))

    def depth_first_iterator(self):
        """
        Iterate on the nodes of the tree, depth-first, pre-order.
        """
        node = self
        parent_stack = []
        while parent_stack or (node is not None):
            if node is not None:
                yield node
                if isinstance(node, SearchableTree) and len(node):
                    parent_stack.extend(reversed(node[1:]))
                    node = node[0]
                else:
                    node = None
            else:
                node = parent_stack.pop()


class ParseNode(SearchableTree):
    """
    A labelled node of a constituency tree, covering a character span of
    the sentence text.

    Invariants: the span of a node encloses the spans of its children;
    children are ordered left to right and do not overlap; token leaves
    correspond one to one with the tokens of the sentence.

    Nodes are compared by identity: two nodes with the same label and
    span are still different nodes (unlike NLTK trees, which compare by
    value).

    Attributes
    ----------
    span : Span
        Character offsets into `text`
    text : str
        The sentence text (shared by all nodes of a tree)
    score : float
        Score (probability) assigned by whatever created the node
    head_index : int
        Index of the head token of the node
    """
    def __init__(self, label, children=None, span=None, text=None,
                 score=1.0, head_index=0):
        children = list(children or [])
        SearchableTree.__init__(self, label, children)
        if span is None:
            if not children:
                raise ValueError("Can't create a node with neither "
                                 "children nor span")
            span = Span.merge_all(x.span for x in children)
        self.span = span
        self.text = text
        self.score = score
        self.head_index = head_index

    def __eq__(self, other):
        return self is other

    def __ne__(self, other):
        return self is not other

    __hash__ = object.__hash__

    def __str__(self):
        return self.show()

    def is_token(self):
        "True if this is a token leaf"
        return self.label() == TOKEN_LABEL and not len(self)

    def is_pos_tag(self):
        "True if this is a pre-terminal, ie. a tag over a single token"
        return len(self) == 1 and self[0].is_token()

    def covered_text(self):
        "the part of the sentence text this node covers"
        if self.text is None:
            return None
        return self.text[self.span.start:self.span.end]

    def tokens(self):
        """
        The token leaves under this node, left to right
        """
        return [x for x in self.depth_first_iterator() if x.is_token()]

    def pos_tags(self):
        """
        The pre-terminal nodes under this node, left to right
        """
        return self.topdown(lambda x: x.is_pos_tag())

    def show(self):
        """
        Bracketed rendering of the tree, in the usual Penn Treebank style,
        eg. `(TOP (NP (DT The) (NN fox)))`
        """
        if self.is_token():
            return self.covered_text()
        return '(%s %s)' % (self.label(), ' '.join(x.show() for x in self))

    def insert_constituent(self, node):
        """
        Graft a new, childless node into this tree, at the place its span
        calls for: below the deepest node that strictly encloses the span,
        and above the (consecutive) children it encloses.

        If the span is equal to that of an existing node, the new node is
        inserted above the topmost such node.

        The tree is left untouched when the span does not fit:
        empty spans, spans outside of this node, spans crossing a
        constituent boundary, splitting a token or enclosing no token
        are refused with `MalformedSpanError`.

        Returns
        -------
        parent : ParseNode
            The node that received the new constituent
        """
        span = node.span
        if len(node):
            raise ValueError("Only childless nodes can be inserted")
        if span.is_empty():
            raise MalformedSpanError(span, "empty constituent")
        if not self.span.encloses(span):
            raise MalformedSpanError(span, "outside of the tree span %s"
                                     % self.span)
        parent = self
        while True:
            if parent.is_token():
                raise MalformedSpanError(span, "splits token %s"
                                         % parent.span)
            first = last = None
            enclosing = None
            for i, kid in enumerate(parent):
                if span.encloses(kid.span):
                    if first is None:
                        first = i
                    last = i
                elif kid.span.encloses(span):
                    enclosing = kid
                    break
                elif span.crosses(kid.span):
                    raise MalformedSpanError(
                        span, "crosses the %s constituent at %s"
                        % (kid.label(), kid.span))
            if enclosing is not None:
                parent = enclosing
                continue
            if first is None:
                raise MalformedSpanError(span, "does not cover any token")
            break
        list.extend(node, parent[first:last + 1])
        list.__setitem__(parent, slice(first, last + 1), [node])
        if node.text is None:
            node.text = parent.text
        return parent

    @classmethod
    def build(cls, tree, leaves, text=None, span=None, score=1.0):
        """Build a parse by combining a labelled NLTK tree with some
        existing token leaves.

        The token leaves should correspond 1:1 to the leaves of the
        NLTK tree (for example, they may be the leaves of a parse
        skeleton, while the tree comes from some parser working on
        plain words).

        Parameters
        ----------
        tree : nltk.Tree
            Labelled tree whose leaves are ignored.
        leaves : iterable of ParseNode
            Replacement token leaves.
        text : str, optional
            Sentence text (defaults to that of the first leaf)
        span : Span, optional
            Span of the root (defaults to that of its children)
        score : float
            Score given to the internal nodes

        Returns
        -------
        ptree : ParseNode
            Internal nodes carry the labels of the NLTK tree; heads are
            taken to be the rightmost token of each node.
        """
        toks = deque(leaves)
        if text is None and toks:
            text = toks[0].text

        def step(t):
            """Recursive helper for tree building"""
            if not isinstance(t, nltk.tree.Tree):
                # leaf
                if not toks:
                    raise ValueError('Must have same number of input tokens '
                                     'as leaves in the tree')
                return toks.popleft()
            # internal node, recurse to kids
            kids = [step(kid) for kid in t]
            if not kids:
                raise ValueError("Can't build an empty %s node" % t.label())
            return cls(t.label(), kids, text=text, score=score,
                       head_index=kids[-1].head_index)

        root = step(tree)
        if toks:
            raise ValueError('Must have same number of input tokens '
                             'as leaves in the tree')
        if span is not None:
            root.span = span
        return root


class ConstituencyParser(object):
    """
    Parse sentences into constituency trees.

    The parser model works on a skeleton: an incomplete root spanning the
    whole sentence, with one token leaf per token (see `skeleton`); it
    returns its best labelled tree over the same leaves.
    """
    def __init__(self, registry, tokenizer):
        self.registry = registry
        self.tokenizer = tokenizer

    def skeleton(self, text):
        """
        Return the incomplete tree the parser model starts from
        """
        spans = self.tokenizer.tokenize_pos(text)
        leaves = [ParseNode(TOKEN_LABEL, span=span, text=text,
                            score=0, head_index=idx)
                  for idx, span in enumerate(spans)]
        return ParseNode(INCOMPLETE_LABEL, leaves,
                         span=Span(0, len(text)), text=text,
                         score=1, head_index=0)

    def parse(self, text):
        """
        Return the parse tree for a sentence
        """
        skeleton = self.skeleton(text)
        return self.registry.get(PARSER).parse(skeleton)
