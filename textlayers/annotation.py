"""
Low-level representation of the positions that annotations point to.

Every layer built by textlayers (tokens, names, parse nodes, mentions)
refers back to the text it annotates through a `Span`.  Spans are plain
integer ranges: the same class is used for character offsets within a
sentence and for token indices within a token sequence, but a single span
value never mixes the two.
"""

# License: BSD3

# pylint: disable=too-few-public-methods


class Span(object):
    """
    What portion of a sequence an annotation corresponds to.

    The way we interpret spans amounts to how Python interprets
    array slice indices.

    One way to understand them is to think of offsets as
    sitting in between individual characters (or tokens) ::

          h   o   w   d   y
        0   1   2   3   4   5

    So `(0,5)` covers the whole word above, and `(1,2)`
    picks out the letter "o"
    """
    def __init__(self, start, end):
        if start < 0 or end < start:
            raise ValueError("Invalid span (%d,%d): need 0 <= start <= end"
                             % (start, end))
        self.start = start
        self.end = end

    def __str__(self):
        return '(%d,%d)' % (self.start, self.end)

    def __repr__(self):
        return 'Span(%d, %d)' % (self.start, self.end)

    def __lt__(self, other):
        return self.start < other.start or\
            (self.start == other.start and
             self.end < other.end)

    def __eq__(self, other):
        if not isinstance(other, Span):
            return NotImplemented
        return self.start == other.start and self.end == other.end

    def __gt__(self, other):
        return other < self

    def __ne__(self, other):
        return not self == other

    def __le__(self, other):
        return self < other or self == other

    def __ge__(self, other):
        return other <= self

    def __hash__(self):
        return (self.start, self.end).__hash__()

    @classmethod
    def coerce(cls, value):
        """
        Return `value` as a Span; pairs of integers are accepted
        (models are free to answer with `(start, end)` tuples)
        """
        if isinstance(value, Span):
            return value
        start, end = value
        return cls(start, end)

    def length(self):
        """
        Return the length of this span
        """
        return self.end - self.start

    def is_empty(self):
        "True if this span covers nothing"
        return self.start == self.end

    def encloses(self, other):
        """
        Return True if this span includes the argument

        Note that `x.encloses(x) == True`

        Corner case: `x.encloses(None) == False`
        """
        if other is None:
            return False
        else:
            return self.start <= other.start and self.end >= other.end

    def overlaps(self, other, inclusive=False):
        """
        Return the overlapping region if two spans have regions
        in common, or else None. ::

            Span(5, 10).overlaps(Span(8, 12)) == Span(8, 10)
            Span(5, 10).overlaps(Span(11, 12)) == None

        If `inclusive == True`, spans with touching edges are
        considered to overlap ::

            Span(5, 10).overlaps(Span(10, 12)) == None
            Span(5, 10).overlaps(Span(10, 12), inclusive=True) == Span(10, 10)

        """
        if other is None:
            return None
        elif self.encloses(other):
            return other
        elif other.encloses(self):
            return self
        else:
            common_start = max(self.start, other.start)
            common_end = min(self.end, other.end)
            if inclusive and common_start <= common_end:
                return Span(common_start, common_end)
            if common_start < common_end:
                return Span(common_start, common_end)
            else:
                return None

    def crosses(self, other):
        """
        True if the two spans overlap without either one enclosing
        the other, ie. if they could not both be nodes of one tree ::

            Span(0, 5).crosses(Span(3, 8)) == True
            Span(0, 5).crosses(Span(1, 3)) == False
        """
        return (self.overlaps(other) is not None and
                not self.encloses(other) and
                not other.encloses(self))

    @classmethod
    def merge_all(cls, spans):
        """
        Return a span that stretches from the beginning to the end
        of all the spans in the list
        """
        spans = list(spans)
        if len(spans) < 1:
            raise ValueError("must have at least one span")
        return cls(min(x.start for x in spans),
                   max(x.end for x in spans))
