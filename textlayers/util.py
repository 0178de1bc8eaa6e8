# License: BSD3

"""
Miscellaneous utility functions
"""

from itertools import chain


def concat(items):
    ":: Iterable (Iterable a) -> Iterable a"
    return chain.from_iterable(items)
