# License: BSD3

"""
Interacting with annotations from third party tools
(sentence splitters, taggers, parsers, coreference linkers, ...)
"""
