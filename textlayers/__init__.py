"""
The textlayers library layers linguistic annotations over raw text.
Each layer builds on the ones below it:

* sentences (`textlayers.external.sentences`)
* tokens and part of speech tags (`textlayers.external.postag`)
* named entities (`textlayers.external.ner`)
* constituency parses (`textlayers.external.parser`)
* coreference chains over the mentions of a whole document
  (`textlayers.external.coref`)

Every stage is backed by a model that is loaded lazily through the
`textlayers.registry.ModelRegistry`.  Locators for the models come from
the model configuration (`textlayers.config`).  The default model kit
(`textlayers.external.nltk_models`) is built on NLTK, but any object with
the right methods will do.

`textlayers.toolkit.Toolkit` ties the stages together, and
`textlayers.cmd` exposes them on the command line.
"""

# License: BSD3

__version__ = '0.3'
