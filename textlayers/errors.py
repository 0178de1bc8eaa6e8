"""
Exceptions raised by the textlayers pipeline.

They form a small closed set so that callers can branch on the kind of
failure rather than on messages.  None of them is transient: retrying
without fixing the configuration or the input reproduces the error.
"""

# License: BSD3


class ToolkitError(Exception):
    """
    Base class for everything the pipeline raises on purpose
    """
    def __init__(self, *args, **kw):
        super(ToolkitError, self).__init__(*args, **kw)


class ConfigurationError(ToolkitError):
    """
    A configuration key has no value (or the configuration resource
    itself is unusable)
    """
    def __init__(self, key, msg=None):
        self.key = key
        msg = msg or "No value for the '%s' key in the configuration" % key
        super(ConfigurationError, self).__init__(msg)


class ResourceNotFoundError(ToolkitError):
    """
    A configured locator does not resolve to anything we can read
    """
    def __init__(self, key, locator):
        self.key = key
        self.locator = locator
        msg = ("Error loading the %s resource. Does '%s' exist in the "
               "model search path (or in the NLTK data path)?"
               % (key, locator))
        super(ResourceNotFoundError, self).__init__(msg)


class ModelLoadError(ToolkitError):
    """
    The resource was found but could not be turned into a model
    """
    def __init__(self, stage, key, locator, reason):
        self.stage = stage
        self.key = key
        self.locator = locator
        msg = ("Could not build the %s model from '%s' (configured by %s): %s"
               % (stage, locator, key, reason))
        super(ModelLoadError, self).__init__(msg)


class MalformedSpanError(ToolkitError):
    """
    A span would break the containment or ordering invariants of a
    parse tree (or of a token sequence)
    """
    def __init__(self, span, msg):
        self.span = span
        super(MalformedSpanError, self).__init__("%s: %s" % (span, msg))


class LinkerUnavailableError(ToolkitError):
    """
    The coreference linker could not run because one of its lexical
    resources (typically the WordNet dictionary) is missing
    """
    def __init__(self, wordnet_dir, msg=None):
        self.wordnet_dir = wordnet_dir
        msg = msg or (
            "The coreference linker returned no result. This usually means "
            "that the WordNet dictionary could not be found: set "
            "TEXTLAYERS_WORDNET_DIR (or WNSEARCHDIR) to the directory "
            "holding it (currently %s)" % (wordnet_dir or "unset"))
        super(LinkerUnavailableError, self).__init__(msg)


class TaggingError(ToolkitError):
    """
    Part of speech tagging could not be performed
    """
    pass
