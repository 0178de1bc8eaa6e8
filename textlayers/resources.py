"""
Finding and reading the resources the pipeline depends on: model files
(resolved from a logical locator) and line-oriented text input.
"""

# License: BSD3

import codecs
import logging
import os

import nltk.data

logger = logging.getLogger(__name__)


class ResourceLoader(object):
    """
    Resolve logical locators (eg. `en-sent.pickle`) to readable resources.

    A locator is looked up, in order:

    * as an absolute path,
    * relative to each directory of the search path,
    * in the NLTK data path (`nltk.data.find`), unless disabled.

    Parameters
    ----------
    search_path : list of str
        Directories to look into.
    use_nltk_data : boolean
        Whether to fall back on the NLTK data path.
    """
    def __init__(self, search_path=None, use_nltk_data=True):
        self.search_path = list(search_path or [])
        self.use_nltk_data = use_nltk_data

    def _candidates(self, locator):
        if not locator.strip():
            return
        if os.path.isabs(locator):
            yield locator
        else:
            for dirname in self.search_path:
                yield os.path.join(dirname, locator)

    def open(self, locator):
        """
        Return a binary stream for the resource, or None if the locator
        does not lead anywhere. The caller is responsible for closing it.
        """
        for path in self._candidates(locator):
            if os.path.isfile(path):
                logger.debug(f"Resolved '{locator}' to {path}")
                return open(path, 'rb')
        pointer = self._find_nltk(locator)
        if pointer is None:
            return None
        return pointer.open()

    def locate(self, locator):
        """
        Return a filesystem path for a directory (or file) resource,
        or None
        """
        for path in self._candidates(locator):
            if os.path.exists(path):
                logger.debug(f"Resolved '{locator}' to {path}")
                return path
        pointer = self._find_nltk(locator)
        if pointer is None:
            return None
        # zipped resources have no path of their own
        return getattr(pointer, 'path', None)

    def _find_nltk(self, locator):
        if not self.use_nltk_data or not locator.strip() or\
                os.path.isabs(locator):
            return None
        try:
            return nltk.data.find(locator)
        except LookupError:
            return None


def read_lines(fname, charset='utf-8'):
    """
    Return the lines of a text file (without their line terminators)

    Raises the usual `OSError` if the file cannot be read, and
    `LookupError` for an unknown charset
    """
    with codecs.open(fname, 'r', charset) as stream:
        return [line.rstrip('\r\n') for line in stream]
