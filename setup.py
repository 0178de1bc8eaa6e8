"""
textlayers setup: textlayers is a library for layering linguistic
annotations (sentences, tokens, tags, names, parses, coreference)
over raw text
"""

from setuptools import setup, find_packages

REQS = [
    'frozendict',
    'tabulate',
    'nltk >= 3.9',
    'PyYAML',
    'pydantic >= 2',
    'pydantic-settings',
    'rich',
]


setup(name='textlayers',
      version='0.3',
      packages=find_packages(),
      package_data={'textlayers': ['models.yaml']},
      install_requires=REQS,
      extras_require={'test': ['pytest']},
      entry_points={
          'console_scripts': ['textlayers = textlayers.cmd:main'],
      })
