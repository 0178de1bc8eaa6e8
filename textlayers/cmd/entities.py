# License: BSD3

"""
Print the named entities found in a text
"""

from tabulate import tabulate

from .args import (add_usual_input_args, add_output_format_arg,
                   get_toolkit, read_sentences)

NAME = 'entities'


def config_argparser(parser):
    """
    Subcommand flags.

    You should create and pass in the subparser to which the flags
    are to be added.
    """
    add_usual_input_args(parser)
    add_output_format_arg(parser)
    parser.set_defaults(func=main)


def entity_rows(toolkit, sentences):
    """
    One row per named entity: sentence, type, token span and words.

    The whole input is treated as a single document.
    """
    rows = []
    with toolkit.document():
        for i, sentence in enumerate(sentences):
            tokens = toolkit.tokenize(sentence)
            for entity in toolkit.find_typed_entities(tokens):
                rows.append([i, entity.entity_type, str(entity.span),
                             ' '.join(entity.words(tokens))])
    return rows


def main(args):
    """
    Subcommand main.

    You shouldn't need to call this yourself if you're using
    `config_argparser`
    """
    toolkit = get_toolkit(args)
    rows = entity_rows(toolkit, read_sentences(toolkit, args))
    print(tabulate(rows, headers=['sent', 'type', 'tokens', 'text'],
                   tablefmt=args.format))
