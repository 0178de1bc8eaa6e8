# License: BSD3

"""
Print the discourse entities (coreference chains) of a text
"""

from tabulate import tabulate

from .args import (add_usual_input_args, add_output_format_arg,
                   get_toolkit, read_sentences)

NAME = 'coref'


def config_argparser(parser):
    """
    Subcommand flags.

    You should create and pass in the subparser to which the flags
    are to be added.
    """
    add_usual_input_args(parser)
    add_output_format_arg(parser)
    parser.add_argument('--singletons', action='store_true',
                        help='also show entities with a single mention')
    parser.set_defaults(func=main)


def entity_rows(entities, singletons=False):
    """
    One row per discourse entity: its number, size and mentions
    (with the index of their sentence)
    """
    rows = []
    for i, entity in enumerate(entities):
        if len(entity) < 2 and not singletons:
            continue
        mentions = ' | '.join('%s [%d]' % (m.text, m.sentence_index)
                              for m in entity)
        rows.append([i, len(entity), mentions])
    return rows


def main(args):
    """
    Subcommand main.

    You shouldn't need to call this yourself if you're using
    `config_argparser`
    """
    toolkit = get_toolkit(args)
    entities = toolkit.find_entity_mentions(read_sentences(toolkit, args))
    print(tabulate(entity_rows(entities, args.singletons),
                   headers=['entity', 'size', 'mentions'],
                   tablefmt=args.format))
