# License: BSD3

"""
Print the sentences of a text, one per line
"""

from .args import add_usual_input_args, get_toolkit, read_sentences

NAME = 'sentences'


def config_argparser(parser):
    """
    Subcommand flags.

    You should create and pass in the subparser to which the flags
    are to be added.
    """
    add_usual_input_args(parser)
    parser.set_defaults(func=main)


def main(args):
    """
    Subcommand main.

    You shouldn't need to call this yourself if you're using
    `config_argparser`
    """
    toolkit = get_toolkit(args)
    for sentence in read_sentences(toolkit, args):
        print(sentence)
