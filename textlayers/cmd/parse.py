# License: BSD3

"""
Print the constituency parse of every sentence, in bracketed form
"""

from .args import add_usual_input_args, get_toolkit, read_sentences

NAME = 'parse'


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
        print(toolkit.parse_sentence(sentence).show())
