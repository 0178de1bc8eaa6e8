# License: BSD3

"""
Print the tokens of every sentence with their offsets and tags
"""

from tabulate import tabulate

from .args import (add_usual_input_args, add_output_format_arg,
                   get_toolkit, read_sentences)

NAME = 'tokens'


def config_argparser(parser):
    """
    Subcommand flags.

    You should create and pass in the subparser to which the flags
    are to be added.
    """
    add_usual_input_args(parser)
    add_output_format_arg(parser)
    parser.add_argument('--no-tags', action='store_true',
                        help='do not run the part of speech tagger')
    parser.set_defaults(func=main)


def token_rows(toolkit, sentence_idx, sentence, tags=True):
    """
    One row per token: sentence, position, offsets, word and tag
    """
    spans = toolkit.tokenize_pos(sentence)
    words = [sentence[s.start:s.end] for s in spans]
    postags = (toolkit.tag_part_of_speech(words) if tags
               else [''] * len(words))
    return [[sentence_idx, i, span.start, span.end, word, tag]
            for i, (span, word, tag) in enumerate(zip(spans, words, postags))]


def main(args):
    """
    Subcommand main.

    You shouldn't need to call this yourself if you're using
    `config_argparser`
    """
    toolkit = get_toolkit(args)
    rows = []
    for i, sentence in enumerate(read_sentences(toolkit, args)):
        rows.extend(token_rows(toolkit, i, sentence, tags=not args.no_tags))
    print(tabulate(rows,
                   headers=['sent', 'tok', 'start', 'end', 'word', 'tag'],
                   tablefmt=args.format))
